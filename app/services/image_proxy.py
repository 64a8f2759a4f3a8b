"""Remote image proxy.

Fetches a question image by URL and returns it as a base64 data URL, so
the paper front end can embed images from hosts that do not send CORS
headers. Includes URL validation and SSRF protection.
"""

import asyncio
import base64
import ipaddress
import logging
import socket
from typing import Optional, Union
from urllib.parse import urlparse

import httpx

from app.config import get_settings
from app.exceptions import ImageProxyError

logger = logging.getLogger(__name__)

MAX_IMAGE_URL_LENGTH = 2048
DEFAULT_MIME_TYPE = "image/png"

# Private/internal IP ranges to block (SSRF protection)
_SSRF_BLOCKED_NETWORKS = [
    ipaddress.ip_network("0.0.0.0/8"),       # "This" network
    ipaddress.ip_network("127.0.0.0/8"),    # Loopback
    ipaddress.ip_network("10.0.0.0/8"),      # Private
    ipaddress.ip_network("172.16.0.0/12"),  # Private
    ipaddress.ip_network("192.168.0.0/16"), # Private
    ipaddress.ip_network("169.254.0.0/16"), # Link-local
    ipaddress.ip_network("::/128"),          # IPv6 unspecified
    ipaddress.ip_network("::1/128"),         # IPv6 loopback
    ipaddress.ip_network("fc00::/7"),        # IPv6 unique local
    ipaddress.ip_network("fe80::/10"),       # IPv6 link-local
]

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def is_blocked_address(ip: IPAddress) -> bool:
    """True for addresses the proxy must never connect to."""
    # ::ffff:127.0.0.1 reaches the IPv4 loopback
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    if ip.is_unspecified or ip.is_loopback or ip.is_link_local or ip.is_multicast or ip.is_reserved:
        return True
    return any(ip.version == net.version and ip in net for net in _SSRF_BLOCKED_NETWORKS)


def validate_image_url(url: str) -> None:
    """
    Reject URLs the proxy must not fetch.

    Resolves the host, so call it off the event loop.

    Raises:
        ImageProxyError: 400 for malformed or blocked URLs
    """
    if len(url) > MAX_IMAGE_URL_LENGTH:
        raise ImageProxyError(
            f"Image URL exceeds maximum length ({MAX_IMAGE_URL_LENGTH} characters)",
            status_code=400,
        )

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ImageProxyError("Image URL must be an absolute http(s) URL", status_code=400)

    try:
        parsed.port  # raises for non-numeric or out-of-range ports
    except ValueError as e:
        raise ImageProxyError(f"Image URL has an invalid port: {e}", status_code=400) from e

    try:
        addresses = socket.getaddrinfo(parsed.hostname, None)
    except socket.gaierror as e:
        raise ImageProxyError(f"Image URL host could not be resolved: {e}", status_code=400) from e

    for res in addresses:
        sockaddr = res[4]
        ip_str = sockaddr[0] if isinstance(sockaddr, (tuple, list)) else None
        if not ip_str:
            continue
        try:
            ip = ipaddress.ip_address(ip_str)
        except ValueError:
            continue
        if is_blocked_address(ip):
            raise ImageProxyError(
                f"Image URL host resolves to blocked private/internal IP: {ip}",
                status_code=400,
            )


def _mime_type(content_type: Optional[str]) -> str:
    """Strip parameters from a Content-Type header, defaulting to PNG."""
    if not content_type:
        return DEFAULT_MIME_TYPE
    mime = content_type.split(";", 1)[0].strip()
    return mime or DEFAULT_MIME_TYPE


def _too_large(size: int, max_bytes: int) -> ImageProxyError:
    return ImageProxyError(
        f"Image too large ({size} bytes, limit {max_bytes})",
        status_code=413,
    )


async def _read_limited(response: httpx.Response, max_bytes: int) -> bytes:
    """Read the response body, stopping as soon as it passes ``max_bytes``."""
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise _too_large(int(declared), max_bytes)

    body = bytearray()
    async for chunk in response.aiter_bytes():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise _too_large(len(body), max_bytes)
    return bytes(body)


async def fetch_image_data_url(
    url: str,
    timeout_seconds: Optional[float] = None,
    max_bytes: Optional[int] = None,
) -> str:
    """
    Fetch an image and encode it as ``data:<mime>;base64,<payload>``.

    Args:
        url: Absolute http(s) image URL
        timeout_seconds: Request timeout (default: IMAGE_FETCH_TIMEOUT_SECONDS)
        max_bytes: Largest accepted body (default: IMAGE_MAX_BYTES)

    Returns:
        The data URL

    Raises:
        ImageProxyError: Invalid URL (400), upstream failure or timeout (502),
            oversized image (413)
    """
    settings = get_settings()
    if timeout_seconds is None:
        timeout_seconds = settings.image_fetch_timeout_seconds
    if max_bytes is None:
        max_bytes = settings.image_max_bytes

    await asyncio.to_thread(validate_image_url, url)

    try:
        async with httpx.AsyncClient(timeout=timeout_seconds) as client:
            async with client.stream("GET", url) as response:
                if not 200 <= response.status_code < 300:
                    logger.warning(f"Image fetch returned non-2xx status: {response.status_code}, url={url}")
                    raise ImageProxyError(f"Upstream returned HTTP {response.status_code}")

                body = await _read_limited(response, max_bytes)
                content_type = response.headers.get("content-type")
    except httpx.TimeoutException as e:
        logger.warning(f"Image fetch timed out: url={url}")
        raise ImageProxyError(f"Timed out after {timeout_seconds}s") from e
    except httpx.InvalidURL as e:
        raise ImageProxyError(f"Invalid image URL: {e}", status_code=400) from e
    except httpx.HTTPError as e:
        logger.warning(f"Image fetch error: url={url}, error={str(e)}")
        raise ImageProxyError(str(e) or type(e).__name__) from e

    mime_type = _mime_type(content_type)
    encoded = base64.b64encode(body).decode("ascii")
    logger.info(f"Proxied image: url={url}, mime={mime_type}, bytes={len(body)}")
    return f"data:{mime_type};base64,{encoded}"
