"""
File validation service for question spreadsheet uploads.

Provides security checks including:
- File size limits
- Extension and MIME type validation
- Filename sanitization
"""

import re
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Tuple

import magic
from fastapi import HTTPException, UploadFile

from app.config import get_settings

# libmagic reports Office Open XML files either by their own type or as zip
_XLSX_MIME_TYPES = frozenset({
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel.sheet.macroenabled.12",
    "application/zip",
    "application/octet-stream",
})
# Legacy BIFF workbooks live in an OLE2 compound file
_XLS_MIME_TYPES = frozenset({
    "application/vnd.ms-excel",
    "application/x-ole-storage",
    "application/cdfv2",
    "application/octet-stream",
})
_CSV_MIME_TYPES = frozenset({
    "text/csv",
    "text/plain",
    "application/csv",
})

ALLOWED_MIME_TYPES: Dict[str, FrozenSet[str]] = {
    ".xlsx": _XLSX_MIME_TYPES,
    ".xlsm": _XLSX_MIME_TYPES,
    ".xls": _XLS_MIME_TYPES,
    ".csv": _CSV_MIME_TYPES,
}

DEFAULT_FILENAME = "questions.xlsx"


async def validate_spreadsheet(
    file: UploadFile,
    max_size: Optional[int] = None,
) -> Tuple[bytes, str]:
    """
    Validate an uploaded spreadsheet and return its content and safe filename.

    Args:
        file: FastAPI UploadFile instance from multipart/form-data
        max_size: Size limit in bytes (default: MAX_UPLOAD_SIZE_MB setting)

    Returns:
        Tuple of (file_content, sanitized_filename)

    Raises:
        HTTPException: 400 for validation errors, 413 for file too large
    """
    if max_size is None:
        max_size = get_settings().max_upload_size_bytes

    content = await file.read()

    if len(content) == 0:
        raise HTTPException(status_code=400, detail="File is empty")

    if len(content) > max_size:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {max_size // (1024 * 1024)}MB"
        )

    sanitized_filename = sanitize_filename(file.filename or DEFAULT_FILENAME)
    extension = Path(sanitized_filename).suffix.lower()
    if extension not in ALLOWED_MIME_TYPES:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Invalid file type '{extension or sanitized_filename}'. "
                f"Expected one of: {', '.join(sorted(ALLOWED_MIME_TYPES))}"
            )
        )

    mime_type = magic.from_buffer(content, mime=True)
    if mime_type.lower() not in ALLOWED_MIME_TYPES[extension]:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file content. A {extension} file cannot be {mime_type}"
        )

    return content, sanitized_filename


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename to prevent path traversal attacks.

    Removes directory components, parent references and null bytes, and
    keeps only alphanumerics, dash, underscore and dot.
    """
    # Handle both separators regardless of host OS
    filename = filename.replace("\\", "/").split("/")[-1]
    filename = filename.replace("..", "").replace("\0", "")
    filename = re.sub(r'[^a-zA-Z0-9._-]', '_', filename)

    if not filename.strip("._"):
        filename = DEFAULT_FILENAME

    if len(filename) > 255:
        suffix = Path(filename).suffix[:10]
        filename = filename[:255 - len(suffix)] + suffix

    return filename
