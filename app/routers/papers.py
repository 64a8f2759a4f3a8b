"""
Question paper API endpoints.

Provides the spreadsheet upload endpoint that generates a paper and the
image proxy used by the paper front end.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, File, Form, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.exceptions import ImageProxyError, SpreadsheetReadError
from app.middleware.logging import get_request_id
from app.middleware.rate_limit import RATE_LIMITS, get_limiter
from app.models.paper import GenerationError
from app.services.file_validator import validate_spreadsheet
from app.services.image_proxy import fetch_image_data_url
from app.services.paper_generator import create_selector, generate_paper
from app.services.spreadsheet_reader import read_rows

router = APIRouter(prefix="/api", tags=["papers"])
limiter = get_limiter()
logger = logging.getLogger(__name__)

# Error kind -> HTTP status
ERROR_STATUS_CODES: Dict[str, int] = {
    "empty_dataset": status.HTTP_400_BAD_REQUEST,
    "missing_question_column": status.HTTP_400_BAD_REQUEST,
    "unknown_paper_type": status.HTTP_400_BAD_REQUEST,
    "insufficient_questions": status.HTTP_400_BAD_REQUEST,
    "internal_fault": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error_response(
    status_code: int,
    message: str,
    kind: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {"error": message}
    if details:
        body["details"] = details
    headers = {"X-Error-Kind": kind} if kind else None
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@router.post("/generate")
@limiter.limit(RATE_LIMITS["generate"])  # type: ignore[untyped-decorator]
async def generate(
    request: Request,
    excel_file: Optional[UploadFile] = File(None, alias="excelFile", description="Question bank spreadsheet (.xlsx, .xls or .csv)"),
    paper_type: Optional[str] = Form(None, alias="paperType", description="Paper type: 'mid1' or 'mid2'"),
) -> JSONResponse:
    """
    Generate a randomized question paper from an uploaded spreadsheet.

    Returns:
        200: Paper payload {paperDetails, questions}
        400: Missing/invalid file, unreadable sheet, no questions, no
             Question column, unknown paper type, or too few questions
        413: File too large
        500: Unexpected processing error
    """
    if excel_file is None:
        return _error_response(status.HTTP_400_BAD_REQUEST, "No Excel file uploaded")

    content, filename = await validate_spreadsheet(excel_file)

    try:
        rows = await asyncio.to_thread(read_rows, content, filename)
    except SpreadsheetReadError as e:
        logger.info(f"Rejected unreadable spreadsheet {filename}: {e}")
        return _error_response(status.HTTP_400_BAD_REQUEST, str(e), kind="unreadable_spreadsheet")

    settings = get_settings()
    result = await asyncio.to_thread(
        generate_paper,
        rows,
        paper_type or "",
        create_selector(settings.selection_seed),
    )

    paper = result.paper
    if paper is None:
        error = result.error or GenerationError(
            kind="internal_fault", message="Error generating question paper"
        )
        if error.kind == "internal_fault":
            logger.error(
                f"Paper generation failed: request_id={get_request_id(request)}, "
                f"file={filename}, paper_type={paper_type}, error={error.message}"
            )
        return _error_response(
            ERROR_STATUS_CODES.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
            error.message,
            kind=error.kind,
            details=error.details,
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=paper.model_dump(by_alias=True, mode="json"),
        headers={
            "X-Paper-Type": paper_type or "",
            "X-Question-Count": str(len(paper.questions)),
        },
    )


@router.get("/image-proxy-base64")
@limiter.limit(RATE_LIMITS["image_proxy"])  # type: ignore[untyped-decorator]
async def image_proxy_base64(
    request: Request,
    url: Optional[str] = Query(None, description="Absolute http(s) URL of the image"),
) -> JSONResponse:
    """
    Fetch a remote image and return it as a base64 data URL.

    Returns:
        200: {"dataUrl": "data:<mime>;base64,..."}
        400: Missing, malformed or blocked URL
        413: Image too large
        502: Upstream error or timeout
    """
    if not url:
        return _error_response(status.HTTP_400_BAD_REQUEST, "No image URL provided")

    try:
        data_url = await fetch_image_data_url(url)
    except ImageProxyError as e:
        return _error_response(e.status_code, f"Failed to fetch image: {e}")

    return JSONResponse(status_code=status.HTTP_200_OK, content={"dataUrl": data_url})
