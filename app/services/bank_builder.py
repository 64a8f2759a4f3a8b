"""Build a question bank from spreadsheet rows.

Each row is a mapping of column header to cell value. Headers are matched
after trimming surrounding whitespace, since hand-edited sheets often carry
stray spaces ("Question " instead of "Question").
"""

import logging
from collections import Counter
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from app.exceptions import EmptyDatasetError, MissingQuestionColumnError
from app.models.paper import Question
from app.services.classifier import classify

logger = logging.getLogger(__name__)

QUESTION_HEADER = "Question"

# Question field -> sheet header
METADATA_HEADERS: dict[str, str] = {
    "subject_code": "Subject Code",
    "subject": "Subject",
    "branch": "Branch",
    "regulation": "Regulation",
    "year": "Year",
    "semester": "Sem",
    "month": "Month",
    "unit": "Unit",
}
IMAGE_URL_HEADER = "Image Url"


def find_column(headers: Iterable[Any], name: str) -> Optional[str]:
    """Return the first header whose trimmed text equals ``name``."""
    for header in headers:
        if isinstance(header, str) and header.strip() == name:
            return header
    return None


def _question_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


def _image_url(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def build_question_bank(rows: Sequence[Mapping[str, Any]]) -> List[Question]:
    """
    Turn spreadsheet rows into classified Question records.

    Args:
        rows: Rows from the first sheet, header -> cell value

    Returns:
        One Question per row, in sheet order

    Raises:
        EmptyDatasetError: No rows, so no questions
        MissingQuestionColumnError: No header trims to "Question"
    """
    if not rows:
        raise EmptyDatasetError()

    headers = list(rows[0].keys())
    question_key = find_column(headers, QUESTION_HEADER)
    if question_key is None:
        raise MissingQuestionColumnError()

    metadata_keys = {
        field: find_column(headers, header) for field, header in METADATA_HEADERS.items()
    }
    image_key = find_column(headers, IMAGE_URL_HEADER)

    bank: List[Question] = []
    for row in rows:
        text = _question_text(row.get(question_key))
        metadata = {
            field: row.get(key) if key is not None else None
            for field, key in metadata_keys.items()
        }
        bank.append(
            Question(
                **metadata,
                question=text,
                image_url=_image_url(row.get(image_key)) if image_key is not None else None,
                type=classify(text),
            )
        )

    counts = Counter(q.type for q in bank)
    logger.info(
        f"Built question bank: {len(bank)} questions "
        f"({counts['objective']} objective, {counts['fill-in-the-blank']} fill-in-the-blank)"
    )
    return bank
