"""Shared fixtures for paper generator tests."""

from typing import Any, Callable, Dict, List, Optional

import pytest

from app.config import get_settings
from app.middleware.rate_limit import get_limiter
from app.models.paper import Question

RowFactory = Callable[..., Dict[str, Any]]


@pytest.fixture(autouse=True)
def reset_state() -> None:
    """Clear cached settings and rate limit counters between tests."""
    get_settings.cache_clear()
    get_limiter().reset()


@pytest.fixture
def make_row() -> RowFactory:
    """Build a spreadsheet row with the standard headers."""
    def _make_row(
        question: str = "What is 2 + 2?\nA. 3\nB. 4",
        unit: Any = 1,
        image_url: Optional[str] = None,
        subject: str = "Data Structures",
    ) -> Dict[str, Any]:
        return {
            "Subject Code": "CS201",
            "Subject": subject,
            "Branch": "CSE",
            "Regulation": "R22",
            "Year": 2,
            "Sem": 1,
            "Month": "March",
            "Unit": unit,
            "Question": question,
            "Image Url": image_url,
        }
    return _make_row


@pytest.fixture
def make_question() -> Callable[..., Question]:
    """Build a Question directly, bypassing the bank builder."""
    def _make_question(
        type: str = "objective",
        unit: Any = 1,
        text: Optional[str] = None,
        subject: str = "Data Structures",
    ) -> Question:
        return Question(
            subject_code="CS201",
            subject=subject,
            branch="CSE",
            regulation="R22",
            year=2,
            semester=1,
            month="March",
            unit=unit,
            question=text or f"{type} question for unit {unit}",
            image_url=None,
            type=type,
        )
    return _make_question


@pytest.fixture
def sufficient_rows(make_row: RowFactory) -> List[Dict[str, Any]]:
    """Rows with 3 objective and 3 blank questions per unit 1-5."""
    rows = []
    for unit in range(1, 6):
        for i in range(3):
            rows.append(make_row(question=f"Unit {unit} objective {i}\nA. yes\nB. no", unit=unit))
            rows.append(make_row(question=f"Unit {unit} blank {i}: ____", unit=unit))
    return rows
