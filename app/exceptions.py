"""Exceptions raised while turning a spreadsheet into a question paper.

Every expected failure of the paper pipeline derives from
PaperGenerationError and carries a ``kind`` that the HTTP layer maps to a
status code.
"""

from typing import Any, Dict, Optional


class PaperGenerationError(Exception):
    """Base class for expected, caller-correctable generation failures."""

    kind = "generation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def details(self) -> Dict[str, Any]:
        return {}


class EmptyDatasetError(PaperGenerationError):
    """Raised when the uploaded sheet holds no question rows."""

    kind = "empty_dataset"

    def __init__(self, message: str = "No questions found in the Excel file"):
        super().__init__(message)


class MissingQuestionColumnError(PaperGenerationError):
    """Raised when no header trims to exactly ``Question``."""

    kind = "missing_question_column"

    def __init__(self, message: str = 'No "Question" column found in the Excel file'):
        super().__init__(message)


class UnknownPaperTypeError(PaperGenerationError):
    """Raised when the requested paper type has no quota table."""

    kind = "unknown_paper_type"

    def __init__(self, paper_type: str, known_types: tuple[str, ...]):
        options = " or ".join(f'"{name}"' for name in known_types)
        super().__init__(f'Invalid paperType "{paper_type}". Use {options}.')
        self.paper_type = paper_type
        self.known_types = known_types

    @property
    def details(self) -> Dict[str, Any]:
        return {"paper_type": self.paper_type, "known_types": list(self.known_types)}


class InsufficientQuestionsError(PaperGenerationError):
    """Raised when one or more buckets cannot fill their quota.

    Attributes:
        objective_detail: Summary of all objective shortfalls, or None
        blank_detail: Summary of all fill-in-the-blank shortfalls, or None
    """

    kind = "insufficient_questions"

    def __init__(self, objective_detail: Optional[str], blank_detail: Optional[str]):
        message = "; ".join(d for d in (objective_detail, blank_detail) if d)
        super().__init__(message)
        self.objective_detail = objective_detail
        self.blank_detail = blank_detail

    @property
    def details(self) -> Dict[str, Any]:
        return {
            "objective": self.objective_detail,
            "fill_in_the_blank": self.blank_detail,
        }


class SpreadsheetReadError(Exception):
    """Raised when an uploaded file cannot be parsed into rows."""


class ImageProxyError(Exception):
    """Raised when a remote image cannot be fetched or encoded.

    Attributes:
        status_code: HTTP status to report to the caller
    """

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code
