"""Pydantic models for question banks and generated papers.

Question records are built per request from spreadsheet rows and never
shared between requests. Output models serialize with camelCase keys, the
shape the paper rendering front end consumes.
"""

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

QuestionType = Literal["objective", "fill-in-the-blank"]

OBJECTIVE: QuestionType = "objective"
FILL_IN_THE_BLANK: QuestionType = "fill-in-the-blank"
QUESTION_TYPES: Tuple[QuestionType, ...] = (OBJECTIVE, FILL_IN_THE_BLANK)

# Syllabus units a quota can refer to
UNITS: Tuple[int, ...] = (1, 2, 3, 4, 5)


class CamelModel(BaseModel):
    """Base model that reads snake_case and writes camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# QUESTION BANK
# =============================================================================

class Question(CamelModel):
    """A single question row from the uploaded sheet.

    Metadata cells are copied verbatim from the sheet, so they may be
    strings, numbers or None.
    """
    model_config = ConfigDict(frozen=True)

    subject_code: Any = None
    subject: Any = None
    branch: Any = None
    regulation: Any = None
    year: Any = None
    semester: Any = None
    month: Any = None
    unit: Any = Field(default=None, description="Syllabus unit, 1-5 when selectable")
    question: str = Field(description="Full question text with any options embedded")
    image_url: Optional[str] = Field(default=None, description="Optional image shown with the question")
    type: QuestionType


BucketKey = Tuple[QuestionType, int]
BucketMap = Dict[BucketKey, List[Question]]


# =============================================================================
# QUOTAS
# =============================================================================

class QuotaRequirement(BaseModel):
    """Number of questions of one type to draw from one unit."""
    model_config = ConfigDict(frozen=True)

    type: QuestionType
    unit: int = Field(ge=1)
    count: int = Field(ge=1)


# =============================================================================
# OUTPUT
# =============================================================================

class PaperDetails(CamelModel):
    """Header information printed on the paper."""
    subject_code: Any = None
    subject: Any = None
    branch: Any = None
    regulation: Any = None
    year: Any = None
    semester: Any = None
    month: Any = None


class PaperQuestion(CamelModel):
    """A numbered question as it appears on the paper."""
    question: str
    unit: Any = None
    image_url: Optional[str] = None


class PaperPayload(CamelModel):
    """The assembled paper returned to the caller."""
    paper_details: PaperDetails
    questions: List[PaperQuestion] = Field(default_factory=list)


class GenerationError(BaseModel):
    """Why a paper could not be generated."""
    kind: Literal[
        "empty_dataset",
        "missing_question_column",
        "unknown_paper_type",
        "insufficient_questions",
        "internal_fault",
    ]
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class GenerationResult(BaseModel):
    """Outcome of a generation run: a paper or an error, never both."""
    success: bool
    paper: Optional[PaperPayload] = None
    error: Optional[GenerationError] = None
