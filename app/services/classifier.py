"""Question type classifier.

Decides whether a question is objective (multiple choice) or
fill-in-the-blank by looking at its text:

1. Three or more consecutive underscores anywhere -> fill-in-the-blank
2. Second non-empty line starts like an option ("A. ", "b) ") -> objective
3. Anything else -> objective

Blank detection wins over option detection.
"""

import re

from app.models.paper import FILL_IN_THE_BLANK, OBJECTIVE, QuestionType

_BLANK_PATTERN = re.compile(r'_{3,}')
_OPTION_PATTERN = re.compile(r'^[A-Da-d][.)]\s+')
_LINE_BREAK = re.compile(r'\r?\n')


def _split_lines(question_text: str) -> list[str]:
    """Split text into trimmed, non-empty lines."""
    lines = (line.strip() for line in _LINE_BREAK.split(question_text))
    return [line for line in lines if line]


def classify(question_text: str) -> QuestionType:
    """Classify a question by its text. Always returns a type."""
    if _BLANK_PATTERN.search(question_text):
        return FILL_IN_THE_BLANK

    lines = _split_lines(question_text)
    if len(lines) > 1 and _OPTION_PATTERN.match(lines[1]):
        return OBJECTIVE

    # Unclear questions are treated as objective
    return OBJECTIVE
