"""Quota-driven random question selection.

A quota table maps a paper type to an ordered list of requirements. The
order is the question numbering on the paper: objective units ascending,
then fill-in-the-blank units ascending.

Every requirement is checked before anything is drawn, so a paper is
either complete or not produced at all.
"""

import logging
import random
import re
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from app.exceptions import InsufficientQuestionsError, UnknownPaperTypeError
from app.models.paper import (
    FILL_IN_THE_BLANK,
    OBJECTIVE,
    BucketMap,
    Question,
    QuestionType,
    QuotaRequirement,
)

logger = logging.getLogger(__name__)

QuotaTables = Mapping[str, Sequence[QuotaRequirement]]


def _requirements(objective: Dict[int, int], blank: Dict[int, int]) -> Tuple[QuotaRequirement, ...]:
    return tuple(
        [QuotaRequirement(type=OBJECTIVE, unit=u, count=c) for u, c in objective.items()]
        + [QuotaRequirement(type=FILL_IN_THE_BLANK, unit=u, count=c) for u, c in blank.items()]
    )


DEFAULT_QUOTA_TABLES: Dict[str, Tuple[QuotaRequirement, ...]] = {
    # Q1-Q5 objective, Q6-Q10 fill-in-the-blank
    "mid1": _requirements(objective={1: 2, 2: 2, 3: 1}, blank={1: 2, 2: 2, 3: 1}),
    "mid2": _requirements(objective={3: 1, 4: 2, 5: 2}, blank={3: 1, 4: 2, 5: 2}),
}

_TYPE_LABELS: Dict[QuestionType, str] = {
    OBJECTIVE: "objective",
    FILL_IN_THE_BLANK: "fill-in-the-blank",
}


def paper_label(paper_type: str) -> str:
    """Human-readable paper name, e.g. "mid1" -> "Mid 1"."""
    match = re.fullmatch(r'([A-Za-z]+)(\d+)', paper_type)
    if not match:
        return paper_type
    return f"{match.group(1).capitalize()} {match.group(2)}"


class QuotaSelector:
    """Draws a quota-compliant random subset of a bucket map.

    Args:
        quota_tables: Paper type -> ordered requirements
        rng: Source of randomness. A fresh unseeded generator is used when omitted
    """

    def __init__(
        self,
        quota_tables: Optional[QuotaTables] = None,
        rng: Optional[random.Random] = None,
    ):
        self.quota_tables: QuotaTables = (
            quota_tables if quota_tables is not None else DEFAULT_QUOTA_TABLES
        )
        self.rng = rng if rng is not None else random.Random()

    @property
    def paper_types(self) -> Tuple[str, ...]:
        return tuple(self.quota_tables.keys())

    def requirements_for(self, paper_type: str) -> Sequence[QuotaRequirement]:
        """Requirements of a paper type, or UnknownPaperTypeError."""
        if paper_type not in self.quota_tables:
            raise UnknownPaperTypeError(paper_type, self.paper_types)
        return self.quota_tables[paper_type]

    def total_questions(self, paper_type: str) -> int:
        return sum(req.count for req in self.requirements_for(paper_type))

    def check(self, buckets: BucketMap, paper_type: str) -> None:
        """
        Validate every requirement of ``paper_type`` against bucket sizes.

        Raises:
            UnknownPaperTypeError: No quota table for paper_type
            InsufficientQuestionsError: One or more buckets are short; all
                shortfalls are reported, grouped by question type
        """
        requirements = self.requirements_for(paper_type)

        shortfalls: Dict[QuestionType, List[str]] = {OBJECTIVE: [], FILL_IN_THE_BLANK: []}
        for req in requirements:
            available = len(buckets.get((req.type, req.unit), ()))
            if available < req.count:
                shortfalls[req.type].append(
                    f"Unit {req.unit} needs {req.count} but has {available}"
                )

        if not any(shortfalls.values()):
            return

        label = paper_label(paper_type)
        details = {
            question_type: (
                f"Insufficient {_TYPE_LABELS[question_type]} questions for {label}: "
                + ", ".join(messages)
                if messages else None
            )
            for question_type, messages in shortfalls.items()
        }
        logger.warning(
            f"Quota check failed for {paper_type}: "
            f"{sum(len(m) for m in shortfalls.values())} bucket(s) short"
        )
        raise InsufficientQuestionsError(details[OBJECTIVE], details[FILL_IN_THE_BLANK])

    def select(self, buckets: BucketMap, paper_type: str) -> List[Question]:
        """
        Pick questions for ``paper_type``.

        Each requirement shuffles a copy of its bucket and takes the first
        ``count`` questions. Results are concatenated in requirement order.
        The bucket map is not modified.

        Returns:
            Selected questions, numbered in list order

        Raises:
            UnknownPaperTypeError: No quota table for paper_type
            InsufficientQuestionsError: See check()
        """
        self.check(buckets, paper_type)

        selection: List[Question] = []
        for req in self.requirements_for(paper_type):
            pool = list(buckets.get((req.type, req.unit), ()))
            self.rng.shuffle(pool)
            selection.extend(pool[:req.count])

        logger.info(f"Selected {len(selection)} questions for {paper_type}")
        return selection
