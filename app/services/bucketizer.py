"""Partition a question bank by (type, unit)."""

import logging
from typing import Any, Sequence

from app.models.paper import QUESTION_TYPES, UNITS, BucketMap, Question

logger = logging.getLogger(__name__)


def is_selectable_unit(unit: Any) -> bool:
    """True when ``unit`` is an integer 1-5 (booleans are not units)."""
    return isinstance(unit, int) and not isinstance(unit, bool) and unit in UNITS


def bucketize(bank: Sequence[Question]) -> BucketMap:
    """
    Group questions into one bucket per (type, unit).

    Every type/unit pair gets a key, even when empty. Questions whose unit
    is not an integer 1-5 land in no bucket; they are skipped, not reported.
    Bucket order follows bank order.
    """
    buckets: BucketMap = {
        (question_type, unit): [] for question_type in QUESTION_TYPES for unit in UNITS
    }

    for question in bank:
        if is_selectable_unit(question.unit):
            buckets[(question.type, question.unit)].append(question)

    skipped = excluded_count(bank)
    if skipped:
        logger.info(f"{skipped} question(s) have no unit in 1-5 and cannot be selected")

    return buckets


def excluded_count(bank: Sequence[Question]) -> int:
    """Number of questions that fall into no bucket."""
    return sum(1 for question in bank if not is_selectable_unit(question.unit))
