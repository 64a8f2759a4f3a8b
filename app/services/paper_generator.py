"""End-to-end paper generation.

Runs rows -> question bank -> buckets -> quota selection -> paper payload
and reports the outcome as a GenerationResult instead of raising, so the
HTTP layer and the CLI share one error mapping.
"""

import logging
import random
from typing import Any, Mapping, Optional, Sequence

from app.exceptions import PaperGenerationError
from app.models.paper import GenerationError, GenerationResult
from app.services.bank_builder import build_question_bank
from app.services.bucketizer import bucketize
from app.services.paper_assembler import assemble_paper
from app.services.quota_selector import QuotaSelector

logger = logging.getLogger(__name__)


def create_selector(seed: Optional[int] = None) -> QuotaSelector:
    """Quota selector with default tables and its own random generator."""
    return QuotaSelector(rng=random.Random(seed))


def generate_paper(
    rows: Sequence[Mapping[str, Any]],
    paper_type: str,
    selector: Optional[QuotaSelector] = None,
) -> GenerationResult:
    """
    Generate a question paper from spreadsheet rows.

    Args:
        rows: Rows of the first sheet, header -> cell value
        paper_type: Quota table to apply, e.g. "mid1"
        selector: Quota selector to use. A default one is created per call

    Returns:
        GenerationResult with either ``paper`` or ``error`` set
    """
    if selector is None:
        selector = create_selector()

    try:
        bank = build_question_bank(rows)
        buckets = bucketize(bank)
        selection = selector.select(buckets, paper_type)
        paper = assemble_paper(selection)
    except PaperGenerationError as e:
        logger.info(f"Paper generation rejected ({e.kind}): {e.message}")
        return GenerationResult(
            success=False,
            error=GenerationError(kind=e.kind, message=e.message, details=e.details),
        )
    except Exception as e:
        logger.error(f"Error generating question paper: {e}", exc_info=True)
        return GenerationResult(
            success=False,
            error=GenerationError(
                kind="internal_fault",
                message=f"Error generating question paper: {type(e).__name__}",
            ),
        )

    return GenerationResult(success=True, paper=paper)
