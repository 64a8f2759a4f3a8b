"""Shape a question selection into the paper payload."""

from typing import Sequence

from app.models.paper import PaperDetails, PaperPayload, PaperQuestion, Question


def assemble_paper(selection: Sequence[Question]) -> PaperPayload:
    """
    Build the paper payload from selected questions.

    Paper details come from the first selected question only. Uploads are
    assumed to cover a single subject, so no consistency check is made
    across the rest of the selection.

    Raises:
        ValueError: If the selection is empty
    """
    if not selection:
        raise ValueError("Cannot assemble a paper without questions")

    first = selection[0]
    details = PaperDetails(
        subject_code=first.subject_code,
        subject=first.subject,
        branch=first.branch,
        regulation=first.regulation,
        year=first.year,
        semester=first.semester,
        month=first.month,
    )

    return PaperPayload(
        paper_details=details,
        questions=[
            PaperQuestion(question=q.question, unit=q.unit, image_url=q.image_url)
            for q in selection
        ],
    )
