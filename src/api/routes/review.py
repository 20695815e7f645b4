"""Review console routes for managers and the administrator."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from src.api.deps import get_review_console
from src.api.schemas.assessments import (
    AnalysisResponse,
    AssessmentView,
    FinalizeRequest,
    ReviewResponse,
    StatsResponse,
    SubmissionItem,
    SyncStatus,
)
from src.domain.services.ai_summary import SummaryUnavailableError
from src.domain.services.lifecycle import (
    InvalidTransitionError,
    LifecycleError,
    ManagerReviewUpdate,
    RecordLockedError,
)
from src.domain.services.registry import RecordNotFoundError
from src.domain.services.review import ReviewConsole

router = APIRouter(prefix="/review", tags=["Review"])


def _lifecycle_error(exc: LifecycleError) -> HTTPException:
    if isinstance(exc, RecordLockedError | InvalidTransitionError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=422, detail=str(exc))


@router.get("/submissions", response_model=list[SubmissionItem])
async def list_submissions(
    console: ReviewConsole = Depends(get_review_console),
) -> list[SubmissionItem]:
    """Submitted and reviewed records within the caller's scope."""
    return [SubmissionItem.from_record(record) for record in console.submissions()]


@router.get("/stats", response_model=StatsResponse)
async def review_stats(console: ReviewConsole = Depends(get_review_console)) -> StatsResponse:
    stats = console.stats()
    return StatsResponse(submitted=stats.submitted, reviewed=stats.reviewed, total=stats.total)


@router.get("/assessments/{assessment_id}", response_model=AssessmentView)
async def open_assessment(
    assessment_id: str,
    console: ReviewConsole = Depends(get_review_console),
) -> AssessmentView:
    try:
        record = console.open(assessment_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return AssessmentView.from_record(record)


@router.patch("/assessments/{assessment_id}", response_model=ReviewResponse)
async def update_review(
    assessment_id: str,
    payload: ManagerReviewUpdate,
    console: ReviewConsole = Depends(get_review_console),
) -> ReviewResponse:
    """Save manager ratings and comments without finalizing."""
    try:
        result = await console.review(assessment_id, payload)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LifecycleError as exc:
        raise _lifecycle_error(exc) from exc

    return ReviewResponse(
        assessment=AssessmentView.from_record(console.open(assessment_id)),
        sync=SyncStatus.from_result(result),
    )


@router.post("/assessments/{assessment_id}/finalize", response_model=ReviewResponse)
async def finalize_review(
    assessment_id: str,
    payload: FinalizeRequest | None = None,
    console: ReviewConsole = Depends(get_review_console),
) -> ReviewResponse:
    """
    Close the appraisal.

    - Applies the optional manager edits first
    - Requires an overall manager rating
    - The record is read-only afterwards
    """
    try:
        record, result = await console.finalize(
            assessment_id, payload.update if payload else None
        )
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LifecycleError as exc:
        raise _lifecycle_error(exc) from exc

    return ReviewResponse(
        assessment=AssessmentView.from_record(record),
        sync=SyncStatus.from_result(result),
    )


@router.post("/assessments/{assessment_id}/analysis", response_model=AnalysisResponse)
async def analyze_assessment(
    assessment_id: str,
    console: ReviewConsole = Depends(get_review_console),
) -> AnalysisResponse:
    """Advisory AI summary of the self-assessment; nothing is stored."""
    try:
        summary = await console.analyze(assessment_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SummaryUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc

    return AnalysisResponse(assessment_id=assessment_id, summary=summary)
