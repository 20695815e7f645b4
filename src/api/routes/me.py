"""Staff self-assessment routes backed by the form wizard."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from src.api.deps import get_registry, staff_principal
from src.api.schemas.assessments import (
    AssessmentView,
    DraftSaveRequest,
    DraftSaveResponse,
    MyAssessmentResponse,
    StageItem,
    SubmitRequest,
    SubmitResponse,
    SyncStatus,
)
from src.domain.models import Assessment, manual_draft
from src.domain.principals import Staff
from src.domain.services.lifecycle import (
    InvalidTransitionError,
    LifecycleError,
    MissingEmployeeNameError,
    RecordLockedError,
)
from src.domain.services.registry import AssessmentRegistry
from src.domain.services.wizard import STAGES, FormWizard, WizardStage, WizardStageError

router = APIRouter(prefix="/me", tags=["Self-assessment"])


def _own_record(registry: AssessmentRegistry, principal: Staff) -> tuple[Assessment, bool]:
    record = registry.get_by_employee_email(principal.email)
    if record is None:
        # Nobody on the roster under this email: start an unsaved blank form
        return manual_draft(principal.email), False
    return record, True


@router.get("/assessment", response_model=MyAssessmentResponse)
async def get_my_assessment(
    stage: WizardStage = Query(WizardStage.OVERVIEW),
    principal: Staff = Depends(staff_principal),
    registry: AssessmentRegistry = Depends(get_registry),
) -> MyAssessmentResponse:
    record, persisted = _own_record(registry, principal)
    wizard = FormWizard(registry, record, stage)
    return MyAssessmentResponse(
        assessment=AssessmentView.from_record(wizard.working_copy),
        persisted=persisted,
        read_only=wizard.read_only,
        stage=wizard.stage,
        stages=[StageItem(id=item, title=item.title) for item in STAGES],
    )


@router.put("/assessment/draft", response_model=DraftSaveResponse)
async def save_my_draft(
    payload: DraftSaveRequest,
    principal: Staff = Depends(staff_principal),
    registry: AssessmentRegistry = Depends(get_registry),
) -> DraftSaveResponse:
    """
    Save the self-assessment as a draft.

    - Writes the whole working copy back through the registry
    - With ``advance`` the wizard moves to the next stage after saving
    """
    record, _ = _own_record(registry, principal)
    wizard = FormWizard(registry, record, payload.stage)
    try:
        wizard.update(payload.update)
        result = await wizard.next() if payload.advance else await wizard.save_draft()
    except RecordLockedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except LifecycleError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return DraftSaveResponse(
        assessment=AssessmentView.from_record(wizard.working_copy),
        stage=wizard.stage,
        read_only=wizard.read_only,
        sync=SyncStatus.from_result(result),
    )


@router.post("/assessment/submit", response_model=SubmitResponse)
async def submit_my_assessment(
    payload: SubmitRequest,
    principal: Staff = Depends(staff_principal),
    registry: AssessmentRegistry = Depends(get_registry),
) -> SubmitResponse:
    record, _ = _own_record(registry, principal)
    wizard = FormWizard(registry, record, payload.stage)
    try:
        if payload.update is not None:
            wizard.update(payload.update)
        result = await wizard.submit()
    except (WizardStageError, RecordLockedError, InvalidTransitionError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except (MissingEmployeeNameError, LifecycleError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return SubmitResponse(
        assessment=AssessmentView.from_record(wizard.working_copy),
        sync=SyncStatus.from_result(result),
    )
