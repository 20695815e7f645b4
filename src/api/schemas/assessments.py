from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from src.domain.models import Assessment, AssessmentStatus
from src.domain.services.lifecycle import ManagerReviewUpdate, SelfAssessmentUpdate
from src.domain.services.registry import SyncResult
from src.domain.services.wizard import WizardStage


class AssessmentView(Assessment):
    """Assessment as returned to clients; the manager password never leaves the server."""

    manager_password: str | None = Field(default=None, exclude=True)

    @classmethod
    def from_record(cls, record: Assessment) -> AssessmentView:
        return cls.model_validate(record.model_dump())


class SyncStatus(BaseModel):
    success: bool
    count: int = 0
    unchanged: int = 0
    conflicts: list[str] = []
    error: str | None = None
    message: str

    @classmethod
    def from_result(cls, result: SyncResult) -> SyncStatus:
        return cls(
            success=result.success,
            count=result.count,
            unchanged=result.unchanged,
            conflicts=list(result.conflicts),
            error=result.error,
            message=result.message,
        )


# Staff wizard


class StageItem(BaseModel):
    id: WizardStage
    title: str


class MyAssessmentResponse(BaseModel):
    assessment: AssessmentView
    persisted: bool = Field(..., description="False for an unsaved manual draft")
    read_only: bool
    stage: WizardStage
    stages: list[StageItem]


class DraftSaveRequest(BaseModel):
    stage: WizardStage = WizardStage.OVERVIEW
    update: SelfAssessmentUpdate = Field(default_factory=SelfAssessmentUpdate)
    advance: bool = Field(False, description="Move to the next stage after saving")


class DraftSaveResponse(BaseModel):
    assessment: AssessmentView
    stage: WizardStage
    read_only: bool
    sync: SyncStatus


class SubmitRequest(BaseModel):
    stage: WizardStage = Field(..., description="Stage the client is on; must be the last one")
    update: SelfAssessmentUpdate | None = None


class SubmitResponse(BaseModel):
    assessment: AssessmentView
    sync: SyncStatus


# Review console


class SubmissionItem(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    id: str
    employee_name: str
    email: str
    position: str
    division: str
    manager_name: str
    manager_email: str
    status: AssessmentStatus
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None

    @classmethod
    def from_record(cls, record: Assessment) -> SubmissionItem:
        details = record.employee_details
        return cls(
            id=record.id,
            employee_name=details.full_name,
            email=details.email,
            position=details.position,
            division=details.division,
            manager_name=record.manager_name,
            manager_email=record.manager_email,
            status=record.status,
            submitted_at=record.submitted_at,
            reviewed_at=record.reviewed_at,
        )


class StatsResponse(BaseModel):
    submitted: int
    reviewed: int
    total: int


class ReviewResponse(BaseModel):
    assessment: AssessmentView
    sync: SyncStatus


class FinalizeRequest(BaseModel):
    update: ManagerReviewUpdate | None = None


class AnalysisResponse(BaseModel):
    assessment_id: str
    summary: str
