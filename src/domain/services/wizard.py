"""
Five-stage self-assessment editor.

The wizard owns a working copy of one record. Moving forward or saving a
draft writes the whole copy back through the registry without diffing.
Submission is only offered on the last stage and runs the lifecycle
transition; the read-only flag mirrors the record status for rendering.
"""

from __future__ import annotations

import enum

import structlog
from src.domain.models import Assessment
from src.domain.services import lifecycle
from src.domain.services.lifecycle import SelfAssessmentUpdate
from src.domain.services.registry import AssessmentRegistry, SyncResult

logger = structlog.get_logger()


class WizardStage(str, enum.Enum):
    OVERVIEW = "overview"
    KPIS = "kpis"
    DEVELOPMENT = "development"
    COMPETENCIES = "competencies"
    FINAL_REVIEW = "final_review"

    @property
    def title(self) -> str:
        return STAGE_TITLES[self]


STAGE_TITLES = {
    WizardStage.OVERVIEW: "Overview",
    WizardStage.KPIS: "Key Performance Indicators",
    WizardStage.DEVELOPMENT: "Individual Development",
    WizardStage.COMPETENCIES: "Core Competencies",
    WizardStage.FINAL_REVIEW: "Final Review",
}

STAGES: tuple[WizardStage, ...] = tuple(WizardStage)


class WizardStageError(Exception):
    """Raised when an action is not available on the current stage."""


class FormWizard:
    """Linear editor over one assessment."""

    def __init__(
        self,
        registry: AssessmentRegistry,
        record: Assessment,
        stage: WizardStage = WizardStage.OVERVIEW,
    ) -> None:
        self.registry = registry
        self.working_copy = record.model_copy(deep=True)
        self.stage = stage

    @property
    def read_only(self) -> bool:
        return not lifecycle.is_self_editable(self.working_copy)

    @property
    def is_last_stage(self) -> bool:
        return self.stage == STAGES[-1]

    def update(self, update: SelfAssessmentUpdate) -> Assessment:
        lifecycle.apply_self_update(self.working_copy, update)
        return self.working_copy

    async def save_draft(self) -> SyncResult:
        if self.read_only:
            raise lifecycle.RecordLockedError(
                f"Assessment {self.working_copy.id} is {self.working_copy.status.value}"
            )
        result = await self.registry.commit([self.working_copy])
        await logger.ainfo(
            "wizard_draft_saved",
            assessment_id=self.working_copy.id,
            stage=self.stage.value,
            synced=result.success,
        )
        return result

    async def next(self) -> SyncResult:
        result = await self.save_draft()
        position = STAGES.index(self.stage)
        if position < len(STAGES) - 1:
            self.stage = STAGES[position + 1]
        return result

    def previous(self) -> WizardStage:
        position = STAGES.index(self.stage)
        if position > 0:
            self.stage = STAGES[position - 1]
        return self.stage

    async def submit(self) -> SyncResult:
        if not self.is_last_stage:
            raise WizardStageError("Submission is only available on the final review stage")

        candidate = self.working_copy.model_copy(deep=True)
        lifecycle.submit(candidate)
        result = await self.registry.commit([candidate])
        self.working_copy = candidate
        await logger.ainfo(
            "assessment_submitted",
            assessment_id=candidate.id,
            email=candidate.employee_email,
            synced=result.success,
        )
        return result
