"""
Assessment lifecycle: draft -> submitted -> reviewed.

Transitions are pure functions over a working copy. A rejected transition
raises before touching the record, so callers never observe a partial
change. Field-level edits are split by author: the employee owns the
self-assessment fields while the record is a draft, the manager owns the
manager fields while it is submitted, and a reviewed record is frozen.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from src.domain.models import Assessment, AssessmentStatus, Rating


class LifecycleError(Exception):
    """Base exception for rejected lifecycle operations."""


class InvalidTransitionError(LifecycleError):
    """Raised when a transition is not allowed from the current status."""


class MissingEmployeeNameError(LifecycleError):
    """Raised when submitting without the employee's full name."""


class MissingFinalGradeError(LifecycleError):
    """Raised when finalizing without an overall manager rating."""


class RecordLockedError(LifecycleError):
    """Raised when editing fields the current status no longer allows."""


_TRANSITIONS: dict[AssessmentStatus, AssessmentStatus] = {
    AssessmentStatus.DRAFT: AssessmentStatus.SUBMITTED,
    AssessmentStatus.SUBMITTED: AssessmentStatus.REVIEWED,
}


def _now() -> datetime:
    return datetime.now(UTC)


def _ensure_transition(record: Assessment, target: AssessmentStatus) -> None:
    if _TRANSITIONS.get(record.status) != target:
        raise InvalidTransitionError(
            f"Cannot move assessment {record.id} from {record.status.value} to {target.value}"
        )


def submit(record: Assessment, now: datetime | None = None) -> Assessment:
    """Employee hands the self-assessment to the manager."""
    _ensure_transition(record, AssessmentStatus.SUBMITTED)
    if not record.employee_details.full_name.strip():
        raise MissingEmployeeNameError("Please enter your full name before submitting.")

    stamp = now or _now()
    record.status = AssessmentStatus.SUBMITTED
    record.submitted_at = stamp
    record.updated_at = stamp
    return record


def finalize_review(record: Assessment, now: datetime | None = None) -> Assessment:
    """Manager or admin closes the appraisal; the record is read-only afterwards."""
    _ensure_transition(record, AssessmentStatus.REVIEWED)
    if record.overall_performance.manager_rating is None:
        raise MissingFinalGradeError("A final overall grade is required before finalizing.")

    stamp = now or _now()
    record.status = AssessmentStatus.REVIEWED
    record.reviewed_at = stamp
    record.updated_at = stamp
    return record


def is_self_editable(record: Assessment) -> bool:
    return record.status == AssessmentStatus.DRAFT


def is_manager_editable(record: Assessment) -> bool:
    return record.status == AssessmentStatus.SUBMITTED


# --- Field-level edits ------------------------------------------------------


class EditModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class DetailsEdit(EditModel):
    full_name: str | None = None
    position: str | None = None
    division: str | None = None


class KPISelfEdit(EditModel):
    id: str
    start_date: str | None = None
    target_date: str | None = None
    status: str | None = None
    self_rating: Rating | None = None
    self_comments: str | None = None
    mid_year_self_comments: str | None = None


class CompetencySelfEdit(EditModel):
    id: str
    self_rating: Rating | None = None


class SelfAssessmentUpdate(EditModel):
    """Employee-authored fields. Unset fields are left untouched."""

    employee_details: DetailsEdit | None = None
    kpis: list[KPISelfEdit] = []
    core_competencies: list[CompetencySelfEdit] = []
    development_competencies: list[str] | None = None
    development_self_comments: str | None = None
    overall_self_rating: Rating | None = None
    overall_self_comments: str | None = None


class KPIManagerEdit(EditModel):
    id: str
    manager_rating: Rating | None = None
    manager_comments: str | None = None
    mid_year_manager_comments: str | None = None


class CompetencyManagerEdit(EditModel):
    id: str
    manager_rating: Rating | None = None
    manager_comments: str | None = None


class ManagerReviewUpdate(EditModel):
    """Manager-authored fields. Unset fields are left untouched."""

    kpis: list[KPIManagerEdit] = []
    core_competencies: list[CompetencyManagerEdit] = []
    development_manager_comments: str | None = None
    overall_manager_rating: Rating | None = None
    overall_manager_comments: str | None = None


def _apply(target: BaseModel, edit: BaseModel, *, skip: tuple[str, ...] = ("id",)) -> None:
    for name, value in edit.model_dump(exclude_unset=True).items():
        if name in skip:
            continue
        # Ratings may be cleared with null; text fields may not
        if value is None and not name.endswith("rating"):
            continue
        setattr(target, name, value)


def _index(items: list, edits: list, kind: str) -> list[tuple]:
    by_id = {item.id: item for item in items}
    pairs = []
    for edit in edits:
        item = by_id.get(edit.id)
        if item is None:
            raise LifecycleError(f"Unknown {kind} '{edit.id}'")
        pairs.append((item, edit))
    return pairs


def apply_self_update(record: Assessment, update: SelfAssessmentUpdate) -> Assessment:
    """Apply employee edits; only a draft accepts them."""
    if not is_self_editable(record):
        raise RecordLockedError(
            f"Assessment {record.id} is {record.status.value}; self-assessment is read-only"
        )

    kpi_pairs = _index(record.kpis, update.kpis, "KPI")
    competency_pairs = _index(record.core_competencies, update.core_competencies, "competency")

    if update.employee_details is not None:
        _apply(record.employee_details, update.employee_details, skip=())
    for kpi, edit in kpi_pairs:
        _apply(kpi, edit)
    for competency, edit in competency_pairs:
        _apply(competency, edit)

    fields = update.model_fields_set
    if "development_competencies" in fields and update.development_competencies is not None:
        record.development_plan.competencies = list(update.development_competencies)
    if "development_self_comments" in fields and update.development_self_comments is not None:
        record.development_plan.self_comments = update.development_self_comments
    if "overall_self_rating" in fields:
        record.overall_performance.self_rating = update.overall_self_rating
    if "overall_self_comments" in fields and update.overall_self_comments is not None:
        record.overall_performance.self_comments = update.overall_self_comments

    record.updated_at = _now()
    return record


def apply_manager_update(record: Assessment, update: ManagerReviewUpdate) -> Assessment:
    """Apply manager edits; only a submitted record accepts them."""
    if not is_manager_editable(record):
        raise RecordLockedError(
            f"Assessment {record.id} is {record.status.value}; manager review is not editable"
        )

    kpi_pairs = _index(record.kpis, update.kpis, "KPI")
    competency_pairs = _index(record.core_competencies, update.core_competencies, "competency")

    for kpi, edit in kpi_pairs:
        _apply(kpi, edit)
    for competency, edit in competency_pairs:
        _apply(competency, edit)

    fields = update.model_fields_set
    if "development_manager_comments" in fields and update.development_manager_comments is not None:
        record.development_plan.manager_comments = update.development_manager_comments
    if "overall_manager_rating" in fields:
        record.overall_performance.manager_rating = update.overall_manager_rating
    if "overall_manager_comments" in fields and update.overall_manager_comments is not None:
        record.overall_performance.manager_comments = update.overall_manager_comments

    record.updated_at = _now()
    return record
