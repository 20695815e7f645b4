from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError
from src.domain.models import AssessmentStatus, Rating
from src.domain.services import lifecycle
from src.domain.services.lifecycle import (
    InvalidTransitionError,
    LifecycleError,
    ManagerReviewUpdate,
    MissingEmployeeNameError,
    MissingFinalGradeError,
    RecordLockedError,
    SelfAssessmentUpdate,
)

from tests.utils import make_record, rated_for_review

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=UTC)


def test_submit_stamps_and_moves_to_submitted() -> None:
    record = make_record()

    lifecycle.submit(record, now=NOW)

    assert record.status == AssessmentStatus.SUBMITTED
    assert record.submitted_at == NOW
    assert record.updated_at == NOW


def test_submit_requires_full_name() -> None:
    record = make_record(name="   ")

    with pytest.raises(MissingEmployeeNameError):
        lifecycle.submit(record, now=NOW)

    assert record.status == AssessmentStatus.DRAFT
    assert record.submitted_at is None


def test_submit_twice_is_rejected() -> None:
    record = make_record()
    lifecycle.submit(record, now=NOW)

    with pytest.raises(InvalidTransitionError):
        lifecycle.submit(record, now=NOW)


def test_finalize_requires_final_grade() -> None:
    record = make_record(status=AssessmentStatus.SUBMITTED)

    with pytest.raises(MissingFinalGradeError):
        lifecycle.finalize_review(record, now=NOW)

    assert record.status == AssessmentStatus.SUBMITTED
    assert record.reviewed_at is None


def test_finalize_moves_to_reviewed() -> None:
    record = rated_for_review(make_record(status=AssessmentStatus.SUBMITTED))

    lifecycle.finalize_review(record, now=NOW)

    assert record.status == AssessmentStatus.REVIEWED
    assert record.reviewed_at == NOW


@pytest.mark.parametrize("status", [AssessmentStatus.DRAFT, AssessmentStatus.REVIEWED])
def test_finalize_only_from_submitted(status: AssessmentStatus) -> None:
    record = rated_for_review(make_record(status=status))

    with pytest.raises(InvalidTransitionError):
        lifecycle.finalize_review(record, now=NOW)


def test_self_update_applies_employee_fields_only() -> None:
    record = make_record()
    update = SelfAssessmentUpdate.model_validate(
        {
            "employeeDetails": {"position": "Analyst", "division": "Finance"},
            "kpis": [
                {"id": "kpi-1", "selfRating": "1 - Outstanding", "selfComments": "Beat target"}
            ],
            "coreCompetencies": [{"id": "comp-1", "selfRating": "3 - Meets requirements"}],
            "developmentCompetencies": ["comp-2"],
            "developmentSelfComments": "Presentation skills",
            "overallSelfRating": "2 - Exceeds requirements",
        }
    )

    lifecycle.apply_self_update(record, update)

    assert record.employee_details.position == "Analyst"
    assert record.employee_details.full_name == "Jane Doe"
    assert record.kpis[0].self_rating == Rating.OUTSTANDING
    assert record.kpis[0].self_comments == "Beat target"
    assert record.kpis[0].description == "Grow revenue"
    assert record.core_competencies[0].self_rating == Rating.MEETS
    assert record.development_plan.competencies == ["comp-2"]
    assert record.overall_performance.self_rating == Rating.EXCEEDS
    assert record.updated_at is not None


def test_self_update_cannot_touch_manager_fields() -> None:
    with pytest.raises(ValidationError):
        SelfAssessmentUpdate.model_validate({"overallManagerRating": "1 - Outstanding"})


def test_self_update_rejected_once_submitted() -> None:
    record = make_record(status=AssessmentStatus.SUBMITTED)

    with pytest.raises(RecordLockedError):
        lifecycle.apply_self_update(record, SelfAssessmentUpdate(overall_self_comments="late"))


def test_unknown_kpi_id_leaves_record_untouched() -> None:
    record = make_record()
    update = SelfAssessmentUpdate.model_validate(
        {"overallSelfComments": "x", "kpis": [{"id": "kpi-99", "selfComments": "?"}]}
    )

    with pytest.raises(LifecycleError):
        lifecycle.apply_self_update(record, update)

    assert record.overall_performance.self_comments == ""


def test_manager_update_only_while_submitted() -> None:
    update = ManagerReviewUpdate(overall_manager_rating=Rating.MEETS)

    with pytest.raises(RecordLockedError):
        lifecycle.apply_manager_update(make_record(), update)

    reviewed = rated_for_review(make_record(status=AssessmentStatus.REVIEWED))
    with pytest.raises(RecordLockedError):
        lifecycle.apply_manager_update(reviewed, update)


def test_manager_update_applies_ratings_and_comments() -> None:
    record = make_record(status=AssessmentStatus.SUBMITTED)
    update = ManagerReviewUpdate.model_validate(
        {
            "kpis": [
                {
                    "id": "kpi-2",
                    "managerRating": "4 - Partially meets requirements",
                    "managerComments": "Churn still high",
                    "midYearManagerComments": "On track in June",
                }
            ],
            "coreCompetencies": [{"id": "comp-3", "managerRating": "N/A - Not Applicable"}],
            "developmentManagerComments": "Coaching budget approved",
            "overallManagerRating": "3 - Meets requirements",
            "overallManagerComments": "Good year",
        }
    )

    lifecycle.apply_manager_update(record, update)

    assert record.kpis[1].manager_rating == Rating.PARTIALLY_MEETS
    assert record.kpis[1].mid_year_manager_comments == "On track in June"
    assert record.core_competencies[2].manager_rating == Rating.NA
    assert record.development_plan.manager_comments == "Coaching budget approved"
    assert record.overall_performance.manager_rating == Rating.MEETS
    assert record.status == AssessmentStatus.SUBMITTED


def test_rating_can_be_cleared_with_null() -> None:
    record = make_record(status=AssessmentStatus.SUBMITTED)
    record.overall_performance.manager_rating = Rating.MEETS

    lifecycle.apply_manager_update(
        record, ManagerReviewUpdate.model_validate({"overallManagerRating": None})
    )

    assert record.overall_performance.manager_rating is None


def test_editability_mirrors_status() -> None:
    draft = make_record()
    submitted = make_record(status=AssessmentStatus.SUBMITTED)
    reviewed = make_record(status=AssessmentStatus.REVIEWED)

    assert lifecycle.is_self_editable(draft)
    assert not lifecycle.is_self_editable(submitted)
    assert lifecycle.is_manager_editable(submitted)
    assert not lifecycle.is_manager_editable(reviewed)
