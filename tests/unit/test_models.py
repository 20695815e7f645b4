from __future__ import annotations

from src.domain.models import (
    Assessment,
    AssessmentStatus,
    Rating,
    blank_assessment,
    manual_draft,
    normalize_email,
)
from src.domain.reference_data import CORE_COMPETENCIES, RATING_DESCRIPTIONS


def test_blank_assessment_seeds_catalog_and_positional_kpis() -> None:
    record = blank_assessment(
        "  Jane Doe ",
        " Jane@Example.com ",
        "Mark Manager",
        "Mark@Example.com",
        ["Grow revenue", "", "  ", "Reduce churn"],
    )

    assert record.status == AssessmentStatus.DRAFT
    assert record.employee_details.full_name == "Jane Doe"
    assert record.employee_details.email == "Jane@Example.com"
    assert record.employee_email == "jane@example.com"
    assert record.manager_email_key == "mark@example.com"
    assert [kpi.title for kpi in record.kpis] == ["KPI 1", "KPI 2"]
    assert [kpi.description for kpi in record.kpis] == ["Grow revenue", "Reduce churn"]
    assert [c.id for c in record.core_competencies] == [c["id"] for c in CORE_COMPETENCIES]
    assert all(c.self_rating is None for c in record.core_competencies)


def test_catalog_is_copied_into_each_record() -> None:
    first = blank_assessment("A", "a@example.com", "M", "m@example.com", ["x"])
    second = blank_assessment("B", "b@example.com", "M", "m@example.com", ["x"])

    first.core_competencies[0].indicators.append("extra")

    assert "extra" not in second.core_competencies[0].indicators
    assert "extra" not in CORE_COMPETENCIES[0]["indicators"]


def test_records_get_distinct_ids() -> None:
    ids = {blank_assessment("A", "a@example.com", "M", "m@example.com", []).id for _ in range(5)}
    assert len(ids) == 5


def test_payload_uses_camel_case_and_round_trips() -> None:
    record = blank_assessment("Jane", "jane@example.com", "Mark", "mark@example.com", ["Goal"])
    record.kpis[0].self_rating = Rating.EXCEEDS

    payload = record.to_payload()

    assert payload["employeeDetails"]["fullName"] == "Jane"
    assert payload["managerEmail"] == "mark@example.com"
    assert payload["kpis"][0]["selfRating"] == "2 - Exceeds requirements"
    assert payload["status"] == "draft"
    assert Assessment.model_validate(payload) == record


def test_snake_case_input_is_accepted() -> None:
    record = Assessment.model_validate(
        {"id": "a-1", "employee_details": {"full_name": "Jane", "email": "j@example.com"}}
    )
    assert record.employee_details.full_name == "Jane"


def test_every_rating_has_a_description() -> None:
    assert set(RATING_DESCRIPTIONS) == {rating.value for rating in Rating}


def test_normalize_email() -> None:
    assert normalize_email("  Jane@Example.COM ") == "jane@example.com"
    assert normalize_email(None) == ""


def test_manual_draft_uses_default_kpis() -> None:
    record = manual_draft("admin@metabev.com")

    assert record.employee_details.email == "admin@metabev.com"
    assert [kpi.title for kpi in record.kpis] == [
        "KPI 1: Strategic Goal",
        "KPI 2: Operational Goal",
    ]
    assert len(record.core_competencies) == 6
