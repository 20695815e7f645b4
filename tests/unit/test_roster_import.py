from __future__ import annotations

import pytest
from src.domain.models import AssessmentStatus, Rating
from src.domain.services.registry import AssessmentRegistry
from src.domain.services.roster_import import RosterImporter, merge_roster, parse_roster

from tests.utils import make_record, roster_csv

JANE = [
    "Jane Doe",
    "jane@example.com",
    "Grow revenue",
    "Reduce churn",
    "",
    "",
    "",
    "Mark Manager",
    "mark@example.com",
    "",
]


def test_parse_handles_quoting_and_bom() -> None:
    text = "\ufeff" + roster_csv(
        [
            'Doe, "JJ" Jane',
            "jj@example.com",
            "Line one\nline two",
            "Has, comma",
            "",
            "",
            "",
            "Mark",
            "mark@example.com",
            "pw",
        ]
    )

    rows, rejected = parse_roster(text)

    assert rejected == []
    assert rows[0].full_name == 'Doe, "JJ" Jane'
    assert rows[0].kpi_seeds[:2] == ["Line one\nline two", "Has, comma"]
    assert rows[0].manager_password == "pw"


def test_parse_reports_rejected_rows_and_skips_blank_lines() -> None:
    text = (
        "FullName,Email,KPI1,KPI2,KPI3,KPI4,KPI5,ManagerName,ManagerEmail\n"
        "\n"
        "Short,short@example.com,a\n"
        "Bad Email,not-an-email,a,b,c,d,e,M,m@example.com\n"
        "Good,good@example.com,a,b,c,d,e,M,m@example.com\n"
    )

    rows, rejected = parse_roster(text)

    assert [row.email for row in rows] == ["good@example.com"]
    assert rows[0].manager_password is None
    assert [(item.line, item.email) for item in rejected] == [
        (3, "short@example.com"),
        (4, "not-an-email"),
    ]


def test_merge_creates_new_records() -> None:
    rows, _ = parse_roster(roster_csv(JANE))

    merged, created, updated = merge_roster([], rows)

    assert len(merged) == 1 and created == [merged[0].id] and updated == []
    record = merged[0]
    assert record.status == AssessmentStatus.DRAFT
    assert [kpi.description for kpi in record.kpis] == ["Grow revenue", "Reduce churn"]
    assert record.manager_password is None


def test_merge_existing_keeps_self_assessment() -> None:
    existing = make_record(email="Jane@Example.com", status=AssessmentStatus.SUBMITTED)
    existing.kpis[0].self_rating = Rating.OUTSTANDING
    existing.kpis[0].self_comments = "Beat target"
    existing.overall_performance.self_comments = "Great year"
    row = list(JANE)
    row[2] = "Grow revenue by 10%"
    row[4] = "Launch product"
    row[7:10] = ["Mary Boss", "mary@example.com", "s3cret"]
    rows, _ = parse_roster(roster_csv(row))

    merged, created, updated = merge_roster([existing], rows)

    assert created == [] and updated == [existing.id]
    record = merged[0]
    assert record.id == existing.id
    assert record.status == AssessmentStatus.SUBMITTED
    assert [kpi.description for kpi in record.kpis] == [
        "Grow revenue by 10%",
        "Reduce churn",
        "Launch product",
    ]
    assert record.kpis[2].id == "kpi-3"
    assert record.kpis[0].self_rating == Rating.OUTSTANDING
    assert record.kpis[0].self_comments == "Beat target"
    assert record.overall_performance.self_comments == "Great year"
    assert (record.manager_name, record.manager_email, record.manager_password) == (
        "Mary Boss",
        "mary@example.com",
        "s3cret",
    )
    # Input list is not mutated
    assert existing.manager_email == "mark@example.com"


def test_reimport_with_fewer_kpis_clears_trailing_descriptions() -> None:
    existing = make_record(kpi_seeds=("Grow revenue", "Reduce churn", "Launch product"))
    existing.kpis[2].self_rating = Rating.EXCEEDS
    row = list(JANE)
    row[2:7] = ["", "Keep customers", "", "", ""]
    rows, _ = parse_roster(roster_csv(row))

    merged, _, _ = merge_roster([existing], rows)

    record = merged[0]
    assert [kpi.description for kpi in record.kpis] == ["Keep customers", "", ""]
    assert [kpi.id for kpi in record.kpis] == ["kpi-1", "kpi-2", "kpi-3"]
    assert record.kpis[2].self_rating == Rating.EXCEEDS


def test_duplicate_email_in_one_file_merges_into_one_record() -> None:
    second = list(JANE)
    second[8] = "other@example.com"
    rows, _ = parse_roster(roster_csv(JANE, second))

    merged, created, updated = merge_roster([], rows)

    assert len(merged) == 1
    assert len(created) == 1 and updated == []
    assert merged[0].manager_email == "other@example.com"


@pytest.mark.asyncio
async def test_import_is_idempotent(registry: AssessmentRegistry) -> None:
    importer = RosterImporter(registry)
    text = roster_csv(JANE)

    first = await importer.import_csv(text)
    snapshot = registry.all()
    second = await importer.import_csv(text)

    assert first.imported == 1 and len(first.created) == 1
    assert second.created == [] and len(second.updated) == 1
    assert len(registry) == 1
    assert [r.to_payload() | {"version": 0} for r in registry.all()] == [
        r.to_payload() | {"version": 0} for r in snapshot
    ]
    assert second.sync is not None and second.sync.success is True


@pytest.mark.asyncio
async def test_import_with_only_bad_rows_writes_nothing(registry: AssessmentRegistry) -> None:
    report = await RosterImporter(registry).import_csv("FullName,Email\nx,y\n")

    assert report.imported == 0
    assert len(report.rejected) == 1
    assert report.sync is None
    assert len(registry) == 0
