"""Read-only projections of the registry: reviewed-results CSV and JSON backup."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence

from pydantic import TypeAdapter, ValidationError
from src.domain.models import Assessment, AssessmentStatus, Rating
from src.domain.reference_data import CORE_COMPETENCIES, ROSTER_KPI_COLUMNS

_RECORDS = TypeAdapter(list[Assessment])


class BackupFormatError(Exception):
    """Raised when a backup file is not a JSON array of assessments."""


def _label(rating: Rating | None) -> str:
    return rating.value if rating is not None else ""


def _stamp(value) -> str:
    return value.isoformat() if value is not None else ""


def export_columns() -> list[str]:
    columns = [
        "Employee Name",
        "Email",
        "Position",
        "Division",
        "Manager Name",
        "Manager Email",
        "Status",
        "Submitted At",
        "Reviewed At",
    ]
    for number in range(1, ROSTER_KPI_COLUMNS + 1):
        columns += [
            f"KPI {number} Title",
            f"KPI {number} Self Rating",
            f"KPI {number} Manager Rating",
            f"KPI {number} Manager Comments",
        ]
    for competency in CORE_COMPETENCIES:
        name = competency["name"]
        columns += [f"{name} Self Rating", f"{name} Manager Rating", f"{name} Manager Comments"]
    columns += ["Overall Self Rating", "Overall Manager Rating", "Overall Manager Comments"]
    return columns


def _row(record: Assessment) -> list[str]:
    details = record.employee_details
    row = [
        details.full_name,
        details.email,
        details.position,
        details.division,
        record.manager_name,
        record.manager_email,
        record.status.value,
        _stamp(record.submitted_at),
        _stamp(record.reviewed_at),
    ]
    for index in range(ROSTER_KPI_COLUMNS):
        if index < len(record.kpis):
            kpi = record.kpis[index]
            row += [
                kpi.title,
                _label(kpi.self_rating),
                _label(kpi.manager_rating),
                kpi.manager_comments,
            ]
        else:
            row += ["", "", "", ""]

    by_id = {competency.id: competency for competency in record.core_competencies}
    for catalog_item in CORE_COMPETENCIES:
        competency = by_id.get(str(catalog_item["id"]))
        if competency is None:
            row += ["", "", ""]
        else:
            row += [
                _label(competency.self_rating),
                _label(competency.manager_rating),
                competency.manager_comments,
            ]

    overall = record.overall_performance
    row += [_label(overall.self_rating), _label(overall.manager_rating), overall.manager_comments]
    return row


def export_reviewed_csv(records: Sequence[Assessment]) -> bytes:
    """One row per reviewed record, UTF-8 with a byte-order mark."""
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer)
    writer.writerow(export_columns())
    for record in records:
        if record.status == AssessmentStatus.REVIEWED:
            writer.writerow(_row(record))
    return buffer.getvalue().encode("utf-8-sig")


def dump_backup(records: Sequence[Assessment]) -> str:
    """Full-fidelity JSON array of the registry."""
    return json.dumps([record.to_payload() for record in records], ensure_ascii=False, indent=2)


def load_backup(text: str | bytes) -> list[Assessment]:
    try:
        return _RECORDS.validate_json(text)
    except ValidationError as exc:
        raise BackupFormatError(
            f"Backup is not a valid assessment list: {exc.error_count()} error(s)"
        ) from exc
