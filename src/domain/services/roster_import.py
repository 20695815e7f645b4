"""
Bulk roster import.

CSV layout (header row first):
    FullName, Email, KPI1..KPI5, ManagerName, ManagerEmail[, ManagerPassword]

For an email already in the registry only the KPI descriptions and the
manager name, email and password are overwritten; the employee's own input,
status and timestamps are kept. Unknown emails get a fresh draft.
"""

from __future__ import annotations

import csv
import io
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog
from src.domain.models import KPI, Assessment, blank_assessment, normalize_email
from src.domain.reference_data import ROSTER_KPI_COLUMNS, ROSTER_MIN_COLUMNS
from src.domain.services.registry import AssessmentRegistry, SyncResult

logger = structlog.get_logger()

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(slots=True)
class RosterRow:
    line: int
    full_name: str
    email: str
    kpi_seeds: list[str]
    manager_name: str
    manager_email: str
    manager_password: str | None = None


@dataclass(slots=True)
class RowRejection:
    line: int
    reason: str
    email: str | None = None


@dataclass(slots=True)
class ImportReport:
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    rejected: list[RowRejection] = field(default_factory=list)
    sync: SyncResult | None = None

    @property
    def imported(self) -> int:
        return len(self.created) + len(self.updated)


def parse_roster(text: str) -> tuple[list[RosterRow], list[RowRejection]]:
    """Parse roster CSV text; malformed rows are returned as rejections."""
    rows: list[RosterRow] = []
    rejected: list[RowRejection] = []

    reader = csv.reader(io.StringIO(text.lstrip("\ufeff"), newline=""))
    next(reader, None)  # header

    for cells in reader:
        line = reader.line_num
        cells = [cell.strip() for cell in cells]
        if not any(cells):
            continue
        if len(cells) < ROSTER_MIN_COLUMNS:
            rejected.append(
                RowRejection(
                    line=line,
                    reason=f"expected at least {ROSTER_MIN_COLUMNS} columns, got {len(cells)}",
                    email=cells[1] if len(cells) > 1 else None,
                )
            )
            continue

        email = cells[1]
        if not EMAIL_PATTERN.match(email):
            rejected.append(RowRejection(line=line, reason="invalid or missing email", email=email))
            continue

        manager_index = 2 + ROSTER_KPI_COLUMNS
        password = cells[manager_index + 2] if len(cells) > manager_index + 2 else ""
        rows.append(
            RosterRow(
                line=line,
                full_name=cells[0],
                email=email,
                kpi_seeds=cells[2:manager_index],
                manager_name=cells[manager_index],
                manager_email=cells[manager_index + 1],
                manager_password=password or None,
            )
        )

    return rows, rejected


def _merge_kpis(kpis: list[KPI], seeds: Sequence[str]) -> None:
    """Re-seed KPI descriptions the way ``blank_assessment`` lays them out.

    Blank seeds are dropped and the rest map onto KPIs in order. KPIs past the
    last seed keep their ratings and comments but lose their description.
    """
    descriptions = [seed for seed in seeds if seed]
    for position, kpi in enumerate(kpis):
        kpi.description = descriptions[position] if position < len(descriptions) else ""

    taken = {kpi.id for kpi in kpis}
    for position in range(len(kpis), len(descriptions)):
        number = position + 1
        kpi_id = f"kpi-{number}"
        while kpi_id in taken:
            number += 1
            kpi_id = f"kpi-{number}"
        taken.add(kpi_id)
        kpis.append(
            KPI(id=kpi_id, title=f"KPI {position + 1}", description=descriptions[position])
        )


def merge_roster(
    records: Sequence[Assessment], rows: Sequence[RosterRow]
) -> tuple[list[Assessment], list[str], list[str]]:
    """Merge roster rows into a copy of ``records``.

    Returns the merged list with the ids of created and updated records.
    """
    merged = [record.model_copy(deep=True) for record in records]
    by_email = {}
    for record in merged:
        by_email.setdefault(record.employee_email, record)

    created: list[str] = []
    updated: list[str] = []
    for row in rows:
        existing = by_email.get(normalize_email(row.email))
        if existing is None:
            record = blank_assessment(
                row.full_name,
                row.email,
                row.manager_name,
                row.manager_email,
                row.kpi_seeds,
                manager_password=row.manager_password,
            )
            merged.append(record)
            by_email[record.employee_email] = record
            created.append(record.id)
            continue

        _merge_kpis(existing.kpis, row.kpi_seeds)
        existing.manager_name = row.manager_name
        existing.manager_email = row.manager_email
        existing.manager_password = row.manager_password
        if existing.id not in created and existing.id not in updated:
            updated.append(existing.id)

    return merged, created, updated


class RosterImporter:
    """Applies a roster file to the registry and pushes the result as one batch."""

    def __init__(self, registry: AssessmentRegistry) -> None:
        self.registry = registry

    async def import_csv(self, text: str) -> ImportReport:
        rows, rejected = parse_roster(text)
        merged, created, updated = merge_roster(self.registry.all(), rows)

        report = ImportReport(created=created, updated=updated, rejected=rejected)
        if report.imported:
            report.sync = await self.registry.commit(merged)

        await logger.ainfo(
            "roster_imported",
            created=len(created),
            updated=len(updated),
            rejected=[(item.line, item.reason) for item in rejected],
        )
        return report
