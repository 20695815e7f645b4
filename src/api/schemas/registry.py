"""Pydantic schemas for the admin staff-registry endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field
from src.api.schemas.assessments import SubmissionItem, SyncStatus
from src.domain.models import Assessment
from src.domain.services.roster_import import ImportReport


class RegistryEntry(SubmissionItem):
    kpi_count: int = 0
    has_manager_password: bool = False

    @classmethod
    def from_record(cls, record: Assessment) -> RegistryEntry:
        base = SubmissionItem.from_record(record)
        return cls(
            **base.model_dump(),
            kpi_count=len(record.kpis),
            has_manager_password=bool(record.manager_password),
        )


class RegistryResponse(BaseModel):
    total: int
    items: list[RegistryEntry]


class RowRejectionItem(BaseModel):
    line: int
    reason: str
    email: str | None = None


class ImportResponse(BaseModel):
    imported: int
    created: list[str]
    updated: list[str]
    rejected: list[RowRejectionItem] = []
    sync: SyncStatus | None = None
    message: str

    @classmethod
    def from_report(cls, report: ImportReport) -> ImportResponse:
        message = f"Successfully imported {report.imported} staff members."
        if report.rejected:
            message += f" {len(report.rejected)} row(s) skipped."
        return cls(
            imported=report.imported,
            created=list(report.created),
            updated=list(report.updated),
            rejected=[
                RowRejectionItem(line=item.line, reason=item.reason, email=item.email)
                for item in report.rejected
            ],
            sync=SyncStatus.from_result(report.sync) if report.sync else None,
            message=message,
        )


class RestoreResponse(BaseModel):
    restored: int = Field(..., description="Number of records in the restored registry")
    sync: SyncStatus


class DeleteResponse(BaseModel):
    deleted: str
    sync: SyncStatus


class ReloadResponse(BaseModel):
    records: int
    source: str | None = None
    connected: bool | None = None
    error: str | None = None
