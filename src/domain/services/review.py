"""
Review console for managers and admins.

Managers see the records that name them as manager; the admin sees the
whole registry and additionally owns roster import, exports, backup and
restore, deletion and forced sync.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from src.domain.models import Assessment, AssessmentStatus
from src.domain.principals import Admin, Manager, Principal, is_assessor
from src.domain.services import lifecycle
from src.domain.services.ai_summary import AssessmentSummarizer, SummaryUnavailableError
from src.domain.services.auth_service import scope_records
from src.domain.services.export import dump_backup, export_reviewed_csv, load_backup
from src.domain.services.lifecycle import ManagerReviewUpdate
from src.domain.services.registry import AssessmentRegistry, RecordNotFoundError, SyncResult
from src.domain.services.roster_import import ImportReport, RosterImporter

logger = structlog.get_logger()


class AccessDeniedError(Exception):
    """Raised when the principal may not use a console action."""


@dataclass(slots=True)
class ConsoleStats:
    submitted: int
    reviewed: int
    total: int


class ReviewConsole:
    def __init__(
        self,
        registry: AssessmentRegistry,
        principal: Principal,
        summarizer: AssessmentSummarizer | None = None,
    ) -> None:
        if not is_assessor(principal):
            raise AccessDeniedError("Manager or admin access required")
        self.registry = registry
        self.principal: Manager | Admin = principal  # type: ignore[assignment]
        self.summarizer = summarizer

    @property
    def is_admin(self) -> bool:
        return isinstance(self.principal, Admin)

    def _require_admin(self) -> None:
        if not self.is_admin:
            raise AccessDeniedError("Admin access required")

    def _scoped(self) -> list[Assessment]:
        return scope_records(self.principal, self.registry.all())

    # -- submissions -----------------------------------------------------

    def submissions(self) -> list[Assessment]:
        return [record for record in self._scoped() if record.status != AssessmentStatus.DRAFT]

    def stats(self) -> ConsoleStats:
        scoped = self._scoped()
        return ConsoleStats(
            submitted=sum(1 for r in scoped if r.status == AssessmentStatus.SUBMITTED),
            reviewed=sum(1 for r in scoped if r.status == AssessmentStatus.REVIEWED),
            total=len(scoped),
        )

    def open(self, assessment_id: str) -> Assessment:
        for record in self._scoped():
            if record.id == assessment_id:
                return record
        # Out-of-scope records look the same as missing ones
        raise RecordNotFoundError(f"Assessment {assessment_id} not found")

    async def review(self, assessment_id: str, update: ManagerReviewUpdate) -> SyncResult:
        record = self.open(assessment_id)
        lifecycle.apply_manager_update(record, update)
        return await self.registry.commit([record])

    async def finalize(
        self, assessment_id: str, update: ManagerReviewUpdate | None = None
    ) -> tuple[Assessment, SyncResult]:
        record = self.open(assessment_id)
        if update is not None:
            lifecycle.apply_manager_update(record, update)
        lifecycle.finalize_review(record)
        result = await self.registry.commit([record])
        await logger.ainfo(
            "assessment_reviewed",
            assessment_id=record.id,
            reviewer=self.principal.email,
            synced=result.success,
        )
        return record, result

    async def analyze(self, assessment_id: str) -> str:
        record = self.open(assessment_id)
        if self.summarizer is None:
            raise SummaryUnavailableError("AI analysis is not configured")
        return await self.summarizer.summarize(record)

    # -- staff registry (admin) -----------------------------------------

    def staff_registry(self) -> list[Assessment]:
        self._require_admin()
        return self.registry.all()

    async def bulk_import(self, csv_text: str) -> ImportReport:
        self._require_admin()
        return await RosterImporter(self.registry).import_csv(csv_text)

    def export_csv(self) -> bytes:
        self._require_admin()
        return export_reviewed_csv(self.registry.all())

    def backup(self) -> str:
        self._require_admin()
        return dump_backup(self.registry.all())

    async def restore(self, payload: str | bytes) -> tuple[int, SyncResult]:
        self._require_admin()
        records = load_backup(payload)
        result = await self.registry.restore(records)
        return len(records), result

    async def delete(self, assessment_id: str) -> SyncResult:
        self._require_admin()
        return await self.registry.remove(assessment_id)

    async def force_sync(self) -> SyncResult:
        """Retry pushing the registry. Newer remote copies are not overwritten."""
        self._require_admin()
        return await self.registry.sync()

    async def reload(self) -> int:
        self._require_admin()
        return len(await self.registry.load())
