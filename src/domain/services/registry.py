"""
Registry of every assessment in the session.

All reads hand out copies; all writes go through ``commit`` (or the
lower-level ``replace``/``add``/``remove``), which re-serialize the whole
registry to the local cache. Remote sync re-upserts the snapshot keyed by
``id``; a record someone else changed first is reported as a conflict and
swapped for the remote copy. Concurrent syncs are not serialized: the last
response to land decides the versions adopted locally.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog
from src.domain.models import Assessment, normalize_email
from src.infrastructure.cache.local_cache import LocalCache
from src.infrastructure.repositories.assessment_store import RemoteStore, RemoteStoreError

logger = structlog.get_logger()


class RecordNotFoundError(Exception):
    """Raised when an assessment id is not in the registry."""


@dataclass(slots=True)
class ConnectionStatus:
    connected: bool | None = None
    error: str | None = None


@dataclass(slots=True)
class SyncResult:
    """Outcome of pushing the registry snapshot to the remote store."""

    success: bool
    count: int = 0
    unchanged: int = 0
    conflicts: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def message(self) -> str:
        if self.error:
            return (
                f"Database Sync Failed: {self.error}. Data is saved locally "
                "but NOT in the remote store."
            )
        if self.conflicts:
            return (
                f"{len(self.conflicts)} record(s) were changed by someone else. Your edits to "
                "them were not saved; the latest copy has been loaded."
            )
        return f"Synchronized {self.count} record(s)."


class AssessmentRegistry:
    """In-memory registry mirrored to a local snapshot and a remote store."""

    def __init__(
        self,
        local_cache: LocalCache,
        remote: RemoteStore | None = None,
        *,
        remote_sync_enabled: bool = True,
    ) -> None:
        self.local_cache = local_cache
        self.remote = remote
        self.remote_sync_enabled = remote_sync_enabled and remote is not None
        self.connection = ConnectionStatus()
        self._records: list[Assessment] = []
        self.source: str | None = None

    # -- loading ---------------------------------------------------------

    async def load(self) -> list[Assessment]:
        """Remote first; an empty or failing remote falls back to the local snapshot.

        Also the reload path: unsynced local edits are replaced by what is loaded.
        """
        records: list[Assessment] = []
        if self.remote is not None:
            try:
                await self.remote.check_connection()
                records = await self.remote.fetch_all()
                self.connection = ConnectionStatus(connected=True)
            except RemoteStoreError as exc:
                self.connection = ConnectionStatus(connected=False, error=str(exc))
                await logger.awarning("registry_remote_unavailable", error=str(exc))

        source = "remote"
        if not records:
            records = self.local_cache.read()
            source = "local_cache"

        self._records = records
        self.source = source
        if source == "remote":
            self._persist_local()
        await logger.ainfo("registry_loaded", source=source, count=len(records))
        return self.all()

    # -- reads -----------------------------------------------------------

    def all(self) -> list[Assessment]:
        return [record.model_copy(deep=True) for record in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def get(self, assessment_id: str) -> Assessment | None:
        for record in self._records:
            if record.id == assessment_id:
                return record.model_copy(deep=True)
        return None

    def require(self, assessment_id: str) -> Assessment:
        record = self.get(assessment_id)
        if record is None:
            raise RecordNotFoundError(f"Assessment {assessment_id} not found")
        return record

    def get_by_employee_email(self, email: str) -> Assessment | None:
        key = normalize_email(email)
        if not key:
            return None
        for record in self._records:
            if record.employee_email == key:
                return record.model_copy(deep=True)
        return None

    def get_by_manager_email(self, email: str) -> list[Assessment]:
        key = normalize_email(email)
        if not key:
            return []
        return [
            record.model_copy(deep=True)
            for record in self._records
            if record.manager_email_key == key
        ]

    def has_manager(self, email: str) -> bool:
        key = normalize_email(email)
        return bool(key) and any(record.manager_email_key == key for record in self._records)

    # -- local mutations -------------------------------------------------

    def replace(self, record: Assessment) -> bool:
        """Swap one record by id; no-op when the id is unknown."""
        if not self._swap(record):
            return False
        self._persist_local()
        return True

    def add(self, record: Assessment) -> None:
        self._records.append(record.model_copy(deep=True))
        self._persist_local()

    def replace_all(self, records: Sequence[Assessment]) -> None:
        self._records = [record.model_copy(deep=True) for record in records]
        self._persist_local()

    def _persist_local(self) -> None:
        self.local_cache.write(self._records)

    # -- remote ----------------------------------------------------------

    async def remove(self, assessment_id: str) -> SyncResult:
        """Delete locally and remotely. Not reversible."""
        before = len(self._records)
        self._records = [record for record in self._records if record.id != assessment_id]
        if len(self._records) == before:
            raise RecordNotFoundError(f"Assessment {assessment_id} not found")
        self._persist_local()
        await logger.ainfo("registry_record_removed", assessment_id=assessment_id)

        if not self.remote_sync_enabled:
            return SyncResult(success=True, count=1)
        try:
            await self.remote.delete(assessment_id)  # type: ignore[union-attr]
        except RemoteStoreError as exc:
            return SyncResult(success=False, error=str(exc))
        return SyncResult(success=True, count=1)

    async def sync(
        self, records: Sequence[Assessment] | None = None, *, force: bool = False
    ) -> SyncResult:
        """Upsert the given records (default: the whole registry) keyed by id.

        ``force`` overwrites remote copies regardless of their version. Without
        it, records someone else changed in the meantime are reported as
        conflicts and replaced by the newer remote copy.
        """
        if not self.remote_sync_enabled:
            return SyncResult(success=False, error="Database not configured")

        batch = [
            record.model_copy(deep=True)
            for record in (self._records if records is None else records)
        ]
        if not batch:
            return SyncResult(success=True, count=0)

        # Objects held before the await; a local write in between swaps them out
        held = {record.id: record for record in self._records}
        try:
            outcome = await self.remote.bulk_upsert(batch, force=force)  # type: ignore[union-attr]
        except RemoteStoreError as exc:
            self.connection = ConnectionStatus(connected=False, error=str(exc))
            await logger.awarning("registry_sync_failed", error=str(exc))
            return SyncResult(success=False, error=str(exc))

        self.connection = ConnectionStatus(connected=True)
        changed = False
        for record in self._records:
            new_version = outcome.versions.get(record.id)
            if (
                new_version is not None
                and new_version != record.version
                and held.get(record.id) is record
            ):
                record.version = new_version
                changed = True

        if outcome.conflicts:
            await logger.awarning("registry_sync_conflicts", conflicts=outcome.conflicts)
            changed = await self._refresh(outcome.conflicts, held) or changed

        if changed:
            self._persist_local()

        return SyncResult(
            success=not outcome.conflicts,
            count=len(outcome.written),
            unchanged=len(outcome.unchanged),
            conflicts=list(outcome.conflicts),
        )

    async def _refresh(self, ids: Sequence[str], held: dict[str, Assessment]) -> bool:
        """Replace conflicting records with their remote copies."""
        try:
            latest = await self.remote.fetch_many(ids)  # type: ignore[union-attr]
        except RemoteStoreError as exc:
            await logger.awarning("registry_refresh_failed", ids=list(ids), error=str(exc))
            return False

        refreshed = []
        for record in latest:
            for index, current in enumerate(self._records):
                if current.id == record.id and held.get(record.id) is current:
                    self._records[index] = record
                    refreshed.append(record.id)
                    break
        await logger.ainfo("registry_conflicts_refreshed", ids=refreshed)
        return bool(refreshed)

    async def commit(self, records: Sequence[Assessment]) -> SyncResult:
        """Single write path: merge into memory, persist locally, push remotely."""
        for record in records:
            if not self._swap(record):
                self._records.append(record.model_copy(deep=True))
        self._persist_local()
        await logger.ainfo("registry_committed", ids=[record.id for record in records])
        if not self.remote_sync_enabled:
            return SyncResult(success=True)
        return await self.sync()

    def _swap(self, record: Assessment) -> bool:
        for index, current in enumerate(self._records):
            if current.id == record.id:
                self._records[index] = record.model_copy(deep=True)
                return True
        return False

    async def restore(self, records: Sequence[Assessment]) -> SyncResult:
        """Replace the registry wholesale and overwrite the remote copies."""
        self.replace_all(records)
        await logger.ainfo("registry_restored", count=len(records))
        if not self.remote_sync_enabled:
            return SyncResult(success=True)
        return await self.sync(force=True)
