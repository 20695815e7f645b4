"""Hosted table of assessments, upserted wholesale and keyed by ``id``."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

import structlog
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from src.domain.models import Assessment
from src.infrastructure.db.models import AssessmentRow

logger = structlog.get_logger()


class RemoteStoreError(Exception):
    """Raised with a human-readable message when the remote store fails."""


@dataclass(slots=True)
class UpsertOutcome:
    """What happened to each record of a bulk upsert."""

    written: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    # id -> version now stored, for written and unchanged records
    versions: dict[str, int] = field(default_factory=dict)


class RemoteStore(Protocol):
    """Protocol for the remote store (allows in-memory fakes)."""

    async def check_connection(self) -> None:
        """Raise RemoteStoreError when the store is unusable."""
        ...

    async def fetch_all(self) -> list[Assessment]: ...

    async def fetch_many(self, ids: Sequence[str]) -> list[Assessment]: ...

    async def bulk_upsert(
        self, records: Sequence[Assessment], *, force: bool = False
    ) -> UpsertOutcome: ...

    async def delete(self, assessment_id: str) -> bool: ...


def describe_store_error(exc: BaseException) -> str:
    """Turn driver errors into something an administrator can act on."""
    message = str(getattr(exc, "orig", None) or exc)
    lowered = message.lower()
    if "42p01" in lowered or "no such table" in lowered or "does not exist" in lowered:
        return 'Table "assessments" missing. Did you run the database migrations?'
    if "42501" in lowered or "permission denied" in lowered:
        return 'Permission denied on table "assessments". Check the database role grants.'
    if isinstance(exc, OSError) or "connect" in lowered:
        return f"Database unreachable: {message[:150]}"
    return message[:200]


def _comparable(payload: dict) -> dict:
    return {key: value for key, value in payload.items() if key != "version"}


class SqlAssessmentStore:
    """SQLAlchemy implementation of the remote store.

    With ``optimistic=True`` a write is accepted only when the incoming
    record carries the version currently stored; stale writes are reported
    as conflicts instead of overwriting a newer copy. With ``optimistic=False``
    the last writer wins.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        optimistic: bool = True,
    ) -> None:
        self.session_factory = session_factory
        self.optimistic = optimistic

    async def check_connection(self) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(select(AssessmentRow.id).limit(1))
        except (SQLAlchemyError, OSError) as exc:
            raise RemoteStoreError(describe_store_error(exc)) from exc

    async def fetch_all(self) -> list[Assessment]:
        try:
            async with self.session_factory() as session:
                rows = (await session.execute(select(AssessmentRow))).scalars().all()
        except (SQLAlchemyError, OSError) as exc:
            await logger.aerror("remote_fetch_failed", error=str(exc))
            raise RemoteStoreError(describe_store_error(exc)) from exc

        records = await self._to_records(rows)
        await logger.ainfo("remote_fetch_completed", count=len(records))
        return records

    async def fetch_many(self, ids: Sequence[str]) -> list[Assessment]:
        """Current remote copies of ``ids``; unknown ids are skipped."""
        if not ids:
            return []
        try:
            async with self.session_factory() as session:
                stmt = select(AssessmentRow).where(AssessmentRow.id.in_(list(ids)))
                rows = (await session.execute(stmt)).scalars().all()
        except (SQLAlchemyError, OSError) as exc:
            await logger.aerror("remote_fetch_failed", ids=list(ids), error=str(exc))
            raise RemoteStoreError(describe_store_error(exc)) from exc
        return await self._to_records(rows)

    async def _to_records(self, rows) -> list[Assessment]:
        records: list[Assessment] = []
        for row in rows:
            try:
                record = Assessment.model_validate(row.data)
            except ValidationError as exc:
                await logger.awarning("remote_row_invalid", assessment_id=row.id, error=str(exc))
                continue
            record.version = row.version
            records.append(record)
        return records

    async def bulk_upsert(
        self, records: Sequence[Assessment], *, force: bool = False
    ) -> UpsertOutcome:
        """Upsert keyed by id; ``force`` skips the version check (backup restore)."""
        outcome = UpsertOutcome()
        if not records:
            return outcome

        ids = [record.id for record in records]
        now = datetime.now(UTC)
        try:
            async with self.session_factory() as session:
                stmt = select(AssessmentRow).where(AssessmentRow.id.in_(ids))
                existing = {row.id: row for row in (await session.execute(stmt)).scalars()}

                for record in records:
                    payload = record.to_payload()
                    row = existing.get(record.id)

                    if row is None:
                        version = record.version + 1
                        payload["version"] = version
                        row = AssessmentRow(
                            id=record.id,
                            email=record.employee_email,
                            manager_email=record.manager_email_key,
                            data=payload,
                            version=version,
                            updated_at=now,
                        )
                        session.add(row)
                        existing[record.id] = row
                        outcome.written.append(record.id)
                        outcome.versions[record.id] = version
                        continue

                    if _comparable(row.data or {}) == _comparable(payload):
                        outcome.unchanged.append(record.id)
                        outcome.versions[record.id] = row.version
                        continue

                    if self.optimistic and not force and row.version != record.version:
                        outcome.conflicts.append(record.id)
                        continue

                    version = max(row.version, record.version) + 1
                    payload["version"] = version
                    row.email = record.employee_email
                    row.manager_email = record.manager_email_key
                    row.data = payload
                    row.version = version
                    row.updated_at = now
                    outcome.written.append(record.id)
                    outcome.versions[record.id] = version

                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            await logger.aerror("remote_upsert_failed", count=len(records), error=str(exc))
            raise RemoteStoreError(describe_store_error(exc)) from exc

        await logger.ainfo(
            "remote_upsert_completed",
            written=len(outcome.written),
            unchanged=len(outcome.unchanged),
            conflicts=outcome.conflicts,
        )
        return outcome

    async def delete(self, assessment_id: str) -> bool:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    delete(AssessmentRow).where(AssessmentRow.id == assessment_id)
                )
                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            await logger.aerror("remote_delete_failed", assessment_id=assessment_id, error=str(exc))
            raise RemoteStoreError(describe_store_error(exc)) from exc
        return bool(result.rowcount)
