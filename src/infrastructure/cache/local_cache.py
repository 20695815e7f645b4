"""Single-file snapshot of the whole registry.

The snapshot exists so a restart can still show the last known registry when
the remote store is unreachable. It is overwritten wholesale on every
mutation; writes are best-effort.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import structlog
from pydantic import TypeAdapter, ValidationError
from src.domain.models import Assessment

logger = structlog.get_logger()

_RECORDS = TypeAdapter(list[Assessment])


class LocalCache:
    """JSON array of assessments stored at a fixed path."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> list[Assessment]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
            return _RECORDS.validate_json(raw) if raw.strip() else []
        except (OSError, ValidationError, ValueError) as exc:
            logger.warning("local_cache_unreadable", path=str(self.path), error=str(exc))
            return []

    def write(self, records: Sequence[Assessment]) -> bool:
        payload = json.dumps([record.to_payload() for record in records], ensure_ascii=False)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            logger.warning("local_cache_write_failed", path=str(self.path), error=str(exc))
            return False
        logger.debug("local_cache_written", path=str(self.path), records=len(records))
        return True

