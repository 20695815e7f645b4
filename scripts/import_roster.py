"""
Import a roster CSV straight into the registry, outside the API.

Usage: python scripts/import_roster.py path/to/roster.csv
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Add parent directory to Python path so the src package resolves from any directory
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.main import build_registry  # noqa: E402
from src.core.config import get_settings  # noqa: E402
from src.core.logging import setup_logging  # noqa: E402
from src.domain.services.roster_import import RosterImporter  # noqa: E402
from src.infrastructure.db import dispose_engine  # noqa: E402


async def run(path: Path) -> int:
    settings = get_settings()
    registry = build_registry(settings)
    await registry.load()

    report = await RosterImporter(registry).import_csv(path.read_text(encoding="utf-8"))
    print(f"Created: {len(report.created)}  Updated: {len(report.updated)}")
    for rejection in report.rejected:
        print(f"  line {rejection.line}: {rejection.reason} ({rejection.email or '-'})")
    if report.sync is not None:
        print(report.sync.message)

    await dispose_engine()
    return 0 if report.sync is None or report.sync.success else 1


def main() -> None:
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(2)
    setup_logging(json_logs=False)
    sys.exit(asyncio.run(run(Path(sys.argv[1]))))


if __name__ == "__main__":
    main()
