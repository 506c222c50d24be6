"""Convert legacy project dates into year fields.

Older project records carry ``startDate``/``completionDate`` timestamps.
This rewrites them as ``startYear``/``endYear`` strings and removes the old
fields, after saving a JSON backup of the whole collection.

Usage:
    python -m scripts.migrate_project_dates            # backup + migrate
    python -m scripts.migrate_project_dates --dry-run  # backup + report only
"""

import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from api.errors import StoreError
from api.services.record_store import get_project_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

BACKUP_DIR = Path("backups")
LEGACY_FIELDS = ("startDate", "completionDate")


def _year(value: str) -> str:
    return str(datetime.fromisoformat(value.replace("Z", "+00:00")).year)


def migration_changes(record: dict[str, Any]) -> dict[str, Any] | None:
    """Return the field changes for one project, or None if already migrated.

    Setting a field to None removes it from the stored record.
    """
    if not any(name in record for name in LEGACY_FIELDS):
        return None

    changes: dict[str, Any] = {name: None for name in LEGACY_FIELDS}
    if record.get("startDate"):
        changes["startYear"] = _year(record["startDate"])
    elif not record.get("startYear"):
        changes["startYear"] = str(datetime.now(timezone.utc).year)

    if record.get("status") == "completed" and record.get("completionDate"):
        changes["endYear"] = _year(record["completionDate"])
    return changes


def write_backup(records: list[dict[str, Any]], backup_dir: Path = BACKUP_DIR) -> Path:
    """Save every record to a timestamped JSON file and return its path."""
    backup_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    path = backup_dir / f"projects-backup-{stamp}.json"
    path.write_text(json.dumps(records, indent=2))
    return path


async def main() -> int:
    dry_run = "--dry-run" in sys.argv
    store = get_project_store()

    records = await store.scan()
    backup = write_backup(records)
    print(f"Backup of {len(records)} projects written to {backup}")

    migrated = failed = 0
    for record in records:
        try:
            changes = migration_changes(record)
            if changes is None:
                continue
            if dry_run:
                print(f"  would migrate {record['id']}: {changes}")
                continue
            await store.update(record["id"], changes)
            migrated += 1
        except (StoreError, ValueError):
            logger.exception("Failed to migrate project %s", record["id"])
            failed += 1

    print(f"Migrated {migrated} projects ({failed} failed).")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
