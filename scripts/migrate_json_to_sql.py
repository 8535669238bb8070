"""One-off migration script: JSON collections (data/*.json) -> SQL backend.

Ids and timestamps are copied as-is, so weak references between users,
books and reviews keep pointing at the same records.

Usage:
  DATABASE_URL=sqlite:///bookreview.db python scripts/migrate_json_to_sql.py [--data-dir data]
"""
from __future__ import annotations

import argparse
from pathlib import Path
import sys

# Make the bookreview package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bookreview.core.config import get_settings  # noqa: E402
from bookreview.domain.entities import ENTITY_KINDS  # noqa: E402
from bookreview.repositories.json_storage import JsonRecordStore  # noqa: E402
from bookreview.repositories.sql_repository import SQLRecordStore  # noqa: E402


def migrate(data_dir: Path) -> dict:
    source = JsonRecordStore(data_dir)
    target = SQLRecordStore()
    counts = {}
    for kind in ENTITY_KINDS:
        records = source.list(kind)
        if kind.collection in source.read_errors:
            raise SystemExit(f"Cannot read {kind.collection}: {source.read_errors[kind.collection]}")
        for entity in records:
            target.import_entity(entity)
        counts[kind.collection] = len(records)
    return counts


def main() -> None:
    ap = argparse.ArgumentParser(description="Copy JSON collections into the SQL backend")
    ap.add_argument("--data-dir", help="Directory holding users.json/books.json/reviews.json (default: DATA_DIR)")
    args = ap.parse_args()
    data_dir = Path(args.data_dir) if args.data_dir else get_settings().data_dir
    if not data_dir.is_dir():
        raise SystemExit(f"Directory not found: {data_dir}")
    counts = migrate(data_dir)
    for collection, count in counts.items():
        print(f"  {collection}: {count}")


if __name__ == "__main__":
    main()
    print("JSON data migrated to SQL successfully.")
