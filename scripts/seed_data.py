#!/usr/bin/env python3
"""
Load the sample catalogue into the configured store (no-op when books exist).

Usage:
  python scripts/seed_data.py [--backend json|sql] [--data-dir data]
"""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bookreview.core.config import get_settings  # noqa: E402
from bookreview.domain.entities import Book, Review  # noqa: E402
from bookreview.repositories import create_store  # noqa: E402
from bookreview.repositories.seed import seed_sample_data  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser(description="Seed the sample book catalogue")
    ap.add_argument("--backend", choices=["json", "sql"], help="Storage backend (default: STORAGE_BACKEND)")
    ap.add_argument("--data-dir", help="JSON data directory (default: DATA_DIR)")
    args = ap.parse_args()

    settings = get_settings()
    if args.backend:
        settings = replace(settings, storage_backend=args.backend)
    if args.data_dir:
        settings = replace(settings, data_dir=Path(args.data_dir))

    store = create_store(settings)
    added = seed_sample_data(store)
    if not added:
        print(f"Catalogue already has {len(store.list(Book))} book(s); nothing to do.")
        return
    print("OK: sample data loaded")
    print(f"  Books: {added}")
    print(f"  Reviews: {len(store.list(Review))}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
