"""
JSON-file persistence adapter.

One array-of-objects document per collection inside ``data_dir``
(``users.json``, ``books.json``, ``reviews.json``). Writes go through a temp
file in the same directory and ``os.replace``, so readers see either the old
or the new collection and a crash never leaves half a file behind.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import List

from bookreview.core.logging import get_logger
from bookreview.domain.entities import Entity

from .base import E, CorruptCollectionError, PersistenceError, WholeCollectionStore

logger = get_logger(__name__)


class JsonRecordStore(WholeCollectionStore):
    backend = "json"

    def __init__(self, data_dir: Path | str) -> None:
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, kind: type[Entity]) -> Path:
        return self.data_dir / f"{kind.collection}.json"

    def _load(self, kind: type[E]) -> List[E]:
        path = self.path_for(kind)
        if not path.exists():
            return []
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CorruptCollectionError(f"{path.name}: {exc}") from exc
        if not isinstance(raw, list):
            raise CorruptCollectionError(f"{path.name}: expected a JSON array, got {type(raw).__name__}")
        try:
            return [kind.from_record(item) for item in raw]
        except ValueError as exc:
            raise CorruptCollectionError(f"{path.name}: {exc}") from exc

    def _save(self, kind: type[E], records: List[E]) -> None:
        path = self.path_for(kind)
        payload = json.dumps([r.to_record() for r in records], ensure_ascii=False, indent=2)
        tmp_path = None
        try:
            tmp_fd, tmp_path = tempfile.mkstemp(dir=str(self.data_dir), prefix=f".{kind.collection}-", suffix=".tmp")
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.error("write of %s failed: %s", path, exc)
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(f"could not write {path.name}: {exc}") from exc
