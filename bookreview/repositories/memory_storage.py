"""In-memory record store with the same contract as the JSON files (tests, throwaway runs)."""

from __future__ import annotations

from typing import Dict, List

from bookreview.domain.entities import ENTITY_KINDS, Entity

from .base import E, WholeCollectionStore


class MemoryRecordStore(WholeCollectionStore):
    backend = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._collections: Dict[type[Entity], List[Entity]] = {kind: [] for kind in ENTITY_KINDS}

    def _load(self, kind: type[E]) -> List[E]:
        return list(self._collections[kind])  # type: ignore[arg-type]

    def _save(self, kind: type[E], records: List[E]) -> None:
        # swap the whole list so concurrent readers keep a consistent snapshot
        self._collections[kind] = list(records)
