from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from ragstore.adapters.backends.in_memory import InMemoryIndex
from ragstore.domain.errors import BackendError
from ragstore.domain.models import IndexEntry, MetadataFilter, QueryMatch, Vector
from ragstore.utils.serialization import json_sanitize

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class JsonlIndex:
    """
    Disk-persisted index, loaded into memory for search.

    Files:
      - entries.jsonl  (one row per namespace+id+vector+payload)

    Mutations stay in memory until save() is called.
    """
    path: Path
    dimension_hint: Optional[int] = None
    _memory: InMemoryIndex = field(init=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self._memory = InMemoryIndex(dimension=self.dimension_hint)

    @property
    def data_file(self) -> Path:
        return self.path / "entries.jsonl"

    @property
    def dimension(self) -> Optional[int]:
        return self._memory.dimension

    def load(self) -> None:
        self._memory = InMemoryIndex(dimension=self.dimension_hint)

        if not self.data_file.exists():
            return

        by_namespace: dict[str, list[IndexEntry]] = {}
        for i, line in enumerate(self.data_file.read_text(encoding="utf-8").splitlines()):
            if not line.strip():
                continue
            try:
                row = json.loads(line)
                entry = IndexEntry(id=str(row["id"]), vector=list(row["vector"]), payload=row.get("payload") or {})
            except (json.JSONDecodeError, KeyError, TypeError) as e:
                snippet = line[:200].replace("\n", "\\n")
                raise BackendError(
                    f"Invalid row on {self.data_file} line {i}: {e}\n"
                    f"Snippet: {snippet}"
                ) from e
            by_namespace.setdefault(row.get("namespace", ""), []).append(entry)

        for namespace, entries in by_namespace.items():
            self._memory.upsert(entries, namespace=namespace or None)
        logger.info("Loaded JSONL index", extra={"path": str(self.data_file), "count": self._memory.count()})

    def save(self) -> None:
        """
        Persist all entries to disk as JSONL.

        Writes to a temp file first, then atomically replaces the data file.
        """
        self.path.mkdir(parents=True, exist_ok=True)
        tmp_file = self.data_file.with_suffix(".jsonl.tmp")

        with tmp_file.open("w", encoding="utf-8") as f:
            for namespace, entry in self._memory.items():
                row = {"namespace": namespace, "id": entry.id, "vector": entry.vector, "payload": entry.payload}
                f.write(json.dumps(json_sanitize(row), ensure_ascii=False))
                f.write("\n")
            f.flush()

        tmp_file.replace(self.data_file)
        logger.info("Saved JSONL index", extra={"path": str(self.data_file), "count": self._memory.count()})

    def relevance_score(self, raw: float) -> float:
        return self._memory.relevance_score(raw)

    def upsert(self, entries: Sequence[IndexEntry], *, namespace: Optional[str] = None) -> list[str]:
        return self._memory.upsert(entries, namespace=namespace)

    def delete(self, ids: Sequence[str], *, namespace: Optional[str] = None) -> bool:
        return self._memory.delete(ids, namespace=namespace)

    def query(
        self,
        vector: Vector,
        k: int,
        *,
        filter: Optional[MetadataFilter] = None,
        namespace: Optional[str] = None,
        include_vectors: bool = False,
    ) -> list[QueryMatch]:
        return self._memory.query(
            vector, k, filter=filter, namespace=namespace, include_vectors=include_vectors
        )

    def is_ready(self) -> bool:
        return True

    def count(self, namespace: Optional[str] = None) -> int:
        return self._memory.count(namespace)
