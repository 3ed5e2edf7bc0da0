from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from ragstore.domain.errors import BackendError
from ragstore.domain.models import IndexEntry, MetadataFilter, QueryMatch, Vector
from ragstore.mmr import cosine_similarity
from ragstore.relevance import cosine_similarity_relevance

DEFAULT_NAMESPACE = ""


def _matches(payload: Mapping[str, Any], filter: Optional[MetadataFilter]) -> bool:
    # Mapping: exact match on every key. Callable: arbitrary predicate over the payload.
    if filter is None:
        return True
    if callable(filter):
        return bool(filter(payload))
    for k, v in filter.items():
        if payload.get(k) != v:
            return False
    return True


@dataclass(slots=True)
class InMemoryIndex:
    """
    Cosine-similarity index held in process memory.

    Linear scan search; namespaces partition the entries. Scores returned by
    query() are raw cosine similarities in [-1, 1].
    """
    dimension: Optional[int] = None
    _entries: dict[str, dict[str, IndexEntry]] = field(default_factory=dict)
    _lock: threading.RLock = field(default_factory=threading.RLock)

    def relevance_score(self, raw: float) -> float:
        return cosine_similarity_relevance(raw)

    def upsert(self, entries: Sequence[IndexEntry], *, namespace: Optional[str] = None) -> list[str]:
        with self._lock:
            for entry in entries:
                if self.dimension is None:
                    self.dimension = len(entry.vector)
                elif len(entry.vector) != self.dimension:
                    raise BackendError(
                        f"vector of length {len(entry.vector)} does not fit index of dimension {self.dimension}"
                    )

            bucket = self._entries.setdefault(namespace or DEFAULT_NAMESPACE, {})
            ids: list[str] = []
            for entry in entries:
                entry_id = entry.id or str(uuid.uuid4())
                bucket[entry_id] = IndexEntry(id=entry_id, vector=list(entry.vector), payload=dict(entry.payload))
                ids.append(entry_id)
            return ids

    def delete(self, ids: Sequence[str], *, namespace: Optional[str] = None) -> bool:
        with self._lock:
            bucket = self._entries.get(namespace or DEFAULT_NAMESPACE, {})
            removed = [bucket.pop(i) for i in ids if i in bucket]
            return bool(removed)

    def query(
        self,
        vector: Vector,
        k: int,
        *,
        filter: Optional[MetadataFilter] = None,
        namespace: Optional[str] = None,
        include_vectors: bool = False,
    ) -> list[QueryMatch]:
        with self._lock:
            bucket = list(self._entries.get(namespace or DEFAULT_NAMESPACE, {}).values())

        scored: list[QueryMatch] = []
        for entry in bucket:
            if not _matches(entry.payload, filter):
                continue
            scored.append(
                QueryMatch(
                    id=str(entry.id),
                    payload=dict(entry.payload),
                    score=cosine_similarity(vector, entry.vector),
                    vector=list(entry.vector) if include_vectors else None,
                )
            )

        # stable sort keeps insertion order among equal scores
        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:k]

    def is_ready(self) -> bool:
        return True

    def count(self, namespace: Optional[str] = None) -> int:
        with self._lock:
            if namespace is None:
                return sum(len(b) for b in self._entries.values())
            return len(self._entries.get(namespace, {}))

    def items(self) -> list[tuple[str, IndexEntry]]:
        """Snapshot of (namespace, entry) pairs."""
        with self._lock:
            return [(ns, entry) for ns, bucket in self._entries.items() for entry in bucket.values()]
