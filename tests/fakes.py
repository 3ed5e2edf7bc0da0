from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from ragstore.domain.models import IndexEntry, MetadataFilter, QueryMatch, Vector
from ragstore.relevance import RelevanceFn, bounded_distance


def unit(angle_deg: float) -> Vector:
    """2-D unit vector at the given angle; cosine between two of these is cos(angle difference)."""
    rad = math.radians(angle_deg)
    return [math.cos(rad), math.sin(rad)]


@dataclass
class KeywordEmbedder:
    """Looks texts up in a fixed table and records every call."""
    table: Mapping[str, Vector]
    model: str = "keyword-embedder"
    document_calls: list[list[str]] = field(default_factory=list)
    query_calls: list[str] = field(default_factory=list)

    @property
    def model_name(self) -> str:
        return self.model

    def embed_documents(self, texts: Sequence[str]) -> list[Vector]:
        self.document_calls.append(list(texts))
        return [list(self.table[t]) for t in texts]

    def embed_query(self, text: str) -> Vector:
        self.query_calls.append(text)
        return list(self.table[text])


class ExplodingEmbedder:
    """Fails the test if anything reaches the embedding step."""
    model_name = "exploding"

    def embed_documents(self, texts: Sequence[str]) -> list[Vector]:
        raise AssertionError("embed_documents should not have been called")

    def embed_query(self, text: str) -> Vector:
        raise AssertionError("embed_query should not have been called")


@dataclass
class SyntheticIndex:
    """
    Returns canned matches whatever the query; scores are distances in [0, max_distance].
    """
    matches: list[QueryMatch]
    dimension: Optional[int] = None
    max_distance: float = 1.0
    queries: list[dict] = field(default_factory=list)
    upserts: list[list[IndexEntry]] = field(default_factory=list)

    @property
    def _relevance(self) -> RelevanceFn:
        return bounded_distance(self.max_distance)

    def relevance_score(self, raw: float) -> float:
        return self._relevance(raw)

    def upsert(self, entries: Sequence[IndexEntry], *, namespace: Optional[str] = None) -> list[str]:
        self.upserts.append(list(entries))
        return [e.id or f"id-{i}" for i, e in enumerate(entries)]

    def delete(self, ids: Sequence[str], *, namespace: Optional[str] = None) -> bool:
        return False

    def query(
        self,
        vector: Vector,
        k: int,
        *,
        filter: Optional[MetadataFilter] = None,
        namespace: Optional[str] = None,
        include_vectors: bool = False,
    ) -> list[QueryMatch]:
        self.queries.append({"k": k, "filter": filter, "namespace": namespace, "include_vectors": include_vectors})
        return self.matches[:k]

    def is_ready(self) -> bool:
        return True
