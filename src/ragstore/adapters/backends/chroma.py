"""
Chroma-based BackendIndex implementation.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Mapping, Optional, Sequence

import chromadb
from chromadb.errors import ChromaError

from ragstore.domain.errors import BackendError, InvalidArgument
from ragstore.domain.models import IndexEntry, MetadataFilter, QueryMatch, Vector
from ragstore.domain.schema import META_NAMESPACE
from ragstore.relevance import RelevanceFn, bounded_distance

DEFAULT_COLLECTION = "ragstore"

# Chroma reports distances; these bounds hold for unit-normalized embeddings.
_RELEVANCE_BY_METRIC: dict[str, RelevanceFn] = {
    "cosine": bounded_distance(2.0),
    "ip": bounded_distance(2.0),
    "l2": bounded_distance(4.0),
}

logger = logging.getLogger(__name__)


class ChromaIndex:
    """
    BackendIndex over a Chroma collection.

    Namespaces are stored under a reserved metadata key and always part of the
    `where` clause, so the default namespace ("") never sees namespaced entries.
    """

    def __init__(
        self,
        collection_name: str = DEFAULT_COLLECTION,
        *,
        path: str | None = None,
        metric: str = "cosine",
        dimension: int | None = None,
        client: Any | None = None,
    ) -> None:
        if metric not in _RELEVANCE_BY_METRIC:
            raise InvalidArgument(f"Unsupported Chroma metric {metric!r}; expected one of {sorted(_RELEVANCE_BY_METRIC)}")

        self.collection_name = collection_name
        self.metric = metric
        self.dimension = dimension
        self._relevance = _RELEVANCE_BY_METRIC[metric]
        try:
            if client is not None:
                self.client = client
            elif path is not None:
                self.client = chromadb.PersistentClient(path=path)
            else:
                self.client = chromadb.EphemeralClient()
            self.collection = self.client.get_or_create_collection(
                name=collection_name, metadata={"hnsw:space": metric}
            )
        except (ChromaError, ValueError) as e:
            raise BackendError(f"Could not open Chroma collection {collection_name!r}: {e}") from e

        logger.info(
            "ChromaIndex initialised",
            extra={"persist_directory": path, "collection": collection_name, "metric": metric},
        )

    def relevance_score(self, raw: float) -> float:
        return self._relevance(raw)

    def upsert(self, entries: Sequence[IndexEntry], *, namespace: Optional[str] = None) -> list[str]:
        if not entries:
            return []

        ids = [entry.id or str(uuid.uuid4()) for entry in entries]
        metadatas = [{**dict(entry.payload), META_NAMESPACE: namespace or ""} for entry in entries]
        try:
            self.collection.upsert(
                ids=ids,
                embeddings=[list(entry.vector) for entry in entries],
                metadatas=metadatas,
            )
        except (ChromaError, ValueError) as e:
            raise BackendError(f"Chroma upsert failed: {e}") from e

        logger.info("Upserted entries into Chroma", extra={"count": len(ids), "collection": self.collection_name})
        return ids

    def delete(self, ids: Sequence[str], *, namespace: Optional[str] = None) -> bool:
        if not ids:
            return False

        where = {META_NAMESPACE: namespace or ""}
        try:
            existing = self.collection.get(ids=list(ids), where=where, include=["metadatas"])
            found = list(existing.get("ids") or [])
            if not found:
                return False
            self.collection.delete(ids=found, where=where)
        except (ChromaError, ValueError) as e:
            raise BackendError(f"Chroma delete failed: {e}") from e
        return True

    def query(
        self,
        vector: Vector,
        k: int,
        *,
        filter: Optional[MetadataFilter] = None,
        namespace: Optional[str] = None,
        include_vectors: bool = False,
    ) -> list[QueryMatch]:
        if k <= 0:
            return []
        if callable(filter):
            raise InvalidArgument("ChromaIndex only supports mapping filters")

        include = ["metadatas", "distances"]
        if include_vectors:
            include.append("embeddings")

        try:
            n_results = min(k, self.collection.count())
            if n_results == 0:
                return []
            result = self.collection.query(
                query_embeddings=[list(vector)],
                n_results=n_results,
                where=self._where(filter, namespace),
                include=include,
            )
        except (ChromaError, ValueError) as e:
            raise BackendError(f"Chroma query failed: {e}") from e

        ids = result.get("ids", [[]])[0] or []
        metadatas = (result.get("metadatas") or [[]])[0] or []
        distances = (result.get("distances") or [[]])[0] or []
        embeddings = result.get("embeddings")
        vectors = embeddings[0] if embeddings is not None and len(embeddings) else None

        matches: list[QueryMatch] = []
        for i, (entry_id, metadata, distance) in enumerate(zip(ids, metadatas, distances)):
            payload = {key: v for key, v in (metadata or {}).items() if key != META_NAMESPACE}
            matches.append(
                QueryMatch(
                    id=str(entry_id),
                    payload=payload,
                    score=float(distance),
                    vector=[float(x) for x in vectors[i]] if vectors is not None else None,
                )
            )
        return matches

    def is_ready(self) -> bool:
        try:
            self.client.heartbeat()
        except Exception:
            logger.debug("Chroma heartbeat failed", exc_info=True)
            return False
        return True

    def count(self) -> int:
        return self.collection.count()

    @staticmethod
    def _where(filter: Optional[Mapping[str, Any]], namespace: Optional[str]) -> dict[str, Any]:
        clauses: list[dict[str, Any]] = [{META_NAMESPACE: namespace or ""}]
        for key, value in (filter or {}).items():
            clauses.append({key: value})
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}
