from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from ragstore.domain.errors import DataQualityWarning, DimensionMismatch, EmbeddingError, InvalidArgument
from ragstore.domain.models import (
    Document,
    IndexEntry,
    IngestOptions,
    QueryMatch,
    ScoredDocument,
    SearchOptions,
    Vector,
)
from ragstore.domain.schema import META_TEXT
from ragstore.mmr import maximal_marginal_relevance
from ragstore.ports import BackendIndex, Embedder
from ragstore.relevance import RelevanceFn

logger = logging.getLogger(__name__)

_NO_OPTIONS = SearchOptions()


def _check_k(k: int) -> None:
    if k < 1:
        raise InvalidArgument(f"k must be >= 1, got {k}")


def _check_mmr_args(k: int, fetch_k: int, lambda_mult: float) -> None:
    _check_k(k)
    if fetch_k < k:
        raise InvalidArgument(f"fetch_k ({fetch_k}) must be >= k ({k})")
    if not 0.0 <= lambda_mult <= 1.0:
        raise InvalidArgument(f"lambda_mult must be in [0, 1], got {lambda_mult}")


@dataclass(frozen=True, slots=True)
class IndexVectorStore:
    """
    Vector store over an Embedder and a BackendIndex.

    Holds no documents itself: ingestion goes text -> embedding -> backend upsert,
    search goes query -> embedding -> backend kNN -> Documents.

    dimension: expected vector length; falls back to index.dimension, and checks are
               skipped when neither is known
    relevance_fn: overrides the backend's own relevance policy
    text_key: payload key holding the page content
    """
    embedder: Embedder
    index: BackendIndex
    dimension: Optional[int] = None
    relevance_fn: Optional[RelevanceFn] = None
    text_key: str = META_TEXT

    # -------------------------
    # Ingestion
    # -------------------------

    def add_texts(
        self,
        texts: Sequence[str],
        metadatas: Optional[Sequence[Mapping[str, Any]]] = None,
        options: Optional[IngestOptions] = None,
    ) -> list[str]:
        options = options or IngestOptions()
        texts = list(texts)
        if metadatas and len(metadatas) != len(texts):
            raise InvalidArgument(
                f"metadatas must match texts in length: {len(metadatas)} != {len(texts)}"
            )
        if options.ids is not None and len(options.ids) != len(texts):
            raise InvalidArgument(f"ids must match texts in length: {len(options.ids)} != {len(texts)}")
        for i, metadata in enumerate(metadatas or ()):
            if self.text_key in metadata:
                raise InvalidArgument(
                    f"metadata at position {i} uses the reserved key {self.text_key!r}"
                )
        if not texts:
            return []

        # Every batch is embedded and checked before the first upsert.
        step = options.batch_size
        expected = self._expected_dimension()
        vectors: list[Vector] = []
        for start in range(0, len(texts), step):
            batch = texts[start : start + step]
            embedded = self.embedder.embed_documents(batch)
            if len(embedded) != len(batch):
                raise EmbeddingError(
                    f"embedder returned {len(embedded)} vectors for {len(batch)} texts"
                )
            for vector in embedded:
                if expected is None:
                    expected = len(vector)
                elif len(vector) != expected:
                    raise DimensionMismatch(f"expected a vector of length {expected}, got {len(vector)}")
            vectors.extend(list(v) for v in embedded)

        ids: list[str] = []
        for start in range(0, len(texts), step):
            entries = [
                IndexEntry(
                    id=options.ids[i] if options.ids is not None else None,
                    vector=vectors[i],
                    payload={**(metadatas[i] if metadatas else {}), self.text_key: texts[i]},
                )
                for i in range(start, min(start + step, len(texts)))
            ]
            ids.extend(self.index.upsert(entries, namespace=options.namespace))

        logger.info(
            "Added texts to vector store",
            extra={"count": len(ids), "namespace": options.namespace, "model": self.embedder.model_name},
        )
        return ids

    def from_texts(
        self,
        texts: Sequence[str],
        metadatas: Optional[Sequence[Mapping[str, Any]]] = None,
        options: Optional[IngestOptions] = None,
    ) -> int:
        return len(self.add_texts(texts, metadatas, options))

    def delete(self, ids: Sequence[str], *, namespace: Optional[str] = None) -> bool:
        return self.index.delete(list(ids), namespace=namespace)

    # -------------------------
    # Similarity search
    # -------------------------

    def similarity_search(self, query: str, k: int = 4, options: Optional[SearchOptions] = None) -> list[Document]:
        _check_k(k)
        return self.similarity_search_by_vector(self.embedder.embed_query(query), k=k, options=options)

    def similarity_search_by_vector(
        self, embedding: Vector, k: int = 4, options: Optional[SearchOptions] = None
    ) -> list[Document]:
        _check_k(k)
        self._check_dimension(embedding)
        return [doc for doc, _ in self._query(embedding, k, options or _NO_OPTIONS)]

    def similarity_search_with_relevance_scores(
        self, query: str, k: int = 4, options: Optional[SearchOptions] = None
    ) -> list[ScoredDocument]:
        """
        Return docs with relevance scores in [0, 1]; 0 is dissimilar, 1 is most similar.

        Out-of-range scores are reported (log + DataQualityWarning) and returned as-is.
        options.score_threshold, when set, drops results below it afterwards.
        """
        _check_k(k)
        options = options or _NO_OPTIONS
        query_vector = self.embedder.embed_query(query)
        self._check_dimension(query_vector)

        to_relevance = self.relevance_fn or self.index.relevance_score
        scored = [
            ScoredDocument(document=doc, score=to_relevance(match.score))
            for doc, match in self._query(query_vector, k, options)
        ]

        out_of_range = [s.score for s in scored if not 0.0 <= s.score <= 1.0]
        if out_of_range:
            message = f"Relevance scores must be between 0 and 1, got {out_of_range}"
            logger.warning(message, extra={"query": query, "k": k})
            warnings.warn(message, DataQualityWarning, stacklevel=2)

        if options.score_threshold is not None:
            scored = [s for s in scored if s.score >= options.score_threshold]
            if not scored:
                logger.warning(
                    "No relevant docs were retrieved using the relevance score threshold %s",
                    options.score_threshold,
                )
        return scored

    # -------------------------
    # Maximal marginal relevance
    # -------------------------

    def max_marginal_relevance_search(
        self,
        query: str,
        k: int = 4,
        fetch_k: int = 20,
        lambda_mult: float = 0.5,
        options: Optional[SearchOptions] = None,
    ) -> list[Document]:
        """
        Return docs selected using maximal marginal relevance.

        Optimizes for similarity to the query AND diversity among the selected docs.

        Args:
            query: Text to look up documents similar to.
            k: Number of Documents to return.
            fetch_k: Number of Documents to fetch and pass to the MMR algorithm.
            lambda_mult: Between 0 and 1; 0 is maximum diversity, 1 is minimum diversity.
        """
        _check_mmr_args(k, fetch_k, lambda_mult)
        return self.max_marginal_relevance_search_by_vector(
            self.embedder.embed_query(query), k=k, fetch_k=fetch_k, lambda_mult=lambda_mult, options=options
        )

    def max_marginal_relevance_search_by_vector(
        self,
        embedding: Vector,
        k: int = 4,
        fetch_k: int = 20,
        lambda_mult: float = 0.5,
        options: Optional[SearchOptions] = None,
    ) -> list[Document]:
        _check_mmr_args(k, fetch_k, lambda_mult)
        self._check_dimension(embedding)

        pool = self._query(embedding, fetch_k, options or _NO_OPTIONS, include_vectors=True)
        if not pool:
            return []

        missing = [i for i, (_, match) in enumerate(pool) if match.vector is None]
        re_embedded: dict[int, Vector] = {}
        if missing:
            # Backend did not return stored vectors; embed the candidate texts instead.
            logger.debug("Re-embedding MMR candidates", extra={"count": len(missing)})
            embedded = self.embedder.embed_documents([pool[i][0].page_content for i in missing])
            if len(embedded) != len(missing):
                raise EmbeddingError(
                    f"embedder returned {len(embedded)} vectors for {len(missing)} MMR candidates"
                )
            re_embedded = dict(zip(missing, embedded))

        # one vector per pool entry, same order, so selected indices map back onto pool
        candidates = [
            match.vector if match.vector is not None else re_embedded[i] for i, (_, match) in enumerate(pool)
        ]
        selected = maximal_marginal_relevance(embedding, candidates, k=k, lambda_mult=lambda_mult)
        logger.debug("MMR selection", extra={"fetch_k": fetch_k, "k": k, "selected": selected})
        return [pool[i][0] for i in selected]

    # -------------------------
    # Internals
    # -------------------------

    def _expected_dimension(self) -> Optional[int]:
        return self.dimension if self.dimension is not None else self.index.dimension

    def _check_dimension(self, vector: Sequence[float]) -> None:
        expected = self._expected_dimension()
        if expected is not None and len(vector) != expected:
            raise DimensionMismatch(f"expected a vector of length {expected}, got {len(vector)}")

    def _to_document(self, match: QueryMatch) -> Optional[Document]:
        payload = dict(match.payload)
        text = payload.pop(self.text_key, None)
        if text is None:
            logger.warning(
                "Found match without %r key in payload; skipping", self.text_key, extra={"id": match.id}
            )
            return None
        return Document(page_content=str(text), metadata=MappingProxyType(payload))

    def _query(
        self,
        vector: Vector,
        k: int,
        options: SearchOptions,
        *,
        include_vectors: bool = False,
    ) -> list[tuple[Document, QueryMatch]]:
        matches = self.index.query(
            vector,
            k,
            filter=options.filter,
            namespace=options.namespace,
            include_vectors=include_vectors,
        )
        logger.debug("Backend query", extra={"k": k, "matches": len(matches)})

        out: list[tuple[Document, QueryMatch]] = []
        for match in matches:
            doc = self._to_document(match)
            if doc is not None:
                out.append((doc, match))
        return out
