from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ragstore.domain.models import Document, IngestOptions, ScoredDocument, SearchOptions, Vector


class VectorStore(Protocol):
    """
    Capability set of a vector store: ingest texts, delete by id, and search by
    similarity or maximal marginal relevance.
    """

    def add_texts(
        self,
        texts: Sequence[str],
        metadatas: Optional[Sequence[Mapping[str, Any]]] = None,
        options: Optional[IngestOptions] = None,
    ) -> list[str]:
        ...

    def delete(self, ids: Sequence[str], *, namespace: Optional[str] = None) -> bool:
        ...

    def similarity_search(self, query: str, k: int = 4, options: Optional[SearchOptions] = None) -> list[Document]:
        ...

    def similarity_search_with_relevance_scores(
        self, query: str, k: int = 4, options: Optional[SearchOptions] = None
    ) -> list[ScoredDocument]:
        ...

    def similarity_search_by_vector(
        self, embedding: Vector, k: int = 4, options: Optional[SearchOptions] = None
    ) -> list[Document]:
        ...

    def max_marginal_relevance_search(
        self,
        query: str,
        k: int = 4,
        fetch_k: int = 20,
        lambda_mult: float = 0.5,
        options: Optional[SearchOptions] = None,
    ) -> list[Document]:
        ...

    def max_marginal_relevance_search_by_vector(
        self,
        embedding: Vector,
        k: int = 4,
        fetch_k: int = 20,
        lambda_mult: float = 0.5,
        options: Optional[SearchOptions] = None,
    ) -> list[Document]:
        ...

    def from_texts(
        self,
        texts: Sequence[str],
        metadatas: Optional[Sequence[Mapping[str, Any]]] = None,
        options: Optional[IngestOptions] = None,
    ) -> int:
        ...
