"""
Convenience operations composed over any VectorStore.

These hold the logic that is the same for every store implementation:
document ingestion, search-mode dispatch and retriever construction.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Sequence, Union

from ragstore.domain.models import Document, IngestOptions, SearchOptions, SearchType
from ragstore.ports import VectorStore

if TYPE_CHECKING:
    from ragstore.adapters.retrieval.vector_retriever import VectorStoreRetriever

logger = logging.getLogger(__name__)


def add_documents(
    store: VectorStore,
    documents: Sequence[Document],
    options: Optional[IngestOptions] = None,
) -> list[str]:
    """Run documents through the embeddings and add them to the store; returns ids."""
    texts = [doc.page_content for doc in documents]
    metadatas = [dict(doc.metadata) for doc in documents]
    return store.add_texts(texts, metadatas, options)


def from_documents(
    store: VectorStore,
    documents: Sequence[Document],
    options: Optional[IngestOptions] = None,
) -> int:
    """Ingest documents into the store; returns how many were added."""
    texts = [doc.page_content for doc in documents]
    metadatas = [dict(doc.metadata) for doc in documents]
    return store.from_texts(texts, metadatas, options)


def search(
    store: VectorStore,
    query: str,
    search_type: Union[SearchType, str],
    *,
    k: int = 4,
    fetch_k: int = 20,
    lambda_mult: float = 0.5,
    options: Optional[SearchOptions] = None,
) -> list[Document]:
    """
    Dispatch to similarity or MMR search.

    Raises:
        UnsupportedSearchType: if `search_type` is neither "similarity" nor "mmr".
    """
    mode = SearchType.parse(search_type)
    logger.debug("Search", extra={"search_type": mode.value, "k": k})

    if mode is SearchType.MMR:
        return store.max_marginal_relevance_search(
            query, k=k, fetch_k=fetch_k, lambda_mult=lambda_mult, options=options
        )
    if options is not None and options.score_threshold is not None:
        scored = store.similarity_search_with_relevance_scores(query, k=k, options=options)
        return [s.document for s in scored]
    return store.similarity_search(query, k=k, options=options)


def as_retriever(
    store: VectorStore,
    search_type: Union[SearchType, str] = SearchType.SIMILARITY,
    *,
    k: int = 4,
    fetch_k: int = 20,
    lambda_mult: float = 0.5,
    options: Optional[SearchOptions] = None,
) -> VectorStoreRetriever:
    from ragstore.adapters.retrieval.vector_retriever import VectorStoreRetriever

    return VectorStoreRetriever(
        store=store,
        search_type=SearchType.parse(search_type),
        k=k,
        fetch_k=fetch_k,
        lambda_mult=lambda_mult,
        options=options,
    )
