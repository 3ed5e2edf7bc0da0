from ragstore.adapters.backends.in_memory import InMemoryIndex
from ragstore.adapters.retrieval.vector_retriever import VectorStoreRetriever
from ragstore.adapters.vectorstores.index_store import IndexVectorStore
from ragstore.domain.errors import (
    BackendError,
    BackendNotReady,
    DataQualityWarning,
    DimensionMismatch,
    EmbeddingError,
    InvalidArgument,
    RagStoreError,
    UnsupportedSearchType,
)
from ragstore.domain.models import Document, IngestOptions, ScoredDocument, SearchOptions, SearchType
from ragstore.mmr import maximal_marginal_relevance

__version__ = "0.1.0"

__all__ = [
    "BackendError",
    "BackendNotReady",
    "DataQualityWarning",
    "DimensionMismatch",
    "Document",
    "EmbeddingError",
    "InMemoryIndex",
    "IndexVectorStore",
    "IngestOptions",
    "InvalidArgument",
    "RagStoreError",
    "ScoredDocument",
    "SearchOptions",
    "SearchType",
    "UnsupportedSearchType",
    "VectorStoreRetriever",
    "maximal_marginal_relevance",
]
