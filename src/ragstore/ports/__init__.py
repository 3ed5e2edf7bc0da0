from .backend_index import BackendIndex
from .embedder import Embedder
from .retriever import Retriever
from .vector_store import VectorStore

__all__ = [
    "BackendIndex",
    "Embedder",
    "Retriever",
    "VectorStore",
]
