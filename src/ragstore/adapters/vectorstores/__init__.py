from .index_store import IndexVectorStore

__all__ = ["IndexVectorStore"]
