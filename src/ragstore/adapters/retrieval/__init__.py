from .vector_retriever import VectorStoreRetriever

__all__ = ["VectorStoreRetriever"]
