from .dummy_embedder import DummyEmbedder
from .sqlite_cache import CachedEmbedder

__all__ = ["CachedEmbedder", "DummyEmbedder"]
