from __future__ import annotations

import pytest

from fakes import KeywordEmbedder, unit
from ragstore.adapters.backends.in_memory import InMemoryIndex
from ragstore.adapters.vectorstores.index_store import IndexVectorStore


@pytest.fixture
def angle_embedder() -> KeywordEmbedder:
    """
    "q" points at 0 degrees; "a" and "b" are near-duplicates close to the query,
    "c" is relevant but far from both.
    """
    return KeywordEmbedder(
        table={
            "q": unit(0),
            "a": unit(10),
            "b": unit(11),
            "c": unit(60),
        }
    )


@pytest.fixture
def angle_store(angle_embedder: KeywordEmbedder) -> IndexVectorStore:
    store = IndexVectorStore(embedder=angle_embedder, index=InMemoryIndex(dimension=2))
    store.add_texts(["a", "b", "c"], [{"name": n} for n in "abc"])
    return store
