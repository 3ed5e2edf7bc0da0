import pytest

from fakes import ExplodingEmbedder
from ragstore import operations
from ragstore.adapters.backends.in_memory import InMemoryIndex
from ragstore.adapters.retrieval.vector_retriever import VectorStoreRetriever
from ragstore.adapters.vectorstores.index_store import IndexVectorStore
from ragstore.domain.errors import EmbeddingError, InvalidArgument, UnsupportedSearchType
from ragstore.domain.models import Document, SearchOptions, SearchType


def test_add_documents_delegates_texts_and_metadata(angle_embedder):
    index = InMemoryIndex()
    store = IndexVectorStore(embedder=angle_embedder, index=index)
    ids = operations.add_documents(
        store, [Document(page_content="a", metadata={"src": "x"}), Document(page_content="c")]
    )
    assert len(ids) == 2
    payloads = sorted((dict(e.payload) for _, e in index.items()), key=lambda p: p["text"])
    assert payloads == [{"src": "x", "text": "a"}, {"text": "c"}]


def test_from_documents_returns_count(angle_embedder):
    store = IndexVectorStore(embedder=angle_embedder, index=InMemoryIndex())
    docs = [Document(page_content=t) for t in ("a", "b", "c")]
    assert operations.from_documents(store, docs) == 3


def test_search_dispatches_similarity(angle_store):
    docs = operations.search(angle_store, "q", SearchType.SIMILARITY, k=2)
    assert [d.page_content for d in docs] == ["a", "b"]


def test_search_dispatches_mmr(angle_store):
    docs = operations.search(angle_store, "q", "mmr", k=2, fetch_k=3, lambda_mult=0.3)
    assert [d.page_content for d in docs] == ["a", "c"]


def test_search_with_threshold_uses_relevance_scores(angle_store):
    docs = operations.search(
        angle_store, "q", SearchType.SIMILARITY, k=3, options=SearchOptions(score_threshold=0.9)
    )
    assert [d.page_content for d in docs] == ["a", "b"]


def test_search_rejects_unknown_mode_before_io():
    store = IndexVectorStore(embedder=ExplodingEmbedder(), index=InMemoryIndex())
    with pytest.raises(UnsupportedSearchType):
        operations.search(store, "q", "similarity_score_threshold")


def test_search_mmr_validation_before_io():
    store = IndexVectorStore(embedder=ExplodingEmbedder(), index=InMemoryIndex())
    with pytest.raises(InvalidArgument):
        operations.search(store, "q", SearchType.MMR, k=5, fetch_k=3)


def test_as_retriever_binds_store_and_mode(angle_store):
    retriever = operations.as_retriever(angle_store, "mmr", k=2, fetch_k=3, lambda_mult=0.3)
    assert isinstance(retriever, VectorStoreRetriever)
    assert retriever.search_type is SearchType.MMR
    assert [d.page_content for d in retriever.retrieve("q")] == ["a", "c"]


def test_retriever_defaults_to_similarity(angle_store):
    retriever = VectorStoreRetriever(store=angle_store, k=1)
    assert retriever.retrieve("q") == [Document(page_content="a", metadata={"name": "a"})]


def test_retriever_is_stateless_across_calls(angle_store):
    retriever = VectorStoreRetriever(store=angle_store, k=2)
    assert retriever.retrieve("q") == retriever.retrieve("q")


def test_retriever_propagates_store_errors():
    class Broken:
        model_name = "broken"

        def embed_documents(self, texts):
            raise EmbeddingError("down")

        def embed_query(self, text):
            raise EmbeddingError("down")

    retriever = VectorStoreRetriever(store=IndexVectorStore(embedder=Broken(), index=InMemoryIndex()))
    with pytest.raises(EmbeddingError, match="down"):
        retriever.retrieve("q")
