import uuid

import pytest

chromadb = pytest.importorskip("chromadb")

from fakes import KeywordEmbedder, unit  # noqa: E402
from ragstore.adapters.backends.chroma import ChromaIndex  # noqa: E402
from ragstore.adapters.vectorstores.index_store import IndexVectorStore  # noqa: E402
from ragstore.domain.errors import InvalidArgument  # noqa: E402
from ragstore.domain.models import IndexEntry, SearchOptions  # noqa: E402


@pytest.fixture(scope="module")
def client():
    return chromadb.EphemeralClient()


@pytest.fixture
def index(client) -> ChromaIndex:
    return ChromaIndex(f"test-{uuid.uuid4().hex[:12]}", client=client)


def test_upsert_and_query_best_first(index):
    ids = index.upsert(
        [
            IndexEntry(id="near", vector=unit(5), payload={"text": "near"}),
            IndexEntry(id=None, vector=unit(80), payload={"text": "far"}),
        ]
    )
    assert ids[0] == "near" and ids[1]

    matches = index.query(unit(0), 2)
    assert [m.payload["text"] for m in matches] == ["near", "far"]
    assert matches[0].score < matches[1].score  # distances
    assert "_namespace" not in matches[0].payload


def test_query_on_empty_collection(index):
    assert index.query(unit(0), 3) == []


def test_relevance_of_identical_vector_is_one(index):
    index.upsert([IndexEntry(id="x", vector=unit(30), payload={"text": "x"})])
    [match] = index.query(unit(30), 1)
    assert index.relevance_score(match.score) == pytest.approx(1.0, abs=1e-4)


def test_include_vectors(index):
    index.upsert([IndexEntry(id="x", vector=unit(30), payload={"text": "x"})])
    [match] = index.query(unit(0), 1, include_vectors=True)
    assert match.vector == pytest.approx(unit(30), abs=1e-5)


def test_filter_and_namespace(index):
    index.upsert([IndexEntry(id="a", vector=unit(0), payload={"text": "a", "lang": "en"})])
    index.upsert([IndexEntry(id="b", vector=unit(0), payload={"text": "b", "lang": "de"})])
    index.upsert([IndexEntry(id="c", vector=unit(0), payload={"text": "c", "lang": "en"})], namespace="other")

    assert [m.id for m in index.query(unit(0), 1, filter={"lang": "de"})] == ["b"]
    assert [m.id for m in index.query(unit(0), 1, namespace="other")] == ["c"]


def test_callable_filter_is_rejected(index):
    index.upsert([IndexEntry(id="a", vector=unit(0), payload={"text": "a"})])
    with pytest.raises(InvalidArgument):
        index.query(unit(0), 1, filter=lambda p: True)


def test_delete_reports_removal(index):
    index.upsert([IndexEntry(id="a", vector=unit(0), payload={"text": "a"})])
    assert index.delete(["a"]) is True
    assert index.delete(["a"]) is False
    assert index.delete(["never-existed"]) is False
    assert index.count() == 0


def test_unknown_metric_is_rejected(client):
    with pytest.raises(InvalidArgument):
        ChromaIndex("bad-metric", client=client, metric="manhattan")


def test_store_round_trip_and_mmr_over_chroma(index):
    embedder = KeywordEmbedder(table={"q": unit(0), "a": unit(10), "b": unit(11), "c": unit(60)})
    store = IndexVectorStore(embedder=embedder, index=index)
    store.add_texts(["a", "b", "c"], [{"name": "a"}, {"name": "b"}, {"name": "c"}])

    assert store.similarity_search("a", k=1)[0].page_content == "a"
    scored = store.similarity_search_with_relevance_scores("q", k=3, options=SearchOptions())
    assert all(0.0 <= s.score <= 1.0 + 1e-6 for s in scored)

    docs = store.max_marginal_relevance_search("q", k=2, fetch_k=3, lambda_mult=0.3)
    assert [d.page_content for d in docs] == ["a", "c"]
