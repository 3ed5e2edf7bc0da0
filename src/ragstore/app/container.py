from __future__ import annotations

from dataclasses import dataclass
from os import getenv

from ragstore import operations
from ragstore.adapters.backends.in_memory import InMemoryIndex
from ragstore.adapters.backends.jsonl import JsonlIndex
from ragstore.adapters.backends.readiness import wait_until_ready
from ragstore.adapters.embedding.dummy_embedder import DummyEmbedder
from ragstore.adapters.embedding.sqlite_cache import CachedEmbedder
from ragstore.adapters.retrieval.vector_retriever import VectorStoreRetriever
from ragstore.adapters.vectorstores.index_store import IndexVectorStore
from ragstore.domain.errors import InvalidArgument
from ragstore.ports import BackendIndex, Embedder
from ragstore.settings import BackendSettings, EmbeddingsSettings, Settings


@dataclass(frozen=True, slots=True)
class Container:
    """
    Lightweight dependency container.
    Holds the embedder, backend index, store and retriever built from Settings.
    """
    embedder: Embedder
    index: BackendIndex
    store: IndexVectorStore
    retriever: VectorStoreRetriever


def build_embedder(cfg: EmbeddingsSettings) -> Embedder:
    provider = cfg.provider.lower()
    embedder: Embedder
    if provider == "dummy":
        embedder = DummyEmbedder(dim=cfg.dimension or 128, model=cfg.model)
    elif provider == "openai":
        from ragstore.adapters.embedding.openai_embedder import OpenAIEmbedder

        embedder = OpenAIEmbedder(api_key=getenv("OPENAI_API_KEY", ""), model=cfg.model, batch_size=cfg.batch_size)
    elif provider == "huggingface":
        from ragstore.adapters.embedding.huggingface_embedder import HuggingFaceEmbedder

        embedder = HuggingFaceEmbedder(model=cfg.model)
    else:
        raise InvalidArgument(f"Unsupported embeddings provider: {cfg.provider}")

    if cfg.cache_path is not None:
        embedder = CachedEmbedder(embedder=embedder, db_path=cfg.cache_path)
    return embedder


def build_index(cfg: BackendSettings, dimension: int | None = None) -> BackendIndex:
    kind = cfg.kind.lower()
    if kind == "memory":
        return InMemoryIndex(dimension=dimension)
    if kind == "jsonl":
        if cfg.path is None:
            raise InvalidArgument("backend.path is required for the jsonl backend")
        index = JsonlIndex(path=cfg.path, dimension_hint=dimension)
        index.load()
        return index
    if kind == "chroma":
        from ragstore.adapters.backends.chroma import ChromaIndex

        chroma = ChromaIndex(
            cfg.collection,
            path=str(cfg.path) if cfg.path is not None else None,
            metric=cfg.metric,
            dimension=dimension,
        )
        wait_until_ready(chroma, timeout=cfg.ready_timeout, interval=cfg.ready_interval)
        return chroma
    raise InvalidArgument(f"Unsupported vector store backend: {cfg.kind}")


def build_container(settings: Settings) -> Container:
    embedder = build_embedder(settings.embeddings)
    index = build_index(settings.backend, dimension=settings.embeddings.dimension)
    store = IndexVectorStore(embedder=embedder, index=index, dimension=settings.embeddings.dimension)

    profile = settings.retrieval
    retriever = operations.as_retriever(
        store,
        profile.search_type,
        k=profile.k,
        fetch_k=profile.fetch_k,
        lambda_mult=profile.lambda_mult,
        options=profile.search_options(),
    )
    return Container(embedder=embedder, index=index, store=store, retriever=retriever)
