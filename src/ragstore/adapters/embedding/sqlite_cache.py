from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path
from typing import Iterable, Sequence

from ragstore.domain.models import Vector
from ragstore.ports import Embedder

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS embedding_cache (
  cache_key TEXT PRIMARY KEY,
  model TEXT NOT NULL,
  dim INTEGER NOT NULL,
  vector TEXT NOT NULL
)
"""


def cache_key(model_name: str, text: str) -> str:
    text_digest = sha256(text.encode("utf-8")).hexdigest()
    return sha256(f"{model_name}|{text_digest}".encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True)
class CachedEmbedder:
    """
    SQLite-backed cache in front of another Embedder.

    Entries are keyed by model name and text hash, so switching models never
    returns stale vectors. Misses are embedded in a single embed_documents call.
    """
    embedder: Embedder
    db_path: Path

    @property
    def model_name(self) -> str:
        return self.embedder.model_name

    def embed_documents(self, texts: Sequence[str]) -> list[Vector]:
        if not texts:
            return []

        keys = [cache_key(self.model_name, text) for text in texts]
        conn = self._open()
        try:
            with conn:
                vectors = self._lookup(conn, keys)
                # repeated texts collapse into one pending entry
                pending = {key: text for key, text in zip(keys, texts) if key not in vectors}
                if pending:
                    fresh = self.embedder.embed_documents(list(pending.values()))
                    vectors.update(zip(pending, (list(v) for v in fresh)))
                    self._store(conn, ((key, vectors[key]) for key in pending))
            logger.debug("Embedding cache", extra={"hits": len(keys) - len(pending), "misses": len(pending)})
        finally:
            conn.close()

        return [vectors[key] for key in keys]

    def embed_query(self, text: str) -> Vector:
        return self.embed_documents([text])[0]

    def _open(self) -> sqlite3.Connection:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.execute(_SCHEMA)
        return conn

    @staticmethod
    def _lookup(conn: sqlite3.Connection, keys: Sequence[str]) -> dict[str, Vector]:
        unique = list(dict.fromkeys(keys))
        placeholders = ",".join("?" * len(unique))
        rows = conn.execute(
            f"SELECT cache_key, vector FROM embedding_cache WHERE cache_key IN ({placeholders})", unique
        )
        return {str(key): list(json.loads(raw)) for key, raw in rows}

    def _store(self, conn: sqlite3.Connection, items: Iterable[tuple[str, Vector]]) -> None:
        conn.executemany(
            "INSERT OR REPLACE INTO embedding_cache(cache_key, model, dim, vector) VALUES (?, ?, ?, ?)",
            [(key, self.model_name, len(vec), json.dumps(vec)) for key, vec in items],
        )
