from __future__ import annotations

from dataclasses import dataclass
from hashlib import sha256
from typing import Sequence

from ragstore.domain.models import Vector


@dataclass(frozen=True, slots=True)
class DummyEmbedder:
    """
    Deterministic fake embeddings for wiring tests.
    Not semantically meaningful, but stable across runs: equal texts get equal vectors.
    """
    dim: int = 128
    model: str = "dummy-embedder-v1"

    @property
    def model_name(self) -> str:
        return self.model

    def embed_documents(self, texts: Sequence[str]) -> list[Vector]:
        return [self._embed(text) for text in texts]

    def embed_query(self, text: str) -> Vector:
        return self._embed(text)

    def _embed(self, text: str) -> Vector:
        digest = sha256(text.encode("utf-8")).digest()
        # expand digest to dim floats in [-1, 1]
        return [(digest[i % len(digest)] / 127.5) - 1.0 for i in range(self.dim)]
