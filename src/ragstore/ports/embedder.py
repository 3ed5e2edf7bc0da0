from __future__ import annotations

from typing import Protocol, Sequence

from ragstore.domain.models import Vector


class Embedder(Protocol):
    """
    Turns text into dense vectors of a fixed dimensionality.

    embed_documents must preserve input order: one vector per text.
    Provider failures surface as EmbeddingError.
    """

    @property
    def model_name(self) -> str: ...

    def embed_documents(self, texts: Sequence[str]) -> list[Vector]:
        ...

    def embed_query(self, text: str) -> Vector:
        ...
