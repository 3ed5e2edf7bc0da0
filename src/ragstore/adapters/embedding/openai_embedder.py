from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

# Requires: pip install openai, and set OPENAI_API_KEY in env
from openai import OpenAI, OpenAIError

from ragstore.domain.errors import EmbeddingError
from ragstore.domain.models import Vector

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"
DEFAULT_EMBED_BATCH_SIZE = 64

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OpenAIEmbedder:
    """
    OpenAI embeddings adapter.

    Notes:
      - uses the official OpenAI Python client
      - sends at most `batch_size` texts per request
      - returns vectors in the same order as inputs
    """
    api_key: str = ""
    model: str = DEFAULT_EMBEDDING_MODEL
    batch_size: int = DEFAULT_EMBED_BATCH_SIZE
    client: Optional[OpenAI] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.client is None:
            self.client = OpenAI(api_key=self.api_key or None)

    @property
    def model_name(self) -> str:
        return self.model

    def embed_documents(self, texts: Sequence[str]) -> list[Vector]:
        if not texts:
            return []

        embeddings: list[Vector] = []
        for i in range(0, len(texts), self.batch_size):
            batch = list(texts[i : i + self.batch_size])
            try:
                resp = self.client.embeddings.create(model=self.model, input=batch)
            except OpenAIError as e:
                raise EmbeddingError(f"OpenAI embeddings request failed ({self.model}): {e}") from e
            # OpenAI returns embeddings in resp.data in order
            embeddings.extend(list(item.embedding) for item in resp.data)
            logger.debug("Embedded batch", extra={"model": self.model, "batch": len(batch)})
        return embeddings

    def embed_query(self, text: str) -> Vector:
        return self.embed_documents([text])[0]
