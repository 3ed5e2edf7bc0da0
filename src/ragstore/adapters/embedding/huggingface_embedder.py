from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

# Optional extra: pip install "ragstore[huggingface]"
from llama_index.embeddings.huggingface import HuggingFaceEmbedding

from ragstore.domain.errors import EmbeddingError
from ragstore.domain.models import Vector


@dataclass(slots=True)
class HuggingFaceEmbedder:
    """
    Local sentence-embedding model via llama-index's HuggingFace integration.

    The model is loaded on first use.
    """
    model: str = "BAAI/bge-base-en-v1.5"
    _embed_model: Optional[Any] = field(default=None, init=False, repr=False)

    @property
    def model_name(self) -> str:
        return self.model

    def _get_model(self) -> Any:
        if self._embed_model is None:
            try:
                self._embed_model = HuggingFaceEmbedding(model_name=self.model)
            except (OSError, ValueError) as e:
                raise EmbeddingError(f"Could not load embedding model {self.model!r}: {e}") from e
        return self._embed_model

    def embed_documents(self, texts: Sequence[str]) -> list[Vector]:
        if not texts:
            return []
        model = self._get_model()
        try:
            return [list(v) for v in model.get_text_embedding_batch(list(texts))]
        except (RuntimeError, ValueError) as e:
            raise EmbeddingError(f"Embedding failed ({self.model}): {e}") from e

    def embed_query(self, text: str) -> Vector:
        model = self._get_model()
        try:
            return list(model.get_query_embedding(text))
        except (RuntimeError, ValueError) as e:
            raise EmbeddingError(f"Embedding failed ({self.model}): {e}") from e
