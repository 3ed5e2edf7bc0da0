from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ragstore import operations
from ragstore.domain.models import Document, SearchOptions, SearchType
from ragstore.ports import VectorStore


@dataclass(frozen=True, slots=True)
class VectorStoreRetriever:
    """
    Binds one store and one search mode into a query -> documents call.

    Stateless; errors from the store propagate unchanged.
    """
    store: VectorStore
    search_type: SearchType = SearchType.SIMILARITY
    k: int = 4
    fetch_k: int = 20
    lambda_mult: float = 0.5
    options: Optional[SearchOptions] = None

    def retrieve(self, query: str) -> list[Document]:
        return operations.search(
            self.store,
            query,
            self.search_type,
            k=self.k,
            fetch_k=self.fetch_k,
            lambda_mult=self.lambda_mult,
            options=self.options,
        )
