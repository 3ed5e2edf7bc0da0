from __future__ import annotations

from typing import Protocol

from ragstore.domain.models import Document


class Retriever(Protocol):
    """
    Retrieves documents for a query string.
    """

    def retrieve(self, query: str) -> list[Document]:
        ...
