from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ragstore.domain.errors import InvalidArgument
from ragstore.domain.models import Document
from ragstore.domain.schema import META_CHUNK_INDEX, META_END_CHAR, META_START_CHAR


@dataclass(frozen=True, slots=True)
class FixedChunker:
    """
    Character-based splitter.

    Strategy:
      - split each document's text into windows of `chunk_size` chars
      - consecutive windows share `overlap` chars
      - every piece keeps the parent metadata plus its offsets
    """
    chunk_size: int = 1000
    overlap: int = 0

    def __post_init__(self) -> None:
        if self.chunk_size < 1:
            raise InvalidArgument(f"chunk_size must be >= 1, got {self.chunk_size}")
        if not 0 <= self.overlap < self.chunk_size:
            raise InvalidArgument(f"overlap must be in [0, chunk_size), got {self.overlap}")

    def split(self, documents: Iterable[Document]) -> list[Document]:
        pieces: list[Document] = []
        for doc in documents:
            pieces.extend(self._split_one(doc))
        return pieces

    def _split_one(self, doc: Document) -> list[Document]:
        text = doc.page_content or ""
        if not text.strip():
            return []

        step = self.chunk_size - self.overlap
        out: list[Document] = []
        chunk_index = 0
        for start in range(0, len(text), step):
            end = min(len(text), start + self.chunk_size)
            piece = text[start:end].strip()
            if piece:
                out.append(
                    Document(
                        page_content=piece,
                        metadata={
                            **dict(doc.metadata),
                            META_CHUNK_INDEX: chunk_index,
                            META_START_CHAR: start,
                            META_END_CHAR: end,
                        },
                    )
                )
                chunk_index += 1
            if end == len(text):
                break
        return out
