from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from ragstore.domain.errors import InvalidArgument, UnsupportedSearchType

Vector = list[float]

# Backend-specific: a metadata mapping (exact match) or a predicate over metadata.
MetadataFilter = Union[Mapping[str, Any], Callable[[Mapping[str, Any]], bool]]


# -------------------------
# Core content objects
# -------------------------

@dataclass(frozen=True, slots=True)
class Document:
    """
    A unit of text plus free-form metadata.

    Has no identity of its own; the backend assigns an id when it is stored.
    """
    page_content: str
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ScoredDocument:
    """
    A search result with its relevance score.

    score: normalized relevance, 1.0 = identical, 0.0 = maximally dissimilar.
    """
    document: Document
    score: float


# -------------------------
# Search mode + per-call options
# -------------------------

class SearchType(str, Enum):
    SIMILARITY = "similarity"
    MMR = "mmr"

    @classmethod
    def parse(cls, value: Union[SearchType, str]) -> SearchType:
        """Resolve a mode read from config or CLI; unknown values raise UnsupportedSearchType."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        expected = ", ".join(repr(m.value) for m in cls)
        raise UnsupportedSearchType(f"search_type of {value!r} not allowed. Expected one of {expected}.")


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """
    Recognized options for a search call.

    filter: backend-specific predicate (mapping for exact metadata match, or a callable
            for backends that evaluate in-process)
    namespace: backend partition to search in
    score_threshold: minimum relevance score; only applied by relevance-scored searches
    """
    filter: Optional[MetadataFilter] = None
    namespace: Optional[str] = None
    score_threshold: Optional[float] = None

    def __post_init__(self) -> None:
        if self.namespace is not None and not self.namespace.strip():
            raise InvalidArgument("namespace must be a non-empty string")
        if self.score_threshold is not None and not 0.0 <= self.score_threshold <= 1.0:
            raise InvalidArgument(f"score_threshold must be in [0, 1], got {self.score_threshold}")


@dataclass(frozen=True, slots=True)
class IngestOptions:
    """
    Recognized options for an ingestion call.

    ids: explicit ids (one per text); omitted ids are assigned by the backend
    batch_size: number of texts per embedding request / upsert
    """
    ids: Optional[Sequence[str]] = None
    namespace: Optional[str] = None
    batch_size: int = 32

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise InvalidArgument(f"batch_size must be >= 1, got {self.batch_size}")
        if self.namespace is not None and not self.namespace.strip():
            raise InvalidArgument("namespace must be a non-empty string")
        if self.ids is not None and len(set(self.ids)) != len(self.ids):
            raise InvalidArgument("ids must be unique")


# -------------------------
# Backend wire objects
# -------------------------

@dataclass(frozen=True, slots=True)
class IndexEntry:
    id: Optional[str]
    vector: Vector
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class QueryMatch:
    """
    One kNN hit as returned by a backend.

    score: the backend's native value (similarity or distance); normalize it with
           the backend's relevance policy before showing it to callers.
    vector: only populated when the query asked for vectors.
    """
    id: str
    payload: Mapping[str, Any]
    score: float
    vector: Optional[Vector] = None
