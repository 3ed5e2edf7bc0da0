from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ragstore.domain.models import IndexEntry, MetadataFilter, QueryMatch, Vector


class BackendIndex(Protocol):
    """
    Persists (id, vector, payload) entries and answers kNN queries.

    The index is assumed to exist and be ready; provisioning is not part of this port.
    """

    @property
    def dimension(self) -> Optional[int]: ...

    def relevance_score(self, raw: float) -> float:
        """Map this backend's native score/distance to a [0, 1] relevance."""
        ...

    def upsert(self, entries: Sequence[IndexEntry], *, namespace: Optional[str] = None) -> list[str]:
        ...

    def delete(self, ids: Sequence[str], *, namespace: Optional[str] = None) -> bool:
        ...

    def query(
        self,
        vector: Vector,
        k: int,
        *,
        filter: Optional[MetadataFilter] = None,
        namespace: Optional[str] = None,
        include_vectors: bool = False,
    ) -> list[QueryMatch]:
        ...

    def is_ready(self) -> bool:
        ...
