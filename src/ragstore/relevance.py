"""
Relevance-score policies.

Each backend reports its own native value (a similarity or a distance). These
functions map that value to a relevance in [0, 1] where 1 is most similar.
None of them clamp. A value outside [0, 1] means the policy does not match
the backend's metric, and the store reports it.
"""
from __future__ import annotations

import math
from typing import Callable

RelevanceFn = Callable[[float], float]


def identity(score: float) -> float:
    """For backends whose native similarity is already bounded to [0, 1]."""
    return score


def cosine_similarity_relevance(similarity: float) -> float:
    """Cosine similarity in [-1, 1] -> [0, 1]."""
    return (1.0 + similarity) / 2.0


def euclidean_relevance(distance: float) -> float:
    """Euclidean distance between unit vectors, which is at most sqrt(2) for non-negative embeddings."""
    return 1.0 - distance / math.sqrt(2)


def bounded_distance(max_distance: float) -> RelevanceFn:
    """
    Linear map for a distance with a known upper bound: 0 -> 1.0, max_distance -> 0.0.
    """
    if max_distance <= 0:
        raise ValueError(f"max_distance must be positive, got {max_distance}")

    def _relevance(distance: float) -> float:
        return 1.0 - distance / max_distance

    return _relevance
