from __future__ import annotations

import math
from typing import Sequence

from ragstore.domain.errors import InvalidArgument


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors; 0.0 when either vector is all zeros.
    """
    dot_product = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot_product / (norm_a * norm_b)


def maximal_marginal_relevance(
    query_vector: Sequence[float],
    candidates: Sequence[Sequence[float]],
    k: int = 4,
    lambda_mult: float = 0.5,
) -> list[int]:
    """
    Greedy Maximal Marginal Relevance selection.

    Args:
        query_vector: The query embedding.
        candidates: Candidate embeddings (the over-fetched pool).
        k: Number of indices to select; capped at the pool size.
        lambda_mult: 1.0 = pure relevance, 0.0 = maximum diversity.

    Returns:
        Indices into `candidates`, in selection order (first = most relevant).
        Ties go to the lowest candidate index.
    """
    if k < 1:
        raise InvalidArgument(f"k must be >= 1, got {k}")
    if not 0.0 <= lambda_mult <= 1.0:
        raise InvalidArgument(f"lambda_mult must be in [0, 1], got {lambda_mult}")
    if not candidates:
        return []

    sim_q = [cosine_similarity(query_vector, c) for c in candidates]

    # First pick ignores lambda: the single most relevant candidate.
    first = max(range(len(candidates)), key=lambda i: (sim_q[i], -i))
    selected: list[int] = [first]
    remaining = [i for i in range(len(candidates)) if i != first]

    # redundancy[i] = max similarity of candidate i to anything selected so far
    redundancy = {i: cosine_similarity(candidates[i], candidates[first]) for i in remaining}

    while remaining and len(selected) < k:
        best_i = remaining[0]
        best_val = -math.inf
        for i in remaining:
            val = lambda_mult * sim_q[i] - (1.0 - lambda_mult) * redundancy[i]
            if val > best_val:
                best_val = val
                best_i = i

        selected.append(best_i)
        remaining.remove(best_i)
        for i in remaining:
            redundancy[i] = max(redundancy[i], cosine_similarity(candidates[i], candidates[best_i]))

    return selected
