import math

import pytest

from ragstore.relevance import bounded_distance, cosine_similarity_relevance, euclidean_relevance, identity


def test_bounded_distance_maps_zero_to_one_and_max_to_zero():
    fn = bounded_distance(2.0)
    assert fn(0.0) == 1.0
    assert fn(2.0) == 0.0
    assert fn(1.0) == pytest.approx(0.5)


def test_bounded_distance_does_not_clamp():
    assert bounded_distance(1.0)(1.5) == pytest.approx(-0.5)


def test_bounded_distance_requires_positive_bound():
    with pytest.raises(ValueError):
        bounded_distance(0.0)


def test_cosine_similarity_relevance():
    assert cosine_similarity_relevance(1.0) == 1.0
    assert cosine_similarity_relevance(-1.0) == 0.0
    assert cosine_similarity_relevance(0.0) == 0.5


def test_euclidean_relevance():
    assert euclidean_relevance(0.0) == 1.0
    assert euclidean_relevance(math.sqrt(2)) == pytest.approx(0.0)


def test_identity():
    assert identity(0.42) == 0.42
