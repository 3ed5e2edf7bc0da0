import pytest

from ragstore.domain.errors import InvalidArgument, UnsupportedSearchType
from ragstore.domain.models import IngestOptions, SearchOptions, SearchType


@pytest.mark.parametrize(
    "value,expected",
    [
        (SearchType.MMR, SearchType.MMR),
        ("mmr", SearchType.MMR),
        ("Similarity", SearchType.SIMILARITY),
        (" similarity ", SearchType.SIMILARITY),
    ],
)
def test_search_type_parse(value, expected):
    assert SearchType.parse(value) is expected


@pytest.mark.parametrize("value", ["similarity_score_threshold", "", 3, None])
def test_search_type_parse_rejects_unknown(value):
    with pytest.raises(UnsupportedSearchType):
        SearchType.parse(value)


def test_unsupported_search_type_is_invalid_argument():
    assert issubclass(UnsupportedSearchType, InvalidArgument)
    assert issubclass(InvalidArgument, ValueError)


@pytest.mark.parametrize("threshold", [-0.1, 1.1])
def test_search_options_threshold_bounds(threshold):
    with pytest.raises(InvalidArgument):
        SearchOptions(score_threshold=threshold)


def test_search_options_blank_namespace():
    with pytest.raises(InvalidArgument):
        SearchOptions(namespace="  ")


def test_ingest_options_validation():
    with pytest.raises(InvalidArgument):
        IngestOptions(batch_size=0)
    with pytest.raises(InvalidArgument):
        IngestOptions(ids=["a", "a"])
    assert IngestOptions(ids=["a", "b"], namespace="ns").batch_size == 32
