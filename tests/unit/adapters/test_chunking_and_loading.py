import pytest

from ragstore.adapters.chunking.fixed import FixedChunker
from ragstore.adapters.ingestion.text_loader import TextLoader
from ragstore.domain.errors import InvalidArgument
from ragstore.domain.models import Document


def test_chunker_splits_with_overlap_and_offsets():
    doc = Document(page_content="abcdefghij", metadata={"source": "s"})
    pieces = FixedChunker(chunk_size=4, overlap=1).split([doc])
    assert [p.page_content for p in pieces] == ["abcd", "defg", "ghij"]
    assert pieces[1].metadata == {"source": "s", "chunk_index": 1, "start_char": 3, "end_char": 7}


def test_chunker_without_overlap():
    pieces = FixedChunker(chunk_size=5).split([Document(page_content="abcdefghij")])
    assert [p.page_content for p in pieces] == ["abcde", "fghij"]


def test_chunker_skips_blank_documents():
    assert FixedChunker().split([Document(page_content="   \n ")]) == []


@pytest.mark.parametrize("chunk_size,overlap", [(0, 0), (10, 10), (10, -1)])
def test_chunker_rejects_bad_config(chunk_size, overlap):
    with pytest.raises(InvalidArgument):
        FixedChunker(chunk_size=chunk_size, overlap=overlap)


def test_loader_reads_text_with_source(tmp_path):
    path = tmp_path / "note.txt"
    path.write_text("hello wörld", encoding="utf-8")
    doc = TextLoader().load(path)
    assert doc == Document(page_content="hello wörld", metadata={"source": str(path)})


def test_loader_falls_back_to_latin1(tmp_path):
    path = tmp_path / "legacy.txt"
    path.write_bytes("café".encode("latin-1"))
    assert TextLoader().load(path).page_content == "café"


def test_loader_skips_binary_oversized_and_missing(tmp_path):
    binary = tmp_path / "blob.bin"
    binary.write_bytes(b"\x00\x01\x02")
    big = tmp_path / "big.txt"
    big.write_text("x" * 50, encoding="utf-8")

    loader = TextLoader(max_bytes=10)
    assert loader.load(binary) is None
    assert loader.load(big) is None
    assert loader.load(tmp_path / "missing.txt") is None
