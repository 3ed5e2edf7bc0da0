from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ragstore.domain.models import Document
from ragstore.domain.schema import META_SOURCE

logger = logging.getLogger(__name__)

SNIFF_BYTES = 4096
MAX_CONTROL_RATIO = 0.02
# C0 control bytes other than tab, newline, vertical tab, form feed and carriage return
_CONTROL = frozenset(range(0, 9)) | frozenset(range(14, 32))


def is_probably_binary(data: bytes) -> bool:
    head = data[:SNIFF_BYTES]
    if not head:
        return False
    if 0 in head:
        return True
    return sum(b in _CONTROL for b in head) / len(head) > MAX_CONTROL_RATIO


@dataclass(frozen=True, slots=True)
class TextLoader:
    """
    Reads one file into a Document carrying {"source": <path>}.

    Oversized, unreadable and binary files yield None and a warning.
    Bytes that are not valid UTF-8 are decoded as latin-1.
    """
    max_bytes: int = 2_000_000
    encoding: str = "utf-8"
    fallback_encoding: str = "latin-1"

    def load(self, path: Path) -> Optional[Document]:
        path = Path(path)
        source = str(path)

        try:
            size = path.stat().st_size
            data = path.read_bytes() if size <= self.max_bytes else None
        except OSError as e:
            logger.warning("Skipping unreadable file: %s", e, extra={"path": source})
            return None

        if data is None:
            logger.warning("Skipping oversized file", extra={"path": source, "bytes": size})
            return None
        if is_probably_binary(data):
            logger.warning("Skipping binary file", extra={"path": source})
            return None

        try:
            text = data.decode(self.encoding)
        except UnicodeDecodeError:
            text = data.decode(self.fallback_encoding, errors="replace")

        return Document(page_content=text, metadata={META_SOURCE: source})
