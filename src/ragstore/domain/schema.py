from __future__ import annotations

from typing import Final

# Payload keys written into the backend next to caller metadata
META_TEXT: Final[str] = "text"
META_NAMESPACE: Final[str] = "_namespace"

# Metadata keys added by the chunker / loader
META_SOURCE: Final[str] = "source"
META_CHUNK_INDEX: Final[str] = "chunk_index"
META_START_CHAR: Final[str] = "start_char"
META_END_CHAR: Final[str] = "end_char"
