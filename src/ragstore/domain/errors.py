class RagStoreError(Exception):
    """Base error for the vector store package."""


class InvalidArgument(RagStoreError, ValueError):
    """Malformed request: mismatched lengths, k > fetch_k, bad options."""


class UnsupportedSearchType(InvalidArgument):
    pass


class DimensionMismatch(RagStoreError, ValueError):
    pass


class EmbeddingError(RagStoreError):
    pass


class BackendError(RagStoreError):
    pass


class BackendNotReady(BackendError):
    pass


class DataQualityWarning(UserWarning):
    """Non-fatal: a relevance score was observed outside [0, 1]."""
