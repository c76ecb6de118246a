"""
Vectorizer exceptions.

Provider failures (embedding network errors, unreadable files) are reported
as values; these exceptions cover contract violations and job-level aborts.
"""

from __future__ import annotations

from typing import Optional


class VectorizerError(RuntimeError):
    """Base class for vectorizer errors."""


class DimensionMismatchError(VectorizerError):
    """Raised when a vector does not match the store's configured dimensionality."""

    def __init__(self, expected: int, actual: int, *, source_path: Optional[str] = None) -> None:
        self.expected = expected
        self.actual = actual
        self.source_path = source_path
        source_hint = f" [{source_path}]" if source_path else ""
        super().__init__(
            f"Vector dimension mismatch: expected {expected}, got {actual}{source_hint}"
        )


class LimitExceededError(VectorizerError):
    """Raised when a job-level resource ceiling (e.g. total size) is exceeded."""

    def __init__(self, detail: str, *, limit: Optional[int] = None, observed: Optional[int] = None) -> None:
        self.limit = limit
        self.observed = observed
        super().__init__(detail)


class EmbeddingError(VectorizerError):
    """Raised when an embedding failure is explicitly unwrapped by a caller."""

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        super().__init__(f"{kind}: {detail}")
