# Lazy imports to keep `vectorizer.core.types` importable without qdrant/httpx
from vectorizer.core.types import (
    EmbeddingRecord,
    IngestionRequest,
    IngestionResponse,
    SkippedFile,
    SkipReason,
)

__all__ = [
    "EmbeddingRecord",
    "IngestionRequest",
    "IngestionResponse",
    "SkippedFile",
    "SkipReason",
    "VectorizerConfig",
]


def __getattr__(name):
    if name == "VectorizerConfig":
        from vectorizer.core.config import VectorizerConfig
        return VectorizerConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
