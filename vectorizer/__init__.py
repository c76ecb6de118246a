"""
Vectorizer: repository ingestion and similarity retrieval.
"""

from vectorizer.version import __version__

__all__ = [
    "__version__",
    "IngestionOrchestrator",
    "RetrievalService",
    "Vectorizer",
    "VectorizerConfig",
    "VectorStore",
    "build_vectorizer",
]


def __getattr__(name):
    if name in ("Vectorizer", "build_vectorizer"):
        from vectorizer import runtime
        return getattr(runtime, name)
    if name == "VectorizerConfig":
        from vectorizer.core.config import VectorizerConfig
        return VectorizerConfig
    if name == "IngestionOrchestrator":
        from vectorizer.ingestion.pipeline import IngestionOrchestrator
        return IngestionOrchestrator
    if name == "RetrievalService":
        from vectorizer.retrieval.service import RetrievalService
        return RetrievalService
    if name == "VectorStore":
        from vectorizer.store.vector_store import VectorStore
        return VectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
