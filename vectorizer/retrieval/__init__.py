# Lazy import: RetrievalService pulls in qdrant_client transitively
__all__ = ["RetrievalService"]


def __getattr__(name):
    if name == "RetrievalService":
        from vectorizer.retrieval.service import RetrievalService
        return RetrievalService
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
