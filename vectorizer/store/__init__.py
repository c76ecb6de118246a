# Lazy import: VectorStore needs qdrant_client
__all__ = ["VectorStore"]


def __getattr__(name):
    if name == "VectorStore":
        from vectorizer.store.vector_store import VectorStore
        return VectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
