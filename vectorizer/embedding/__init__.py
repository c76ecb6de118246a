"""
Embedding providers.
"""

from vectorizer.embedding.client import (
    EmbeddingClient,
    EmbeddingErr,
    EmbeddingOk,
    EmbeddingResult,
    FastEmbedClient,
    OllamaEmbeddingClient,
    create_embedding_client,
)

__all__ = [
    "EmbeddingClient",
    "EmbeddingErr",
    "EmbeddingOk",
    "EmbeddingResult",
    "FastEmbedClient",
    "OllamaEmbeddingClient",
    "create_embedding_client",
]
