"""
Chunking and ingestion orchestration.
"""

from vectorizer.ingestion.models import ChunkMetadata, HarvestedFile, TextChunk

__all__ = [
    "ChunkMetadata",
    "ChunkingEngine",
    "HarvestedFile",
    "IngestionOrchestrator",
    "TextChunk",
    "TokenCounter",
]


def __getattr__(name):
    if name == "ChunkingEngine":
        from vectorizer.ingestion.chunking import ChunkingEngine
        return ChunkingEngine
    if name == "TokenCounter":
        from vectorizer.ingestion.tokenizer import TokenCounter
        return TokenCounter
    if name == "IngestionOrchestrator":
        from vectorizer.ingestion.pipeline import IngestionOrchestrator
        return IngestionOrchestrator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
