"""
Data models for chunking and ingestion.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ChunkMetadata:
    source_path: str
    start_token: int = 0
    end_token: int = 0
    # Length of the leading text repeated from the previous chunk.
    overlap_chars: int = 0


@dataclass
class TextChunk:
    text: str
    chunk_index: int
    token_count: int
    metadata: ChunkMetadata

    @property
    def new_text(self) -> str:
        """The portion of the chunk not repeated from its predecessor."""
        return self.text[self.metadata.overlap_chars:]


@dataclass
class HarvestedFile:
    path: str
    name: str
    content: str
    extension: str
    size_bytes: int = 0
    relative_path: str = ""
