"""
Vectorizer Core Types
---------------------
Pydantic models and enums shared by ingestion, storage and retrieval.
"""

import time
from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field


class SkipReason(str, Enum):
    IGNORE_RULE = "ignore-rule"
    SENSITIVE_FILE = "sensitive_file"
    SENSITIVE_CONTENT = "sensitive_content"
    TOO_LARGE = "too_large"
    BINARY = "binary"
    READ_ERROR = "read_error"
    NO_CHUNKS = "no_chunks"
    EMBEDDING_FAILED = "embedding_failed"
    ERROR = "error"


class EmbeddingRecord(BaseModel):
    """A stored chunk; ``(source_path, chunk_index)`` is its identity."""
    source_path: str
    source_name: str
    chunk_index: int
    chunk_text: str
    token_count: int
    vector: List[float]
    created_at: float = Field(default_factory=time.time)


class SkippedFile(BaseModel):
    path: str
    reason: SkipReason
    details: Optional[str] = None


class IngestionMetrics(BaseModel):
    duration_ms: int = 0
    total_size_bytes: int = 0
    files_scanned: int = 0


class SourceInfo(BaseModel):
    branch: Optional[str] = None
    revision_id: Optional[str] = None
    remote_url: Optional[str] = None


# --- API Request/Response Models ---

class IngestionRequest(BaseModel):
    source_path: str
    model: str = "nomic-embed-text"
    respect_ignore_rules: bool = True
    scan_for_secrets: bool = True
    skip_files_with_secrets: bool = True
    max_files: Optional[int] = Field(default=None, gt=0)
    max_file_size_mb: Optional[int] = Field(default=None, gt=0)


class IngestionResponse(BaseModel):
    success: bool
    files_processed: int = 0
    chunks_created: int = 0
    files_skipped: List[SkippedFile] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    message: str = ""
    metrics: IngestionMetrics = Field(default_factory=IngestionMetrics)
    source_info: Optional[SourceInfo] = None


class SearchRequest(BaseModel):
    query: str
    limit: int = 5


class SearchResponse(BaseModel):
    results: List[str] = Field(default_factory=list)


class TextEmbeddingResponse(BaseModel):
    embedding: List[float]
    dimension: int
    model: str
