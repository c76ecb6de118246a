"""
Vectorizer Configuration
------------------------
Centralized configuration for the ingestion and retrieval core.
Loads from environment variables and YAML config files.
"""

import os
import logging
from pathlib import Path
from typing import Optional, List, Literal

from pydantic import BaseModel, Field

from vectorizer.platform import get_data_dir
from vectorizer.repository.validator import RepositoryLimits

logger = logging.getLogger("Vectorizer.Config")

DEFAULT_DATA_DIR = str(get_data_dir())
DEFAULT_EMBEDDING_MODEL = "nomic-embed-text"
DEFAULT_OLLAMA_URL = "http://localhost:11434"
SUPPORTED_EMBEDDING_PROVIDERS = ("ollama", "fastembed")

_MB = 1024 * 1024


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
        if value <= 0:
            raise ValueError
        return value
    except ValueError:
        logger.warning(
            "Invalid %s value '%s'; expected positive integer. Using %d.",
            name,
            raw,
            default,
        )
        return default


def _normalize_provider(provider: Optional[str]) -> str:
    candidate = (provider or "").strip().lower()
    if candidate in SUPPORTED_EMBEDDING_PROVIDERS:
        return candidate
    if candidate:
        logger.warning(
            "Unsupported embedding provider '%s'; expected one of %s. Falling back to 'ollama'.",
            candidate,
            SUPPORTED_EMBEDDING_PROVIDERS,
        )
    return "ollama"


class EmbeddingConfig(BaseModel):
    """Embedding backend configuration."""
    provider: Literal["ollama", "fastembed"] = "ollama"
    model: str = DEFAULT_EMBEDDING_MODEL
    dimensions: int = 768
    ollama_url: str = DEFAULT_OLLAMA_URL
    timeout_seconds: float = 30.0


class VectorConfig(BaseModel):
    """Qdrant vector store configuration."""
    path: str = os.path.join(DEFAULT_DATA_DIR, "qdrant")
    collection: str = "vectorizer_chunks"
    dimensions: int = 768


class RepositoryConfig(BaseModel):
    """Repository harvesting limits and security toggles."""
    max_files: int = 10_000
    max_file_size_mb: int = 5
    max_total_size_mb: int = 500
    max_depth: int = 50
    allowed_base_paths: List[str] = Field(default_factory=list)
    scan_for_secrets: bool = True

    def to_limits(self) -> RepositoryLimits:
        return RepositoryLimits(
            max_files=self.max_files,
            max_file_size_bytes=self.max_file_size_mb * _MB,
            max_total_size_bytes=self.max_total_size_mb * _MB,
            max_depth=self.max_depth,
            allowed_base_paths=tuple(self.allowed_base_paths),
        )


class RetrievalConfig(BaseModel):
    """Similarity search configuration."""
    default_limit: int = 5
    max_limit: int = 100


class VectorizerConfig(BaseModel):
    """Root configuration for the ingestion and retrieval core."""
    embedding: EmbeddingConfig = Field(default_factory=EmbeddingConfig)
    vector: VectorConfig = Field(default_factory=VectorConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    retrieval: RetrievalConfig = Field(default_factory=RetrievalConfig)
    data_dir: str = DEFAULT_DATA_DIR

    @classmethod
    def from_env(cls) -> "VectorizerConfig":
        """
        Load configuration from environment variables.

        Environment variables override defaults:
        - VECTORIZER_DATA_DIR: Base data directory
        - VECTORIZER_EMBEDDING_PROVIDER: ollama | fastembed
        - VECTORIZER_EMBEDDING_MODEL: Embedding model name
        - VECTORIZER_EMBEDDING_DIMS: Embedding dimensions
        - VECTORIZER_OLLAMA_URL: Embedding backend base URL
        - VECTORIZER_COLLECTION: Vector collection name
        - VECTORIZER_ALLOWED_BASE_PATHS: os.pathsep separated allow-list
        - VECTORIZER_MAX_FILES / VECTORIZER_MAX_FILE_SIZE_MB /
          VECTORIZER_MAX_TOTAL_SIZE_MB / VECTORIZER_MAX_DEPTH: Harvest limits
        - VECTORIZER_SCAN_FOR_SECRETS: Enable/disable secret scanning
        """
        data_dir = os.environ.get("VECTORIZER_DATA_DIR", DEFAULT_DATA_DIR)
        embedding_dims = _env_int("VECTORIZER_EMBEDDING_DIMS", 768)

        return cls(
            data_dir=data_dir,
            embedding=EmbeddingConfig(
                provider=_normalize_provider(os.environ.get("VECTORIZER_EMBEDDING_PROVIDER")),
                model=os.environ.get("VECTORIZER_EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL),
                dimensions=embedding_dims,
                ollama_url=os.environ.get("VECTORIZER_OLLAMA_URL", DEFAULT_OLLAMA_URL),
            ),
            vector=VectorConfig(
                path=os.path.join(data_dir, "qdrant"),
                collection=os.environ.get("VECTORIZER_COLLECTION", "vectorizer_chunks"),
                dimensions=embedding_dims,
            ),
            repository=RepositoryConfig(
                max_files=_env_int("VECTORIZER_MAX_FILES", 10_000),
                max_file_size_mb=_env_int("VECTORIZER_MAX_FILE_SIZE_MB", 5),
                max_total_size_mb=_env_int("VECTORIZER_MAX_TOTAL_SIZE_MB", 500),
                max_depth=_env_int("VECTORIZER_MAX_DEPTH", 50),
                allowed_base_paths=[
                    part.strip()
                    for part in os.environ.get("VECTORIZER_ALLOWED_BASE_PATHS", "").split(os.pathsep)
                    if part.strip()
                ],
                scan_for_secrets=_env_bool("VECTORIZER_SCAN_FOR_SECRETS", True),
            ),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "VectorizerConfig":
        """Load configuration from a YAML file."""
        import yaml

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Config file not found: %s; using environment", path)
            return cls.from_env()
        return cls(**data)

    def ensure_directories(self) -> None:
        """Create data directories if they don't exist."""
        Path(self.data_dir).mkdir(parents=True, exist_ok=True)
        if self.vector.path != ":memory:":
            Path(self.vector.path).parent.mkdir(parents=True, exist_ok=True)
        logger.info("Data directory: %s", self.data_dir)
