"""
Component wiring for the ingestion and retrieval core.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from vectorizer.core.config import VectorizerConfig
from vectorizer.embedding.client import EmbeddingClient, create_embedding_client
from vectorizer.ingestion.chunking import ChunkingEngine
from vectorizer.ingestion.pipeline import IngestionOrchestrator
from vectorizer.repository.harvester import RepositoryHarvester
from vectorizer.repository.sensitive import SensitiveContentFilter
from vectorizer.repository.validator import PathValidator
from vectorizer.retrieval.service import RetrievalService
from vectorizer.store.vector_store import VectorStore

logger = logging.getLogger("Vectorizer.Runtime")


@dataclass
class Vectorizer:
    config: VectorizerConfig
    embedder: EmbeddingClient
    store: VectorStore
    ingestion: IngestionOrchestrator
    retrieval: RetrievalService

    def close(self) -> None:
        self.embedder.close()
        self.store.close()


def build_vectorizer(
    config: Optional[VectorizerConfig] = None,
    *,
    embedder: Optional[EmbeddingClient] = None,
    store: Optional[VectorStore] = None,
) -> Vectorizer:
    """Wire every component from one configuration."""
    config = config or VectorizerConfig.from_env()
    if config.embedding.dimensions != config.vector.dimensions:
        raise ValueError(
            f"Embedding dimensions ({config.embedding.dimensions}) must match "
            f"vector store dimensions ({config.vector.dimensions})"
        )
    if store is None:
        config.ensure_directories()
        store = VectorStore(
            data_path=config.vector.path,
            collection_name=config.vector.collection,
            embedding_dims=config.vector.dimensions,
        )
    embedder = embedder or create_embedding_client(config.embedding)

    limits = config.repository.to_limits()
    sensitive_filter = SensitiveContentFilter()
    harvester = RepositoryHarvester(
        limits,
        validator=PathValidator(limits),
        sensitive_filter=sensitive_filter,
    )
    ingestion = IngestionOrchestrator(
        harvester=harvester,
        chunker=ChunkingEngine(),
        embedder=embedder,
        store=store,
        sensitive_filter=sensitive_filter,
        scan_for_secrets=config.repository.scan_for_secrets,
    )
    retrieval = RetrievalService(
        embedder,
        store,
        model=config.embedding.model,
        default_limit=config.retrieval.default_limit,
        max_limit=config.retrieval.max_limit,
    )
    logger.info(
        "Vectorizer ready (provider=%s, model=%s, collection=%s)",
        config.embedding.provider,
        config.embedding.model,
        config.vector.collection,
    )
    return Vectorizer(
        config=config,
        embedder=embedder,
        store=store,
        ingestion=ingestion,
        retrieval=retrieval,
    )
