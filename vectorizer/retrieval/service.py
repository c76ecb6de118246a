"""
Retrieval Service
-----------------
Embeds a query and returns the closest stored chunk texts.

Retrieval is best-effort: embedding or store failures degrade to an empty
result instead of propagating to the caller. Malformed requests (blank
query, limit out of range) are still rejected with ``ValueError``.
"""

import logging
from typing import List, Optional

from vectorizer.core.errors import DimensionMismatchError
from vectorizer.core.types import SearchRequest, SearchResponse
from vectorizer.embedding.client import EmbeddingClient
from vectorizer.store.vector_store import VectorStore

logger = logging.getLogger("Vectorizer.Retrieval")

DEFAULT_LIMIT = 5
MAX_LIMIT = 100


class RetrievalService:
    def __init__(
        self,
        embedder: EmbeddingClient,
        store: VectorStore,
        *,
        model: str = "nomic-embed-text",
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ):
        self.embedder = embedder
        self.store = store
        self.model = model
        self.default_limit = default_limit
        self.max_limit = max_limit

    def search(self, query: str, limit: Optional[int] = None) -> List[str]:
        """Top-``limit`` chunk texts by ascending cosine distance; ``limit`` defaults to ``default_limit``."""
        if limit is None:
            limit = self.default_limit
        if not query or not query.strip():
            raise ValueError("Query must not be blank")
        if not 1 <= limit <= self.max_limit:
            raise ValueError(f"Limit must be between 1 and {self.max_limit}")

        result = self.embedder.embed(query, self.model)
        if not result.ok:
            logger.warning("Query embedding failed (%s); returning no results", result.message)
            return []

        try:
            results = self.store.query(result.vector, limit)
        except DimensionMismatchError as e:
            logger.warning("Query vector rejected by store: %s", e)
            return []
        except Exception as e:
            logger.warning("Vector search failed: %s", e)
            return []

        logger.info("Found %d similar chunks for query", len(results))
        return results

    def handle(self, request: SearchRequest) -> SearchResponse:
        return SearchResponse(results=self.search(request.query, request.limit or self.default_limit))
