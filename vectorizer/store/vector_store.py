"""
Vectorizer Vector Store
-----------------------
Qdrant-based storage for chunk embeddings.

Each point is keyed by ``(source_path, chunk_index)``, so qdrant's native
upsert is the insert-or-replace. Re-ingesting a source deletes all of its
points first; a shrunk document cannot leave stale chunks behind.

The embedded qdrant client is not thread-safe, so every client call runs
under one re-entrant lock per store.
"""

import logging
import threading
import uuid
from pathlib import Path
from typing import Optional, List, Tuple, Union

from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    VectorParams,
    PointStruct,
    Filter,
    FieldCondition,
    FilterSelector,
    MatchValue,
)

from vectorizer.core.errors import DimensionMismatchError
from vectorizer.core.types import EmbeddingRecord

logger = logging.getLogger("Vectorizer.Vector")

DEFAULT_COLLECTION = "vectorizer_chunks"
DEFAULT_DIMS = 768
IN_MEMORY = ":memory:"
_SCROLL_PAGE = 256


def point_id_for(source_path: str, chunk_index: int) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{source_path}#{chunk_index}"))


def _source_filter(source_path: str) -> Filter:
    return Filter(must=[FieldCondition(key="source_path", match=MatchValue(value=source_path))])


class VectorStore:
    """Manages chunk embeddings in Qdrant for cosine similarity search."""

    def __init__(
        self,
        data_path: Union[str, Path] = IN_MEMORY,
        collection_name: str = DEFAULT_COLLECTION,
        embedding_dims: int = DEFAULT_DIMS,
    ):
        self.data_path = str(data_path)
        self.collection_name = collection_name
        self.embedding_dims = embedding_dims
        self._client: Optional[QdrantClient] = None
        self._lock = threading.RLock()
        with self._lock:
            self._initialize()

    def _get_client(self) -> QdrantClient:
        if self._client is None:
            if self.data_path == IN_MEMORY:
                self._client = QdrantClient(location=IN_MEMORY)
            else:
                self._client = QdrantClient(path=self.data_path)
        return self._client

    def _initialize(self):
        client = self._get_client()
        collections = [c.name for c in client.get_collections().collections]
        if self.collection_name not in collections:
            client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(
                    size=self.embedding_dims,
                    distance=Distance.COSINE,
                ),
            )
            logger.info(
                "Created vector collection '%s' (%d dims)",
                self.collection_name,
                self.embedding_dims,
            )
            return

        params = client.get_collection(self.collection_name).config.params.vectors
        existing_dims = getattr(params, "size", None)
        if existing_dims is not None and existing_dims != self.embedding_dims:
            raise DimensionMismatchError(self.embedding_dims, existing_dims)
        existing_distance = getattr(params, "distance", Distance.COSINE)
        if existing_distance != Distance.COSINE:
            raise ValueError(
                f"Collection '{self.collection_name}' uses {existing_distance} distance; expected cosine"
            )
        logger.info("Vector collection '%s' exists", self.collection_name)

    def _check_dims(self, vector: List[float], source_path: Optional[str] = None) -> None:
        if len(vector) != self.embedding_dims:
            raise DimensionMismatchError(self.embedding_dims, len(vector), source_path=source_path)

    def upsert(self, record: EmbeddingRecord) -> bool:
        """Insert or replace the point for ``(source_path, chunk_index)``."""
        self._check_dims(record.vector, record.source_path)
        point = PointStruct(
            id=point_id_for(record.source_path, record.chunk_index),
            vector=record.vector,
            payload={
                "source_path": record.source_path,
                "source_name": record.source_name,
                "chunk_index": record.chunk_index,
                "chunk_text": record.chunk_text,
                "token_count": record.token_count,
                "created_at": record.created_at,
            },
        )
        try:
            with self._lock:
                self._get_client().upsert(collection_name=self.collection_name, points=[point])
        except Exception as e:
            logger.error(
                "Failed to upsert embedding for %s:%d: %s",
                record.source_path,
                record.chunk_index,
                e,
            )
            return False
        return True

    def delete_by_source(self, source_path: str) -> int:
        """Delete every chunk stored for ``source_path``. Returns the count removed."""
        selector = _source_filter(source_path)
        with self._lock:
            client = self._get_client()
            existing = client.count(
                collection_name=self.collection_name,
                count_filter=selector,
                exact=True,
            ).count
            if existing:
                client.delete(
                    collection_name=self.collection_name,
                    points_selector=FilterSelector(filter=selector),
                )
        return existing

    def query_with_scores(self, vector: List[float], limit: int = 5) -> List[Tuple[str, float]]:
        """
        Nearest chunks by cosine similarity.
        Returns (chunk_text, cosine_distance) tuples, closest first.
        """
        self._check_dims(vector)
        with self._lock:
            results = self._get_client().query_points(
                collection_name=self.collection_name,
                query=vector,
                limit=limit,
                with_payload=True,
            ).points
        matches = []
        for hit in results:
            if not hit.payload or "chunk_text" not in hit.payload:
                continue
            distance = 1.0 - hit.score
            logger.debug("Found similar chunk with cosine distance: %.4f", distance)
            matches.append((hit.payload["chunk_text"], distance))
        return matches

    def query(self, vector: List[float], limit: int = 5) -> List[str]:
        """Chunk texts ordered by ascending cosine distance."""
        return [text for text, _ in self.query_with_scores(vector, limit)]

    def find_by_source(self, source_path: str) -> List[EmbeddingRecord]:
        """All stored chunks of one source, ordered by chunk index."""
        records: List[EmbeddingRecord] = []
        offset = None
        with self._lock:
            client = self._get_client()
            while True:
                points, offset = client.scroll(
                    collection_name=self.collection_name,
                    scroll_filter=_source_filter(source_path),
                    limit=_SCROLL_PAGE,
                    offset=offset,
                    with_payload=True,
                    with_vectors=True,
                )
                for point in points:
                    payload = point.payload or {}
                    vector = point.vector
                    if isinstance(vector, dict):
                        vector = next(iter(vector.values()), [])
                    records.append(
                        EmbeddingRecord(
                            source_path=payload.get("source_path", source_path),
                            source_name=payload.get("source_name", ""),
                            chunk_index=int(payload.get("chunk_index", 0)),
                            chunk_text=payload.get("chunk_text", ""),
                            token_count=int(payload.get("token_count", 0)),
                            vector=list(vector or []),
                            created_at=float(payload.get("created_at", 0.0)),
                        )
                    )
                if offset is None:
                    break
        records.sort(key=lambda r: r.chunk_index)
        return records

    def count(self) -> int:
        with self._lock:
            return self._get_client().count(collection_name=self.collection_name, exact=True).count

    def delete_all(self) -> bool:
        """Delete and recreate the collection."""
        with self._lock:
            self._get_client().delete_collection(self.collection_name)
            self._initialize()
        return True

    def close(self):
        with self._lock:
            if self._client:
                self._client.close()
                self._client = None
