"""
Ingestion Orchestrator
----------------------
Drives harvested files through chunking, embedding and storage.

Per file, in traversal order:
  1. optional content scan (skip on detected secrets)
  2. delete every stored chunk of the source path
  3. chunk, then embed and upsert each chunk
Chunk-level failures are accumulated as error strings; a file with no stored
chunk degrades to an ``embedding_failed`` skip. A job succeeds iff no errors
were recorded. All counters are scoped to one job.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from vectorizer.core.errors import DimensionMismatchError
from vectorizer.core.types import (
    EmbeddingRecord,
    IngestionMetrics,
    IngestionRequest,
    IngestionResponse,
    SkippedFile,
    SkipReason,
    SourceInfo,
    TextEmbeddingResponse,
)
from vectorizer.embedding.client import EmbeddingClient
from vectorizer.ingestion.chunking import ChunkingEngine
from vectorizer.ingestion.models import HarvestedFile
from vectorizer.repository.git_info import read_source_info
from vectorizer.repository.harvester import HarvestResult, RepositoryHarvester
from vectorizer.repository.sensitive import SensitiveContentFilter
from vectorizer.store.vector_store import VectorStore

logger = logging.getLogger("Vectorizer.Ingest")

DEFAULT_MODEL = "nomic-embed-text"
_MB = 1024 * 1024


@dataclass
class _JobState:
    started: float = field(default_factory=time.monotonic)
    files_processed: int = 0
    chunks_created: int = 0
    skipped: List[SkippedFile] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    total_size: int = 0
    files_scanned: int = 0

    def skip(self, path: str, reason: SkipReason, details: Optional[str] = None) -> None:
        self.skipped.append(SkippedFile(path=path, reason=reason, details=details))

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)


class IngestionOrchestrator:
    """Runs ingestion jobs for repositories and plain folders."""

    def __init__(
        self,
        *,
        harvester: RepositoryHarvester,
        chunker: ChunkingEngine,
        embedder: EmbeddingClient,
        store: VectorStore,
        sensitive_filter: Optional[SensitiveContentFilter] = None,
        scan_for_secrets: bool = True,
    ):
        self.harvester = harvester
        self.chunker = chunker
        self.embedder = embedder
        self.store = store
        self.sensitive_filter = sensitive_filter or harvester.sensitive_filter
        self.scan_for_secrets = scan_for_secrets

    def ingest_repository(self, request: IngestionRequest) -> IngestionResponse:
        """Ingest a version-controlled repository."""
        return self._run(request, require_vcs=True)

    async def aingest_repository(self, request: IngestionRequest) -> IngestionResponse:
        """Run ``ingest_repository`` in a worker thread."""
        return await asyncio.to_thread(self.ingest_repository, request)

    def ingest_folder(
        self,
        folder_path: str,
        model: str = DEFAULT_MODEL,
        *,
        scan_for_secrets: bool = True,
    ) -> IngestionResponse:
        """Ingest a plain directory; no version-control marker is required."""
        request = IngestionRequest(
            source_path=folder_path,
            model=model,
            scan_for_secrets=scan_for_secrets,
            skip_files_with_secrets=scan_for_secrets,
        )
        return self._run(request, require_vcs=False)

    def embed_text(self, text: str, model: str = DEFAULT_MODEL) -> TextEmbeddingResponse:
        """Embed a single piece of text. Raises ``EmbeddingError`` on failure."""
        if not text or not text.strip():
            raise ValueError("Text must not be blank")
        vector = self.embedder.embed(text, model).unwrap()
        return TextEmbeddingResponse(embedding=vector, dimension=len(vector), model=model)

    # ------------------------------------------------------------------

    def _run(self, request: IngestionRequest, *, require_vcs: bool) -> IngestionResponse:
        job = _JobState()
        source_info: Optional[SourceInfo] = None
        if not self.scan_for_secrets:
            request = request.model_copy(update={"scan_for_secrets": False})

        try:
            harvest = self.harvester.harvest(
                request.source_path,
                require_vcs=require_vcs,
                respect_ignore_rules=request.respect_ignore_rules,
                check_sensitive_names=request.scan_for_secrets,
                max_files=request.max_files,
                max_file_size_bytes=request.max_file_size_mb * _MB if request.max_file_size_mb else None,
            )
            if harvest.validation_failure is not None:
                return IngestionResponse(
                    success=False,
                    errors=[harvest.validation_failure.message],
                    message="Repository validation failed" if require_vcs else "Folder validation failed",
                    metrics=IngestionMetrics(duration_ms=job.elapsed_ms()),
                )

            if require_vcs and harvest.root is not None:
                source_info = read_source_info(harvest.root)

            job.skipped.extend(harvest.skipped)
            job.files_scanned = harvest.files_scanned
            if harvest.aborted:
                job.errors.append(f"Critical error: {harvest.abort_reason}")
                return self._response(job, source_info, message="Harvest aborted")

            if not harvest.files and not require_vcs:
                job.errors.append(f"No text files found in folder: {request.source_path}")
                return self._response(job, source_info)

            logger.info("Found %d files to process in %s", len(harvest.files), harvest.root)
            self._process_files(harvest, request, job)
        except Exception as e:
            logger.error("Error during ingestion of %s: %s", request.source_path, e, exc_info=True)
            job.errors.append(f"Critical error: {e}")

        return self._response(job, source_info)

    def _process_files(self, harvest: HarvestResult, request: IngestionRequest, job: _JobState) -> None:
        for harvested in harvest.files:
            job.total_size += harvested.size_bytes
            try:
                self._process_file(harvested, request, job)
            except DimensionMismatchError:
                raise
            except Exception as e:
                logger.error("Error processing file %s: %s", harvested.path, e, exc_info=True)
                job.errors.append(f"Error processing {harvested.name}: {e}")
                job.skip(harvested.path, SkipReason.ERROR, str(e))

    def _process_file(self, harvested: HarvestedFile, request: IngestionRequest, job: _JobState) -> None:
        if request.scan_for_secrets:
            detection = self.sensitive_filter.contains_sensitive_data(harvested.content, harvested.path)
            if detection.detected and request.skip_files_with_secrets:
                job.skip(
                    harvested.path,
                    SkipReason.SENSITIVE_CONTENT,
                    f"Contains {len(detection.matches)} potential secret(s)",
                )
                return

        deleted = self.store.delete_by_source(harvested.path)
        if deleted:
            logger.debug("Deleted %d existing embeddings for %s", deleted, harvested.name)

        chunks = self.chunker.chunk(harvested.content, harvested.path)
        if not chunks:
            logger.warning("No chunks created for file: %s", harvested.path)
            job.skip(harvested.path, SkipReason.NO_CHUNKS, "File produced no chunks")
            return

        stored = 0
        for chunk in chunks:
            result = self.embedder.embed(chunk.text, request.model)
            if not result.ok:
                job.errors.append(
                    f"Failed to generate embedding for {harvested.name}:{chunk.chunk_index} ({result.message})"
                )
                continue

            record = EmbeddingRecord(
                source_path=harvested.path,
                source_name=harvested.name,
                chunk_index=chunk.chunk_index,
                chunk_text=chunk.text,
                token_count=chunk.token_count,
                vector=result.vector,
            )
            if self.store.upsert(record):
                stored += 1
            else:
                job.errors.append(f"Failed to store embedding for {harvested.name}:{chunk.chunk_index}")

        if stored:
            job.files_processed += 1
            job.chunks_created += stored
            logger.info("Successfully processed %s: %d chunks", harvested.name, stored)
        else:
            job.skip(harvested.path, SkipReason.EMBEDDING_FAILED, "Failed to generate embeddings")

    @staticmethod
    def _response(job: _JobState, source_info: Optional[SourceInfo], message: Optional[str] = None) -> IngestionResponse:
        if message is None:
            if job.errors:
                message = f"Vectorization completed with {len(job.errors)} error(s)"
            else:
                message = f"Successfully vectorized {job.files_processed} files ({job.chunks_created} chunks)"
        return IngestionResponse(
            success=not job.errors,
            files_processed=job.files_processed,
            chunks_created=job.chunks_created,
            files_skipped=job.skipped,
            errors=job.errors,
            message=message,
            metrics=IngestionMetrics(
                duration_ms=job.elapsed_ms(),
                total_size_bytes=job.total_size,
                files_scanned=job.files_scanned,
            ),
            source_info=source_info,
        )
