"""
Vectorizer Embedding Clients
----------------------------
Turns chunk text into a fixed-dimensionality vector.

Two providers, chosen once from configuration:
  - ``ollama``: remote embedding API (``POST /api/embed``)
  - ``fastembed``: in-process local model

Provider failures are returned as ``EmbeddingErr`` values, never raised.
Timeouts belong to the HTTP client configuration; retries belong to callers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

import httpx

from vectorizer.core.config import EmbeddingConfig
from vectorizer.core.errors import EmbeddingError

logger = logging.getLogger("Vectorizer.Embedding")

NETWORK_ERROR = "network_error"
MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True)
class EmbeddingOk:
    vector: List[float]

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> List[float]:
        return self.vector


@dataclass(frozen=True)
class EmbeddingErr:
    kind: str
    message: str

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> List[float]:
        raise EmbeddingError(self.kind, self.message)


EmbeddingResult = Union[EmbeddingOk, EmbeddingErr]


def _coerce_vector(raw) -> Optional[List[float]]:
    if not isinstance(raw, (list, tuple)) or not raw:
        return None
    try:
        return [float(value) for value in raw]
    except (TypeError, ValueError):
        return None


class OllamaEmbeddingClient:
    """Remote embedding provider speaking the Ollama ``/api/embed`` protocol."""

    provider = "ollama"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        *,
        default_model: str = "nomic-embed-text",
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.default_model = default_model
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout_seconds)

    def embed(self, text: str, model: Optional[str] = None) -> EmbeddingResult:
        model_name = model or self.default_model
        try:
            response = self._client.post(
                f"{self.base_url}/api/embed",
                json={"model": model_name, "input": text},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Embedding API error: %s - %s",
                exc.response.status_code,
                exc.response.text[:200],
            )
            return EmbeddingErr(NETWORK_ERROR, f"HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.error("Embedding request failed: %s", exc)
            return EmbeddingErr(NETWORK_ERROR, str(exc) or type(exc).__name__)

        try:
            payload = response.json()
        except ValueError as exc:
            return EmbeddingErr(MALFORMED_RESPONSE, f"Invalid JSON: {exc}")

        embeddings = payload.get("embeddings") if isinstance(payload, dict) else None
        vector = _coerce_vector(embeddings[0]) if isinstance(embeddings, list) and embeddings else None
        if vector is None:
            logger.error("Embedding response missing 'embeddings' for model %s", model_name)
            return EmbeddingErr(MALFORMED_RESPONSE, "Response has no embeddings")
        return EmbeddingOk(vector)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


class FastEmbedClient:
    """Local embedding provider backed by fastembed's ONNX models."""

    provider = "fastembed"

    def __init__(self, model: str = "nomic-embed-text"):
        self.default_model = model
        self._models = {}

    @staticmethod
    def _resolve_model_name(model: str) -> str:
        if "/" not in model and "nomic" in model:
            return f"nomic-ai/{model}-v1.5"
        return model

    def _get_model(self, model: str):
        if model not in self._models:
            from fastembed import TextEmbedding

            self._models[model] = TextEmbedding(model_name=self._resolve_model_name(model))
            logger.info("Embedding model loaded: fastembed/%s", model)
        return self._models[model]

    def embed(self, text: str, model: Optional[str] = None) -> EmbeddingResult:
        model_name = model or self.default_model
        try:
            embeddings = list(self._get_model(model_name).embed([text]))
        except Exception as exc:
            logger.error("Local embedding failed: %s", exc)
            return EmbeddingErr(NETWORK_ERROR, str(exc))
        vector = _coerce_vector(embeddings[0].tolist()) if embeddings else None
        if vector is None:
            return EmbeddingErr(MALFORMED_RESPONSE, "Model produced no embedding")
        return EmbeddingOk(vector)

    def close(self) -> None:
        self._models.clear()


EmbeddingClient = Union[OllamaEmbeddingClient, FastEmbedClient]


def create_embedding_client(config: EmbeddingConfig) -> EmbeddingClient:
    """Select the embedding provider once, at configuration time."""
    if config.provider == "fastembed":
        return FastEmbedClient(model=config.model)
    return OllamaEmbeddingClient(
        config.ollama_url,
        default_model=config.model,
        timeout_seconds=config.timeout_seconds,
    )
