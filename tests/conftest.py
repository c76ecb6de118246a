"""Shared fixtures: deterministic embedder, word-based token counter, stores."""

import hashlib
import re
from pathlib import Path

import pytest

from vectorizer.embedding.client import EmbeddingErr, EmbeddingOk
from vectorizer.ingestion.chunking import ChunkingEngine
from vectorizer.ingestion.tokenizer import TokenCounter
from vectorizer.store.vector_store import VectorStore

TEST_DIMS = 8


class WordCounter(TokenCounter):
    """One token per whitespace-delimited word; keeps sizing exact in tests."""

    def count(self, text):
        return len(text.split())


class HashingEmbedder:
    """Bag-of-words vectors: texts sharing words land close together."""

    provider = "fake"

    def __init__(self, dims=TEST_DIMS):
        self.dims = dims
        self.calls = []

    def embed(self, text, model=None):
        self.calls.append((text, model))
        vector = [0.0] * self.dims
        for word in re.findall(r"\w+", text.lower()):
            digest = hashlib.md5(word.encode("utf-8")).digest()
            vector[digest[0] % self.dims] += 1.0
        if not any(vector):
            vector[0] = 1.0
        return EmbeddingOk(vector)

    def close(self):
        pass


class FailingEmbedder:
    provider = "fake"

    def embed(self, text, model=None):
        return EmbeddingErr("network_error", "connection refused")

    def close(self):
        pass


def _make_repo(root: Path, files=None, gitignore=None) -> Path:
    """Create a directory that passes the git-marker check."""
    root.mkdir(parents=True, exist_ok=True)
    (root / ".git").mkdir(exist_ok=True)
    if gitignore is not None:
        (root / ".gitignore").write_text(gitignore, encoding="utf-8")
    for relative, content in (files or {}).items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_repo():
    return _make_repo


@pytest.fixture
def word_counter():
    return WordCounter()


@pytest.fixture
def chunker(word_counter):
    return ChunkingEngine(counter=word_counter)


@pytest.fixture
def embedder():
    return HashingEmbedder()


@pytest.fixture
def store():
    vector_store = VectorStore(":memory:", collection_name="test_chunks", embedding_dims=TEST_DIMS)
    yield vector_store
    vector_store.close()


@pytest.fixture(autouse=True)
def _no_global_excludes(monkeypatch):
    # Keep the developer's global gitignore out of test results.
    monkeypatch.setattr(
        "vectorizer.repository.ignore.global_excludes_file", lambda repo_root: None
    )


@pytest.fixture
def failing_embedder():
    return FailingEmbedder()
