"""Tests for vectorizer.runtime: component wiring."""

import pytest

import vectorizer
from vectorizer.core.config import EmbeddingConfig, RepositoryConfig, VectorConfig, VectorizerConfig
from vectorizer.core.types import IngestionRequest
from vectorizer.runtime import build_vectorizer


@pytest.fixture(autouse=True)
def _offline_tokenizer(monkeypatch):
    monkeypatch.setattr("vectorizer.ingestion.tokenizer._load_encoding", lambda name: None)


def _config(tmp_path, dims=8, **repository):
    return VectorizerConfig(
        data_dir=str(tmp_path),
        embedding=EmbeddingConfig(dimensions=dims),
        vector=VectorConfig(path=str(tmp_path / "qdrant"), collection="wired", dimensions=dims),
        repository=RepositoryConfig(**repository),
    )


def test_wires_components_end_to_end(tmp_path, make_repo, embedder, store):
    repo = make_repo(tmp_path / "repo", files={"notes.md": "wired components share one store"})
    app = build_vectorizer(_config(tmp_path), embedder=embedder, store=store)

    response = app.ingestion.ingest_repository(IngestionRequest(source_path=str(repo)))

    assert response.success
    assert app.retrieval.search("wired components") == ["wired components share one store"]
    assert app.ingestion.store is app.retrieval.store


def test_allow_list_flows_from_config(tmp_path, make_repo, embedder, store):
    repo = make_repo(tmp_path / "repo", files={"notes.md": "text"})
    config = _config(tmp_path, allowed_base_paths=[str(tmp_path / "elsewhere")])
    app = build_vectorizer(config, embedder=embedder, store=store)

    response = app.ingestion.ingest_repository(IngestionRequest(source_path=str(repo)))
    assert not response.success
    assert "allowed" in response.errors[0]


def test_builds_on_disk_store(tmp_path, embedder):
    app = build_vectorizer(_config(tmp_path), embedder=embedder)
    try:
        assert app.store.embedding_dims == 8
        assert (tmp_path / "qdrant").exists()
    finally:
        app.close()


def test_mismatched_dimensions_are_rejected(tmp_path, embedder):
    config = _config(tmp_path)
    config.vector.dimensions = 16
    with pytest.raises(ValueError):
        build_vectorizer(config, embedder=embedder)


def test_package_exports_are_lazy():
    assert vectorizer.build_vectorizer is build_vectorizer
    assert vectorizer.__version__
    with pytest.raises(AttributeError):
        vectorizer.does_not_exist
