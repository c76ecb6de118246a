"""Tests for vectorizer.core.config: Configuration management."""

import os

import pytest

from vectorizer.core.config import (
    EmbeddingConfig,
    RepositoryConfig,
    RetrievalConfig,
    VectorConfig,
    VectorizerConfig,
)

_ENV_VARS = [
    "VECTORIZER_DATA_DIR",
    "VECTORIZER_EMBEDDING_PROVIDER",
    "VECTORIZER_EMBEDDING_MODEL",
    "VECTORIZER_EMBEDDING_DIMS",
    "VECTORIZER_OLLAMA_URL",
    "VECTORIZER_COLLECTION",
    "VECTORIZER_ALLOWED_BASE_PATHS",
    "VECTORIZER_MAX_FILES",
    "VECTORIZER_MAX_FILE_SIZE_MB",
    "VECTORIZER_MAX_TOTAL_SIZE_MB",
    "VECTORIZER_MAX_DEPTH",
    "VECTORIZER_SCAN_FOR_SECRETS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestVectorizerConfigDefaults:
    def test_from_env_defaults(self, clean_env):
        config = VectorizerConfig.from_env()
        assert config.embedding.provider == "ollama"
        assert config.embedding.model == "nomic-embed-text"
        assert config.embedding.dimensions == 768
        assert config.vector.collection == "vectorizer_chunks"
        assert config.repository.max_files == 10_000
        assert config.repository.scan_for_secrets is True
        assert config.repository.allowed_base_paths == []

    def test_ensure_directories(self, tmp_path):
        config = VectorizerConfig(
            data_dir=str(tmp_path / "vectorizer_data"),
            vector=VectorConfig(path=str(tmp_path / "vectorizer_data" / "qdrant")),
        )
        config.ensure_directories()
        assert (tmp_path / "vectorizer_data").exists()


class TestFromEnv:
    def test_overrides(self, clean_env, tmp_path):
        base_a = str(tmp_path / "a")
        base_b = str(tmp_path / "b")
        clean_env.setenv("VECTORIZER_DATA_DIR", str(tmp_path))
        clean_env.setenv("VECTORIZER_EMBEDDING_PROVIDER", "FastEmbed")
        clean_env.setenv("VECTORIZER_EMBEDDING_MODEL", "all-minilm")
        clean_env.setenv("VECTORIZER_EMBEDDING_DIMS", "384")
        clean_env.setenv("VECTORIZER_OLLAMA_URL", "http://gpu-box:11434")
        clean_env.setenv("VECTORIZER_COLLECTION", "team_docs")
        clean_env.setenv("VECTORIZER_ALLOWED_BASE_PATHS", os.pathsep.join([base_a, base_b, ""]))
        clean_env.setenv("VECTORIZER_MAX_FILES", "50")
        clean_env.setenv("VECTORIZER_MAX_DEPTH", "3")
        clean_env.setenv("VECTORIZER_SCAN_FOR_SECRETS", "false")

        config = VectorizerConfig.from_env()

        assert config.data_dir == str(tmp_path)
        assert config.embedding.provider == "fastembed"
        assert config.embedding.model == "all-minilm"
        assert config.embedding.dimensions == 384
        assert config.vector.dimensions == 384
        assert config.vector.path == os.path.join(str(tmp_path), "qdrant")
        assert config.embedding.ollama_url == "http://gpu-box:11434"
        assert config.vector.collection == "team_docs"
        assert config.repository.allowed_base_paths == [base_a, base_b]
        assert config.repository.max_files == 50
        assert config.repository.max_depth == 3
        assert config.repository.scan_for_secrets is False

    def test_unknown_provider_falls_back_to_ollama(self, clean_env, caplog):
        clean_env.setenv("VECTORIZER_EMBEDDING_PROVIDER", "openai")
        with caplog.at_level("WARNING", logger="Vectorizer.Config"):
            config = VectorizerConfig.from_env()
        assert config.embedding.provider == "ollama"
        assert "Unsupported embedding provider" in caplog.text

    @pytest.mark.parametrize("raw", ["abc", "0", "-5"])
    def test_invalid_integers_use_default(self, clean_env, raw):
        clean_env.setenv("VECTORIZER_MAX_FILES", raw)
        assert VectorizerConfig.from_env().repository.max_files == 10_000


class TestFromYaml:
    def test_loads_sections(self, tmp_path):
        path = tmp_path / "vectorizer.yaml"
        path.write_text(
            "embedding:\n"
            "  provider: fastembed\n"
            "  dimensions: 384\n"
            "vector:\n"
            "  collection: docs\n"
            "  dimensions: 384\n"
            "repository:\n"
            "  max_file_size_mb: 2\n"
            "  allowed_base_paths: [/srv/repos]\n",
            encoding="utf-8",
        )
        config = VectorizerConfig.from_yaml(str(path))
        assert config.embedding.provider == "fastembed"
        assert config.vector.collection == "docs"
        assert config.repository.max_file_size_mb == 2
        assert config.repository.allowed_base_paths == ["/srv/repos"]

    def test_missing_file_uses_environment(self, clean_env, tmp_path):
        config = VectorizerConfig.from_yaml(str(tmp_path / "missing.yaml"))
        assert config.embedding.model == "nomic-embed-text"

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert VectorizerConfig.from_yaml(str(path)).retrieval.max_limit == 100


class TestSections:
    def test_embedding_defaults(self):
        cfg = EmbeddingConfig()
        assert cfg.ollama_url == "http://localhost:11434"
        assert cfg.timeout_seconds == 30.0

    def test_embedding_rejects_unknown_provider(self):
        with pytest.raises(ValueError):
            EmbeddingConfig(provider="openai")

    def test_retrieval_defaults(self):
        cfg = RetrievalConfig()
        assert cfg.default_limit == 5
        assert cfg.max_limit == 100

    def test_repository_limits_conversion(self):
        limits = RepositoryConfig(
            max_files=10,
            max_file_size_mb=2,
            max_total_size_mb=3,
            max_depth=4,
            allowed_base_paths=["/srv"],
        ).to_limits()
        assert limits.max_files == 10
        assert limits.max_file_size_bytes == 2 * 1024 * 1024
        assert limits.max_total_size_bytes == 3 * 1024 * 1024
        assert limits.max_depth == 4
        assert limits.allowed_base_paths == ("/srv",)

    def test_limits_are_immutable(self):
        limits = RepositoryConfig().to_limits()
        with pytest.raises(ValueError):
            limits.max_files = 1
