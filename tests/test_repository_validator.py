"""Tests for vectorizer.repository.validator: path safety checks."""

from vectorizer.repository.validator import (
    NOT_A_DIRECTORY,
    NOT_A_GIT_REPO,
    PATH_NOT_ALLOWED,
    PATH_NOT_FOUND,
    PATH_TRAVERSAL,
    PathValidator,
    RepositoryLimits,
    ValidationFailure,
    ValidationSuccess,
)


class TestValidateRepository:
    def test_rejects_parent_traversal_before_touching_disk(self):
        result = PathValidator().validate_repository("../../etc/passwd")
        assert isinstance(result, ValidationFailure)
        assert result.code == PATH_TRAVERSAL
        assert "traversal" in result.message.lower()
        assert not result.is_valid

    def test_rejects_embedded_traversal_even_if_it_resolves_inside(self, tmp_path, make_repo):
        repo = make_repo(tmp_path / "repo")
        result = PathValidator().validate_repository(str(repo / "sub" / ".."))
        assert result.code == PATH_TRAVERSAL

    def test_rejects_missing_path(self, tmp_path):
        result = PathValidator().validate_repository(str(tmp_path / "nope"))
        assert result.code == PATH_NOT_FOUND

    def test_rejects_plain_file(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("hi", encoding="utf-8")
        result = PathValidator().validate_repository(str(target))
        assert result.code == NOT_A_DIRECTORY
        assert "not a directory" in result.message

    def test_rejects_directory_without_git_marker(self, tmp_path):
        result = PathValidator().validate_repository(str(tmp_path))
        assert result.code == NOT_A_GIT_REPO
        assert "Git repository" in result.message

    def test_accepts_repository(self, tmp_path, make_repo):
        repo = make_repo(tmp_path / "repo")
        result = PathValidator().validate_repository(str(repo))
        assert isinstance(result, ValidationSuccess)
        assert result.is_valid
        assert result.path == repo.resolve()

    def test_allow_list_rejects_outside_paths(self, tmp_path, make_repo):
        allowed = tmp_path / "allowed"
        allowed.mkdir()
        repo = make_repo(tmp_path / "elsewhere")
        validator = PathValidator(RepositoryLimits(allowed_base_paths=(str(allowed),)))

        result = validator.validate_repository(str(repo))
        assert result.code == PATH_NOT_ALLOWED
        assert "allowed" in result.message

    def test_allow_list_accepts_descendants(self, tmp_path, make_repo):
        allowed = tmp_path / "allowed"
        repo = make_repo(allowed / "team" / "repo")
        validator = PathValidator(RepositoryLimits(allowed_base_paths=(str(allowed),)))

        assert validator.validate_repository(str(repo)).is_valid

    def test_allow_list_does_not_match_on_name_prefix(self, tmp_path, make_repo):
        allowed = tmp_path / "work"
        allowed.mkdir()
        repo = make_repo(tmp_path / "workshop")
        validator = PathValidator(RepositoryLimits(allowed_base_paths=(str(allowed),)))

        assert validator.validate_repository(str(repo)).code == PATH_NOT_ALLOWED


class TestValidateFolder:
    def test_folder_needs_no_git_marker(self, tmp_path):
        assert PathValidator().validate_folder(str(tmp_path)).is_valid

    def test_folder_still_rejects_traversal(self):
        assert PathValidator().validate_folder("docs/../secrets").code == PATH_TRAVERSAL


class TestEstimateSize:
    def test_counts_files_outside_git_dir(self, tmp_path, make_repo):
        repo = make_repo(tmp_path / "repo", files={"a.md": "12345", "src/b.py": "123"})
        (repo / ".git" / "HEAD").write_text("ref: refs/heads/main", encoding="utf-8")

        stats = PathValidator().estimate_size(repo)
        assert stats.file_count == 2
        assert stats.total_size_bytes == 8
        assert stats.max_depth == 1
        assert stats.limit_exceeded == ""

    def test_reports_file_count_limit(self, tmp_path, make_repo):
        repo = make_repo(tmp_path / "repo", files={f"f{i}.txt": "x" for i in range(5)})
        stats = PathValidator(RepositoryLimits(max_files=2)).estimate_size(repo)
        assert stats.limit_exceeded == "File count limit exceeded"

    def test_reports_total_size_limit(self, tmp_path, make_repo):
        repo = make_repo(tmp_path / "repo", files={"big.txt": "x" * 100})
        stats = PathValidator(RepositoryLimits(max_total_size_bytes=10)).estimate_size(repo)
        assert stats.limit_exceeded == "Total size limit exceeded"
