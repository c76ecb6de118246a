"""
Repository path validation.

Rejects unsafe or out-of-policy paths before any traversal happens. Every
failure is returned as a ``ValidationFailure`` value carrying a stable code.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger("Vectorizer.Validator")

VCS_MARKER = ".git"

PATH_TRAVERSAL = "PATH_TRAVERSAL"
INVALID_PATH = "INVALID_PATH"
PATH_NOT_FOUND = "PATH_NOT_FOUND"
NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
NOT_A_GIT_REPO = "NOT_A_GIT_REPO"
PATH_NOT_ALLOWED = "PATH_NOT_ALLOWED"


class RepositoryLimits(BaseModel):
    """Resource ceilings and allow-list for one validator/harvester."""

    model_config = ConfigDict(frozen=True)

    max_files: int = 10_000
    max_file_size_bytes: int = 5 * 1024 * 1024
    max_total_size_bytes: int = 500 * 1024 * 1024
    max_depth: int = 50
    allowed_base_paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationSuccess:
    path: Path

    @property
    def is_valid(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None


@dataclass(frozen=True)
class ValidationFailure:
    code: str
    message: str

    @property
    def is_valid(self) -> bool:
        return False

    @property
    def error(self) -> str:
        return self.message


ValidationResult = Union[ValidationSuccess, ValidationFailure]


@dataclass
class RepositoryStats:
    file_count: int
    total_size_bytes: int
    max_depth: int
    limit_exceeded: str = ""


def _is_relative_to(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


class PathValidator:
    """Validates repository and folder paths against security constraints."""

    def __init__(self, limits: RepositoryLimits | None = None):
        self.limits = limits or RepositoryLimits()

    def validate_repository(self, path: str) -> ValidationResult:
        return self._validate(path, require_vcs=True)

    def validate_folder(self, path: str) -> ValidationResult:
        return self._validate(path, require_vcs=False)

    def _validate(self, path: str, *, require_vcs: bool) -> ValidationResult:
        # String-level check happens before canonicalization on purpose.
        if ".." in path:
            logger.warning("Path traversal attempt detected: %s", path)
            return ValidationFailure(PATH_TRAVERSAL, "Path traversal patterns (..) are not allowed")

        try:
            resolved = Path(path).expanduser().resolve()
        except (OSError, RuntimeError, ValueError) as exc:
            logger.warning("Invalid path %s: %s", path, exc)
            return ValidationFailure(INVALID_PATH, f"Invalid file path: {exc}")

        if not resolved.exists():
            return ValidationFailure(PATH_NOT_FOUND, f"Path does not exist: {path}")

        if not resolved.is_dir():
            return ValidationFailure(NOT_A_DIRECTORY, f"Path is not a directory: {path}")

        if require_vcs and not (resolved / VCS_MARKER).is_dir():
            return ValidationFailure(
                NOT_A_GIT_REPO,
                "Path is not a Git repository (no .git directory found)",
            )

        if self.limits.allowed_base_paths:
            allowed = any(
                _is_relative_to(resolved, Path(base).expanduser().resolve())
                for base in self.limits.allowed_base_paths
            )
            if not allowed:
                logger.warning("Access denied to path outside allowed directories: %s", path)
                return ValidationFailure(PATH_NOT_ALLOWED, "Path is outside allowed directories")

        logger.info("Path validated successfully: %s", resolved)
        return ValidationSuccess(resolved)

    def estimate_size(self, root: Path) -> RepositoryStats:
        """Walk ``root`` (skipping .git) and tally files until a limit trips."""
        file_count = 0
        total_size = 0
        deepest = 0
        root = Path(root)

        for current, dirnames, filenames in os.walk(root):
            depth = len(Path(current).relative_to(root).parts)
            deepest = max(deepest, depth)
            dirnames[:] = [d for d in dirnames if d != VCS_MARKER]
            if depth >= self.limits.max_depth:
                dirnames[:] = []
            for name in filenames:
                try:
                    size = (Path(current) / name).stat().st_size
                except OSError:
                    continue
                file_count += 1
                total_size += size
                if file_count > self.limits.max_files:
                    return RepositoryStats(file_count, total_size, deepest, "File count limit exceeded")
                if total_size > self.limits.max_total_size_bytes:
                    return RepositoryStats(file_count, total_size, deepest, "Total size limit exceeded")

        return RepositoryStats(file_count, total_size, deepest)
