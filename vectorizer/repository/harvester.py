"""
Repository Harvester
--------------------
Produces the admissible file set for one ingestion job.

Traversal is depth-first and top-down: ignored directories and the VCS
metadata directory are pruned before descent. Each remaining file either
becomes a ``HarvestedFile`` or a ``SkippedFile`` with a typed reason.
Exceeding the total size ceiling aborts the whole harvest.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from vectorizer.core.errors import LimitExceededError
from vectorizer.core.types import SkippedFile, SkipReason
from vectorizer.ingestion.models import HarvestedFile
from vectorizer.repository.ignore import VCS_DIR, IgnoreRuleResolver
from vectorizer.repository.sensitive import SensitiveContentFilter
from vectorizer.repository.validator import (
    PathValidator,
    RepositoryLimits,
    ValidationFailure,
)

logger = logging.getLogger("Vectorizer.Harvester")

TEXT_FILE_EXTENSIONS = frozenset(
    {
        "txt", "md", "kt", "java", "scala", "py", "js", "ts", "json", "xml",
        "yaml", "yml", "properties", "conf", "gradle", "kts", "html", "css",
        "sql", "sh", "bat", "c", "cpp", "h", "hpp", "go", "rs", "rb", "php",
        "swift", "m", "mm", "cs", "vb", "r", "jl",
    }
)


class HarvestState(str, Enum):
    PENDING = "pending"
    VALIDATING = "validating"
    WALKING = "walking"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class HarvestResult:
    state: HarvestState = HarvestState.PENDING
    root: Optional[Path] = None
    files: List[HarvestedFile] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)
    total_size: int = 0
    files_scanned: int = 0
    validation_failure: Optional[ValidationFailure] = None
    abort_reason: Optional[str] = None

    @property
    def aborted(self) -> bool:
        return self.state == HarvestState.ABORTED


def is_text_file(path: Path) -> bool:
    return path.suffix.lower().lstrip(".") in TEXT_FILE_EXTENSIONS


def _clamp(requested: Optional[int], ceiling: int) -> int:
    """A per-request limit may only tighten the configured ceiling."""
    return min(requested, ceiling) if requested else ceiling


def _resolves_within(path: Path, root: Path) -> bool:
    try:
        path.resolve(strict=True).relative_to(root)
    except (OSError, RuntimeError, ValueError):
        return False
    return True


class RepositoryHarvester:
    """Walks a validated tree applying ignore rules, name checks and limits."""

    def __init__(
        self,
        limits: Optional[RepositoryLimits] = None,
        *,
        validator: Optional[PathValidator] = None,
        sensitive_filter: Optional[SensitiveContentFilter] = None,
    ):
        self.limits = limits or RepositoryLimits()
        self.validator = validator or PathValidator(self.limits)
        self.sensitive_filter = sensitive_filter or SensitiveContentFilter()

    def harvest(
        self,
        path: str,
        *,
        require_vcs: bool = True,
        respect_ignore_rules: bool = True,
        check_sensitive_names: bool = True,
        max_files: Optional[int] = None,
        max_file_size_bytes: Optional[int] = None,
    ) -> HarvestResult:
        result = HarvestResult()

        result.state = HarvestState.VALIDATING
        if require_vcs:
            validation = self.validator.validate_repository(path)
        else:
            validation = self.validator.validate_folder(path)
        if not validation.is_valid:
            logger.error("Repository validation failed: %s", validation.error)
            result.state = HarvestState.ABORTED
            result.validation_failure = validation
            result.abort_reason = validation.message
            return result

        root = validation.path
        result.root = root
        if respect_ignore_rules:
            ignore = IgnoreRuleResolver.load(root, include_global=require_vcs)
        else:
            ignore = IgnoreRuleResolver.empty(root)

        result.state = HarvestState.WALKING
        try:
            self._walk(
                root,
                ignore,
                result,
                check_sensitive_names=check_sensitive_names,
                max_files=_clamp(max_files, self.limits.max_files),
                max_file_size_bytes=_clamp(max_file_size_bytes, self.limits.max_file_size_bytes),
            )
        except LimitExceededError as exc:
            logger.error("Harvest of %s aborted: %s", root, exc)
            result.state = HarvestState.ABORTED
            result.abort_reason = str(exc)
            return result

        result.state = HarvestState.COMPLETED
        logger.info(
            "Harvested %d file(s) from %s (%d skipped, %d bytes)",
            len(result.files),
            root,
            len(result.skipped),
            result.total_size,
        )
        return result

    def _walk(
        self,
        root: Path,
        ignore: IgnoreRuleResolver,
        result: HarvestResult,
        *,
        check_sensitive_names: bool,
        max_files: int,
        max_file_size_bytes: int,
    ) -> None:
        for current, dirnames, filenames in os.walk(root, onerror=self._on_walk_error):
            current_path = Path(current)
            depth = len(current_path.relative_to(root).parts)

            kept = []
            for name in sorted(dirnames):
                if name == VCS_DIR:
                    continue
                if ignore.is_ignored(current_path / name, is_dir=True):
                    logger.debug("Skipping ignored directory: %s", ignore.relative(current_path / name))
                    continue
                kept.append(name)
            dirnames[:] = kept if depth < self.limits.max_depth else []

            for name in sorted(filenames):
                if len(result.files) >= max_files:
                    logger.warning("Reached max file limit: %d", max_files)
                    return
                self._visit_file(
                    current_path / name,
                    root,
                    ignore,
                    result,
                    check_sensitive_names=check_sensitive_names,
                    max_file_size_bytes=max_file_size_bytes,
                )

    def _visit_file(
        self,
        path: Path,
        root: Path,
        ignore: IgnoreRuleResolver,
        result: HarvestResult,
        *,
        check_sensitive_names: bool,
        max_file_size_bytes: int,
    ) -> None:
        result.files_scanned += 1
        display = str(path)

        if ignore.is_ignored(path, is_dir=False):
            result.skipped.append(
                SkippedFile(path=display, reason=SkipReason.IGNORE_RULE, details="File matches an ignore rule")
            )
            return

        if check_sensitive_names and self.sensitive_filter.is_sensitive_file(path):
            result.skipped.append(
                SkippedFile(
                    path=display,
                    reason=SkipReason.SENSITIVE_FILE,
                    details="File marked as sensitive (extension or name)",
                )
            )
            return

        if not is_text_file(path):
            result.skipped.append(
                SkippedFile(path=display, reason=SkipReason.BINARY, details="Not a recognized text file type")
            )
            return

        if path.is_symlink() and not _resolves_within(path, root):
            result.skipped.append(
                SkippedFile(
                    path=display,
                    reason=SkipReason.READ_ERROR,
                    details="Symbolic link points outside the source root",
                )
            )
            return

        try:
            size = path.stat().st_size
        except OSError as exc:
            result.skipped.append(
                SkippedFile(path=display, reason=SkipReason.READ_ERROR, details=f"Failed to stat file: {exc}")
            )
            return

        if size > max_file_size_bytes:
            result.skipped.append(
                SkippedFile(
                    path=display,
                    reason=SkipReason.TOO_LARGE,
                    details=f"File size {size} exceeds limit of {max_file_size_bytes} bytes",
                )
            )
            return

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read file %s: %s", display, exc)
            result.skipped.append(
                SkippedFile(path=display, reason=SkipReason.READ_ERROR, details=f"Failed to read file: {exc}")
            )
            return

        result.total_size += size
        if result.total_size > self.limits.max_total_size_bytes:
            raise LimitExceededError(
                f"Total size limit exceeded: {result.total_size} > {self.limits.max_total_size_bytes} bytes",
                limit=self.limits.max_total_size_bytes,
                observed=result.total_size,
            )

        result.files.append(
            HarvestedFile(
                path=display,
                name=path.name,
                content=content,
                extension=path.suffix.lower().lstrip("."),
                size_bytes=size,
                relative_path=path.relative_to(root).as_posix(),
            )
        )

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning("Failed to list directory %s: %s", error.filename, error)
