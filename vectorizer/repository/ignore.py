"""
Ignore-rule resolution for repository harvesting.

Patterns come from three ranked sources: the repository's ``.gitignore``,
``.git/info/exclude`` and the global excludes file named by git's
``core.excludesfile`` setting. Each source keeps its own gitwildmatch pattern set,
so a negation in one source can only re-include paths that source excluded.
A path is excluded when any source excludes it.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import pathspec

from vectorizer.platform import home_dir

logger = logging.getLogger("Vectorizer.Ignore")

VCS_DIR = ".git"
_GIT_TIMEOUT_SECONDS = 5


@dataclass(frozen=True)
class IgnoreSource:
    """One ignore file compiled into an independent pattern set."""

    origin: str
    spec: pathspec.PathSpec

    def excludes(self, relative_path: str) -> bool:
        return self.spec.match_file(relative_path)

    @classmethod
    def from_lines(cls, origin: str, lines: Sequence[str]) -> "IgnoreSource":
        return cls(origin=origin, spec=pathspec.GitIgnoreSpec.from_lines(lines))

    @classmethod
    def from_file(cls, path: Path) -> Optional["IgnoreSource"]:
        if not path.is_file():
            return None
        try:
            lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError as exc:
            logger.warning("Failed to read ignore file %s: %s", path, exc)
            return None
        logger.debug("Loaded %d ignore line(s) from %s", len(lines), path)
        return cls.from_lines(str(path), lines)


def expand_user_path(raw: str) -> Path:
    """Tilde-expand a path taken from git configuration."""
    if raw == "~" or raw.startswith("~/") or raw.startswith("~\\"):
        return home_dir() / raw[2:] if len(raw) > 1 else home_dir()
    return Path(raw).expanduser()


def global_excludes_file(repo_root: Path) -> Optional[Path]:
    """Resolve ``core.excludesfile`` as git sees it from ``repo_root``."""
    try:
        result = subprocess.run(
            ["git", "config", "--get", "core.excludesfile"],
            cwd=str(repo_root),
            capture_output=True,
            text=True,
            timeout=_GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Failed to read global gitignore setting: %s", exc)
        return None
    value = result.stdout.strip() if result.returncode == 0 else ""
    if not value:
        return None
    return expand_user_path(value)


class IgnoreRuleResolver:
    """Decides whether a repository-relative path is excluded."""

    def __init__(self, root: Path, sources: Sequence[IgnoreSource] = ()):
        self.root = Path(root)
        self.sources: List[IgnoreSource] = list(sources)

    @classmethod
    def load(cls, root: Path, *, include_global: bool = True) -> "IgnoreRuleResolver":
        root = Path(root)
        candidates = [root / ".gitignore", root / VCS_DIR / "info" / "exclude"]
        if include_global:
            global_file = global_excludes_file(root)
            if global_file is not None:
                candidates.append(global_file)

        sources = []
        for candidate in candidates:
            source = IgnoreSource.from_file(candidate)
            if source is not None:
                sources.append(source)
        logger.info("Loaded %d ignore source(s) for %s", len(sources), root)
        return cls(root, sources)

    @classmethod
    def empty(cls, root: Path) -> "IgnoreRuleResolver":
        """Resolver that only excludes the VCS metadata directory."""
        return cls(root, ())

    def relative(self, path: Path) -> str:
        path = Path(path)
        if path.is_absolute():
            path = path.relative_to(self.root)
        return path.as_posix()

    def is_ignored(self, path: Path, is_dir: Optional[bool] = None) -> bool:
        relative = self.relative(path)
        if relative in ("", "."):
            return False
        if relative == VCS_DIR or relative.startswith(VCS_DIR + "/"):
            return True

        if is_dir is None:
            is_dir = (self.root / relative).is_dir()
        candidate = relative + "/" if is_dir else relative

        for source in self.sources:
            if source.excludes(candidate):
                logger.debug("%s excluded by %s", relative, source.origin)
                return True
        return False
