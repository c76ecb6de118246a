"""Source metadata for version-controlled repositories."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from vectorizer.core.types import SourceInfo

logger = logging.getLogger("Vectorizer.GitInfo")

_GIT_TIMEOUT_SECONDS = 5


def _git(repo_root: Path, args: List[str]) -> Optional[str]:
    result = subprocess.run(
        ["git", *args],
        cwd=str(repo_root),
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        text=True,
        timeout=_GIT_TIMEOUT_SECONDS,
    )
    value = result.stdout.strip()
    if result.returncode != 0 or not value:
        return None
    return value


def read_source_info(repo_root: Path) -> Optional[SourceInfo]:
    """Branch, HEAD revision and origin URL; None when git is unavailable."""
    try:
        # symbolic-ref also works for an unborn branch with no commits yet
        branch = _git(repo_root, ["symbolic-ref", "--short", "HEAD"]) or _git(
            repo_root, ["rev-parse", "--abbrev-ref", "HEAD"]
        )
        revision = _git(repo_root, ["rev-parse", "--verify", "--quiet", "HEAD"])
        remote_url = _git(repo_root, ["config", "--get", "remote.origin.url"])
    except (OSError, subprocess.SubprocessError) as exc:
        logger.warning("Failed to get repository info: %s", exc)
        return None
    return SourceInfo(branch=branch, revision_id=revision, remote_url=remote_url)
