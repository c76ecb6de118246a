"""
Secret detection for harvested files.

Two independent checks: a name/extension check that never opens the file,
and a content scan over a fixed regex list. Matches carry a truncated
preview only, so detection results are safe to log.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger("Vectorizer.Sensitive")

PREVIEW_CHARS = 50

SENSITIVE_FILE_EXTENSIONS = frozenset(
    {"pem", "key", "p12", "pfx", "jks", "keystore", "cer", "crt", "der", "csr"}
)

SENSITIVE_FILE_PATTERNS = [
    re.compile(r"(?i)\.(env|secret|credential|password|auth).*$"),
    re.compile(r"(?i)(id_rsa|id_dsa|id_ecdsa|id_ed25519)$"),
    re.compile(r"(?i)^\.?npmrc$"),
    re.compile(r"(?i)^\.?pypirc$"),
    re.compile(r"(?i)credentials\..*$"),
    re.compile(r"(?i)secrets?\..*$"),
]

SENSITIVE_CONTENT_PATTERNS = [
    # API key assignments
    re.compile(r"""(?i)(api[_-]?key|apikey|api[_-]?secret)\s*[:=]\s*['"]?[\w\-]{16,}['"]?"""),
    # Generic secret/password assignments
    re.compile(r"""(?i)(secret|token|password|passwd|pwd)\s*[:=]\s*['"]?[^\s'"]{8,}['"]?"""),
    # AWS
    re.compile(r"AKIA[0-9A-Z]{16}"),
    re.compile(r"""(?i)aws[_-]?secret[_-]?access[_-]?key\s*[:=]\s*['"]?[\w/+]{40}['"]?"""),
    # PEM private keys
    re.compile(r"-----BEGIN (RSA |DSA |EC )?PRIVATE KEY-----"),
    # Connection strings with credentials
    re.compile(r"(?i)jdbc:.*://[^:]+:[^@]+@"),
    re.compile(r"(?i)postgres://[^:]+:[^@]+@"),
    re.compile(r"(?i)mysql://[^:]+:[^@]+@"),
    re.compile(r"(?i)mongodb(\+srv)?://[^:]+:[^@]+@"),
    # GitHub tokens
    re.compile(r"gh[pousr]_[A-Za-z0-9_]{36,}"),
    # Long base64 runs
    re.compile(r"(?<![A-Za-z0-9])[A-Za-z0-9+/]{40,}={0,2}(?![A-Za-z0-9])"),
    # Bearer tokens
    re.compile(r"(?i)bearer\s+[A-Za-z0-9\-._~+/]+=*"),
    # OpenAI-style keys
    re.compile(r"sk-[A-Za-z0-9]{48}"),
    # Slack tokens
    re.compile(r"xox[pboa]-[0-9]{10,13}-[0-9]{10,13}-[A-Za-z0-9]{24,}"),
    # Google API keys
    re.compile(r"AIza[0-9A-Za-z\-_]{35}"),
]

_QUICK_ASSIGNMENT = re.compile(r"(?i)(api[_-]?key|secret|password)\s*[:=]")


@dataclass(frozen=True)
class SensitiveMatch:
    pattern: str
    matched_text: str
    position: int


@dataclass
class DetectionResult:
    detected: bool
    matches: List[SensitiveMatch] = field(default_factory=list)


class SensitiveContentFilter:
    """Flags secret-looking file names and file content."""

    def is_sensitive_file(self, path: Union[str, Path]) -> bool:
        name = Path(path).name
        extension = Path(name).suffix.lower().lstrip(".")
        if extension in SENSITIVE_FILE_EXTENSIONS:
            logger.debug("File marked as sensitive due to extension: %s", name)
            return True
        for pattern in SENSITIVE_FILE_PATTERNS:
            if pattern.search(name):
                logger.debug("File marked as sensitive due to name pattern: %s", name)
                return True
        return False

    def contains_sensitive_data(self, content: str, file_path: Optional[str] = None) -> DetectionResult:
        matches: List[SensitiveMatch] = []
        for index, pattern in enumerate(SENSITIVE_CONTENT_PATTERNS):
            for found in pattern.finditer(content):
                matches.append(
                    SensitiveMatch(
                        pattern=f"PATTERN_{index}",
                        matched_text=found.group(0)[:PREVIEW_CHARS],
                        position=found.start(),
                    )
                )

        if matches:
            logger.warning(
                "Detected %d potential secret(s) in %s: %s",
                len(matches),
                file_path or "content",
                ", ".join(m.pattern for m in matches),
            )
        return DetectionResult(detected=bool(matches), matches=matches)

    def quick_contains_sensitive_data(self, content: str) -> bool:
        """Cheap pre-filter using a few high-signal markers."""
        return (
            "-----begin" in content.lower()
            or "AKIA" in content
            or _QUICK_ASSIGNMENT.search(content) is not None
        )
