"""
Approximate token counting for chunk sizing decisions.

Counts are used only to size chunks; they carry no semantic meaning. The
cl100k_base vocabulary is the reference. When the encoder cannot be loaded
or fails on an input, the count falls back to ~4 characters per token.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Optional

import tiktoken

logger = logging.getLogger("Vectorizer.Tokenizer")

DEFAULT_ENCODING = "cl100k_base"
CHARS_PER_TOKEN = 4


@functools.lru_cache(maxsize=4)
def _load_encoding(name: str) -> Optional[Any]:
    try:
        return tiktoken.get_encoding(name)
    except Exception as exc:
        logger.warning("Failed to load tiktoken encoding %s (%s); using approximation", name, exc)
        return None


def approximate_token_count(text: str) -> int:
    return max(1, len(text) // CHARS_PER_TOKEN)


class TokenCounter:
    """Counts tokens with a fixed subword vocabulary."""

    def __init__(self, encoding_name: str = DEFAULT_ENCODING):
        self.encoding_name = encoding_name

    @property
    def encoding(self) -> Optional[Any]:
        return _load_encoding(self.encoding_name)

    def count(self, text: str) -> int:
        if not text:
            return 0
        encoding = self.encoding
        if encoding is None:
            return approximate_token_count(text)
        try:
            return len(encoding.encode(text, disallowed_special=()))
        except Exception as exc:
            logger.warning("Failed to count tokens, using approximation: %s", exc)
            return approximate_token_count(text)
