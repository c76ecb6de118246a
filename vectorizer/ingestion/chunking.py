"""
Token-aware chunking of document text.

Paragraphs (blank-line separated) are accumulated into chunks near TARGET
tokens and never above MAX. Each closed chunk seeds the next with roughly
OVERLAP tokens of trailing words. Oversized paragraphs fall back to sentence
splitting, and oversized sentences to character windows sized from token
counts (an approximation: windows are not cut on exact token boundaries).

Every input word lands in some chunk; ``TextChunk.new_text`` gives the part
of a chunk not repeated from its predecessor.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from vectorizer.ingestion.models import ChunkMetadata, TextChunk
from vectorizer.ingestion.tokenizer import TokenCounter

logger = logging.getLogger("Vectorizer.Chunking")

TARGET_CHUNK_TOKENS = 500
MAX_CHUNK_TOKENS = 700
MIN_CHUNK_TOKENS = 200
OVERLAP_TOKENS = 75

PARAGRAPH_SEPARATOR = "\n\n"
SENTENCE_SEPARATOR = " "

_PARAGRAPH_SPLIT = re.compile(r"\n[ \t\r\f\v]*\n\s*")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE = re.compile(r"\s+")


@dataclass
class _Draft:
    text: str
    overlap_chars: int = 0


class _Accumulator:
    """Running buffer for one level of splitting (paragraphs or sentences)."""

    def __init__(self, engine: "ChunkingEngine", separator: str, drafts: List[_Draft]):
        self._engine = engine
        self._separator = separator
        self._drafts = drafts
        self._text = ""
        self._seed_chars = 0
        self._has_content = False

    def add(self, unit: str) -> None:
        engine = self._engine
        if self._text:
            if engine.count(self._text + self._separator + unit) > engine.max_tokens:
                if self._has_content:
                    self._close()
                if self._text and engine.count(self._text + self._separator + unit) > engine.max_tokens:
                    self._text = ""
                    self._seed_chars = 0

        self._text = self._text + self._separator + unit if self._text else unit
        self._has_content = True

        if engine.count(self._text) >= engine.target_tokens:
            self._close()

    def flush(self) -> None:
        """Emit pending content without seeding an overlap."""
        if self._has_content:
            self._drafts.append(_Draft(self._text, self._seed_chars))
        self._text = ""
        self._seed_chars = 0
        self._has_content = False

    def _close(self) -> None:
        self._drafts.append(_Draft(self._text, self._seed_chars))
        seed = self._engine.overlap_text(self._text)
        self._text = seed
        self._seed_chars = len(seed)
        self._has_content = False


class ChunkingEngine:
    """Splits one document into overlapping, token-bounded chunks."""

    def __init__(
        self,
        *,
        target_tokens: int = TARGET_CHUNK_TOKENS,
        max_tokens: int = MAX_CHUNK_TOKENS,
        min_tokens: int = MIN_CHUNK_TOKENS,
        overlap_tokens: int = OVERLAP_TOKENS,
        counter: Optional[TokenCounter] = None,
    ):
        if not 0 < min_tokens <= target_tokens <= max_tokens:
            raise ValueError("chunk sizes must satisfy 0 < min <= target <= max")
        if not 0 <= overlap_tokens < target_tokens:
            raise ValueError("overlap_tokens must be smaller than target_tokens")
        self.target_tokens = target_tokens
        self.max_tokens = max_tokens
        self.min_tokens = min_tokens
        self.overlap_tokens = overlap_tokens
        self.counter = counter or TokenCounter()

    def count(self, text: str) -> int:
        return self.counter.count(text)

    def chunk(self, text: str, source_path: str) -> List[TextChunk]:
        if not text or not text.strip():
            return []

        drafts: List[_Draft] = []
        paragraphs = _Accumulator(self, PARAGRAPH_SEPARATOR, drafts)

        for paragraph in _PARAGRAPH_SPLIT.split(text):
            if not paragraph.strip():
                continue
            if self.count(paragraph) > self.max_tokens:
                paragraphs.flush()
                self._split_sentences(paragraph, drafts)
                continue
            paragraphs.add(paragraph)

        paragraphs.flush()
        self._merge_small_tail(drafts)
        chunks = self._finalize(drafts, source_path)
        logger.debug("Chunked %s into %d chunk(s)", source_path, len(chunks))
        return chunks

    def overlap_text(self, text: str) -> str:
        """Trailing words of ``text`` worth roughly ``overlap_tokens`` tokens."""
        if self.overlap_tokens == 0:
            return ""
        token_count = self.count(text)
        if token_count <= self.overlap_tokens:
            return text
        words = _WHITESPACE.split(text.strip())
        words_per_token = len(words) / token_count
        overlap_words = max(1, int(self.overlap_tokens * words_per_token))
        return " ".join(words[-overlap_words:])

    def _split_sentences(self, paragraph: str, drafts: List[_Draft]) -> None:
        sentences = _Accumulator(self, SENTENCE_SEPARATOR, drafts)
        for sentence in _SENTENCE_SPLIT.split(paragraph):
            if not sentence.strip():
                continue
            if self.count(sentence) > self.max_tokens:
                sentences.flush()
                drafts.extend(self._split_windows(sentence))
                continue
            sentences.add(sentence)
        sentences.flush()

    def _split_windows(self, sentence: str) -> List[_Draft]:
        # Positions are scaled from token offsets to character offsets rather
        # than re-encoding, so window edges only approximate token boundaries.
        total_tokens = self.count(sentence)
        length = len(sentence)
        step = self.target_tokens - self.overlap_tokens
        windows: List[_Draft] = []
        previous_end = 0
        start_token = 0
        while start_token < total_tokens:
            end_token = min(start_token + self.target_tokens, total_tokens)
            start_pos = (start_token * length) // total_tokens
            end_pos = length if end_token >= total_tokens else (end_token * length) // total_tokens
            windows.append(
                _Draft(sentence[start_pos:end_pos], max(0, previous_end - start_pos))
            )
            previous_end = end_pos
            if end_token >= total_tokens:
                break
            start_token += step
        return windows

    def _merge_small_tail(self, drafts: List[_Draft]) -> None:
        if len(drafts) < 2:
            return
        tail = drafts[-1]
        if self.count(tail.text) >= self.min_tokens:
            return
        previous = drafts[-2]
        if tail.overlap_chars:
            merged = previous.text + tail.text[tail.overlap_chars:]
        else:
            merged = previous.text + PARAGRAPH_SEPARATOR + tail.text
        if self.count(merged) <= self.max_tokens:
            drafts[-2:] = [_Draft(merged, previous.overlap_chars)]

    def _finalize(self, drafts: List[_Draft], source_path: str) -> List[TextChunk]:
        chunks: List[TextChunk] = []
        offset = 0
        for index, draft in enumerate(drafts):
            overlap_tokens = self.count(draft.text[:draft.overlap_chars])
            new_tokens = self.count(draft.text[draft.overlap_chars:])
            chunks.append(
                TextChunk(
                    text=draft.text,
                    chunk_index=index,
                    token_count=self.count(draft.text),
                    metadata=ChunkMetadata(
                        source_path=source_path,
                        start_token=max(0, offset - overlap_tokens),
                        end_token=offset + new_tokens,
                        overlap_chars=draft.overlap_chars,
                    ),
                )
            )
            offset += new_tokens
        return chunks
