"""Chunk splitter that recursively breaks text on a ladder of separators."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Sequence

from domain.entities import Chunk, Document
from domain.interfaces import ChunkSplitter

logger = logging.getLogger(__name__)

DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", "。", ". ", " ")


@dataclass(frozen=True, slots=True)
class ChunkConfig:
    """Chunking parameters, sizes in characters."""

    max_chunk_size: int = 500
    overlap_size: int = 50
    separators: tuple[str, ...] = DEFAULT_SEPARATORS


@dataclass(slots=True)
class _Pending:
    """Oversized text still waiting to be split."""

    text: str
    separators: tuple[str, ...]


class RecursiveCharacterSplitter(ChunkSplitter):
    """Split on paragraphs, then sentences, then words, then hard cuts.

    Segments are packed greedily up to ``max_chunk_size``. Once the whole
    document is segmented, every segment after the first is prefixed with
    the last ``overlap_size`` characters of its predecessor.
    """

    def __init__(self, config: ChunkConfig | None = None) -> None:
        cfg = config or ChunkConfig()
        if cfg.max_chunk_size < 1:
            raise ValueError("max_chunk_size must be at least 1")
        if cfg.overlap_size < 0:
            raise ValueError("overlap_size must not be negative")
        self.config = ChunkConfig(
            max_chunk_size=cfg.max_chunk_size,
            overlap_size=cfg.overlap_size,
            separators=tuple(sep for sep in cfg.separators if sep),
        )

    def split(self, document: Document) -> list[Chunk]:
        segments = self.split_text(document.content)
        metadata = {
            "title": document.title,
            "source": document.source,
            "type": document.type,
        }
        chunks = [
            Chunk(
                id=str(uuid.uuid4()),
                document_id=document.id,
                tenant_id=document.tenant_id,
                content=segment,
                chunk_index=index,
                metadata=dict(metadata),
            )
            for index, segment in enumerate(segments)
        ]
        logger.debug("Split document %s into %d chunks", document.id, len(chunks))
        return chunks

    def split_text(self, text: str) -> list[str]:
        """Return the chunk texts for ``text`` with overlap applied."""
        if len(text) <= self.config.max_chunk_size:
            stripped = text.strip()
            return [stripped] if stripped else []
        return self._apply_overlap(self._segment(text))

    def _segment(self, text: str) -> list[str]:
        segments: list[str] = []
        # LIFO worklist; items are pushed in reverse so output keeps text order.
        stack: list[str | _Pending] = [_Pending(text, self.config.separators)]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                segments.append(item)
                continue
            pieces = self._split_once(item)
            stack.extend(reversed(pieces))
        return segments

    def _split_once(self, pending: _Pending) -> list[str | _Pending]:
        max_size = self.config.max_chunk_size
        text = pending.text
        if len(text) <= max_size:
            stripped = text.strip()
            return [stripped] if stripped else []

        for position, separator in enumerate(pending.separators):
            if separator in text:
                remaining = pending.separators[position + 1 :]
                return self._pack(text.split(separator), separator, remaining)
        return list(self._hard_cut(text))

    def _pack(
        self,
        parts: Sequence[str],
        separator: str,
        remaining: tuple[str, ...],
    ) -> list[str | _Pending]:
        max_size = self.config.max_chunk_size
        pieces: list[str | _Pending] = []
        current = ""
        for part in parts:
            candidate = f"{current}{separator}{part}" if current else part
            if len(candidate) <= max_size:
                current = candidate
                continue
            if current.strip():
                pieces.append(current.strip())
            if len(part) > max_size:
                pieces.append(_Pending(part, remaining))
                current = ""
            else:
                current = part
        if current.strip():
            pieces.append(current.strip())
        return pieces

    def _hard_cut(self, text: str) -> list[str]:
        size = self.config.max_chunk_size
        stride = max(1, size - self.config.overlap_size)
        slices: list[str] = []
        for start in range(0, len(text), stride):
            fragment = text[start : start + size].strip()
            if fragment:
                slices.append(fragment)
            if start + size >= len(text):
                break
        return slices

    def _apply_overlap(self, segments: list[str]) -> list[str]:
        overlap = self.config.overlap_size
        if overlap <= 0 or len(segments) <= 1:
            return segments
        result = [segments[0]]
        for previous, segment in zip(segments, segments[1:]):
            result.append(previous[-overlap:] + segment)
        return result


__all__ = ["ChunkConfig", "DEFAULT_SEPARATORS", "RecursiveCharacterSplitter"]
