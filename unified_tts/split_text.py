from __future__ import annotations

import logging
import re
from typing import List

from .errors import InputTooShortError, ValidationError

logger = logging.getLogger(__name__)

__all__ = ["normalize_text", "split_long_text"]

WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """
    Remove every whitespace run from ``text``.

    This is lossy: spacing and line breaks are not preserved across chunks.
    """
    if not isinstance(text, str):
        raise ValidationError(f"Text must be a string, got {type(text).__name__}")
    return WHITESPACE_PATTERN.sub("", text)


def split_long_text(text: str, max_chunk_size: int) -> List[str]:
    """
    Cut ``text`` into consecutive windows of ``max_chunk_size`` characters.

    The cut is purely positional (it may fall mid-word) and only the last chunk
    can be shorter. Joining the chunks gives back ``text`` exactly. Text shorter
    than one chunk belongs on the single-request path and raises
    ``InputTooShortError``.
    """
    if not isinstance(text, str):
        raise ValidationError(f"Text must be a string, got {type(text).__name__}")
    if isinstance(max_chunk_size, bool) or not isinstance(max_chunk_size, int) or max_chunk_size <= 0:
        raise ValidationError(f"max_chunk_size must be a positive integer, got {max_chunk_size!r}")
    if len(text) < max_chunk_size:
        raise InputTooShortError(len(text), max_chunk_size)

    chunks = [text[start : start + max_chunk_size] for start in range(0, len(text), max_chunk_size)]
    logger.debug("Split %d characters into %d chunks of up to %d.", len(text), len(chunks), max_chunk_size)
    return chunks
