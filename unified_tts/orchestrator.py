from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Union

from . import split_text
from .errors import ValidationError
from .limiter import ConcurrencyLimiter, validate_budget
from .merger import concat_fragments

logger = logging.getLogger(__name__)

__all__ = ["LongSpeakConfig", "ChunkResult", "LongSpeakResult", "LongSpeakOrchestrator"]

ChunkSynthesizer = Callable[[str], bytes]


@dataclass
class LongSpeakConfig:
    """
    Configuration describing how long text is split and dispatched.
    """

    max_chunk_size: int
    max_concurrent_requests: Optional[Union[int, float]] = None
    strip_whitespace: bool = True

    def __post_init__(self) -> None:
        if (
            isinstance(self.max_chunk_size, bool)
            or not isinstance(self.max_chunk_size, int)
            or self.max_chunk_size <= 0
        ):
            raise ValidationError(
                f"max_chunk_size must be a positive integer, got {self.max_chunk_size!r}"
            )
        validate_budget(self.max_concurrent_requests)


@dataclass
class ChunkResult:
    index: int
    characters: int
    byte_count: int
    elapsed_ms: int


@dataclass
class LongSpeakResult:
    audio: bytes
    chunks: List[ChunkResult] = field(default_factory=list)
    elapsed_ms: int = 0
    peak_in_flight: int = 0

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)


class LongSpeakOrchestrator:
    """
    Synthesizes text longer than one request allows.

    The text is split into chunks, every chunk is sent to ``synthesize`` on a
    worker pool bounded by the concurrency budget, and the fragments are joined
    in chunk order. Each task writes into its own pre-allocated slot, so the
    order in which calls finish never affects the output.
    """

    def __init__(self, synthesize: ChunkSynthesizer, config: LongSpeakConfig) -> None:
        self.synthesize = synthesize
        self.config = config

    def run(self, text: str) -> LongSpeakResult:
        started = time.monotonic()
        if self.config.strip_whitespace:
            text = split_text.normalize_text(text)
        chunks = split_text.split_long_text(text, self.config.max_chunk_size)
        limiter = ConcurrencyLimiter(self.config.max_concurrent_requests)

        logger.info(
            "Split %d characters into %d chunks (max %d chars, concurrency %s).",
            len(text),
            len(chunks),
            self.config.max_chunk_size,
            "unbounded" if limiter.unbounded else limiter.budget,
        )

        fragments: List[Optional[bytes]] = [None] * len(chunks)
        results: List[Optional[ChunkResult]] = [None] * len(chunks)

        def work(index: int, chunk: str) -> None:
            chunk_started = time.monotonic()
            logger.debug("Synthesizing chunk %d (%d chars).", index, len(chunk))
            fragment = self.synthesize(chunk)
            fragments[index] = fragment
            results[index] = ChunkResult(
                index=index,
                characters=len(chunk),
                byte_count=_byte_count(fragment),
                elapsed_ms=_elapsed_ms(chunk_started),
            )

        with ThreadPoolExecutor(
            max_workers=limiter.max_workers(len(chunks)),
            thread_name_prefix="long-speak",
        ) as pool:
            futures: Dict[Future, int] = {
                pool.submit(limiter.call, work, index, chunk): index
                for index, chunk in enumerate(chunks)
            }
            try:
                for future in as_completed(futures):
                    future.result()
            except Exception:
                logger.error("Chunk %d failed; abandoning long synthesis.", futures[future])
                for pending in futures:
                    pending.cancel()
                raise

        audio = concat_fragments(fragments, len(chunks))
        elapsed = _elapsed_ms(started)
        logger.info("Assembled %d chunks into %d bytes in %d ms.", len(chunks), len(audio), elapsed)
        return LongSpeakResult(
            audio=audio,
            chunks=[result for result in results if result is not None],
            elapsed_ms=elapsed,
            peak_in_flight=limiter.peak_in_flight,
        )


def _byte_count(fragment: object) -> int:
    if isinstance(fragment, (bytes, bytearray, memoryview)):
        return memoryview(fragment).nbytes
    return 0


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
