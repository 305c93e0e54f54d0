import array
import random
import threading
import time

import pytest

from unified_tts.errors import InputTooShortError, InvalidConcurrencyBudgetError, ValidationError
from unified_tts.orchestrator import LongSpeakConfig, LongSpeakOrchestrator


class RecordingSynthesizer:
    """
    Returns the chunk text as bytes after ``delay`` seconds and tracks peak concurrency.
    """

    def __init__(self, delay=0.0):
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.peak = 0
        self._lock = threading.Lock()

    def __call__(self, chunk):
        with self._lock:
            self.calls.append(chunk)
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            time.sleep(self.delay)
            return chunk.encode("utf-8")
        finally:
            with self._lock:
                self.in_flight -= 1


def test_fragments_follow_chunk_order_under_random_delays():
    rng = random.Random(1234)
    chunk_count = 12
    text = "".join(f"c{index:02d}" for index in range(chunk_count))
    delays = {f"c{index:02d}": rng.uniform(0, 0.03) for index in range(chunk_count)}

    def synthesize(chunk):
        time.sleep(delays[chunk])
        return str(int(chunk[1:])).encode("ascii")

    orchestrator = LongSpeakOrchestrator(
        synthesize, LongSpeakConfig(max_chunk_size=3, max_concurrent_requests=4)
    )
    result = orchestrator.run(text)

    assert result.audio == "".join(str(index) for index in range(chunk_count)).encode("ascii")
    assert [chunk.index for chunk in result.chunks] == list(range(chunk_count))


def test_peak_concurrency_never_exceeds_budget():
    synthesizer = RecordingSynthesizer(delay=0.02)
    orchestrator = LongSpeakOrchestrator(
        synthesizer, LongSpeakConfig(max_chunk_size=5, max_concurrent_requests=2)
    )

    result = orchestrator.run("x" * 50)

    assert len(synthesizer.calls) == 10
    assert synthesizer.peak <= 2
    assert result.peak_in_flight <= 2


def test_single_slot_budget_starts_chunks_in_order():
    synthesizer = RecordingSynthesizer(delay=0.005)
    orchestrator = LongSpeakOrchestrator(
        synthesizer, LongSpeakConfig(max_chunk_size=2, max_concurrent_requests=1)
    )

    orchestrator.run("aabbccddeeff")

    assert synthesizer.calls == ["aa", "bb", "cc", "dd", "ee", "ff"]
    assert synthesizer.peak == 1


def test_memoryview_fragments_are_counted_in_bytes():
    def synthesize(chunk):
        return memoryview(array.array("H", [ord(char) for char in chunk]))

    orchestrator = LongSpeakOrchestrator(synthesize, LongSpeakConfig(max_chunk_size=2))
    result = orchestrator.run("abcde")

    assert [chunk.byte_count for chunk in result.chunks] == [4, 4, 2]
    assert len(result.audio) == sum(chunk.byte_count for chunk in result.chunks)


def test_unbounded_budget_launches_every_chunk_at_once():
    barrier = threading.Barrier(5, timeout=5)

    def synthesize(chunk):
        barrier.wait()
        return chunk.encode("utf-8")

    orchestrator = LongSpeakOrchestrator(synthesize, LongSpeakConfig(max_chunk_size=2))
    result = orchestrator.run("aabbccddee")

    assert result.audio == b"aabbccddee"
    assert result.peak_in_flight == 5


def test_first_failure_aborts_the_run():
    boom = RuntimeError("vendor exploded on chunk 3")

    def synthesize(chunk):
        if chunk == "33":
            raise boom
        return chunk.encode("utf-8")

    orchestrator = LongSpeakOrchestrator(
        synthesize, LongSpeakConfig(max_chunk_size=2, max_concurrent_requests=2)
    )

    with pytest.raises(RuntimeError) as excinfo:
        orchestrator.run("0011223344")

    assert excinfo.value is boom


def test_forty_five_characters_make_three_chunks():
    synthesizer = RecordingSynthesizer()
    orchestrator = LongSpeakOrchestrator(
        synthesizer, LongSpeakConfig(max_chunk_size=20, max_concurrent_requests=2)
    )
    text = "".join(chr(ord("a") + index % 26) for index in range(45))

    result = orchestrator.run(text)

    assert sorted(len(chunk) for chunk in synthesizer.calls) == [5, 20, 20]
    assert [chunk.characters for chunk in result.chunks] == [20, 20, 5]
    assert len(result.audio) == sum(chunk.byte_count for chunk in result.chunks)
    assert result.audio == text.encode("utf-8")


def test_whitespace_variants_synthesize_identically():
    outputs = []
    for text in ("ab cd", "abcd", "a b c d"):
        synthesizer = RecordingSynthesizer()
        orchestrator = LongSpeakOrchestrator(synthesizer, LongSpeakConfig(max_chunk_size=2))
        outputs.append((orchestrator.run(text).audio, sorted(synthesizer.calls)))

    assert outputs[0] == outputs[1] == outputs[2] == (b"abcd", ["ab", "cd"])


def test_whitespace_can_be_kept():
    synthesizer = RecordingSynthesizer()
    orchestrator = LongSpeakOrchestrator(
        synthesizer, LongSpeakConfig(max_chunk_size=3, strip_whitespace=False)
    )

    assert orchestrator.run("ab cd").audio == b"ab cd"


def test_short_text_fails_before_any_call():
    synthesizer = RecordingSynthesizer()
    orchestrator = LongSpeakOrchestrator(synthesizer, LongSpeakConfig(max_chunk_size=10))

    with pytest.raises(InputTooShortError):
        orchestrator.run("too short")
    assert synthesizer.calls == []


def test_config_validation():
    with pytest.raises(InvalidConcurrencyBudgetError):
        LongSpeakConfig(max_chunk_size=10, max_concurrent_requests=0)
    with pytest.raises(ValidationError):
        LongSpeakConfig(max_chunk_size=0)
