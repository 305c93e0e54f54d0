import pytest

from unified_tts.errors import FragmentMismatchError
from unified_tts.merger import concat_fragments


def test_concat_fragments_keeps_order_and_bytes():
    fragments = [b"ID3\x00\x01", bytearray(b"\xff\xfb"), memoryview(b"tail")]

    merged = concat_fragments(fragments, expected_count=3)

    assert merged == b"ID3\x00\x01\xff\xfbtail"
    assert len(merged) == sum(len(fragment) for fragment in fragments)


def test_concat_fragments_rejects_count_mismatch():
    with pytest.raises(FragmentMismatchError):
        concat_fragments([b"a", b"b"], expected_count=3)


def test_concat_fragments_rejects_missing_slot():
    with pytest.raises(FragmentMismatchError, match="Fragment 1 is missing"):
        concat_fragments([b"a", None, b"c"], expected_count=3)


def test_concat_fragments_rejects_non_bytes():
    with pytest.raises(FragmentMismatchError):
        concat_fragments([b"a", "b"], expected_count=2)
