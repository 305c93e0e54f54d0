from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from .errors import FragmentMismatchError

logger = logging.getLogger(__name__)

__all__ = ["concat_fragments"]

Fragment = Union[bytes, bytearray, memoryview]


def concat_fragments(fragments: Sequence[Optional[Fragment]], expected_count: int) -> bytes:
    """
    Join audio fragments byte for byte, in the order given.

    ``fragments`` must be in chunk order, not completion order. Nothing is
    inserted between fragments and nothing is re-encoded.
    """
    if len(fragments) != expected_count:
        raise FragmentMismatchError(
            f"Expected {expected_count} fragments, got {len(fragments)}"
        )

    for index, fragment in enumerate(fragments):
        if fragment is None:
            raise FragmentMismatchError(f"Fragment {index} is missing")
        if not isinstance(fragment, (bytes, bytearray, memoryview)):
            raise FragmentMismatchError(
                f"Fragment {index} is {type(fragment).__name__}, expected bytes"
            )

    merged = b"".join(fragments)  # type: ignore[arg-type]
    logger.debug("Merged %d fragments into %d bytes", expected_count, len(merged))
    return merged
