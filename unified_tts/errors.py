from __future__ import annotations

__all__ = [
    "TtsError",
    "ValidationError",
    "InputTooShortError",
    "TextTooLongError",
    "InvalidConcurrencyBudgetError",
    "MissingEnvironmentVariableError",
    "FragmentMismatchError",
    "SynthesisError",
    "AudioNotAvailableError",
    "UploadError",
    "NotSupportedError",
]


class TtsError(Exception):
    """
    Base class for every error raised by this package.
    """


class ValidationError(TtsError, ValueError):
    """
    Raised when settings or call arguments are invalid.
    """


class InputTooShortError(ValidationError):
    """
    Raised when ``long_speak`` receives text shorter than one chunk.
    """

    def __init__(self, length: int, max_chunk_size: int) -> None:
        self.length = length
        self.max_chunk_size = max_chunk_size
        super().__init__(
            f"Text must be at least {max_chunk_size} characters long to use long_speak "
            f"(received {length}). Use speak instead."
        )


class TextTooLongError(ValidationError):
    def __init__(self, length: int, max_length: int) -> None:
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"Text must be at most {max_length} characters, received {length} characters. "
            "Use long_speak instead."
        )


class InvalidConcurrencyBudgetError(ValidationError):
    pass


class MissingEnvironmentVariableError(ValidationError):
    pass


class FragmentMismatchError(TtsError, RuntimeError):
    """
    Internal bookkeeping failure: fragments do not line up with chunks.
    """


class SynthesisError(TtsError, RuntimeError):
    """
    Raised by the vendor adapters when a response carries no usable audio.
    """


class AudioNotAvailableError(TtsError):
    pass


class UploadError(TtsError):
    pass


class NotSupportedError(TtsError):
    pass
