from __future__ import annotations

from enum import Enum
from typing import Union

from .errors import ValidationError

__all__ = ["TtsProvider", "validate_provider"]


class TtsProvider(str, Enum):
    GOOGLE = "Google"
    ELEVENLABS = "ElevenLabs"
    OPENAI = "OpenAi"

    @property
    def env_prefix(self) -> str:
        return self.value.upper()


def validate_provider(value: Union[str, TtsProvider, None]) -> TtsProvider:
    """
    Coerce ``value`` to a ``TtsProvider``; names and values are accepted case-insensitively.
    """
    if isinstance(value, TtsProvider):
        return value
    choices = ", ".join(p.value for p in TtsProvider)
    if value is None:
        raise ValidationError(f"TTS provider is required ({choices})")
    if isinstance(value, str):
        lowered = value.lower()
        for provider in TtsProvider:
            if lowered in (provider.value.lower(), provider.name.lower()):
                return provider
    raise ValidationError(f"TTS provider must be one of {choices}, got {value!r}")
