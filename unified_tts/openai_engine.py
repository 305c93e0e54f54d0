from __future__ import annotations

import logging
from typing import Any, List, Optional

from .errors import SynthesisError
from .settings import OpenAiSettings
from .tts_engine import TtsEngine

logger = logging.getLogger(__name__)

__all__ = ["OpenAiTtsEngine"]

OPENAI_MAX_TEXT_LENGTH = 4096

# The API has no endpoint that lists only speech models.
OPENAI_TTS_MODELS = ["tts-1", "tts-1-hd", "gpt-4o-mini-tts"]

OPENAI_VOICES = [
    "alloy",
    "ash",
    "coral",
    "echo",
    "fable",
    "onyx",
    "nova",
    "sage",
    "shimmer",
]


class OpenAiTtsEngine(TtsEngine):
    """
    OpenAI speech implementation using the ``openai`` client.
    """

    settings_class = OpenAiSettings
    max_text_length = OPENAI_MAX_TEXT_LENGTH

    def __init__(
        self,
        settings: Optional[OpenAiSettings] = None,
        *,
        client: Optional[object] = None,
        **overrides: Any,
    ) -> None:
        super().__init__(settings, **overrides)
        if client is None:
            try:
                from openai import OpenAI  # type: ignore
            except ImportError as exc:  # pragma: no cover - optional dependency
                raise RuntimeError(
                    "openai is required for OpenAiTtsEngine but is not installed."
                ) from exc
            client = OpenAI(api_key=self.settings.api_key)
        self._client = client

    def synthesize(self, text: str) -> bytes:
        settings = self.settings
        params = {
            "model": settings.model,
            "voice": settings.voice,
            "response_format": settings.response_format,
            "speed": settings.speed,
        }
        logger.debug("OpenAI request params: %s", params)
        response = self._client.audio.speech.create(input=text, **params)  # type: ignore[attr-defined]
        audio_bytes = response.content if hasattr(response, "content") else response.read()
        if not audio_bytes:
            raise SynthesisError("OpenAI returned empty audio.")
        return audio_bytes

    def list_models(self) -> List[str]:
        return list(OPENAI_TTS_MODELS)

    def list_voices(self) -> List[str]:
        return list(OPENAI_VOICES)
