from __future__ import annotations

import logging
from typing import Any, List, Optional

from .errors import NotSupportedError, SynthesisError
from .settings import GoogleSettings
from .tts_engine import TtsEngine

logger = logging.getLogger(__name__)

__all__ = ["GoogleTtsEngine"]

GOOGLE_MAX_TEXT_LENGTH = 5000


class GoogleTtsEngine(TtsEngine):
    """
    Google Cloud Text-to-Speech implementation using ``google-cloud-texttospeech``.
    """

    settings_class = GoogleSettings
    max_text_length = GOOGLE_MAX_TEXT_LENGTH

    def __init__(
        self,
        settings: Optional[GoogleSettings] = None,
        *,
        client: Optional[object] = None,
        **overrides: Any,
    ) -> None:
        super().__init__(settings, **overrides)
        try:
            from google.cloud import texttospeech  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError(
                "google-cloud-texttospeech is required for GoogleTtsEngine but is not installed."
            ) from exc

        self._types = texttospeech
        self._client = client or texttospeech.TextToSpeechClient.from_service_account_file(
            self.settings.key_file
        )

    def synthesize(self, text: str) -> bytes:
        types = self._types
        response = self._client.synthesize_speech(  # type: ignore[attr-defined]
            input=types.SynthesisInput(text=text),
            voice=self._voice_params(),
            audio_config=types.AudioConfig(
                audio_encoding=types.AudioEncoding[self.settings.audio_encoding]
            ),
        )
        if not response.audio_content:
            raise SynthesisError("No audio content found")
        return bytes(response.audio_content)

    def list_voices(self, language_code: Optional[str] = None) -> List[Any]:
        if language_code:
            response = self._client.list_voices(language_code=language_code)  # type: ignore[attr-defined]
        else:
            response = self._client.list_voices()  # type: ignore[attr-defined]
        return list(response.voices or [])

    def list_models(self) -> List[Any]:
        raise NotSupportedError(
            "Not supported by Google TTS: Google does not support listing models, it has only one model"
        )

    def _voice_params(self) -> Any:
        types = self._types
        voice = dict(self.settings.voice)
        gender = voice.pop("ssml_gender", None)
        if gender:
            voice["ssml_gender"] = types.SsmlVoiceGender[str(gender).upper()]
        logger.debug("Google voice params: %s", voice)
        return types.VoiceSelectionParams(**voice)
