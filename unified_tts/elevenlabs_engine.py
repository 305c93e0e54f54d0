from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import SynthesisError
from .settings import ElevenLabsSettings
from .tts_engine import TtsEngine

logger = logging.getLogger(__name__)

__all__ = ["ElevenLabsTtsEngine"]

ELEVENLABS_API_URL = "https://api.elevenlabs.io/v1"
ELEVENLABS_MAX_TEXT_LENGTH = 5000
DEFAULT_REQUEST_TIMEOUT = 120


class ElevenLabsTtsEngine(TtsEngine):
    """
    ElevenLabs implementation talking to the REST API directly.

    Error bodies are turned into ``SynthesisError`` messages: 400 responses
    carry ``detail.message``, 422 responses carry a list of field errors.

    Without a ``session`` every call goes through ``requests.request`` and so
    gets its own connection, which keeps concurrent chunk requests apart. A
    session passed in is shared by all worker threads.
    """

    settings_class = ElevenLabsSettings
    max_text_length = ELEVENLABS_MAX_TEXT_LENGTH

    def __init__(
        self,
        settings: Optional[ElevenLabsSettings] = None,
        *,
        session: Optional[requests.Session] = None,
        api_url: str = ELEVENLABS_API_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        **overrides: Any,
    ) -> None:
        super().__init__(settings, **overrides)
        self._session = session
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def synthesize(self, text: str) -> bytes:
        settings = self.settings
        payload = {
            "model_id": settings.model,
            "text": text,
            "voice_settings": settings.voice_settings,
        }
        response = self._call_api("POST", f"/text-to-speech/{settings.voice}", json=payload)
        audio_bytes = response.content
        if not audio_bytes:
            raise SynthesisError("ElevenLabs returned empty audio.")
        return audio_bytes

    def list_models(self) -> List[str]:
        data = self._call_api("GET", "/models").json()
        return [model["model_id"] for model in data]

    def list_voices(self) -> List[Dict[str, Any]]:
        data = self._call_api("GET", "/voices").json()
        return list(data.get("voices", []))

    def _call_api(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        headers = {
            "Content-Type": "application/json",
            "xi-api-key": self.settings.api_key,
        }
        url = f"{self.api_url}{path}"
        logger.debug("ElevenLabs %s %s", method, url)
        request = self._session.request if self._session is not None else requests.request
        response = request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        if not response.ok:
            message = _error_message(response)
            logger.error("ElevenLabs call failed (%s): %s", response.status_code, message)
            raise SynthesisError(message)
        return response


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    detail = payload.get("detail") if isinstance(payload, dict) else None

    if response.status_code == 400 and isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    if response.status_code == 422 and isinstance(detail, list):
        return "\n".join(
            f"{item.get('type')}: {'.'.join(str(part) for part in item.get('loc', []))} {item.get('msg')}"
            for item in detail
        )
    return "Failed ElevenLabs API call"
