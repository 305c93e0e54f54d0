from __future__ import annotations

import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, Type, Union
from urllib.parse import urlparse

import requests
from pydub import AudioSegment

from .errors import (
    AudioNotAvailableError,
    TextTooLongError,
    UploadError,
    ValidationError,
)
from .orchestrator import LongSpeakConfig, LongSpeakOrchestrator, LongSpeakResult
from .settings import OpenAiSettings, TtsSettings
from .split_text import normalize_text

logger = logging.getLogger(__name__)

__all__ = [
    "TtsEngine",
    "MockTtsEngine",
]

DEFAULT_UPLOAD_TIMEOUT = 60


class TtsEngine(ABC):
    """
    Common lifecycle shared by every text-to-speech vendor.

    Subclasses only implement :meth:`synthesize` (one bounded request) and the
    listing helpers. ``speak`` and ``long_speak`` store their output in
    :attr:`audio`, which ``save`` and ``upload`` then persist.
    """

    settings_class: ClassVar[Type[TtsSettings]] = TtsSettings
    max_text_length: ClassVar[int] = 4096

    def __init__(self, settings: Optional[TtsSettings] = None, **overrides: Any) -> None:
        if settings is None:
            settings = self.settings_class(**overrides)
        else:
            if not isinstance(settings, self.settings_class):
                raise ValidationError(
                    f"{self.descriptor()} expects {self.settings_class.__name__}, "
                    f"got {type(settings).__name__}"
                )
            for key, value in overrides.items():
                settings.set(key, value)
        self.settings = settings
        self._audio: Optional[bytes] = None
        self.last_run: Optional[LongSpeakResult] = None

    @abstractmethod
    def synthesize(self, text: str) -> bytes:
        """
        Convert at most ``max_text_length`` characters into audio bytes.
        """

    @abstractmethod
    def list_models(self) -> List[Any]:
        """
        Models the vendor offers for speech synthesis.
        """

    @abstractmethod
    def list_voices(self) -> List[Any]:
        """
        Voices the vendor offers.
        """

    def descriptor(self) -> str:
        return self.__class__.__name__

    @property
    def audio(self) -> Optional[bytes]:
        return self._audio

    @audio.setter
    def audio(self, value: Optional[Union[bytes, bytearray, memoryview]]) -> None:
        if value is None:
            self._audio = None
            return
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise ValidationError(f"Audio must be bytes, got {type(value).__name__}")
        self._audio = bytes(value)

    def get_audio(self) -> bytes:
        if self._audio is None:
            raise AudioNotAvailableError(
                "No audio available; call speak or long_speak first."
            )
        return self._audio

    def validate_text(self, text: str) -> None:
        _check_text_type(text)
        if not text.strip():
            raise ValidationError("Text cannot be empty or contain only whitespace")

    def speak(self, text: str) -> bytes:
        """
        Synthesize ``text`` in a single request and keep the result as :attr:`audio`.

        Text over the limit is sent with its whitespace removed when
        ``strip_whitespace`` is on, the same way ``long_speak`` prepares it.
        """
        self.validate_text(text)
        if len(text) > self.max_text_length and self.settings.strip_whitespace:
            text = normalize_text(text)
        if len(text) > self.max_text_length:
            raise TextTooLongError(len(text), self.max_text_length)
        logger.debug("%s speaking %d characters.", self.descriptor(), len(text))
        self.audio = self.synthesize(text)
        return self.get_audio()

    def long_speak(self, text: str) -> bytes:
        """
        Synthesize text longer than one request by splitting it into chunks.

        Replaces :attr:`audio` with the assembled result. If any chunk fails the
        error propagates unchanged and the previously stored audio is kept.
        Text that is too short once normalized, whitespace-only text included,
        raises ``InputTooShortError``.
        """
        _check_text_type(text)
        orchestrator = LongSpeakOrchestrator(self.synthesize, self.long_speak_config())
        result = orchestrator.run(text)
        self.audio = result.audio
        self.last_run = result
        return self.get_audio()

    def long_speak_config(self) -> LongSpeakConfig:
        return LongSpeakConfig(
            max_chunk_size=self.max_text_length,
            max_concurrent_requests=self.settings.max_concurrent_requests,
            strip_whitespace=self.settings.strip_whitespace,
        )

    def save(self, file_path: Optional[Union[str, os.PathLike]] = None) -> Path:
        """
        Write :attr:`audio` to ``file_path``; defaults to ``<audio_dir>/<epoch-ms>.<format>``.
        """
        if file_path is None:
            file_path = Path(self.settings.audio_dir) / (
                f"{int(time.time() * 1000)}.{self.settings.audio_format}"
            )
        if not isinstance(file_path, (str, os.PathLike)):
            raise ValidationError(f"File path must be a string or path, got {type(file_path).__name__}")

        audio = self.get_audio()
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(audio)
        logger.info("Saved %d bytes of audio to %s", len(audio), path)
        return path

    def upload(self) -> Any:
        """
        Hand :attr:`audio` to the configured upload handler or storage API.

        The storage API receives the raw audio as a POST body and answers with
        the URL of the stored file.
        """
        audio = self.get_audio()

        handler = self.settings.upload_handler
        if handler is not None:
            return handler(audio)

        url = self.settings.storage_api_url
        if not url:
            raise ValidationError("Neither upload_handler nor storage_api_url is configured")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(f"storage_api_url is not a valid URL: {url!r}")

        options: Dict[str, Any] = dict(self.settings.request_options)
        headers = {"Content-Type": f"audio/{self.settings.audio_format}"}
        headers.update(options.pop("headers", None) or {})
        timeout = options.pop("timeout", DEFAULT_UPLOAD_TIMEOUT)

        logger.info("Uploading %d bytes of audio to %s", len(audio), url)
        response = requests.post(url, data=audio, headers=headers, timeout=timeout, **options)
        if not response.ok:
            raise UploadError(_upload_error_message(response))
        return response.text.strip()

    def set_voice(self, voice: Any) -> "TtsEngine":
        self.settings.set("voice", voice)
        return self

    def set_model(self, model: str) -> "TtsEngine":
        self.settings.set("model", model)
        return self

    def __repr__(self) -> str:
        return (
            f"{self.descriptor()}(provider='{self.settings.provider.value}', "
            f"model={self.settings.model!r}, voice={self.settings.voice!r})"
        )


class MockTtsEngine(TtsEngine):
    """
    Offline engine for tests. Produces raw PCM silence of predictable length.

    Every synthesized text is recorded in :attr:`calls`.
    """

    settings_class = TtsSettings

    def __init__(
        self,
        settings: Optional[TtsSettings] = None,
        *,
        durations_ms: Optional[Dict[str, int]] = None,
        base_duration_ms: int = 100,
        per_char_ms: int = 10,
        sample_rate: int = 22050,
        max_text_length: Optional[int] = None,
        **overrides: Any,
    ) -> None:
        if settings is None:
            overrides.setdefault("api_key", "mock")
            overrides.setdefault("response_format", "pcm")
            settings = OpenAiSettings(**overrides)
            overrides = {}
        super().__init__(settings, **overrides)
        if max_text_length is not None:
            self.max_text_length = max_text_length
        self._durations_ms = durations_ms or {}
        self._base_duration_ms = base_duration_ms
        self._per_char_ms = per_char_ms
        self.sample_rate = sample_rate
        self.calls: List[str] = []
        self._calls_lock = threading.Lock()

    def synthesize(self, text: str) -> bytes:
        with self._calls_lock:
            self.calls.append(text)
        duration = self._durations_ms.get(
            text, self._base_duration_ms + max(0, len(text)) * self._per_char_ms
        )
        segment = AudioSegment.silent(duration=duration, frame_rate=self.sample_rate)
        return segment.raw_data

    def list_models(self) -> List[str]:
        return ["mock"]

    def list_voices(self) -> List[str]:
        return ["mock"]


def _check_text_type(text: Any) -> None:
    if text is None:
        raise ValidationError("Text cannot be None")
    if not isinstance(text, str):
        raise ValidationError(f"Text must be a string, got {type(text).__name__}")


def _upload_error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    return f"Upload failed with status {response.status_code}"
