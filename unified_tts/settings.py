from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any, Callable, ClassVar, Dict, Optional, Type, Union

from .env import get_env
from .errors import ValidationError
from .limiter import validate_budget
from .providers import TtsProvider, validate_provider

__all__ = [
    "TtsSettings",
    "OpenAiSettings",
    "ElevenLabsSettings",
    "GoogleSettings",
    "SETTINGS_BY_PROVIDER",
    "build_settings",
]

OPENAI_RESPONSE_FORMATS = ("mp3", "opus", "aac", "flac", "wav", "pcm")

GOOGLE_AUDIO_ENCODINGS = {
    "MP3": "mp3",
    "LINEAR16": "wav",
    "OGG_OPUS": "ogg",
    "MULAW": "wav",
    "ALAW": "wav",
}

GOOGLE_KEY_FILE_MESSAGE = (
    "Google TTS requires a key file: the path to the JSON key of a Google Cloud service account"
)


@dataclass
class TtsSettings:
    """
    Settings shared by every provider.

    ``max_concurrent_requests`` bounds how many chunk requests ``long_speak``
    keeps in flight; ``None`` means unbounded.
    """

    requires_api_key: ClassVar[bool] = True

    provider: TtsProvider
    api_key: Optional[str] = None
    voice: Any = None
    model: Optional[str] = None
    audio_dir: str = "audio"
    audio_format: str = "mp3"
    storage_api_url: Optional[str] = None
    request_options: Dict[str, Any] = field(default_factory=dict)
    upload_handler: Optional[Callable[[bytes], Any]] = None
    max_concurrent_requests: Optional[Union[int, float]] = None
    strip_whitespace: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        self.provider = validate_provider(self.provider)

        if self.api_key is not None and not isinstance(self.api_key, str):
            raise ValidationError(f"api_key must be a string, got {type(self.api_key).__name__}")
        if self.requires_api_key and not self.api_key:
            env_key = f"{self.provider.env_prefix}_TTS_API_KEY"
            self.api_key = get_env(
                env_key,
                error_message=f"{self.provider.value} requires an API key (pass api_key or set {env_key})",
            )

        if not isinstance(self.audio_dir, (str, os.PathLike)):
            raise ValidationError(f"audio_dir must be a path, got {type(self.audio_dir).__name__}")
        if not isinstance(self.audio_format, str) or not self.audio_format:
            raise ValidationError("audio_format must be a non-empty string")
        if self.storage_api_url is not None and not isinstance(self.storage_api_url, str):
            raise ValidationError("storage_api_url must be a string")
        if not isinstance(self.request_options, dict):
            raise ValidationError(
                f"request_options must be a mapping, got {type(self.request_options).__name__}"
            )
        if self.upload_handler is not None and not callable(self.upload_handler):
            raise ValidationError("upload_handler must be callable")
        validate_budget(self.max_concurrent_requests)
        if not isinstance(self.strip_whitespace, bool):
            raise ValidationError("strip_whitespace must be a boolean")

    def set(self, key: str, value: Any) -> None:
        """
        Update one setting and re-validate; the old value is restored if validation fails.
        """
        known = {f.name: f for f in fields(self)}
        if key not in known:
            raise ValidationError(
                f"Setting {key} does not exist in the {self.provider.value} settings"
            )
        if not known[key].init:
            raise ValidationError(
                f"Setting {key} is derived in the {self.provider.value} settings and cannot be set"
            )
        previous = getattr(self, key)
        setattr(self, key, value)
        try:
            self.validate()
        except ValidationError:
            setattr(self, key, previous)
            raise

    def describe(self) -> Dict[str, Any]:
        """
        Settings as a plain dict with secrets and callables left out.
        """
        hidden = {"api_key", "upload_handler", "request_options"}
        described: Dict[str, Any] = {}
        for f in fields(self):
            if f.name in hidden:
                continue
            value = getattr(self, f.name)
            described[f.name] = value.value if isinstance(value, TtsProvider) else value
        return described


@dataclass
class OpenAiSettings(TtsSettings):
    """
    ``audio_format`` follows ``response_format`` and cannot be set on its own.
    """

    provider: TtsProvider = TtsProvider.OPENAI
    audio_format: str = field(default="mp3", init=False)
    voice: str = "onyx"
    model: str = "tts-1"
    speed: float = 1.0
    response_format: str = "mp3"

    def validate(self) -> None:
        if self.response_format not in OPENAI_RESPONSE_FORMATS:
            raise ValidationError(
                f"response_format must be one of {', '.join(OPENAI_RESPONSE_FORMATS)}, "
                f"got {self.response_format!r}"
            )
        if isinstance(self.speed, bool) or not isinstance(self.speed, (int, float)):
            raise ValidationError("speed must be a number")
        if not 0.25 <= self.speed <= 4.0:
            raise ValidationError(f"speed must be between 0.25 and 4.0, got {self.speed}")
        self.audio_format = self.response_format
        super().validate()


@dataclass
class ElevenLabsSettings(TtsSettings):
    provider: TtsProvider = TtsProvider.ELEVENLABS
    voice: str = "29vD33N1CtxCmqQRPOHJ"
    model: str = "eleven_multilingual_v1"
    max_concurrent_requests: Optional[Union[int, float]] = 2
    voice_settings: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        if self.voice_settings is not None and not isinstance(self.voice_settings, dict):
            raise ValidationError("voice_settings must be a mapping")
        super().validate()


def _default_google_voice() -> Dict[str, str]:
    return {"language_code": "en-GB", "ssml_gender": "MALE", "name": "en-GB-Neural2-D"}


@dataclass
class GoogleSettings(TtsSettings):
    """
    ``audio_format`` follows ``audio_encoding`` and cannot be set on its own.
    """

    requires_api_key: ClassVar[bool] = False

    provider: TtsProvider = TtsProvider.GOOGLE
    audio_format: str = field(default="mp3", init=False)
    voice: Dict[str, str] = field(default_factory=_default_google_voice)
    key_file: Optional[str] = None
    audio_encoding: str = "MP3"

    def validate(self) -> None:
        if self.key_file is not None and not isinstance(self.key_file, (str, os.PathLike)):
            raise ValidationError("key_file must be a path")
        self.key_file = self.key_file or get_env(
            "GOOGLE_APPLICATION_CREDENTIALS",
            error_message=GOOGLE_KEY_FILE_MESSAGE,
        )
        if not isinstance(self.voice, dict) or not self.voice.get("language_code"):
            raise ValidationError("Google voice must be a mapping with at least a language_code")
        encoding = str(self.audio_encoding or "").upper()
        if encoding not in GOOGLE_AUDIO_ENCODINGS:
            raise ValidationError(
                f"audio_encoding must be one of {', '.join(GOOGLE_AUDIO_ENCODINGS)}, "
                f"got {self.audio_encoding!r}"
            )
        self.audio_encoding = encoding
        self.audio_format = GOOGLE_AUDIO_ENCODINGS[encoding]
        super().validate()


SETTINGS_BY_PROVIDER: Dict[TtsProvider, Type[TtsSettings]] = {
    TtsProvider.OPENAI: OpenAiSettings,
    TtsProvider.ELEVENLABS: ElevenLabsSettings,
    TtsProvider.GOOGLE: GoogleSettings,
}


def build_settings(provider: Union[str, TtsProvider], **overrides: Any) -> TtsSettings:
    """
    Build the settings for ``provider``, applying ``overrides`` on top of its defaults.
    """
    provider = validate_provider(provider)
    overrides.pop("provider", None)
    settings_cls = SETTINGS_BY_PROVIDER[provider]
    known = {f.name for f in fields(settings_cls) if f.init}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValidationError(
            f"Unknown {provider.value} settings: {', '.join(unknown)}"
        )
    return settings_cls(**overrides)
