"""
Unified text-to-speech client.

This package exposes one lifecycle (configure, synthesize, save or upload) over
several vendors:

- Text normalisation and fixed-size splitting (`split_text`).
- Concurrency gate for chunk requests (`limiter`).
- Ordered fragment concatenation (`merger`).
- Long text fan-out/fan-in (`orchestrator`).
- Engine abstraction and vendor implementations (`tts_engine`, `openai_engine`,
  `elevenlabs_engine`, `google_engine`, `engines`).
- Per-vendor settings (`settings`, `providers`).
- Run metadata (`metadata`).
"""

from .errors import (
    AudioNotAvailableError,
    FragmentMismatchError,
    InputTooShortError,
    InvalidConcurrencyBudgetError,
    MissingEnvironmentVariableError,
    NotSupportedError,
    SynthesisError,
    TextTooLongError,
    TtsError,
    UploadError,
    ValidationError,
)
from .providers import TtsProvider, validate_provider
from .settings import (
    ElevenLabsSettings,
    GoogleSettings,
    OpenAiSettings,
    TtsSettings,
    build_settings,
)
from .split_text import normalize_text, split_long_text
from .limiter import ConcurrencyLimiter
from .merger import concat_fragments
from .orchestrator import (
    ChunkResult,
    LongSpeakConfig,
    LongSpeakOrchestrator,
    LongSpeakResult,
)
from .tts_engine import MockTtsEngine, TtsEngine
from .openai_engine import OpenAiTtsEngine
from .elevenlabs_engine import ElevenLabsTtsEngine
from .google_engine import GoogleTtsEngine
from .engines import create_engine
from .metadata import MetadataBuilder

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
    "TtsProvider",
    "validate_provider",
    "TtsSettings",
    "OpenAiSettings",
    "ElevenLabsSettings",
    "GoogleSettings",
    "build_settings",
    "normalize_text",
    "split_long_text",
    "ConcurrencyLimiter",
    "concat_fragments",
    "LongSpeakConfig",
    "LongSpeakOrchestrator",
    "LongSpeakResult",
    "ChunkResult",
    "TtsEngine",
    "MockTtsEngine",
    "OpenAiTtsEngine",
    "ElevenLabsTtsEngine",
    "GoogleTtsEngine",
    "create_engine",
    "MetadataBuilder",
]
