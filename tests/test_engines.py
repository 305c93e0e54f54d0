from unittest.mock import MagicMock

import pytest

from unified_tts.elevenlabs_engine import ElevenLabsTtsEngine
from unified_tts.engines import create_engine
from unified_tts.env import get_env
from unified_tts.errors import MissingEnvironmentVariableError, ValidationError
from unified_tts.openai_engine import OpenAiTtsEngine
from unified_tts.settings import ElevenLabsSettings, OpenAiSettings


def test_create_engine_by_provider_name():
    engine = create_engine("OpenAi", client=MagicMock(), api_key="sk-123", voice="nova")

    assert isinstance(engine, OpenAiTtsEngine)
    assert engine.settings.voice == "nova"


def test_engine_accepts_prebuilt_settings():
    settings = ElevenLabsSettings(api_key="xi-123")

    engine = ElevenLabsTtsEngine(settings, session=MagicMock(), voice="voice2")

    assert engine.settings is settings
    assert settings.voice == "voice2"


def test_engine_rejects_foreign_settings():
    with pytest.raises(ValidationError):
        ElevenLabsTtsEngine(OpenAiSettings(api_key="sk-123"), session=MagicMock())


def test_create_engine_rejects_unknown_provider():
    with pytest.raises(ValidationError):
        create_engine("polly")


def test_get_env(monkeypatch):
    monkeypatch.setenv("MY_VARIABLE", "my value")
    monkeypatch.delenv("NON_EXISTING_VARIABLE", raising=False)

    assert get_env("MY_VARIABLE") == "my value"
    assert get_env("NON_EXISTING_VARIABLE", "default value") == "default value"
    with pytest.raises(MissingEnvironmentVariableError, match="Environment variable NON_EXISTING_VARIABLE not found"):
        get_env("NON_EXISTING_VARIABLE")
    with pytest.raises(MissingEnvironmentVariableError, match="Custom error message"):
        get_env("NON_EXISTING_VARIABLE", error_message="Custom error message")
