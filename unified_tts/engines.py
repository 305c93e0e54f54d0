from __future__ import annotations

from typing import Any, Dict, Type, Union

from .elevenlabs_engine import ElevenLabsTtsEngine
from .google_engine import GoogleTtsEngine
from .openai_engine import OpenAiTtsEngine
from .providers import TtsProvider, validate_provider
from .tts_engine import TtsEngine

__all__ = ["ENGINES", "create_engine"]

ENGINES: Dict[TtsProvider, Type[TtsEngine]] = {
    TtsProvider.OPENAI: OpenAiTtsEngine,
    TtsProvider.ELEVENLABS: ElevenLabsTtsEngine,
    TtsProvider.GOOGLE: GoogleTtsEngine,
}


def create_engine(provider: Union[str, TtsProvider], **kwargs: Any) -> TtsEngine:
    """
    Instantiate the engine for ``provider``.

    Keyword arguments are passed through: settings overrides (``api_key``,
    ``voice``...) and engine options such as ``client`` or ``session``.
    """
    return ENGINES[validate_provider(provider)](**kwargs)
