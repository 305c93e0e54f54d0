from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from .errors import AudioNotAvailableError
from .limiter import validate_budget
from .orchestrator import LongSpeakResult
from .tts_engine import TtsEngine

__all__ = ["MetadataBuilder"]


@dataclass
class MetadataBuilder:
    engine: TtsEngine
    output_path: Path

    def build_metadata(
        self,
        result: Optional[LongSpeakResult] = None,
        *,
        options: Optional[Dict[str, object]] = None,
    ) -> Dict[str, object]:
        result = result or self.engine.last_run
        if result is None:
            raise AudioNotAvailableError("No long_speak run to describe; call long_speak first.")
        settings = self.engine.settings

        metadata = {
            "created_at": datetime.now(timezone.utc).isoformat(),
            "engine": self.engine.descriptor(),
            "provider": settings.provider.value,
            "settings": settings.describe(),
            "max_chunk_size": self.engine.max_text_length,
            "max_concurrent_requests": validate_budget(settings.max_concurrent_requests),
            "peak_in_flight": result.peak_in_flight,
            "chunks": [
                {
                    "index": chunk.index,
                    "characters": chunk.characters,
                    "bytes": chunk.byte_count,
                    "ms": chunk.elapsed_ms,
                }
                for chunk in result.chunks
            ],
            "total_characters": sum(chunk.characters for chunk in result.chunks),
            "total_bytes": len(result.audio),
            "elapsed_ms": result.elapsed_ms,
            "options": dict(options or {}),
        }

        return metadata

    def write_metadata(self, metadata: Dict[str, object]) -> None:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        with self.output_path.open("w", encoding="utf-8") as f:
            json.dump(metadata, f, ensure_ascii=False, indent=2, default=str)
