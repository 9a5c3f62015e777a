from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict

from .concatenator import BufferConcatenator
from .config import Config
from .models import BriefingResult
from .subtitles import SubtitleGenerator

logger = logging.getLogger(__name__)


class BriefingExporter:
    """Writes the briefing audio, an SRT transcript and a metadata.json."""

    def __init__(self, config: Config):
        self.config = config
        self.concater = BufferConcatenator()
        self.subtitles = SubtitleGenerator()

    def export(self, result: BriefingResult, persona: str, voice: str) -> Dict[str, str]:
        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        fmt = self.config.audio_format.lower()
        audio_path = output_dir / f"briefing.{fmt}"
        self.concater.write_audio(result.buffer, str(audio_path), fmt)

        srt_path = output_dir / "transcript.srt"
        self.subtitles.generate_srt(self.subtitles.build_entries(result.tokens), str(srt_path))

        metadata = {
            "headline": result.headline,
            "persona": persona,
            "voice": voice,
            "output_audio": audio_path.name,
            "total_duration": round(result.duration, 3),
            "sample_rate": result.buffer.sample_rate,
            "segment_count": len(result.segments),
            "token_count": len(result.tokens),
            "created_at": datetime.now().isoformat(),
            "models": {
                "text": self.config.text_model,
                "search": self.config.search_model,
                "speech": self.config.speech_model,
            },
            "segments": [
                {
                    "index": s.index,
                    "text": s.text,
                    "start_time": round(s.start_time, 3),
                    "end_time": round(s.end_time, 3),
                    "duration": round(s.duration, 3),
                }
                for s in result.segments
            ],
            "script": result.script,
        }
        metadata_path = output_dir / "metadata.json"
        with open(metadata_path, "w", encoding="utf-8") as f:
            json.dump(metadata, f, ensure_ascii=False, indent=2)
        logger.info("Briefing exported to %s", output_dir)

        return {"audio": str(audio_path), "transcript": str(srt_path), "metadata": str(metadata_path)}
