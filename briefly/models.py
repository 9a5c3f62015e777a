from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .decoder import AudioBuffer

PERSONAS = [
    "News Anchor",
    "Tech Vlogger",
    "Storyteller",
    "Aristocrat",
    "Sports Caster",
]

VOICES = ["Puck", "Charon", "Kore", "Fenrir", "Zephyr"]


class ArticleKind(str, Enum):
    TEXT = "text"
    URL = "url"


@dataclass
class Article:
    id: str
    content: str
    kind: ArticleKind = ArticleKind.TEXT
    processing: bool = False

    @property
    def is_blank(self) -> bool:
        return not self.content.strip()


@dataclass(frozen=True)
class ScriptResult:
    headline: str
    script: str


@dataclass(frozen=True)
class SpeechSegment:
    """One synthesized chunk of the script.

    ``audio_data`` is PCM16 mono, either base64 text (wire form) or the raw
    bytes the SDK already decoded.
    """
    text: str
    audio_data: Union[str, bytes]


@dataclass(frozen=True)
class ScriptToken:
    word: str
    start_ms: float
    end_ms: float

    def contains(self, time_ms: float) -> bool:
        return self.start_ms <= time_ms < self.end_ms


class GenerationStatus(str, Enum):
    IDLE = "idle"
    FETCHING_CONTENT = "fetching_content"
    SUMMARIZING = "summarizing"
    SYNTHESIZING = "synthesizing"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class GenerationState:
    status: GenerationStatus = GenerationStatus.IDLE
    message: Optional[str] = None

    @property
    def is_busy(self) -> bool:
        return self.status in (
            GenerationStatus.FETCHING_CONTENT,
            GenerationStatus.SUMMARIZING,
            GenerationStatus.SYNTHESIZING,
        )


@dataclass(frozen=True)
class PlaybackState:
    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    active_token_index: int = -1


@dataclass(frozen=True)
class SegmentTiming:
    index: int
    text: str
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass
class BriefingResult:
    headline: str
    script: str
    buffer: AudioBuffer
    tokens: List[ScriptToken] = field(default_factory=list)
    segments: List[SegmentTiming] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.buffer.duration
