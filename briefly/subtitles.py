from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence

from .models import ScriptToken

_CUE_END = re.compile(r"[.!?][\"')\]]*$")
_INITIALISM = re.compile(r"^(?:[A-Za-z]\.){2,}$")


def _ends_sentence(word: str) -> bool:
    # "3.5" and "U.S." keep the cue open
    return bool(_CUE_END.search(word)) and not _INITIALISM.match(word)


@dataclass
class SubtitleEntry:
    index: int
    start_time: float
    end_time: float
    text: str


class SubtitleGenerator:
    def __init__(self, max_words: int = 8):
        self.max_words = max_words

    def build_entries(self, tokens: Sequence[ScriptToken]) -> List[SubtitleEntry]:
        """Group word tokens into cues, breaking after a sentence end or ``max_words`` words."""
        entries: List[SubtitleEntry] = []
        group: List[ScriptToken] = []
        for token in tokens:
            group.append(token)
            if len(group) >= self.max_words or _ends_sentence(token.word):
                entries.append(self._entry(len(entries), group))
                group = []
        if group:
            entries.append(self._entry(len(entries), group))
        return entries

    def _entry(self, index: int, group: List[ScriptToken]) -> SubtitleEntry:
        return SubtitleEntry(
            index=index,
            start_time=group[0].start_ms / 1000.0,
            end_time=group[-1].end_ms / 1000.0,
            text=" ".join(t.word for t in group),
        )

    def format_time(self, seconds: float) -> str:
        if seconds < 0:
            seconds = 0
        total_ms = int(round(seconds * 1000))
        hours, rem = divmod(total_ms, 3_600_000)
        minutes, rem = divmod(rem, 60_000)
        secs, millis = divmod(rem, 1000)
        return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"

    def generate_srt(self, entries: List[SubtitleEntry], output_path: str) -> str:
        with open(output_path, "w", encoding="utf-8") as f:
            for idx, e in enumerate(entries, start=1):
                f.write(f"{idx}\n")
                f.write(f"{self.format_time(e.start_time)} --> {self.format_time(e.end_time)}\n")
                f.write(f"{e.text}\n\n")
        return output_path
