from __future__ import annotations

import re
from typing import List

MAX_SEGMENT_CHARS = 4500

# A sentence ends at . ! or ? followed by whitespace, or at a line break.
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+|\s*\n\s*")


class ScriptSplitter:
    """Groups a script into as few speech requests as the length cap allows."""

    def __init__(self, max_length: int = MAX_SEGMENT_CHARS):
        if max_length < 2:
            raise ValueError("max_length must be at least 2")
        self.max_length = max_length

    def split_sentences(self, text: str) -> List[str]:
        if not text:
            return []
        parts = [p.strip() for p in _SENTENCE_BREAK.split(text)]
        sentences = [p for p in parts if p]
        return sentences if sentences else [text.strip()]

    def _split_long(self, sentence: str) -> List[str]:
        # Pieces must stay strictly under the cap so they can stand alone
        limit = self.max_length - 1
        if len(sentence) <= limit:
            return [sentence]
        pieces: List[str] = []
        chunk: List[str] = []
        cur_len = 0
        for w in sentence.split():
            while len(w) > limit:
                if chunk:
                    pieces.append(" ".join(chunk))
                    chunk, cur_len = [], 0
                pieces.append(w[:limit])
                w = w[limit:]
            extra = len(w) + (1 if chunk else 0)
            if cur_len + extra <= limit:
                chunk.append(w)
                cur_len += extra
            else:
                pieces.append(" ".join(chunk))
                chunk = [w]
                cur_len = len(w)
        if chunk:
            pieces.append(" ".join(chunk))
        return [p for p in pieces if p]

    def split(self, script: str) -> List[str]:
        """Merge consecutive sentences while the running length stays under the cap."""
        sentences: List[str] = []
        for s in self.split_sentences(script):
            sentences.extend(self._split_long(s))

        merged: List[str] = []
        current = ""
        for seg in sentences:
            if len(current) + len(seg) < self.max_length:
                current += (" " if current else "") + seg
            else:
                if current:
                    merged.append(current)
                current = seg
        if current:
            merged.append(current)
        return merged
