"""Synthetic word timing for karaoke-style transcripts.

The speech model returns no word-level timestamps, so each word gets a share
of the known spoken duration proportional to a heuristic speaking weight.
The constants below are a fixed policy, not a phonetic model.
"""
from __future__ import annotations

import logging
import re
from typing import List, Sequence

from .models import ScriptToken

logger = logging.getLogger(__name__)

BASE_WEIGHT = 1.0
SHORT_WORD_WEIGHT = 0.6
SHORT_WORD_LENGTH = 4
CLAUSE_BREAK_BONUS = 0.5
SENTENCE_END_BONUS = 1.5

CLAUSE_BREAK = re.compile(r"[,;:\-]")
SENTENCE_END = re.compile(r"[.!?]")


def word_weight(word: str) -> float:
    weight = SHORT_WORD_WEIGHT if len(word) < SHORT_WORD_LENGTH else BASE_WEIGHT
    if CLAUSE_BREAK.search(word):
        weight += CLAUSE_BREAK_BONUS
    if SENTENCE_END.search(word):
        weight += SENTENCE_END_BONUS
    return weight


class ScriptTokenizer:
    def tokenize(self, text: str, total_duration_ms: float, offset_ms: float = 0.0) -> List[ScriptToken]:
        """Split ``text`` on whitespace and spread ``total_duration_ms`` over the words.

        Tokens are contiguous: each one starts where the previous ended, and
        all of them are shifted by ``offset_ms`` (the duration of the
        segments that precede this one).
        """
        words = text.split()
        weights = [word_weight(w) for w in words]
        total_weight = sum(weights)
        unit_time = total_duration_ms / total_weight if total_weight > 0 else 0.0

        tokens: List[ScriptToken] = []
        accumulator = 0.0
        for word, weight in zip(words, weights):
            duration = weight * unit_time
            tokens.append(ScriptToken(word, offset_ms + accumulator, offset_ms + accumulator + duration))
            accumulator += duration
        logger.debug("Tokenized %d words over %.1f ms (offset %.1f ms)", len(tokens), total_duration_ms, offset_ms)
        return tokens


def resolve_active_token(
    tokens: Sequence[ScriptToken],
    elapsed: float,
    duration: float,
    previous: int = -1,
) -> int:
    """Index of the token being spoken at ``elapsed`` seconds.

    Falls back to the last token once playback reached the end, and otherwise
    keeps ``previous`` so the highlight never flickers off between tokens.
    """
    if not tokens:
        return -1
    elapsed_ms = elapsed * 1000.0
    for i, token in enumerate(tokens):
        if token.contains(elapsed_ms):
            return i
    if duration > 0 and elapsed >= duration:
        return len(tokens) - 1
    return previous
