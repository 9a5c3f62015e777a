"""Briefing generation: sources -> script -> speech -> decoded, timed audio.

Every remote call runs sequentially through the rate-limit aware retry
wrapper. Progress is published as an append-only log of GenerationState
transitions that restarts with each run.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional, Sequence, Tuple

from .client import BriefingClient
from .concatenator import BufferConcatenator
from .config import Config
from .decoder import AudioBuffer, decode_pcm16
from .errors import GenerationCancelled, MissingCredentialError, NoAudioProducedError
from .models import (
    Article,
    ArticleKind,
    BriefingResult,
    GenerationState,
    GenerationStatus,
    ScriptResult,
    ScriptToken,
    SegmentTiming,
    SpeechSegment,
)
from .retry import RetryingCaller, RetryPolicy
from .script import (
    build_script_prompt,
    parse_script_response,
    url_error_source,
    url_summary_source,
)
from .splitter import ScriptSplitter
from .tokenizer import ScriptTokenizer

logger = logging.getLogger(__name__)

StateListener = Callable[[GenerationState], None]

# Errors that must end the run even inside per-source / per-segment recovery
_FATAL = (MissingCredentialError, GenerationCancelled)

STATUS_MESSAGES = {
    GenerationStatus.FETCHING_CONTENT: "Reading sources...",
    GenerationStatus.SUMMARIZING: "Writing script...",
    GenerationStatus.SYNTHESIZING: "Recording audio...",
}


class BriefingOrchestrator:
    def __init__(
        self,
        client: BriefingClient,
        config: Optional[Config] = None,
        retry: Optional[RetryingCaller] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.config = config or Config()
        self._sleep = sleep
        self.retry = retry or RetryingCaller(
            RetryPolicy(self.config.retry_attempts, self.config.retry_base_delay),
            sleep=sleep,
        )
        self.splitter = ScriptSplitter(max_length=self.config.max_segment_chars)
        self.tokenizer = ScriptTokenizer()
        self.concater = BufferConcatenator()

        self._transitions: List[GenerationState] = [GenerationState()]
        self._listeners: List[StateListener] = []
        self._cancel = threading.Event()
        self.headline: Optional[str] = None
        self.tokens: List[ScriptToken] = []
        self.result: Optional[BriefingResult] = None

    # -- state ---------------------------------------------------------

    @property
    def state(self) -> GenerationState:
        return self._transitions[-1]

    @property
    def transitions(self) -> Tuple[GenerationState, ...]:
        return tuple(self._transitions)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _transition(self, status: GenerationStatus, message: Optional[str] = None) -> None:
        state = GenerationState(status, message if message is not None else STATUS_MESSAGES.get(status))
        self._transitions.append(state)
        logger.info("Briefing state -> %s%s", status.value, f" ({state.message})" if state.message else "")
        for listener in list(self._listeners):
            listener(state)

    def cancel(self) -> None:
        """Ask the running generation to stop at its next checkpoint."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def _check_cancelled(self) -> None:
        if self._cancel.is_set():
            raise GenerationCancelled()

    # -- run -----------------------------------------------------------

    def run(
        self,
        articles: Sequence[Article],
        persona: Optional[str] = None,
        voice: Optional[str] = None,
    ) -> Optional[BriefingResult]:
        """Generate one briefing. Returns None on error or when there is nothing to do."""
        valid = [a for a in articles if not a.is_blank]
        if not valid:
            logger.warning("No article content supplied; nothing to generate")
            return None

        persona = persona or self.config.persona
        voice = voice or self.config.voice

        self.headline = None
        self.tokens = []
        self.result = None
        self._cancel.clear()
        self._transitions = []

        try:
            self._transition(GenerationStatus.FETCHING_CONTENT)
            sources = self.fetch_sources(valid)
            self._check_cancelled()

            self._transition(GenerationStatus.SUMMARIZING)
            summary = self.write_script(sources, persona)
            self.headline = summary.headline
            self._check_cancelled()

            self._transition(GenerationStatus.SYNTHESIZING)
            segments = self.synthesize(summary.script, voice)
            if not segments:
                raise NoAudioProducedError()

            result = self.assemble(summary, segments)
        except Exception as exc:
            logger.exception("Briefing generation failed")
            self.headline = None
            self.tokens = []
            self._transition(GenerationStatus.ERROR, str(exc) or "Something went wrong.")
            return None

        self.tokens = result.tokens
        self.result = result
        self._transition(GenerationStatus.READY)
        return result

    def fetch_sources(self, articles: Sequence[Article]) -> List[str]:
        sources: List[str] = []
        url_calls = 0
        for article in articles:
            if article.kind is not ArticleKind.URL:
                sources.append(article.content)
                continue
            self._check_cancelled()
            if url_calls:
                self._sleep(self.config.url_cooldown)
                self._check_cancelled()
            url_calls += 1
            url = article.content.strip()
            article.processing = True
            try:
                summary = self.retry.call(lambda: self.client.summarize_url(url), label=f"URL {url}")
                sources.append(url_summary_source(url, summary))
            except _FATAL:
                raise
            except Exception:
                logger.exception("Error processing URL %s", url)
                sources.append(url_error_source(url))
            finally:
                article.processing = False
        return sources

    def write_script(self, sources: List[str], persona: str) -> ScriptResult:
        prompt = build_script_prompt(sources, persona)
        raw = self.retry.call(lambda: self.client.generate_script(prompt), label="script generation")
        return parse_script_response(raw)

    def synthesize(self, script: str, voice: str) -> List[SpeechSegment]:
        chunks = self.splitter.split(script)
        logger.info("Synthesizing %d segment(s) with voice %s", len(chunks), voice)
        results: List[SpeechSegment] = []
        for i, text in enumerate(chunks):
            self._check_cancelled()
            if i:
                self._sleep(self.config.speech_cooldown)
                self._check_cancelled()
            try:
                audio = self.retry.call(
                    lambda: self.client.synthesize_speech(text, voice),
                    label=f"speech segment {i + 1}/{len(chunks)}",
                )
            except _FATAL:
                raise
            except Exception:
                logger.exception("Error generating speech segment %d; skipping it", i + 1)
                continue
            if not audio:
                logger.error("Speech segment %d returned no audio; skipping it", i + 1)
                continue
            results.append(SpeechSegment(text=text, audio_data=audio))
        return results

    def assemble(self, summary: ScriptResult, segments: Sequence[SpeechSegment]) -> BriefingResult:
        buffers: List[AudioBuffer] = []
        tokens: List[ScriptToken] = []
        timings: List[SegmentTiming] = []
        cumulative = 0.0
        for idx, segment in enumerate(segments):
            buffer = decode_pcm16(segment.audio_data, self.config.sample_rate, self.config.channels)
            buffers.append(buffer)
            # Each segment is timed against its own decoded length
            tokens.extend(self.tokenizer.tokenize(segment.text, buffer.duration_ms, offset_ms=cumulative * 1000.0))
            timings.append(SegmentTiming(idx, segment.text, cumulative, cumulative + buffer.duration))
            cumulative += buffer.duration

        final = self.concater.concatenate(buffers)
        return BriefingResult(
            headline=summary.headline,
            script=summary.script,
            buffer=final,
            tokens=tokens,
            segments=timings,
        )
