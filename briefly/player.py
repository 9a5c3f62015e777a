"""Playback of a finished briefing with progress ticks and transcript sync.

Elapsed time is always recomputed as ``clock() - start_time`` rather than
accumulated, so ticks never drift. Only one output stream exists at a time:
seeking or loading stops the previous stream before a new one starts.
Reaching the end of the buffer ends playback as far as callers can see, but
the output keeps running until its last frames have been played.
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, List, Optional, Protocol, Sequence

from .analysis import FrequencyAnalyser
from .decoder import AudioBuffer
from .models import PlaybackState, ScriptToken
from .tokenizer import resolve_active_token

logger = logging.getLogger(__name__)

PlaybackListener = Callable[[PlaybackState], None]


class AudioOutput(Protocol):
    def start(self, buffer: AudioBuffer, offset_frames: int, tap: Optional[FrequencyAnalyser]) -> None:
        """Begin sending ``buffer`` from ``offset_frames``; feed played blocks to ``tap``."""

    def stop(self) -> None:
        """Silence the current stream, if any."""

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the current stream has played its last frame."""


class SoundDeviceOutput:
    """Speaker output through a ``sounddevice`` callback stream."""

    def __init__(self, device=None, blocksize: int = 512):
        self.device = device
        self.blocksize = blocksize
        self._stream = None
        self._finished = threading.Event()
        self._finished.set()

    def start(self, buffer: AudioBuffer, offset_frames: int, tap: Optional[FrequencyAnalyser]) -> None:
        # Imported lazily: PortAudio may be missing on headless machines
        import sounddevice as sd

        self.stop()
        data = buffer.samples
        position = max(0, offset_frames)

        def callback(outdata, frames, time_info, status):
            nonlocal position
            if status:
                logger.debug("Output stream status: %s", status)
            chunk = data[position:position + frames]
            n = len(chunk)
            outdata[:n] = chunk
            position += n
            if tap is not None and n:
                tap.push(chunk[:, 0])
            if n < frames:
                outdata[n:] = 0
                raise sd.CallbackStop

        finished = threading.Event()
        stream = sd.OutputStream(
            samplerate=buffer.sample_rate,
            channels=buffer.channels,
            dtype="float32",
            blocksize=self.blocksize,
            device=self.device,
            callback=callback,
            finished_callback=finished.set,
        )
        self._finished = finished
        stream.start()
        self._stream = stream

    def stop(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            stream.abort()
            stream.close()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._finished.wait(timeout)


class Ticker(Protocol):
    def start(self, callback: Callable[[], None]) -> None:
        ...

    def stop(self) -> None:
        ...


class ThreadTicker:
    """Calls a function repeatedly on a background thread until stopped.

    ``stop`` only signals the thread and never joins it, so both methods are
    safe to call while holding a lock the callback also takes. A thread that
    was signalled finishes at most the callback it is already running.
    """

    def __init__(self, interval: float = 1 / 60):
        self.interval = interval
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._stop_event.set()

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    def start(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if self.running:
                return
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(callback, self._stop_event),
                name="briefly-playback-tick",
                daemon=True,
            )
            self._thread.start()

    def _run(self, callback: Callable[[], None], stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            callback()
            stop_event.wait(self.interval)

    def stop(self) -> None:
        with self._lock:
            self._stop_event.set()


class PlaybackEngine:
    def __init__(
        self,
        output: Optional[AudioOutput] = None,
        clock: Callable[[], float] = time.monotonic,
        ticker: Optional[Ticker] = None,
        tick_rate: float = 60.0,
        end_epsilon: float = 0.1,
        fft_size: int = 256,
    ):
        self.output = output if output is not None else SoundDeviceOutput()
        self._clock = clock
        self._ticker = ticker if ticker is not None else ThreadTicker(1.0 / tick_rate)
        self.end_epsilon = end_epsilon
        self.fft_size = fft_size

        self._lock = threading.RLock()
        self._listeners: List[PlaybackListener] = []
        self._stopped = threading.Event()
        self._stopped.set()

        self._buffer: Optional[AudioBuffer] = None
        self._tokens: List[ScriptToken] = []
        self._analyser: Optional[FrequencyAnalyser] = None
        self._duration = 0.0
        self._offset = 0.0
        self._start_time = 0.0
        self._current_time = 0.0
        self._active_index = -1
        self._is_playing = False
        # The output is still playing out the tail after a reported end
        self._draining = False

    # -- observable state ---------------------------------------------

    @property
    def is_playing(self) -> bool:
        return self._is_playing

    @property
    def current_time(self) -> float:
        return self._current_time

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def active_token_index(self) -> int:
        return self._active_index

    @property
    def tokens(self) -> Sequence[ScriptToken]:
        return tuple(self._tokens)

    @property
    def analyser(self) -> Optional[FrequencyAnalyser]:
        """Analysis tap of the loaded buffer; read-only for visualizers."""
        return self._analyser

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(self._is_playing, self._current_time, self._duration, self._active_index)

    def subscribe(self, listener: PlaybackListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, state: PlaybackState) -> None:
        for listener in list(self._listeners):
            listener(state)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until playback is not running and the output has drained.

        Returns False on timeout.
        """
        if not self._stopped.wait(timeout):
            return False
        if self._draining:
            return self.output.wait(timeout)
        return True

    # -- transport -----------------------------------------------------

    def load(self, buffer: AudioBuffer, tokens: Optional[Sequence[ScriptToken]] = None) -> None:
        with self._lock:
            self._halt()
            self._buffer = buffer
            self._tokens = list(tokens or [])
            self._duration = buffer.duration
            self._offset = 0.0
            self._current_time = 0.0
            self._active_index = -1
            self._analyser = FrequencyAnalyser(self.fft_size)
            state = self.state
        logger.debug("Loaded %.2fs of audio with %d tokens", self._duration, len(self._tokens))
        self._notify(state)

    def play(self) -> None:
        with self._lock:
            if self._buffer is None or self._is_playing:
                return
            self._start_output()
            self._is_playing = True
            self._stopped.clear()
            self._current_time = self._offset
            self._ticker.start(self.tick)
            state = self.state
        self._notify(state)

    def pause(self) -> None:
        with self._lock:
            if not self._is_playing:
                return
            self.output.stop()
            self._offset = min(max(0.0, self._clock() - self._start_time), self._duration)
            self._current_time = self._offset
            self._is_playing = False
            self._stopped.set()
            self._ticker.stop()
            state = self.state
        self._notify(state)

    def stop(self) -> None:
        with self._lock:
            self._halt()
            self._offset = 0.0
            self._current_time = 0.0
            self._active_index = -1
            state = self.state
        self._notify(state)

    def toggle(self) -> None:
        if self._is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, time_seconds: float) -> None:
        with self._lock:
            if self._buffer is None:
                return
            target = min(max(0.0, float(time_seconds)), self._duration)
            self._offset = target
            if self._is_playing:
                self.output.stop()
                self._start_output()
            self._current_time = self._offset
            self._active_index = resolve_active_token(
                self._tokens, self._offset, self._duration, self._active_index
            )
            state = self.state
        self._notify(state)

    def tick(self) -> None:
        """Recompute progress from the clock; reports the end of the buffer."""
        with self._lock:
            if not self._is_playing:
                return
            elapsed = self._clock() - self._start_time
            finished = elapsed >= self._duration - self.end_epsilon
            self._current_time = min(max(0.0, elapsed), self._duration)
            if finished:
                self._current_time = self._duration
            self._active_index = resolve_active_token(
                self._tokens, self._current_time, self._duration, self._active_index
            )
            if finished:
                # The stream ends by itself once its last frames are played
                self._is_playing = False
                self._draining = True
                self._stopped.set()
                self._ticker.stop()
                self._offset = 0.0
                self._current_time = 0.0
                logger.debug("Playback reached the end")
            state = self.state
        self._notify(state)

    # -- internals -----------------------------------------------------

    def _start_output(self) -> None:
        if self._draining:
            self.output.stop()
            self._draining = False
        # Resuming at or past the end restarts from the beginning
        if self._offset >= self._duration:
            self._offset = 0.0
        frames = int(round(self._offset * self._buffer.sample_rate))
        self.output.start(self._buffer, frames, self._analyser)
        # Measured once the stream is open so the clock does not run ahead of the audio
        self._start_time = self._clock() - self._offset

    def _halt(self) -> None:
        if self._is_playing or self._draining:
            self.output.stop()
        self._is_playing = False
        self._draining = False
        self._stopped.set()
        self._ticker.stop()
