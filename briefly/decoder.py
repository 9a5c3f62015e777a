"""PCM16 decoding into float sample buffers.

The speech model returns raw little-endian signed 16-bit PCM without any
container header, base64-encoded in transit.
"""
from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Union

import numpy as np

from .errors import DecodeError

SAMPLE_RATE = 24000
CHANNELS = 1
SAMPLE_WIDTH = 2
_INT16_SCALE = 32768.0
_ASCII_WHITESPACE = re.compile(r"[ \t\n\r\f\v]+")


@dataclass(frozen=True)
class AudioBuffer:
    """Float32 samples shaped ``(frames, channels)`` in the range [-1.0, 1.0]."""

    samples: np.ndarray
    sample_rate: int = SAMPLE_RATE

    @property
    def channels(self) -> int:
        return int(self.samples.shape[1])

    @property
    def length(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.length / self.sample_rate

    @property
    def duration_ms(self) -> float:
        return self.duration * 1000.0

    def channel_data(self, channel: int) -> np.ndarray:
        return self.samples[:, channel]

    @classmethod
    def silent(cls, frames: int = 1, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> "AudioBuffer":
        return cls(np.zeros((frames, channels), dtype=np.float32), sample_rate)


def _to_bytes(data: Union[str, bytes]) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    try:
        # Wrapped base64 (line breaks every 76 chars) is accepted
        return base64.b64decode(_ASCII_WHITESPACE.sub("", data), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Audio payload is not valid base64: {exc}") from exc


def decode_pcm16(
    data: Union[str, bytes],
    sample_rate: int = SAMPLE_RATE,
    channels: int = CHANNELS,
) -> AudioBuffer:
    """Decode base64 text (or already-decoded bytes) into an AudioBuffer.

    Each sample becomes ``int16 / 32768.0``. A payload whose length is not a
    whole number of frames raises DecodeError instead of being truncated.
    """
    raw = _to_bytes(data)
    frame_bytes = SAMPLE_WIDTH * channels
    if len(raw) % frame_bytes:
        raise DecodeError(
            f"PCM payload of {len(raw)} bytes is not a multiple of {frame_bytes} "
            f"(16-bit, {channels} channel(s))"
        )
    ints = np.frombuffer(raw, dtype="<i2")
    samples = (ints.astype(np.float32) / _INT16_SCALE).reshape(-1, channels)
    return AudioBuffer(samples, sample_rate)


def encode_pcm16(buffer: AudioBuffer) -> bytes:
    """Inverse of decode_pcm16: interleaved little-endian int16 bytes."""
    scaled = np.round(np.clip(buffer.samples, -1.0, 1.0) * _INT16_SCALE)
    return np.clip(scaled, -32768, 32767).astype("<i2").tobytes()
