from __future__ import annotations

import os
from typing import List

import numpy as np
import soundfile as sf
from pydub import AudioSegment

from .decoder import AudioBuffer, SAMPLE_WIDTH, encode_pcm16


class BufferConcatenator:
    def concatenate(self, buffers: List[AudioBuffer]) -> AudioBuffer:
        """Join buffers end to end, in order, per channel.

        An empty list yields a one-frame silent buffer; callers treat a
        near-zero duration as nothing to play.
        """
        if not buffers:
            return AudioBuffer.silent()
        first = buffers[0]
        for b in buffers[1:]:
            if b.sample_rate != first.sample_rate:
                raise ValueError(
                    f"Cannot concatenate buffers with sample rates {first.sample_rate} and {b.sample_rate}"
                )
            if b.channels != first.channels:
                raise ValueError(
                    f"Cannot concatenate buffers with {first.channels} and {b.channels} channels"
                )
        samples = np.concatenate([b.samples for b in buffers], axis=0)
        return AudioBuffer(samples, first.sample_rate)

    def write_audio(self, buffer: AudioBuffer, output_path: str, audio_format: str | None = None) -> str:
        fmt = (audio_format or os.path.splitext(output_path)[1].lstrip(".") or "wav").lower()
        if fmt == "wav":
            sf.write(output_path, buffer.samples, buffer.sample_rate, subtype="PCM_16")
            return output_path
        # Compressed containers go through pydub (needs ffmpeg on PATH)
        segment = AudioSegment(
            data=encode_pcm16(buffer),
            sample_width=SAMPLE_WIDTH,
            frame_rate=buffer.sample_rate,
            channels=buffer.channels,
        )
        segment.export(output_path, format=fmt)
        return output_path
