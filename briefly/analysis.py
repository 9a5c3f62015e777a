"""Frequency analysis of whatever the playback engine is currently outputting.

Mirrors the behaviour of a Web Audio ``AnalyserNode`` so visualizers written
against byte frequency data look the same: Blackman window, magnitude
spectrum smoothed over time, decibels mapped onto 0..255.
"""
from __future__ import annotations

import threading
from typing import List

import numpy as np

MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0
SMOOTHING = 0.8


class FrequencyAnalyser:
    def __init__(self, fft_size: int = 256, smoothing: float = SMOOTHING):
        if fft_size < 32 or fft_size & (fft_size - 1):
            raise ValueError("fft_size must be a power of two >= 32")
        self.fft_size = fft_size
        self.smoothing = smoothing
        self._window = np.blackman(fft_size).astype(np.float32)
        self._lock = threading.Lock()
        self._samples = np.zeros(fft_size, dtype=np.float32)
        self._smoothed = np.zeros(self.frequency_bin_count, dtype=np.float64)

    @property
    def frequency_bin_count(self) -> int:
        return self.fft_size // 2

    def push(self, block: np.ndarray) -> None:
        """Feed mono samples just sent to the output device."""
        block = np.asarray(block, dtype=np.float32).reshape(-1)
        if block.size == 0:
            return
        with self._lock:
            if block.size >= self.fft_size:
                self._samples = block[-self.fft_size:].copy()
            else:
                self._samples = np.concatenate([self._samples[block.size:], block])

    def reset(self) -> None:
        with self._lock:
            self._samples = np.zeros(self.fft_size, dtype=np.float32)
            self._smoothed = np.zeros(self.frequency_bin_count, dtype=np.float64)

    def get_float_frequency_data(self) -> np.ndarray:
        """Smoothed spectrum in decibels, one value per frequency bin."""
        with self._lock:
            spectrum = np.fft.rfft(self._samples * self._window)[: self.frequency_bin_count]
            magnitude = np.abs(spectrum) / self.fft_size
            self._smoothed = self.smoothing * self._smoothed + (1.0 - self.smoothing) * magnitude
            smoothed = self._smoothed.copy()
        with np.errstate(divide="ignore"):
            return 20.0 * np.log10(smoothed)

    def get_byte_frequency_data(self) -> np.ndarray:
        db = self.get_float_frequency_data()
        scaled = 255.0 / (MAX_DECIBELS - MIN_DECIBELS) * (db - MIN_DECIBELS)
        scaled = np.nan_to_num(scaled, nan=0.0, neginf=0.0, posinf=255.0)
        return np.clip(np.floor(scaled), 0, 255).astype(np.uint8)

    def bar_levels(self, count: int = 40) -> List[float]:
        """Visualizer bar heights in 0..0.8, averaged over groups of bins."""
        data = self.get_byte_frequency_data()
        step = max(1, len(data) // count)
        levels: List[float] = []
        for i in range(count):
            group = data[i * step:(i + 1) * step]
            value = float(group.mean()) if group.size else 0.0
            levels.append((value / 255.0) ** 1.5 * 0.8)
        return levels
