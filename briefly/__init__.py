"""
Briefly

Turns a handful of article texts or URLs into a spoken news briefing: the
sources are summarized into an anchor script with Gemini, the script is read
aloud by Gemini TTS, and the result can be played back with a synchronized
word-by-word transcript and a frequency visualizer.

Features:
- URL resolution through search-grounded summaries
- Persona-conditioned script writing with structured headline/script output
- Chunked speech synthesis with rate-limit aware retries
- PCM16 decoding and seamless stitching of audio segments
- Synthetic per-word timing for karaoke-style transcripts
- Playback engine with seek, progress ticks and an analysis tap
"""

__version__ = "0.1.0"
__author__ = "Briefly Team"

# Package metadata
__all__ = [
    "__version__",
    "__author__",
]
