from __future__ import annotations


class BrieflyError(Exception):
    """Base class for errors raised by the briefing pipeline."""


class MissingCredentialError(BrieflyError):
    """Remote access is not configured (no API key)."""

    def __init__(self, message: str = "API Key is missing"):
        super().__init__(message)


class RateLimitedError(BrieflyError):
    """The remote model refused the call because of rate limiting or quota."""

    status_code = 429


class DecodeError(BrieflyError):
    """An audio payload could not be decoded as PCM16."""


class NoAudioProducedError(BrieflyError):
    def __init__(self, message: str = "No speech generated"):
        super().__init__(message)


class GenerationCancelled(BrieflyError):
    def __init__(self, message: str = "Generation cancelled"):
        super().__init__(message)
