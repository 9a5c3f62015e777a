from __future__ import annotations

import logging
from typing import Optional, Protocol, Union

from google import genai
from google.genai import types

from .errors import MissingCredentialError
from .script import SCRIPT_SCHEMA, build_url_prompt

logger = logging.getLogger(__name__)

DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
DEFAULT_SEARCH_MODEL = "gemini-3-flash-preview"
DEFAULT_SPEECH_MODEL = "gemini-2.5-flash-preview-tts"


class BriefingClient(Protocol):
    """The three remote calls a briefing run needs."""

    def summarize_url(self, url: str) -> Optional[str]:
        """Read a URL with search grounding and return a textual summary."""

    def generate_script(self, prompt: str) -> Optional[str]:
        """Return the raw JSON text of a ``{headline, script}`` reply."""

    def synthesize_speech(self, text: str, voice: str) -> Optional[Union[str, bytes]]:
        """Return PCM16 mono audio (base64 text or raw bytes), or None if absent."""


class GeminiClient:
    def __init__(
        self,
        api_key: str = "",
        text_model: str = DEFAULT_TEXT_MODEL,
        search_model: str = DEFAULT_SEARCH_MODEL,
        speech_model: str = DEFAULT_SPEECH_MODEL,
        client: Optional[genai.Client] = None,
    ):
        if client is None:
            if not api_key:
                raise MissingCredentialError()
            client = genai.Client(api_key=api_key)
        self._client = client
        self.text_model = text_model
        self.search_model = search_model
        self.speech_model = speech_model

    @classmethod
    def from_config(cls, config) -> "GeminiClient":
        return cls(
            api_key=config.resolve_api_key(),
            text_model=config.text_model,
            search_model=config.search_model,
            speech_model=config.speech_model,
        )

    def summarize_url(self, url: str) -> Optional[str]:
        logger.debug("Summarizing %s with %s", url, self.search_model)
        response = self._client.models.generate_content(
            model=self.search_model,
            contents=build_url_prompt(url),
            config=types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())],
            ),
        )
        return response.text

    def generate_script(self, prompt: str) -> Optional[str]:
        logger.debug("Requesting script from %s (%d prompt chars)", self.text_model, len(prompt))
        response = self._client.models.generate_content(
            model=self.text_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=SCRIPT_SCHEMA,
            ),
        )
        return response.text

    def synthesize_speech(self, text: str, voice: str) -> Optional[Union[str, bytes]]:
        logger.debug("Synthesizing %d chars with voice %s", len(text), voice)
        response = self._client.models.generate_content(
            model=self.speech_model,
            contents=[types.Content(parts=[types.Part(text=text)])],
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice)
                    )
                ),
            ),
        )
        return _first_inline_audio(response)


def _first_inline_audio(response) -> Optional[Union[str, bytes]]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None
    inline = getattr(parts[0], "inline_data", None)
    return getattr(inline, "data", None) or None
