from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, fields

from .client import DEFAULT_SEARCH_MODEL, DEFAULT_SPEECH_MODEL, DEFAULT_TEXT_MODEL
from .models import PERSONAS, VOICES

AUDIO_FORMATS = ("wav", "mp3", "ogg", "flac")
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


@dataclass
class Config:
    api_key: str = ""
    text_model: str = DEFAULT_TEXT_MODEL
    search_model: str = DEFAULT_SEARCH_MODEL
    speech_model: str = DEFAULT_SPEECH_MODEL
    persona: str = PERSONAS[0]
    voice: str = "Fenrir"
    output_dir: str = "output"
    audio_format: str = "wav"
    max_segment_chars: int = 4500
    url_cooldown: float = 2.0
    speech_cooldown: float = 1.0
    retry_attempts: int = 5
    retry_base_delay: float = 4.0
    sample_rate: int = 24000
    channels: int = 1
    tick_rate: float = 60.0
    end_epsilon: float = 0.1
    fft_size: int = 256

    def resolve_api_key(self) -> str:
        if self.api_key:
            return self.api_key
        for name in API_KEY_ENV_VARS:
            value = os.environ.get(name, "").strip()
            if value:
                return value
        return ""


class ConfigManager:
    @staticmethod
    def load_config(config_path: str) -> Config:
        # Load file contents; provide a clearer error if missing
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            try:
                data = tomllib.loads(content)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Failed to parse TOML file: {e}")
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a table/object at the top level")

        known = {f.name for f in fields(Config)}
        values = {k: v for k, v in data.items() if k in known}
        return Config(**values)

    @staticmethod
    def get_default_config() -> Config:
        return Config()

    @staticmethod
    def validate_config(config: Config) -> list[str]:
        errors: list[str] = []
        if config.voice not in VOICES:
            errors.append(f"Unknown voice '{config.voice}' (expected one of {', '.join(VOICES)})")
        if not config.persona.strip():
            errors.append("persona cannot be empty")
        if not config.output_dir:
            errors.append("output_dir path is empty")
        if config.audio_format.lower() not in AUDIO_FORMATS:
            errors.append(f"Unsupported audio_format '{config.audio_format}'")

        # numeric validations
        if config.max_segment_chars < 2:
            errors.append("max_segment_chars must be at least 2")
        if config.url_cooldown < 0:
            errors.append("url_cooldown must be non-negative")
        if config.speech_cooldown < 0:
            errors.append("speech_cooldown must be non-negative")
        if config.retry_attempts <= 0:
            errors.append("retry_attempts must be positive")
        if config.retry_base_delay < 0:
            errors.append("retry_base_delay must be non-negative")
        if config.sample_rate <= 0:
            errors.append("sample_rate must be positive")
        if config.channels <= 0:
            errors.append("channels must be positive")
        if config.tick_rate < 30:
            errors.append("tick_rate must be at least 30 updates per second")
        if config.end_epsilon < 0:
            errors.append("end_epsilon must be non-negative")
        n = config.fft_size
        if n < 32 or n > 32768 or n & (n - 1):
            errors.append("fft_size must be a power of two between 32 and 32768")
        return errors
