"""
Tests for configuration loading and validation.
"""

import json

import pytest

from briefly.config import Config, ConfigManager


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults(self):
        """Test the default configuration is valid and matches the pipeline constants."""
        config = ConfigManager.get_default_config()
        assert config.voice == "Fenrir"
        assert config.persona == "News Anchor"
        assert config.max_segment_chars == 4500
        assert config.url_cooldown == 2.0
        assert config.speech_cooldown == 1.0
        assert config.retry_attempts == 5
        assert config.retry_base_delay == 4.0
        assert config.sample_rate == 24000
        assert ConfigManager.validate_config(config) == []

    def test_load_toml(self, tmp_path):
        """Test loading a TOML file."""
        path = tmp_path / "briefly.toml"
        path.write_text(
            'voice = "Kore"\npersona = "Tech Vlogger"\nmax_segment_chars = 1000\nurl_cooldown = 0.5\n',
            encoding="utf-8",
        )
        config = ConfigManager.load_config(str(path))
        assert config.voice == "Kore"
        assert config.persona == "Tech Vlogger"
        assert config.max_segment_chars == 1000
        assert config.url_cooldown == 0.5
        assert config.speech_cooldown == 1.0

    def test_load_json(self, tmp_path):
        """Test loading a JSON file and ignoring unknown keys."""
        path = tmp_path / "briefly.json"
        path.write_text(json.dumps({"audio_format": "mp3", "unknown": 1}), encoding="utf-8")
        config = ConfigManager.load_config(str(path))
        assert config.audio_format == "mp3"
        assert not hasattr(config, "unknown")

    def test_missing_file(self, tmp_path):
        """Test a missing file is reported with its path."""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            ConfigManager.load_config(str(tmp_path / "nope.toml"))

    def test_invalid_syntax(self, tmp_path):
        """Test unparseable content is rejected."""
        path = tmp_path / "bad.toml"
        path.write_text("voice = = 'x'", encoding="utf-8")
        with pytest.raises(ValueError, match="Failed to parse TOML"):
            ConfigManager.load_config(str(path))

    def test_non_table(self, tmp_path):
        """Test a top-level value that is not a table is rejected."""
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError, match="top level"):
            ConfigManager.load_config(str(path))

    def test_validate_reports_each_problem(self):
        """Test every invalid field produces its own message."""
        config = Config(
            voice="Robot",
            persona=" ",
            output_dir="",
            audio_format="aac",
            max_segment_chars=1,
            url_cooldown=-1,
            speech_cooldown=-1,
            retry_attempts=0,
            retry_base_delay=-1,
            sample_rate=0,
            channels=0,
            tick_rate=10,
            end_epsilon=-0.1,
            fft_size=300,
        )
        errors = ConfigManager.validate_config(config)
        assert len(errors) == 14
        assert any("Robot" in e for e in errors)
        assert any("fft_size" in e for e in errors)

    def test_api_key_resolution(self, monkeypatch):
        """Test configured keys win over the environment, which is read in order."""
        monkeypatch.setenv("GEMINI_API_KEY", "gemini")
        monkeypatch.setenv("API_KEY", "generic")
        assert Config(api_key="explicit").resolve_api_key() == "explicit"
        assert Config().resolve_api_key() == "gemini"
        monkeypatch.delenv("GEMINI_API_KEY")
        assert Config().resolve_api_key() == "generic"
        monkeypatch.delenv("API_KEY")
        assert Config().resolve_api_key() == ""
