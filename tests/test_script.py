"""
Tests for script prompts and structured reply parsing.
"""

import json

from briefly.script import (
    DEFAULT_HEADLINE,
    DEFAULT_SCRIPT,
    FALLBACK_HEADLINE,
    build_script_prompt,
    build_url_prompt,
    combine_sources,
    parse_script_response,
    url_error_source,
    url_summary_source,
)


class TestPrompts:
    """Tests for the prompt builders."""

    def test_url_prompt_names_url(self):
        """Test the URL prompt includes the URL."""
        assert "URL: https://example.com/a" in build_url_prompt("https://example.com/a")

    def test_combine_sources_numbering(self):
        """Test sources are numbered from one in order."""
        combined = combine_sources(["first", "second"])
        assert combined == "--- ARTICLE 1 ---\nfirst\n\n--- ARTICLE 2 ---\nsecond"

    def test_script_prompt_contents(self):
        """Test the script prompt carries persona and all sources."""
        prompt = build_script_prompt(["Alpha text", "Beta text"], "Storyteller")
        assert "news anchor with a Storyteller personality" in prompt
        assert "--- ARTICLE 1 ---\nAlpha text" in prompt
        assert "--- ARTICLE 2 ---\nBeta text" in prompt
        assert "200-300 words" in prompt

    def test_url_source_formats(self):
        """Test URL summaries and failures become labelled sources."""
        assert url_summary_source("u", "text") == "[Source: u]\nSummary: text"
        assert url_summary_source("u", "") == "[Failed to retrieve content for URL: u]"
        assert url_summary_source("u", None) == "[Failed to retrieve content for URL: u]"
        assert url_error_source("u") == "[Error reading URL: u]"


class TestParseScriptResponse:
    """Tests for parse_script_response."""

    def test_valid_json(self):
        """Test a well-formed reply is used as is."""
        result = parse_script_response(json.dumps({"headline": "Big Day", "script": "Hello there."}))
        assert result.headline == "Big Day"
        assert result.script == "Hello there."

    def test_missing_fields_use_defaults(self):
        """Test absent or empty fields fall back to defaults."""
        result = parse_script_response(json.dumps({"headline": ""}))
        assert result.headline == DEFAULT_HEADLINE
        assert result.script == DEFAULT_SCRIPT

    def test_empty_reply(self):
        """Test a missing reply yields both defaults."""
        result = parse_script_response(None)
        assert result.headline == DEFAULT_HEADLINE
        assert result.script == DEFAULT_SCRIPT

    def test_non_json_keeps_raw_text(self):
        """Test plain text is spoken as the script under a fallback headline."""
        result = parse_script_response("Good evening, here is the news.")
        assert result.headline == FALLBACK_HEADLINE
        assert result.script == "Good evening, here is the news."

    def test_non_object_json(self):
        """Test JSON that is not an object is treated like plain text."""
        result = parse_script_response("[1, 2]")
        assert result.headline == FALLBACK_HEADLINE
        assert result.script == "[1, 2]"

    def test_whitespace_reply(self):
        """Test an unparseable blank reply still produces a script."""
        result = parse_script_response("   ")
        assert result.headline == FALLBACK_HEADLINE
        assert result.script == "   "
