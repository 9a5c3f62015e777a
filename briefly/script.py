"""Prompts for the text model and parsing of its structured reply."""
from __future__ import annotations

import json
import logging
from typing import List, Optional

from .models import ScriptResult

logger = logging.getLogger(__name__)

DEFAULT_HEADLINE = "Daily Briefing"
DEFAULT_SCRIPT = "Could not generate script."
FALLBACK_HEADLINE = "Daily Update"
FALLBACK_SCRIPT = "Error generating summary."

SCRIPT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "headline": {"type": "STRING", "description": "A catchy title for this news segment"},
        "script": {"type": "STRING", "description": "The full spoken script for the news anchor"},
    },
    "required": ["headline", "script"],
}


def build_url_prompt(url: str) -> str:
    return (
        "Please read the article at the following URL and provide a comprehensive summary "
        f"of its content, preserving key details, names, and quotes. URL: {url}"
    )


def url_summary_source(url: str, summary: Optional[str]) -> str:
    if not summary:
        return f"[Failed to retrieve content for URL: {url}]"
    return f"[Source: {url}]\nSummary: {summary}"


def url_error_source(url: str) -> str:
    return f"[Error reading URL: {url}]"


def combine_sources(sources: List[str]) -> str:
    return "\n\n".join(f"--- ARTICLE {i + 1} ---\n{s}" for i, s in enumerate(sources))


def build_script_prompt(sources: List[str], persona: str) -> str:
    return f"""You are a professional news anchor with a {persona} personality.

Task:
Read the following provided articles (some might be summaries of URLs) and write a cohesive, engaging radio-style news briefing script.

Requirements:
1. Start with a catchy hook or greeting appropriate for the persona.
2. Seamlessly transition between topics.
3. Keep it concise (approx. 200-300 words).
4. Do not read the articles verbatim; summarize the key points naturally.
5. End with a sign-off.

Input Content:
{combine_sources(sources)}
"""


def parse_script_response(text: Optional[str]) -> ScriptResult:
    """Read ``{headline, script}`` JSON, degrading to the raw text when it is not JSON."""
    try:
        data = json.loads(text or "{}")
    except json.JSONDecodeError as exc:
        logger.error("Structured script response was not valid JSON: %s", exc)
        return ScriptResult(headline=FALLBACK_HEADLINE, script=text or FALLBACK_SCRIPT)
    if not isinstance(data, dict):
        logger.error("Structured script response was %s, expected an object", type(data).__name__)
        return ScriptResult(headline=FALLBACK_HEADLINE, script=text or FALLBACK_SCRIPT)
    headline = data.get("headline")
    script = data.get("script")
    return ScriptResult(
        headline=headline if isinstance(headline, str) and headline else DEFAULT_HEADLINE,
        script=script if isinstance(script, str) and script else DEFAULT_SCRIPT,
    )
