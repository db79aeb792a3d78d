"""Sanitizers for raw language-model output."""

from __future__ import annotations

import re

_FENCE_JSON = re.compile(r"```json", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",(\s*[\]}])")

_EMPHASIS = re.compile(r"\*+")
_BRACKETED = re.compile(r"\[.*?\]")
_PARENTHETICAL = re.compile(r"\(.*?\)")
_WHITESPACE = re.compile(r"\s+")


def clean_json(text: str | None) -> str:
    """Reduce model output to something ``json.loads`` can attempt.

    Strips markdown fences, drops conversational filler around the outermost
    array and removes trailing commas before ``]``/``}``. Parsing can still
    fail; callers must handle that.
    """
    if not text:
        return "[]"

    clean = _FENCE_JSON.sub("", text).replace("```", "")

    start = clean.find("[")
    end = clean.rfind("]")
    if start != -1 and end != -1 and end > start:
        clean = clean[start : end + 1]

    clean = _TRAILING_COMMA.sub(r"\1", clean)
    return clean.strip()


def clean_script_for_tts(text: str | None) -> str:
    """Keep only the words meant to be spoken aloud."""
    if not text:
        return ""
    clean = _EMPHASIS.sub("", text)
    clean = _BRACKETED.sub(" ", clean)
    clean = _PARENTHETICAL.sub(" ", clean)
    return _WHITESPACE.sub(" ", clean).strip()
