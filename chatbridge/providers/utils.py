"""Helper utilities for provider adapters."""

from __future__ import annotations

from typing import Any

import httpx

_MAX_ERROR_TEXT = 500


def extract_error_body(response: httpx.Response) -> Any:
    """Return structured error details if available, else a trimmed text body."""

    try:
        return response.json()
    except ValueError:
        text = getattr(response, "text", None)
        if text:
            stripped = text.strip()
            if stripped:
                return stripped[:_MAX_ERROR_TEXT]
        return None


def first_text(data: Any, *path: str | int) -> str | None:
    """Walk ``path`` through nested dicts and lists, returning a non-empty string.

    Any missing key, out-of-range index or wrong type yields ``None``.
    """

    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or len(current) <= step:
                return None
        elif not isinstance(current, dict):
            return None
        try:
            current = current[step]
        except (KeyError, IndexError, TypeError):
            return None
    if isinstance(current, str) and current:
        return current
    return None


__all__ = ["extract_error_body", "first_text"]
