"""Locate the candidate JSON object inside a chatty model response."""

from __future__ import annotations

from typing import Optional


def extract_outer_span(text: str) -> str:
    """
    Return ``text`` from the first ``{`` to the last ``}`` inclusive.

    The input is returned unchanged when either brace is missing. This is an
    outer-brace span, not bracket matching: an unrelated ``{...}`` before or
    after the payload widens the span and the parse will fail downstream.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return text
    return text[start : end + 1]


def _balanced_end(text: str, start: int) -> Optional[int]:
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return None


def extract_balanced_object(text: str) -> str:
    """
    Return the first balanced top-level ``{...}`` object in ``text``.

    Braces inside string literals are skipped. When no object closes (a
    truncated response) the outer span is returned instead.
    """
    start = text.find("{")
    if start == -1:
        return text
    end = _balanced_end(text, start)
    if end is None:
        return extract_outer_span(text)
    return text[start : end + 1]


def extract_json_span(text: str, strategy: str = "outer") -> str:
    """Dispatch to the configured extraction strategy."""
    if strategy == "balanced":
        return extract_balanced_object(text)
    return extract_outer_span(text)
