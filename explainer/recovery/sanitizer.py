"""
Text-level repairs that make a candidate JSON string parseable.

Nothing here raises or validates: whether the result is JSON is decided by
the parse attempt that follows.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional

# Everything below U+0020 except LF and CR, which are handled by the scanner.
_CONTROL_CHARS = re.compile(r"[\x00-\x09\x0b\x0c\x0e-\x1f]+")


class ScanResult(NamedTuple):
    text: str
    in_string: bool
    escape_pending: bool


def strip_control_characters(text: str) -> str:
    """Drop carriage returns and control characters that are illegal in JSON strings."""
    return _CONTROL_CHARS.sub("", text.replace("\r", ""))


def escape_string_newlines(text: str) -> ScanResult:
    """
    Escape physical line breaks that sit inside string literals.

    Line breaks between structural tokens are left alone. A backslash right
    before a line break does not swallow it: the backslash is kept as a
    literal and the break is still escaped.
    """
    out = []
    in_string = False
    escape_pending = False

    for char in text:
        if not in_string:
            if char == '"':
                in_string = True
            out.append(char)
            continue

        if char == "\n":
            if escape_pending:
                # The lone backslash becomes literal text
                out.append("\\")
            out.append("\\n")
            escape_pending = False
        elif escape_pending:
            out.append(char)
            escape_pending = False
        elif char == "\\":
            out.append(char)
            escape_pending = True
        else:
            if char == '"':
                in_string = False
            out.append(char)

    return ScanResult("".join(out), in_string, escape_pending)


def sanitize_json_text(text: str) -> str:
    """Full cleanup: control characters, carriage returns, in-string newlines."""
    return escape_string_newlines(strip_control_characters(text)).text


def patch_truncated_json(text: str) -> Optional[str]:
    """
    Best-effort closing for a response cut off mid-generation.

    Takes everything from the first ``{``, cleans it like
    :func:`sanitize_json_text`, closes an unterminated final string and then
    the object. Nested containers left open are not balanced; such input
    stays unparseable and ends in the fallback record.
    """
    start = text.find("{")
    if start == -1:
        return None

    scan = escape_string_newlines(strip_control_characters(text[start:]))
    body = scan.text
    if scan.in_string:
        if scan.escape_pending:
            body = body[:-1]
        return body + '"}'

    return body.rstrip().rstrip(",") + "}"
