"""Unit tests for text-level JSON repairs."""

import json

from explainer.recovery.sanitizer import (
    escape_string_newlines,
    patch_truncated_json,
    sanitize_json_text,
    strip_control_characters,
)


class TestControlCharacters:
    """Control characters and carriage returns."""

    def test_removes_illegal_control_characters(self):
        text = '{"a": "x\x00y\x07z\x0b\x0c\x1f"}\x01'
        assert strip_control_characters(text) == '{"a": "xyz"}'

    def test_removes_tabs(self):
        assert strip_control_characters('{\t"a": "b\tc"}') == '{"a": "bc"}'

    def test_keeps_line_feeds_and_drops_carriage_returns(self):
        assert strip_control_characters('{\r\n"a": 1\r\n}') == '{\n"a": 1\n}'

    def test_keeps_unicode_text(self):
        text = '{"summary": "分段函数 $f(x)$"}'
        assert strip_control_characters(text) == text


class TestStringNewlines:
    """Two-state scan for physical line breaks."""

    def test_escapes_newline_inside_string_only(self):
        text = '{\n  "a": "line1\nline2",\n  "b": "x"\n}'
        scan = escape_string_newlines(text)
        assert scan.text == '{\n  "a": "line1\\nline2",\n  "b": "x"\n}'
        assert scan.in_string is False
        assert json.loads(scan.text)["a"] == "line1\nline2"

    def test_escaped_quote_keeps_string_open(self):
        text = '{"a": "say \\"hi\nthere\\""}'
        scan = escape_string_newlines(text)
        assert scan.text == '{"a": "say \\"hi\\nthere\\""}'
        assert json.loads(scan.text)["a"] == 'say "hi\nthere"'

    def test_backslash_before_newline_does_not_swallow_it(self):
        text = '{"a": "end\\\nnext"}'
        scan = escape_string_newlines(text)
        assert scan.text == '{"a": "end\\\\\\nnext"}'
        assert json.loads(scan.text)["a"] == "end\\\nnext"

    def test_reports_unterminated_string(self):
        scan = escape_string_newlines('{"a": "cut')
        assert scan.in_string is True
        assert scan.escape_pending is False

    def test_reports_pending_escape(self):
        scan = escape_string_newlines('{"a": "cut\\')
        assert scan.in_string is True
        assert scan.escape_pending is True

    def test_valid_json_is_untouched(self):
        text = json.dumps({"a": "x\ny", "b": ["c", {"d": "e"}]}, indent=2)
        assert sanitize_json_text(text) == text


class TestTruncationPatch:
    """Best-effort closing of cut-off responses."""

    def test_closes_open_string_and_object(self):
        patched = patch_truncated_json('{"summary":"ok","explanation":"partial tex')
        assert patched == '{"summary":"ok","explanation":"partial tex"}'
        assert json.loads(patched)["explanation"] == "partial tex"

    def test_starts_at_first_brace(self):
        patched = patch_truncated_json('Answer below\n{"summary":"ok"')
        assert patched == '{"summary":"ok"}'

    def test_drops_trailing_comma(self):
        assert patch_truncated_json('{"summary":"ok",\n') == '{"summary":"ok"}'

    def test_drops_dangling_escape(self):
        patched = patch_truncated_json('{"summary":"a\\')
        assert json.loads(patched) == {"summary": "a"}

    def test_cleans_newlines_in_the_cut_value(self):
        patched = patch_truncated_json('{"summary":"line1\nline2')
        assert json.loads(patched) == {"summary": "line1\nline2"}

    def test_no_brace(self):
        assert patch_truncated_json("nothing to patch") is None
