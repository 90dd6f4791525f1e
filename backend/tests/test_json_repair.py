"""
Tests for structured-output extraction and repair.
"""

from services.json_repair import extract_code_block, extract_json_from_response, parse_json_response, repair_json


class TestExtraction:
    def test_fenced_json_preferred(self):
        text = 'Sure! {"ignored": 1}\n```json\n{"changeType": "style"}\n```\nDone.'
        assert extract_json_from_response(text) == '{"changeType": "style"}'

    def test_bare_fence(self):
        assert extract_json_from_response('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_raw_object(self):
        assert extract_json_from_response('The analysis is {"a": {"b": 2}} as requested') == '{"a": {"b": 2}}'

    def test_nothing_found(self):
        assert extract_json_from_response("no json here") is None
        assert extract_json_from_response("") is None


class TestRepair:
    def test_python_literals(self):
        assert parse_json_response("{'ok': True, 'value': None}") == {"ok": True, "value": None}

    def test_trailing_prose_after_object(self):
        assert repair_json('{"a": 1} and then {"b"') == '{"a": 1}'

    def test_braces_inside_strings_ignored(self):
        text = '{"code": "function f() { return 1; }", "x": 2,}'
        assert parse_json_response(text) == {"code": "function f() { return 1; }", "x": 2}

    def test_truncated_object_closed(self):
        assert parse_json_response('{"files": [{"path": "a.py"}') == {"files": [{"path": "a.py"}]}

    def test_unrepairable_returns_none(self):
        assert parse_json_response('{"a": }') is None


class TestCodeBlock:
    def test_language_fence(self):
        assert extract_code_block("Here:\n```html\n<p>x</p>\n```\nEnjoy", ("html", "tsx")) == "<p>x</p>"

    def test_untagged_fence(self):
        assert extract_code_block("```\nFROM python:3.12\n```", ("dockerfile",)) == "FROM python:3.12"

    def test_any_fence(self):
        assert extract_code_block("```yaml\nkey: v\n```") == "key: v"

    def test_no_fence_returns_stripped_text(self):
        assert extract_code_block("  <html></html>\n") == "<html></html>"
        assert extract_code_block("") == ""
