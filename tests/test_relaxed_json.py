"""Tests for lenient example parsing."""

import pytest

from hookgen.errors import InputParseError
from hookgen.relaxed_json import parse_json, repair


class TestParseJson:
    """Test JSON5 parsing with one repair pass."""

    def test_plain_json(self):
        assert parse_json('{"id": 1, "tags": ["a"]}') == {"id": 1, "tags": ["a"]}

    def test_json5_features(self):
        """Unquoted keys, single quotes, comments and trailing commas are accepted."""
        text = "{\n  id: 1, // primary key\n  'name': 'Test',\n}"
        assert parse_json(text) == {"id": 1, "name": "Test"}

    def test_missing_commas_repaired(self):
        text = '{"a": {"x": 1} "b": [1, 2] "c": "d" "e": 3}'
        assert parse_json(text) == {"a": {"x": 1}, "b": [1, 2], "c": "d", "e": 3}

    def test_unrecoverable_input_raises(self):
        with pytest.raises(InputParseError) as excinfo:
            parse_json('{"success": true, "data": {')
        err = excinfo.value
        assert "Invalid JSON" in str(err)
        assert "Repair attempt failed" in str(err)
        assert err.original_error
        assert err.repair_error


class TestRepair:
    """Test the comma-insertion heuristic on its own."""

    def test_after_closing_brace(self):
        assert repair('{"a": {} "b": 1}') == '{"a": {}, "b": 1}'

    def test_after_number(self):
        assert repair('{"a": 1 "b": 2}') == '{"a": 1, "b": 2}'

    def test_well_formed_text_unchanged(self):
        text = '{"a": [1, 2], "b": {"c": "d"}}'
        assert repair(text) == text
