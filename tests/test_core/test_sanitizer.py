from __future__ import annotations

import json
import xml.etree.ElementTree as ET

import pytest

from depfinder.core.sanitizer import sanitize_response


@pytest.mark.unit
class TestSanitizeResponse:
    """Tests for sanitize_response."""

    def test_strips_leading_bom(self) -> None:
        """Test a leading byte-order mark is removed."""
        assert sanitize_response("\ufeff{}") == "{}"

    def test_strips_utf8_bom_bytes(self) -> None:
        """Test the UTF-8 encoded BOM is removed after decoding."""
        raw = b"\xef\xbb\xbf" + b'{"value": []}'

        assert sanitize_response(raw) == '{"value": []}'

    def test_strips_trailing_zero_width_space(self) -> None:
        """Test a trailing zero-width space is removed."""
        assert sanitize_response("<a/>\u200b") == "<a/>"

    @pytest.mark.parametrize("char", ["\u200b", "\u200c", "\u200d", "\ufeff"])
    def test_strips_each_marker_on_both_ends(self, char: str) -> None:
        """Test every supported marker is stripped from either end."""
        assert sanitize_response(f"{char}body{char}") == "body"

    def test_strips_only_one_marker_per_end(self) -> None:
        """Test repeated markers are only removed once per end."""
        assert sanitize_response("\ufeff\ufeffbody") == "\ufeffbody"

    def test_inner_markers_untouched(self) -> None:
        """Test markers inside the body are preserved."""
        assert sanitize_response("a\u200bb") == "a\u200bb"

    def test_empty_input(self) -> None:
        """Test empty bodies stay empty."""
        assert sanitize_response(b"") == ""
        assert sanitize_response("") == ""

    def test_invalid_utf8_is_replaced(self) -> None:
        """Test undecodable bytes do not raise."""
        assert sanitize_response(b"ok\xff") == "ok\ufffd"

    def test_bom_prefixed_json_parses_after_sanitizing(self) -> None:
        """Test JSON that fails with a BOM parses once sanitized."""
        body = '\ufeff{"value": [1]}'

        with pytest.raises(json.JSONDecodeError):
            json.loads(body)

        assert json.loads(sanitize_response(body)) == {"value": [1]}

    def test_zero_width_prefixed_xml_parses_after_sanitizing(self) -> None:
        """Test XML that fails with a zero-width prefix parses once sanitized."""
        body = "\u200b<package><metadata/></package>"

        with pytest.raises(ET.ParseError):
            ET.fromstring(body)

        assert ET.fromstring(sanitize_response(body)).tag == "package"
