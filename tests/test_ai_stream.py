"""Tests for SSE framing."""

import pytest

from comptara.ai.stream import (
    StreamDone,
    format_sse_chunk,
    format_sse_done,
    iter_stream_content,
    parse_sse_line,
)


class TestParseSseLine:

    def test_content_delta(self):
        line = 'data: {"choices":[{"delta":{"content":"Hello"}}]}'
        assert parse_sse_line(line) == "Hello"

    def test_done_marker(self):
        with pytest.raises(StreamDone):
            parse_sse_line("data: [DONE]")

    @pytest.mark.parametrize("line", [
        "",
        ": keep-alive",
        "event: message",
        "data: ",
        'data: {"choices":[{"delta":{"cont',
        'data: {"choices":[]}',
        'data: {"choices":[{"delta":{}}]}',
    ])
    def test_ignored_lines(self, line):
        assert parse_sse_line(line) is None

    def test_trailing_newline(self):
        assert parse_sse_line('data: {"choices":[{"delta":{"content":"x"}}]}\r\n') == "x"


class TestIterStreamContent:

    def test_stops_at_terminator(self):
        lines = [
            format_sse_chunk("Bal").strip(),
            "",
            "data: {broken",
            format_sse_chunk("anced").strip(),
            format_sse_done().strip(),
            format_sse_chunk("ignored").strip(),
        ]
        assert "".join(iter_stream_content(lines)) == "Balanced"

    def test_without_terminator(self):
        assert list(iter_stream_content([format_sse_chunk("a").strip()])) == ["a"]

    def test_unicode_round_trip(self):
        line = format_sse_chunk("Écriture équilibrée").strip()
        assert parse_sse_line(line) == "Écriture équilibrée"
