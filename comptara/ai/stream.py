"""
Server-Sent Events framing for streamed model output.

Each chunk is one line `data: {"choices":[{"delta":{"content": "..."}}]}`;
the stream ends with `data: [DONE]`.
"""

import json
from typing import Iterable, Iterator, Optional


DATA_PREFIX = "data: "
DONE_MARKER = "[DONE]"


class StreamDone(Exception):
    """The terminator line was read."""
    pass


def format_sse_chunk(content: str) -> str:
    payload = {"choices": [{"delta": {"content": content}}]}
    return f"{DATA_PREFIX}{json.dumps(payload, ensure_ascii=False)}\n\n"


def format_sse_done() -> str:
    return f"{DATA_PREFIX}{DONE_MARKER}\n\n"


def parse_sse_line(line: str) -> Optional[str]:
    """
    Extract the content delta from one SSE line.

    Returns None for blank lines, non-data lines, lines that are not valid
    JSON (partial chunks) and chunks without content.

    Raises:
        StreamDone: On the `data: [DONE]` terminator
    """
    line = line.rstrip("\r\n")
    if not line.startswith(DATA_PREFIX):
        return None
    body = line[len(DATA_PREFIX):].strip()
    if body == DONE_MARKER:
        raise StreamDone()
    if not body:
        return None
    try:
        data = json.loads(body)
        return data["choices"][0]["delta"].get("content") or None
    except (ValueError, KeyError, IndexError, TypeError, AttributeError):
        return None


def iter_stream_content(lines: Iterable[str]) -> Iterator[str]:
    """Yield content deltas until the terminator or the end of input."""
    for line in lines:
        try:
            content = parse_sse_line(line)
        except StreamDone:
            return
        if content:
            yield content
