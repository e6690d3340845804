"""Incremental decoder for ``text/event-stream`` chat-completion responses.

Network reads do not line up with frame boundaries: a chunk may end halfway
through a line, or halfway through a multi-byte UTF-8 character. The decoder
keeps whatever is incomplete and only parses whole lines.
"""

from __future__ import annotations

import codecs
import json
from typing import Any, Iterable, Iterator, List, Optional

DATA_PREFIX = "data: "
DONE = "[DONE]"


def delta_content(frame: Any) -> str:
    """``choices[0].delta.content`` of a parsed frame, or "" when absent."""
    if not isinstance(frame, dict):
        return ""
    choices = frame.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


class EventStreamDecoder:
    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.done = False
        self.skipped = 0

    def feed(self, chunk: bytes) -> List[str]:
        """Consume one network chunk; return the content deltas it completed."""
        if self.done:
            return []
        self._buffer += self._utf8.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._consume(lines)

    def close(self) -> List[str]:
        """Flush the trailing unterminated line at end of stream."""
        if self.done:
            return []
        tail = self._buffer + self._utf8.decode(b"", final=True)
        self._buffer = ""
        return self._consume([tail]) if tail else []

    def _consume(self, lines: Iterable[str]) -> List[str]:
        out: List[str] = []
        for line in lines:
            content = self._parse_line(line.rstrip("\r"))
            if self.done:
                break
            if content:
                out.append(content)
        return out

    def _parse_line(self, line: str) -> Optional[str]:
        if not line.startswith(DATA_PREFIX):
            return None
        payload = line[len(DATA_PREFIX):]
        if payload.strip() == DONE:
            self.done = True
            return None
        try:
            frame = json.loads(payload)
        except ValueError:
            self.skipped += 1
            return None
        return delta_content(frame)


def iter_deltas(chunks: Iterable[bytes], decoder: Optional[EventStreamDecoder] = None) -> Iterator[str]:
    """Yield content deltas as chunks arrive; reading stops at ``[DONE]``."""
    if decoder is None:
        decoder = EventStreamDecoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)
        if decoder.done:
            return
    yield from decoder.close()


def decode_stream(chunks: Iterable[bytes]) -> str:
    return "".join(iter_deltas(chunks))
