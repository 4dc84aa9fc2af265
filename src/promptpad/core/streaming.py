"""Incremental assembly of server-sent-event chunks into text deltas."""

from __future__ import annotations

import codecs
import json
from collections.abc import Iterable, Iterator
from enum import Enum

from promptpad.logging_utils import get_logger

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"

_LOGGER = get_logger(__name__)


class StreamState(str, Enum):
    READING = "reading"
    DONE = "done"
    FAILED = "failed"


def extract_delta(payload: object, completion: bool) -> str:
    """Return the text fragment of one parsed event, or ``""`` when the path is missing."""
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    first = choices[0]
    if completion:
        text = first.get("text")
    else:
        delta = first.get("delta")
        text = delta.get("content") if isinstance(delta, dict) else None
    return text if isinstance(text, str) else ""


class StreamAssembler:
    """Line-oriented state machine over a chunked response body.

    Only complete lines are acted on; a partial line stays buffered until
    its terminating newline arrives or the stream closes.
    """

    def __init__(self, completion: bool) -> None:
        self.completion = completion
        self.state = StreamState.READING
        self.error: str | None = None
        self.received = False
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._events = 0
        self._skipped = 0

    def feed(self, chunk: bytes) -> list[str]:
        self._ensure_reading()
        self._pending += self._decoder.decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        return self._consume(lines)

    def close(self) -> list[str]:
        self._ensure_reading()
        self._pending += self._decoder.decode(b"", final=True)
        lines = [self._pending] if self._pending else []
        self._pending = ""
        deltas = self._consume(lines)
        self.state = StreamState.DONE
        _LOGGER.debug(
            "Stream closed events=%d skipped=%d received=%s", self._events, self._skipped, self.received
        )
        return deltas

    def fail(self, message: str) -> None:
        self.state = StreamState.FAILED
        self.error = message

    def _ensure_reading(self) -> None:
        if self.state is not StreamState.READING:
            raise RuntimeError(f"Stream already {self.state.value}")

    def _consume(self, lines: list[str]) -> list[str]:
        deltas: list[str] = []
        for raw in lines:
            line = raw.rstrip("\r")
            if not line.startswith(DATA_PREFIX):
                continue
            data = line[len(DATA_PREFIX):]
            if data == DONE_SENTINEL:
                continue
            self._events += 1
            try:
                payload = json.loads(data)
            except (ValueError, RecursionError) as exc:
                self._skipped += 1
                _LOGGER.warning("Failed to parse SSE data %r: %s", data[:200], exc)
                continue
            delta = extract_delta(payload, self.completion)
            if delta:
                self.received = True
                deltas.append(delta)
        return deltas


def iter_stream_deltas(chunks: Iterable[bytes], completion: bool) -> Iterator[str]:
    assembler = StreamAssembler(completion)
    try:
        for chunk in chunks:
            yield from assembler.feed(chunk)
    except Exception as exc:
        assembler.fail(str(exc))
        raise
    yield from assembler.close()
