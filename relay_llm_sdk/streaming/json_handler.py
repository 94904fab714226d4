"""
Incremental JSON decoder for streamed provider responses.

Provider streams arrive as arbitrarily sized byte chunks. This module
reconstructs the complete JSON values they carry, independent of where the
chunk boundaries fall, for the three framings providers use:

- ``sse``: server-sent events, one JSON value per ``data:`` payload
- ``array``: one top-level JSON array whose elements arrive over time
- ``raw``: JSON objects embedded in arbitrary text (model output, for
  instance); everything outside an object is skipped, so the elements of an
  array of objects come out one by one
"""

import codecs
import json
import logging
from typing import Any, List, Optional, Union

from ..config.constants import SSE_DONE_SENTINEL

logger = logging.getLogger(__name__)

FRAMINGS = ("sse", "array", "raw")

_OPENERS = {'{', '['}
_CLOSERS = {'}', ']'}
_MATCHING_PAIRS = {'{': '}', '[': ']'}

# Array envelope states
_ENVELOPE_PENDING = "pending"
_ENVELOPE_OPEN = "open"
_ENVELOPE_NONE = "none"


class _ValueScanner:
    """
    Finds complete JSON objects/arrays in text fed piece by piece.

    The bracket stack and the in-string/escape flags survive between calls,
    so a value may be split anywhere.
    """

    def __init__(self, unwrap_array: bool = False, objects_only: bool = False):
        self.openers = {'{'} if objects_only else _OPENERS
        self.stack: List[str] = []
        self.in_string = False
        self.escape_next = False
        self.current: List[str] = []
        self.envelope = _ENVELOPE_PENDING if unwrap_array else _ENVELOPE_NONE

    def feed(self, text: str) -> List[Any]:
        values = []
        for char in text:
            if not self.stack:
                if self.envelope == _ENVELOPE_PENDING:
                    if char.isspace():
                        continue
                    if char == '[':
                        self.envelope = _ENVELOPE_OPEN
                        continue
                    # Not an array body (an error object, for instance)
                    self.envelope = _ENVELOPE_NONE
                elif self.envelope == _ENVELOPE_OPEN and char == ']':
                    self.envelope = _ENVELOPE_NONE
                    continue

                if char in self.openers:
                    self.stack.append(char)
                    self.current.append(char)
                # Separators, whitespace and prose between values
                continue

            self.current.append(char)

            if self.in_string:
                if self.escape_next:
                    self.escape_next = False
                elif char == '\\':
                    self.escape_next = True
                elif char == '"':
                    self.in_string = False
                continue

            if char == '"':
                self.in_string = True
            elif char in _OPENERS:
                self.stack.append(char)
            elif char in _CLOSERS:
                if _MATCHING_PAIRS[self.stack[-1]] != char:
                    logger.debug(f"Dropping malformed JSON span: {''.join(self.current)[:200]!r}")
                    self._reset()
                    continue
                self.stack.pop()
                if not self.stack:
                    value = self._complete()
                    if value is not None:
                        values.append(value)
        return values

    def pending(self) -> str:
        return "".join(self.current)

    def _complete(self) -> Optional[Any]:
        json_str = "".join(self.current)
        self._reset()
        try:
            return json.loads(json_str)
        except json.JSONDecodeError as e:
            logger.debug(f"Failed to parse JSON: {e}")
            return None

    def _reset(self) -> None:
        self.stack = []
        self.in_string = False
        self.escape_next = False
        self.current = []


class JsonStreamDecoder:
    """
    Decodes one streamed response into complete JSON values.

    Feeding a stream whole or split at any points yields the same sequence of
    values. Use one decoder per response; instances are not shared.

    Args:
        framing: One of ``"sse"``, ``"array"`` or ``"raw"``
    """

    def __init__(self, framing: str = "raw"):
        if framing not in FRAMINGS:
            raise ValueError(f"Unknown framing: {framing!r}")
        self.framing = framing
        self.done = False
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._scanner = _ValueScanner(
            unwrap_array=framing == "array",
            objects_only=framing == "raw",
        )
        self._line_buffer = ""
        self._received: List[str] = []

    def feed(self, chunk: Union[bytes, str]) -> List[Any]:
        """
        Consume a chunk and return the values it completed, in order.

        Args:
            chunk: Raw bytes from the wire, or already decoded text

        Returns:
            Complete JSON objects/arrays (possibly empty)
        """
        if not chunk:
            return []
        text = self._utf8.decode(chunk) if isinstance(chunk, bytes) else chunk
        return self._consume(text)

    def finish(self) -> List[Any]:
        """
        Flush buffered bytes and any final unterminated SSE line.

        Returns:
            Values completed by the flushed input
        """
        values = self._consume(self._utf8.decode(b"", final=True))
        if self.framing == "sse" and self._line_buffer:
            line, self._line_buffer = self._line_buffer, ""
            values.extend(self._handle_line(line.rstrip("\r")))
        return values

    def received_text(self) -> str:
        """Everything received so far, decoded but otherwise untouched."""
        return "".join(self._received)

    def remainder(self) -> str:
        """Trailing text that has not (yet) formed a complete value."""
        return self._scanner.pending() + self._line_buffer

    def _consume(self, text: str) -> List[Any]:
        if not text:
            return []
        self._received.append(text)
        if self.framing != "sse":
            return self._scanner.feed(text)

        self._line_buffer += text
        values = []
        while True:
            newline = self._line_buffer.find("\n")
            if newline < 0:
                break
            line = self._line_buffer[:newline].rstrip("\r")
            self._line_buffer = self._line_buffer[newline + 1:]
            values.extend(self._handle_line(line))
        return values

    def _handle_line(self, line: str) -> List[Any]:
        # Blank lines end events, ':' lines are comments
        if not line:
            self._end_event()
            return []
        if line.startswith(":"):
            return []
        field, _, data = line.partition(":")
        if field != "data":
            return []
        if data.startswith(" "):
            data = data[1:]
        if data.strip() == SSE_DONE_SENTINEL:
            self.done = True
            return []
        return self._scanner.feed(data + "\n")

    def _end_event(self) -> None:
        # A value never spans two events
        pending = self._scanner.pending()
        if pending:
            logger.debug(f"Dropping unterminated SSE event: {pending[:200]!r}")
            self._scanner._reset()
