"""Incremental Server-Sent Events decoder.

Text fragments of arbitrary size are fed in as they arrive from the network;
the decoder buffers incomplete lines and invokes the registered callback once
per complete event (terminated by a blank line).
"""

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class ServerSentEvent:
    """One decoded SSE event."""

    data: str
    event: str | None = None
    id: str | None = None


class SSEDecoder:
    """Feed/callback SSE decoder following the WHATWG field rules."""

    def __init__(self, on_event: Callable[[ServerSentEvent], None]) -> None:
        self._on_event = on_event
        self._buffer = ""
        self._data_lines: list[str] = []
        self._event: str | None = None
        self._last_id: str | None = None
        self._has_fields = False

    def feed(self, text: str) -> None:
        """Consume a text fragment, dispatching every event it completes."""
        self._buffer += text
        while True:
            line, rest = self._split_line(self._buffer)
            if line is None:
                break
            self._buffer = rest
            self._process_line(line)

    @staticmethod
    def _split_line(buffer: str) -> tuple[str | None, str]:
        positions = [p for p in (buffer.find("\n"), buffer.find("\r")) if p >= 0]
        if not positions:
            return None, buffer
        index = min(positions)
        if buffer[index] == "\n":
            return buffer[:index], buffer[index + 1 :]
        # A trailing CR may be the first half of CRLF
        if index + 1 == len(buffer):
            return None, buffer
        skip = 2 if buffer[index + 1] == "\n" else 1
        return buffer[:index], buffer[index + skip :]

    def _process_line(self, line: str) -> None:
        if line == "":
            self._dispatch()
            return
        if line.startswith(":"):
            return

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if field == "data":
            self._data_lines.append(value)
            self._has_fields = True
        elif field == "event":
            self._event = value or None
            self._has_fields = True
        elif field == "id":
            if "\0" not in value:
                self._last_id = value
            self._has_fields = True
        # "retry" and unknown fields carry nothing for this adapter

    def _dispatch(self) -> None:
        if not self._has_fields:
            return
        event = ServerSentEvent(
            data="\n".join(self._data_lines),
            event=self._event,
            id=self._last_id,
        )
        self._clear_event()
        self._on_event(event)

    def _clear_event(self) -> None:
        self._data_lines = []
        self._event = None
        self._has_fields = False
