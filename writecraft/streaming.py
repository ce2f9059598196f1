"""
Messages API streaming protocol parser.

Turns the raw Server-Sent Events byte stream into typed events:

- SSEFrameSplitter: byte chunks -> ``data:`` payload strings
- decode_event: one payload -> one StreamEvent

Protocol: https://docs.anthropic.com/en/api/messages-streaming
"""

from collections.abc import Generator, Iterable
import codecs
from dataclasses import dataclass
from enum import Enum
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class StreamEventType(str, Enum):
    """Messages API stream event types."""

    CONTENT_BLOCK_START = "content_block_start"
    CONTENT_BLOCK_DELTA = "content_block_delta"
    CONTENT_BLOCK_STOP = "content_block_stop"
    MESSAGE_DELTA = "message_delta"
    MESSAGE_STOP = "message_stop"
    ERROR = "error"

    # Anything this version does not act on (message_start, ping, ...)
    UNKNOWN = "unknown"


@dataclass
class StreamEvent:
    """Base class for all stream events."""

    type: StreamEventType
    raw: dict[str, Any]


@dataclass
class ContentBlockStartEvent(StreamEvent):
    """A content block opened."""

    block_type: str
    id: str | None = None
    name: str | None = None

    @property
    def is_tool_use(self) -> bool:
        return self.block_type == "tool_use"


@dataclass
class TextDeltaEvent(StreamEvent):
    """Incremental text chunk."""

    text: str


@dataclass
class InputJsonDeltaEvent(StreamEvent):
    """Fragment of a tool call's JSON input."""

    partial_json: str


@dataclass
class ContentBlockStopEvent(StreamEvent):
    """The open content block closed."""


@dataclass
class MessageDeltaEvent(StreamEvent):
    """Top-level message change (recognized, not acted on)."""


@dataclass
class MessageStopEvent(StreamEvent):
    """Message is complete."""

    stop_reason: str | None = None


@dataclass
class ErrorEvent(StreamEvent):
    """Server reported an error mid-stream."""

    error_type: str
    message: str

    @property
    def description(self) -> str:
        return f"{self.error_type}: {self.message}"


@dataclass
class UnknownEvent(StreamEvent):
    """Event kind or delta kind this version does not understand."""


def _unknown(data: dict[str, Any]) -> UnknownEvent:
    return UnknownEvent(type=StreamEventType.UNKNOWN, raw=data)


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def event_from_dict(data: Any) -> StreamEvent | None:
    """Build a typed event from a decoded payload.

    Returns None when the payload does not have the structure its ``type``
    requires, so the caller can drop the frame.
    """
    if not isinstance(data, dict):
        return None

    event_type_str = data.get("type")
    if not isinstance(event_type_str, str):
        return None

    try:
        event_type = StreamEventType(event_type_str)
    except ValueError:
        return _unknown(data)

    event: StreamEvent

    if event_type == StreamEventType.CONTENT_BLOCK_START:
        block = data.get("content_block")
        if not isinstance(block, dict) or not isinstance(block.get("type"), str):
            return None
        event = ContentBlockStartEvent(
            type=event_type,
            raw=data,
            block_type=block["type"],
            id=_optional_str(block.get("id")),
            name=_optional_str(block.get("name")),
        )

    elif event_type == StreamEventType.CONTENT_BLOCK_DELTA:
        delta = data.get("delta")
        if not isinstance(delta, dict) or not isinstance(delta.get("type"), str):
            return None
        delta_type = delta["type"]
        if delta_type == "text_delta" and isinstance(delta.get("text"), str):
            event = TextDeltaEvent(type=event_type, raw=data, text=delta["text"])
        elif delta_type == "input_json_delta" and isinstance(delta.get("partial_json"), str):
            event = InputJsonDeltaEvent(
                type=event_type, raw=data, partial_json=delta["partial_json"]
            )
        else:
            # thinking_delta, signature_delta, ...
            event = _unknown(data)

    elif event_type == StreamEventType.CONTENT_BLOCK_STOP:
        event = ContentBlockStopEvent(type=event_type, raw=data)

    elif event_type == StreamEventType.MESSAGE_DELTA:
        event = MessageDeltaEvent(type=event_type, raw=data)

    elif event_type == StreamEventType.MESSAGE_STOP:
        message = data.get("message")
        if message is not None and not isinstance(message, dict):
            return None
        stop_reason = _optional_str(message.get("stop_reason")) if message else None
        event = MessageStopEvent(type=event_type, raw=data, stop_reason=stop_reason)

    elif event_type == StreamEventType.ERROR:
        error = data.get("error")
        if (
            not isinstance(error, dict)
            or not isinstance(error.get("type"), str)
            or not isinstance(error.get("message"), str)
        ):
            return None
        event = ErrorEvent(
            type=event_type,
            raw=data,
            error_type=error["type"],
            message=error["message"],
        )

    else:
        event = _unknown(data)

    return event


def decode_event(payload: str) -> StreamEvent | None:
    """
    Decode one ``data:`` payload into a StreamEvent.

    Args:
        payload: JSON text from a single SSE data line

    Returns:
        The typed event, or None if the frame is malformed and should be dropped
    """
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError):
        logger.debug("Dropping undecodable SSE payload: %s", payload[:200])
        return None

    event = event_from_dict(data)
    if event is None:
        logger.debug("Dropping SSE payload with unexpected shape: %s", payload[:200])
    return event


class SSEFrameSplitter:
    """
    Incremental splitter for SSE byte streams.

    Buffers arbitrary byte chunks and returns the payloads of complete
    ``data:`` lines. Output is independent of where chunk boundaries fall,
    including boundaries inside a multi-byte UTF-8 sequence.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Buffered text of the incomplete trailing line."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[str]:
        """Add a byte chunk and return payloads for every line it completes."""
        self._buffer += self._decoder.decode(chunk)

        payloads: list[str] = []
        while True:
            newline_pos = self._buffer.find("\n")
            if newline_pos == -1:
                break
            line = self._buffer[:newline_pos]
            self._buffer = self._buffer[newline_pos + 1 :]
            payload = self.parse_line(line)
            if payload is not None:
                payloads.append(payload)
        return payloads

    def flush(self) -> list[str]:
        """Process whatever remains once the input is exhausted."""
        self._buffer += self._decoder.decode(b"", final=True)
        line, self._buffer = self._buffer, ""
        payload = self.parse_line(line)
        return [payload] if payload is not None else []

    def reset(self) -> None:
        """Discard buffered bytes and text."""
        self._decoder.reset()
        self._buffer = ""

    @staticmethod
    def parse_line(line: str) -> str | None:
        """
        Extract the payload from one SSE line.

        Blank lines, comments, ``event:`` lines and the ``[DONE]`` sentinel
        yield None.
        """
        line = line.strip()
        if not line.startswith(DATA_PREFIX):
            return None
        payload = line[len(DATA_PREFIX) :]
        if payload == DONE_SENTINEL:
            return None
        return payload


def iter_payloads(chunks: Iterable[bytes]) -> Generator[str, None, None]:
    """Yield every data payload from an iterable of byte chunks."""
    splitter = SSEFrameSplitter()
    for chunk in chunks:
        yield from splitter.feed(chunk)
    yield from splitter.flush()


def iter_events(chunks: Iterable[bytes]) -> Generator[StreamEvent, None, None]:
    """Yield typed events from an iterable of byte chunks, dropping bad frames."""
    for payload in iter_payloads(chunks):
        event = decode_event(payload)
        if event is not None:
            yield event
