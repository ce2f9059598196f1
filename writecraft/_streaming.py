"""MessageStream wrapping a streaming HTTP response in the decode pipeline."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
import logging
from typing import TYPE_CHECKING

import requests

from ._types import AssistantResponse, ToolUse
from .assembler import BlockAssembler
from .exceptions import NetworkError, StreamProtocolError
from .sinks import StreamSink, notify
from .streaming import SSEFrameSplitter, StreamEvent, decode_event

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class MessageStream:
    """Iterable stream of typed events for one call.

    Every event is applied to a fresh BlockAssembler before it is yielded, so
    the sink sees notifications in the same order the caller sees events.

    Usage:
        with client.stream(messages) as stream:
            for event in stream:
                print(event.type)
        print(stream.text)

        response = client.stream(messages).until_done()
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        sink: StreamSink | None = None,
        strict: bool = False,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._chunks = chunks
        self._splitter = SSEFrameSplitter()
        self._assembler = BlockAssembler(sink=sink, strict=strict)
        self._on_close = on_close
        self._closed = False
        self._consumed = False
        self._finished = False

    @classmethod
    def from_response(
        cls, response: requests.Response, sink: StreamSink | None = None, strict: bool = False
    ) -> MessageStream:
        """Wrap a ``requests`` response opened with ``stream=True``."""
        return cls(
            response.iter_content(chunk_size=None),
            sink=sink,
            strict=strict,
            on_close=response.close,
        )

    def close(self) -> None:
        """Close the underlying response (idempotent)."""
        if not self._closed:
            self._closed = True
            self._splitter.reset()
            if self._on_close is not None:
                self._on_close()

    def __iter__(self) -> Iterator[StreamEvent]:
        if self._consumed:
            return
        self._consumed = True
        try:
            for payload in self._payloads():
                event = decode_event(payload)
                if event is None:
                    continue
                terminal = self._assembler.process(event)
                if terminal:
                    self._finished = True
                yield event
                if terminal:
                    return
            self._finished = True
        finally:
            self.close()

    def _payloads(self) -> Iterator[str]:
        chunk_iter = iter(self._chunks)
        while True:
            try:
                chunk = next(chunk_iter)
            except StopIteration:
                break
            except (requests.RequestException, OSError) as e:
                message = f"Network error: {e!s}"
                logger.warning("Stream interrupted: %s", e)
                notify(self._assembler.sink, "on_error", message)
                raise NetworkError(message) from e
            yield from self._splitter.feed(chunk)
        yield from self._splitter.flush()

    def __enter__(self) -> MessageStream:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def until_done(self) -> AssistantResponse:
        """
        Consume the rest of the stream and return the assembled response.

        Raises:
            StreamProtocolError: An earlier iteration stopped before the
                message finished, so only a partial response exists
        """
        for _event in self:
            pass
        if not self._finished:
            raise StreamProtocolError(
                "Stream iteration stopped before the message finished",
                code="stream_incomplete",
            )
        return self._assembler.build_response()

    @property
    def text(self) -> str:
        """Text accumulated so far."""
        return self._assembler.text

    @property
    def tool_uses(self) -> list[ToolUse]:
        """Tool calls completed so far."""
        return list(self._assembler.tool_uses)

    @property
    def stop_reason(self) -> str:
        return self._assembler.stop_reason


def consume_stream(
    chunks: Iterable[bytes], sink: StreamSink | None = None, strict: bool = False
) -> AssistantResponse:
    """
    Decode an SSE byte stream into an AssistantResponse.

    Args:
        chunks: Byte chunks in arrival order, split at arbitrary boundaries
        sink: Optional observer for incremental notifications
        strict: Raise StreamProtocolError on overlapping tool blocks

    Returns:
        AssistantResponse built at message_stop or when input is exhausted

    Raises:
        APIError: The stream carried an error event
        NetworkError: Pulling the next chunk failed
    """
    return MessageStream(chunks, sink=sink, strict=strict).until_done()
