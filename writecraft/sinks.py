"""
Observers for incremental stream notifications.

A sink receives text chunks, completed tool calls, the final stop reason and
errors while a stream is being decoded. Delivery is fire-and-forget: a sink
that raises never interrupts decoding.
"""

from collections.abc import Callable
from dataclasses import dataclass
import logging
import queue
from typing import Any

from ._types import ToolUse

logger = logging.getLogger(__name__)


class StreamSink:
    """Base sink. Every hook is a no-op; override the ones you need."""

    def on_text(self, chunk: str, done: bool) -> None:
        """
        Text chunk from the model.

        ``done`` is always False: completion is reported only through
        :meth:`on_message_stop`, never as a final empty text chunk.
        """

    def on_tool_use(self, tool_use: ToolUse) -> None:
        """A tool call finished assembling."""

    def on_message_stop(self, stop_reason: str) -> None:
        """The message finished with the given stop reason."""

    def on_error(self, message: str) -> None:
        """The stream failed; the call is about to raise."""


def notify(sink: StreamSink | None, hook: str, *args: Any) -> None:
    """Invoke ``sink.<hook>(*args)``, logging and swallowing any failure."""
    if sink is None:
        return
    try:
        getattr(sink, hook)(*args)
    except Exception:
        logger.warning("Stream sink %s.%s failed", type(sink).__name__, hook, exc_info=True)


class CallbackSink(StreamSink):
    """Sink that forwards notifications to plain callables."""

    def __init__(
        self,
        on_text: Callable[[str, bool], None] | None = None,
        on_tool_use: Callable[[ToolUse], None] | None = None,
        on_message_stop: Callable[[str], None] | None = None,
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        self._on_text = on_text
        self._on_tool_use = on_tool_use
        self._on_message_stop = on_message_stop
        self._on_error = on_error

    def on_text(self, chunk: str, done: bool) -> None:
        if self._on_text:
            self._on_text(chunk, done)

    def on_tool_use(self, tool_use: ToolUse) -> None:
        if self._on_tool_use:
            self._on_tool_use(tool_use)

    def on_message_stop(self, stop_reason: str) -> None:
        if self._on_message_stop:
            self._on_message_stop(stop_reason)

    def on_error(self, message: str) -> None:
        if self._on_error:
            self._on_error(message)


@dataclass
class Notification:
    """One queued sink notification."""

    kind: str
    payload: Any = None


class QueueSink(StreamSink):
    """
    Bounded, non-blocking channel of notifications.

    Notifications are dropped (and counted) when the queue is full so a slow
    consumer can never stall decoding.
    """

    def __init__(self, maxsize: int = 1024) -> None:
        self.queue: queue.Queue[Notification] = queue.Queue(maxsize=maxsize)
        self.dropped = 0

    def _put(self, notification: Notification) -> None:
        try:
            self.queue.put_nowait(notification)
        except queue.Full:
            self.dropped += 1
            logger.debug("Sink queue full, dropped %s notification", notification.kind)

    def on_text(self, chunk: str, done: bool) -> None:
        self._put(Notification("text", {"chunk": chunk, "done": done}))

    def on_tool_use(self, tool_use: ToolUse) -> None:
        self._put(Notification("tool_use", tool_use))

    def on_message_stop(self, stop_reason: str) -> None:
        self._put(Notification("message_stop", stop_reason))

    def on_error(self, message: str) -> None:
        self._put(Notification("error", message))

    def drain(self) -> list[Notification]:
        """Remove and return everything currently queued."""
        items: list[Notification] = []
        while True:
            try:
                items.append(self.queue.get_nowait())
            except queue.Empty:
                return items


class RecordingSink(StreamSink):
    """Sink that keeps every notification in order. Handy for tests and scripts."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def on_text(self, chunk: str, done: bool) -> None:
        self.notifications.append(Notification("text", {"chunk": chunk, "done": done}))

    def on_tool_use(self, tool_use: ToolUse) -> None:
        self.notifications.append(Notification("tool_use", tool_use))

    def on_message_stop(self, stop_reason: str) -> None:
        self.notifications.append(Notification("message_stop", stop_reason))

    def on_error(self, message: str) -> None:
        self.notifications.append(Notification("error", message))

    @property
    def kinds(self) -> list[str]:
        return [n.kind for n in self.notifications]
