"""
Block assembler for streamed assistant messages.

Tracks the currently open content block, accumulates tool-call JSON
fragments, collects text, and builds the final AssistantResponse.
"""

from dataclasses import dataclass
from enum import Enum
import json
import logging
from typing import Any

from ._types import AssistantResponse, ToolUse, resolve_stop_reason
from .exceptions import APIError, StreamProtocolError
from .sinks import StreamSink, notify
from .streaming import (
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    ErrorEvent,
    InputJsonDeltaEvent,
    MessageStopEvent,
    StreamEvent,
    TextDeltaEvent,
)

logger = logging.getLogger(__name__)


class BlockState(str, Enum):
    IDLE = "idle"
    TEXT_ONLY = "text_only"
    OPEN_TOOL_BLOCK = "open_tool_block"


@dataclass
class OpenToolBlock:
    """Tool-use block currently receiving input_json deltas."""

    id: str
    name: str
    input_json: str = ""

    def finalize(self) -> ToolUse:
        return ToolUse(id=self.id, name=self.name, input=parse_tool_input(self.input_json))


def parse_tool_input(input_json: str) -> Any:
    """Parse accumulated tool JSON, substituting an empty object on failure."""
    try:
        return json.loads(input_json)
    except (ValueError, RecursionError):
        if input_json:
            logger.debug("Tool input did not parse, using {}: %s", input_json[:200])
        return {}


class BlockAssembler:
    """
    State machine over one streamed message.

    Feed events in arrival order with :meth:`process`. Once it returns True
    the stream is terminal and further events are ignored. Call
    :meth:`build_response` for the final result, whether or not a
    message_stop arrived.

    Usage:
        assembler = BlockAssembler(sink=my_sink)
        for event in events:
            if assembler.process(event):
                break
        response = assembler.build_response()
    """

    def __init__(self, sink: StreamSink | None = None, strict: bool = False) -> None:
        self.sink = sink
        self.strict = strict
        self.state = BlockState.IDLE
        self.text_parts: list[str] = []
        self.tool_uses: list[ToolUse] = []
        self.open_block: OpenToolBlock | None = None
        self.explicit_stop_reason: str | None = None
        self.terminal = False

    @property
    def text(self) -> str:
        return "".join(self.text_parts)

    @property
    def stop_reason(self) -> str:
        return resolve_stop_reason(self.explicit_stop_reason, self.tool_uses)

    def process(self, event: StreamEvent) -> bool:
        """
        Apply one event.

        Returns:
            True once the stream has reached a terminal event

        Raises:
            APIError: The event is a server error
            StreamProtocolError: In strict mode, a tool block opened while
                another was still open
        """
        if self.terminal:
            return True

        if isinstance(event, ContentBlockStartEvent):
            if event.is_tool_use:
                self._open_tool_block(event)

        elif isinstance(event, TextDeltaEvent):
            self.text_parts.append(event.text)
            if self.state == BlockState.IDLE:
                self.state = BlockState.TEXT_ONLY
            notify(self.sink, "on_text", event.text, False)

        elif isinstance(event, InputJsonDeltaEvent):
            if self.open_block is not None:
                self.open_block.input_json += event.partial_json
            else:
                logger.debug("input_json_delta with no open tool block, dropped")

        elif isinstance(event, ContentBlockStopEvent):
            if self.open_block is not None:
                self._close_tool_block(self.open_block)

        elif isinstance(event, MessageStopEvent):
            if event.stop_reason:
                self.explicit_stop_reason = event.stop_reason
            self.terminal = True
            notify(self.sink, "on_message_stop", self.stop_reason)

        elif isinstance(event, ErrorEvent):
            self.terminal = True
            notify(self.sink, "on_error", event.description)
            raise APIError(event.description, error_type=event.error_type)

        return self.terminal

    def _open_tool_block(self, event: ContentBlockStartEvent) -> None:
        if self.open_block is not None:
            if self.strict:
                raise StreamProtocolError(
                    f"Tool block {event.id!r} started while {self.open_block.id!r} is still open",
                    code="overlapping_blocks",
                )
            logger.warning(
                "Tool block %r started while %r is still open; discarding the earlier block",
                event.id,
                self.open_block.id,
            )
        self.open_block = OpenToolBlock(id=event.id or "", name=event.name or "")
        self.state = BlockState.OPEN_TOOL_BLOCK

    def _close_tool_block(self, block: OpenToolBlock) -> None:
        tool_use = block.finalize()
        self.open_block = None
        self.state = BlockState.IDLE
        self.tool_uses.append(tool_use)
        notify(self.sink, "on_tool_use", tool_use)

    def build_response(self) -> AssistantResponse:
        """Build the final result from everything accumulated so far."""
        return AssistantResponse(
            text_content=self.text,
            tool_uses=list(self.tool_uses),
            stop_reason=self.stop_reason,
        )
