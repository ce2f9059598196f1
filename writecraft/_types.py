"""Dataclass models for Messages API requests and assembled stream results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StopReason(str, Enum):
    """Documented reasons generation ended."""

    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    MAX_TOKENS = "max_tokens"
    STOP_SEQUENCE = "stop_sequence"
    PAUSE_TURN = "pause_turn"
    REFUSAL = "refusal"


@dataclass
class ToolUse:
    """A completed tool invocation assembled from a tool_use block."""

    id: str
    name: str
    input: Any

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "input": self.input}


@dataclass
class AssistantResponse:
    """Final result of one streamed call."""

    text_content: str = ""
    tool_uses: list[ToolUse] = field(default_factory=list)
    stop_reason: str = StopReason.END_TURN.value

    @property
    def has_tool_uses(self) -> bool:
        return bool(self.tool_uses)

    def to_message(self) -> Message:
        """Build the assistant turn to send back alongside tool results."""
        blocks: list[ContentBlock] = []
        if self.text_content:
            blocks.append(TextBlock(text=self.text_content))
        for tool_use in self.tool_uses:
            blocks.append(ToolUseBlock(id=tool_use.id, name=tool_use.name, input=tool_use.input))
        return Message(role="assistant", content=blocks)


def resolve_stop_reason(explicit: str | None, tool_uses: list[ToolUse]) -> str:
    """Pick the stop reason reported to the caller.

    An explicit server value always wins; otherwise ``tool_use`` when any tool
    call completed, else ``end_turn``.
    """
    if explicit:
        return explicit
    if tool_uses:
        return StopReason.TOOL_USE.value
    return StopReason.END_TURN.value


@dataclass
class Tool:
    """Tool definition advertised to the model."""

    name: str
    description: str
    input_schema: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }


@dataclass
class TextBlock:
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass
class ToolUseBlock:
    id: str
    name: str
    input: Any

    def to_dict(self) -> dict[str, Any]:
        return {"type": "tool_use", "id": self.id, "name": self.name, "input": self.input}


@dataclass
class ToolResultBlock:
    tool_use_id: str
    content: str
    is_error: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": self.content,
        }
        if self.is_error is not None:
            data["is_error"] = self.is_error
        return data


ContentBlock = TextBlock | ToolUseBlock | ToolResultBlock


@dataclass
class Message:
    """A chat message whose content is plain text or a list of blocks."""

    role: str
    content: str | list[ContentBlock]

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.content, str):
            return {"role": self.role, "content": self.content}
        return {"role": self.role, "content": [block.to_dict() for block in self.content]}

    @classmethod
    def from_dict(cls, data: dict) -> Message:
        content = data.get("content", "")
        if isinstance(content, list):
            return cls(role=data["role"], content=[_block_from_dict(b) for b in content])
        return cls(role=data["role"], content=str(content))


def _block_from_dict(data: dict) -> ContentBlock:
    block_type = data.get("type")
    if block_type == "text":
        return TextBlock(text=data.get("text", ""))
    if block_type == "tool_use":
        return ToolUseBlock(id=data["id"], name=data["name"], input=data.get("input", {}))
    if block_type == "tool_result":
        return ToolResultBlock(
            tool_use_id=data["tool_use_id"],
            content=data.get("content", ""),
            is_error=data.get("is_error"),
        )
    raise ValueError(f"Unsupported content block type: {block_type!r}")
