"""
writecraft - streaming Messages API client

Decodes Server-Sent Events from the Messages API into reply text, completed
tool calls and a stop reason, with incremental notifications along the way.
"""

__version__ = "0.1.0"

from ._streaming import MessageStream, consume_stream
from ._types import (
    AssistantResponse,
    Message,
    StopReason,
    TextBlock,
    Tool,
    ToolResultBlock,
    ToolUse,
    ToolUseBlock,
)
from .client import Writecraft
from .exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    NoApiKeyError,
    RateLimitError,
    StreamProtocolError,
    WritecraftError,
)
from .sinks import CallbackSink, QueueSink, StreamSink

__all__ = [
    "APIError",
    "AssistantResponse",
    "AuthenticationError",
    "CallbackSink",
    "Message",
    "MessageStream",
    "NetworkError",
    "NoApiKeyError",
    "QueueSink",
    "RateLimitError",
    "StopReason",
    "StreamProtocolError",
    "StreamSink",
    "TextBlock",
    "Tool",
    "ToolResultBlock",
    "ToolUse",
    "ToolUseBlock",
    # Main client
    "Writecraft",
    "WritecraftError",
    "consume_stream",
]
