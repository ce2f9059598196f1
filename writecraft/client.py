"""
Writecraft client for streaming replies from the Messages API.
"""

import logging
import os
from typing import Any

from ._http import HTTPClient, _error_message
from ._streaming import MessageStream
from ._types import AssistantResponse, Message, Tool
from .auth.credentials import DEFAULT_PROFILE, CredentialManager
from .exceptions import APIError, NoApiKeyError
from .sinks import StreamSink

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.anthropic.com"
DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_MAX_TOKENS = 4096
MESSAGES_PATH = "/v1/messages"

MessageLike = Message | dict[str, Any]
ToolLike = Tool | dict[str, Any]


def _message_dict(message: MessageLike) -> dict[str, Any]:
    if isinstance(message, Message):
        return message.to_dict()
    return {"role": message["role"], "content": message["content"]}


def _tool_dict(tool: ToolLike) -> dict[str, Any]:
    if isinstance(tool, Tool):
        return tool.to_dict()
    return dict(tool)


class Writecraft:
    """Main client for streaming chat replies."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float = 600,
        profile: str = DEFAULT_PROFILE,
        credentials: CredentialManager | None = None,
    ):
        """
        Initialize Writecraft client.

        Args:
            api_key: API key. If not provided, checks the credential stores
                (keychain, config file, memory), then WRITECRAFT_API_KEY and
                ANTHROPIC_API_KEY
            base_url: Base URL for API. Defaults to WRITECRAFT_BASE_URL or the
                public endpoint
            model: Default model. Defaults to WRITECRAFT_MODEL or DEFAULT_MODEL
            timeout: Request timeout in seconds
            profile: Credential profile name (default: "default")
            credentials: Credential manager to use instead of the default chain
        """
        if api_key is None:
            self.credentials = credentials or CredentialManager(profile=profile)
            api_key = (
                self.credentials.get_api_key()
                or os.getenv("WRITECRAFT_API_KEY")
                or os.getenv("ANTHROPIC_API_KEY")
            )
        else:
            self.credentials = credentials

        base_url = base_url or os.getenv("WRITECRAFT_BASE_URL", DEFAULT_BASE_URL)
        self.model = model or os.getenv("WRITECRAFT_MODEL", DEFAULT_MODEL)
        self.http = HTTPClient(base_url=base_url, api_key=api_key, timeout=timeout)

    @property
    def api_key(self) -> str | None:
        return self.http.api_key

    @property
    def base_url(self) -> str:
        return self.http.base_url

    def _require_api_key(self) -> str:
        if not self.http.api_key:
            raise NoApiKeyError()
        return self.http.api_key

    def _build_request(
        self,
        messages: list[MessageLike],
        system_prompt: str | None,
        tools: list[ToolLike] | None,
        model: str | None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": model or self.model,
            "max_tokens": DEFAULT_MAX_TOKENS,
            "messages": [_message_dict(m) for m in messages],
            "stream": True,
        }
        if system_prompt is not None:
            body["system"] = system_prompt
        if tools:
            body["tools"] = [_tool_dict(t) for t in tools]
        return body

    def stream(
        self,
        messages: list[MessageLike],
        system_prompt: str | None = None,
        tools: list[ToolLike] | None = None,
        model: str | None = None,
        sink: StreamSink | None = None,
        strict: bool = False,
    ) -> MessageStream:
        """
        Open a streaming request and return its event stream.

        Raises:
            NoApiKeyError: No API key is configured
            NetworkError: The request could not be sent
            APIError: The API answered with a non-success status
        """
        api_key = self._require_api_key()
        body = self._build_request(messages, system_prompt, tools, model)
        logger.debug("Streaming %d message(s) to %s", len(body["messages"]), body["model"])
        response = self.http.stream("POST", MESSAGES_PATH, api_key=api_key, json=body)
        return MessageStream.from_response(response, sink=sink, strict=strict)

    def send_message(
        self,
        messages: list[MessageLike],
        system_prompt: str | None = None,
        model: str | None = None,
        sink: StreamSink | None = None,
    ) -> str:
        """
        Send a conversation and return the complete reply text.

        Text chunks are pushed to ``sink`` as they arrive.
        """
        with self.stream(messages, system_prompt=system_prompt, model=model, sink=sink) as stream:
            return stream.until_done().text_content

    def send_message_with_tools(
        self,
        messages: list[MessageLike],
        system_prompt: str | None = None,
        tools: list[ToolLike] | None = None,
        model: str | None = None,
        sink: StreamSink | None = None,
    ) -> AssistantResponse:
        """
        Send a conversation with tool definitions.

        Returns:
            AssistantResponse with reply text, completed tool calls and stop reason
        """
        with self.stream(
            messages, system_prompt=system_prompt, tools=tools, model=model, sink=sink
        ) as stream:
            return stream.until_done()

    def test_api_key(self, api_key: str) -> bool:
        """
        Check a key with a one-token request.

        Returns:
            True if the key is accepted, False if the API rejects it (401)

        Raises:
            APIError: Any other non-success status
            NetworkError: The request could not be sent
        """
        body = {
            "model": self.model,
            "max_tokens": 1,
            "messages": [{"role": "user", "content": "Hi"}],
        }
        resp = self.http.request_raw("POST", MESSAGES_PATH, api_key=api_key, json=body)
        if resp.status_code == 200:
            return True
        if resp.status_code == 401:
            return False
        raise APIError(
            f"API error ({resp.status_code}): {_error_message(resp)}", status_code=resp.status_code
        )

    def close(self) -> None:
        """Close the HTTP session."""
        self.http.close()
