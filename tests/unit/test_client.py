"""Unit tests for the Writecraft client class."""

import json
from unittest.mock import Mock

import pytest
import requests
import responses

from tests.utils.factories import SSEFactory
from writecraft import Writecraft
from writecraft._types import Message, TextBlock, Tool, ToolResultBlock
from writecraft.auth.credentials import CredentialManager
from writecraft.client import DEFAULT_BASE_URL, DEFAULT_MAX_TOKENS, DEFAULT_MODEL
from writecraft.exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    NoApiKeyError,
    RateLimitError,
)
from writecraft.sinks import RecordingSink


def _no_stored_key():
    credentials = Mock(spec=CredentialManager)
    credentials.get_api_key.return_value = None
    return credentials


def _add_stream(mock_requests, url, *events, status=200):
    mock_requests.add(
        responses.POST,
        url,
        body=SSEFactory.body(*events),
        status=status,
        content_type="text/event-stream",
    )


@pytest.mark.unit
class TestWritecraftInit:
    """Key, base URL and model resolution."""

    def test_explicit_api_key(self, api_key, base_url):
        client = Writecraft(api_key=api_key, base_url=base_url)
        assert client.api_key == api_key
        assert client.base_url == base_url
        assert client.model == DEFAULT_MODEL

    def test_stored_key_wins_over_environment(self, monkeypatch):
        monkeypatch.setenv("WRITECRAFT_API_KEY", "sk-env")
        credentials = Mock(spec=CredentialManager)
        credentials.get_api_key.return_value = "sk-stored"

        client = Writecraft(credentials=credentials)

        assert client.api_key == "sk-stored"

    def test_writecraft_env_before_anthropic_env(self, monkeypatch):
        monkeypatch.setenv("WRITECRAFT_API_KEY", "sk-writecraft")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-anthropic")
        assert Writecraft(credentials=_no_stored_key()).api_key == "sk-writecraft"

    def test_anthropic_env_fallback(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-anthropic")
        assert Writecraft(credentials=_no_stored_key()).api_key == "sk-anthropic"

    def test_no_key_anywhere(self):
        client = Writecraft(credentials=_no_stored_key())
        assert client.api_key is None
        assert client.base_url == DEFAULT_BASE_URL

    def test_environment_base_url_and_model(self, monkeypatch, api_key):
        monkeypatch.setenv("WRITECRAFT_BASE_URL", "https://proxy.example.com/")
        monkeypatch.setenv("WRITECRAFT_MODEL", "claude-test")
        client = Writecraft(api_key=api_key)
        assert client.base_url == "https://proxy.example.com"
        assert client.model == "claude-test"


@pytest.mark.unit
class TestSendMessage:
    def test_streams_text(self, client, mock_requests, messages_url):
        _add_stream(
            mock_requests,
            messages_url,
            SSEFactory.block_start_text(),
            SSEFactory.text_delta("Hello"),
            SSEFactory.text_delta(" world"),
            SSEFactory.block_stop(),
            SSEFactory.message_stop(),
        )
        sink = RecordingSink()

        text = client.send_message([{"role": "user", "content": "Hi"}], sink=sink)

        assert text == "Hello world"
        assert sink.kinds == ["text", "text", "message_stop"]

    def test_request_body(self, client, mock_requests, messages_url, api_key):
        _add_stream(mock_requests, messages_url, SSEFactory.message_stop())

        client.send_message([{"role": "user", "content": "Hi"}], system_prompt="Be brief")

        request = mock_requests.calls[0].request
        body = json.loads(request.body)
        assert body == {
            "model": DEFAULT_MODEL,
            "max_tokens": DEFAULT_MAX_TOKENS,
            "messages": [{"role": "user", "content": "Hi"}],
            "stream": True,
            "system": "Be brief",
        }
        assert request.headers["x-api-key"] == api_key
        assert request.headers["anthropic-version"] == "2023-06-01"

    def test_omits_system_and_tools_when_absent(self, client, mock_requests, messages_url):
        _add_stream(mock_requests, messages_url, SSEFactory.message_stop())

        client.send_message_with_tools([{"role": "user", "content": "Hi"}], tools=[])

        body = json.loads(mock_requests.calls[0].request.body)
        assert "system" not in body
        assert "tools" not in body

    def test_model_override(self, client, mock_requests, messages_url):
        _add_stream(mock_requests, messages_url, SSEFactory.message_stop())
        client.send_message([{"role": "user", "content": "Hi"}], model="claude-other")
        assert json.loads(mock_requests.calls[0].request.body)["model"] == "claude-other"

    def test_no_api_key_raises_before_request(self, mock_requests):
        client = Writecraft(credentials=_no_stored_key())
        with pytest.raises(NoApiKeyError) as exc_info:
            client.send_message([{"role": "user", "content": "Hi"}])
        assert "writecraft key set" in exc_info.value.message
        assert len(mock_requests.calls) == 0

    def test_unauthorized(self, client, mock_requests, messages_url):
        mock_requests.add(responses.POST, messages_url, json={"error": {}}, status=401)
        with pytest.raises(AuthenticationError, match="Invalid API key"):
            client.send_message([{"role": "user", "content": "Hi"}])

    def test_rate_limited(self, client, mock_requests, messages_url):
        mock_requests.add(
            responses.POST,
            messages_url,
            json={"error": {"type": "rate_limit_error", "message": "Too many requests"}},
            status=429,
        )
        with pytest.raises(RateLimitError, match="Too many requests"):
            client.send_message([{"role": "user", "content": "Hi"}])

    def test_in_stream_error(self, client, mock_requests, messages_url):
        _add_stream(
            mock_requests,
            messages_url,
            SSEFactory.text_delta("par"),
            SSEFactory.error("api_error", "Internal server error"),
        )
        with pytest.raises(APIError, match="api_error: Internal server error"):
            client.send_message([{"role": "user", "content": "Hi"}])

    def test_connection_refused(self, client, mock_requests, messages_url):
        mock_requests.add(
            responses.POST, messages_url, body=requests.exceptions.ConnectionError("refused")
        )
        with pytest.raises(NetworkError):
            client.send_message([{"role": "user", "content": "Hi"}])


@pytest.mark.unit
class TestSendMessageWithTools:
    def test_tool_call_round(self, client, mock_requests, messages_url):
        _add_stream(
            mock_requests,
            messages_url,
            SSEFactory.block_start_text(),
            SSEFactory.text_delta("Checking."),
            SSEFactory.block_stop(),
            *SSEFactory.tool_call("toolu_1", "get_weather", ['{"city":', ' "Paris"}'], index=1),
            SSEFactory.message_delta("tool_use"),
            SSEFactory.message_stop(),
        )
        tool = Tool(
            name="get_weather",
            description="Weather for a city",
            input_schema={"type": "object", "properties": {"city": {"type": "string"}}},
        )

        response = client.send_message_with_tools(
            [Message(role="user", content="Weather in Paris?")], tools=[tool]
        )

        assert response.text_content == "Checking."
        assert response.stop_reason == "tool_use"
        assert response.tool_uses[0].name == "get_weather"
        assert response.tool_uses[0].input == {"city": "Paris"}

        body = json.loads(mock_requests.calls[0].request.body)
        assert body["tools"] == [tool.to_dict()]
        assert body["messages"] == [{"role": "user", "content": "Weather in Paris?"}]

    def test_block_messages_serialized(self, client, mock_requests, messages_url):
        _add_stream(mock_requests, messages_url, SSEFactory.message_stop("end_turn"))
        messages = [
            Message(role="user", content=[TextBlock("Weather?")]),
            Message(
                role="user",
                content=[ToolResultBlock(tool_use_id="toolu_1", content="Sunny", is_error=False)],
            ),
        ]

        client.send_message_with_tools(messages)

        body = json.loads(mock_requests.calls[0].request.body)
        assert body["messages"][1]["content"] == [
            {"type": "tool_result", "tool_use_id": "toolu_1", "content": "Sunny", "is_error": False}
        ]

    def test_stream_iteration(self, client, mock_requests, messages_url):
        _add_stream(
            mock_requests,
            messages_url,
            SSEFactory.text_delta("a"),
            SSEFactory.message_stop(),
        )
        with client.stream([{"role": "user", "content": "Hi"}]) as stream:
            events = list(stream)
        assert len(events) == 2
        assert stream.text == "a"


@pytest.mark.unit
class TestApiKeyCheck:
    def test_accepted(self, client, mock_requests, messages_url):
        mock_requests.add(responses.POST, messages_url, json={"id": "msg_1"}, status=200)

        assert client.test_api_key("sk-candidate") is True

        request = mock_requests.calls[0].request
        body = json.loads(request.body)
        assert request.headers["x-api-key"] == "sk-candidate"
        assert body["max_tokens"] == 1
        assert "stream" not in body

    def test_rejected(self, client, mock_requests, messages_url):
        mock_requests.add(responses.POST, messages_url, json={"error": {}}, status=401)
        assert client.test_api_key("sk-bad") is False

    def test_other_status_raises(self, client, mock_requests, messages_url):
        mock_requests.add(
            responses.POST,
            messages_url,
            json={"error": {"type": "api_error", "message": "Internal"}},
            status=500,
        )
        with pytest.raises(APIError) as exc_info:
            client.test_api_key("sk-candidate")
        assert exc_info.value.message == "API error (500): Internal"
        assert exc_info.value.status_code == 500
