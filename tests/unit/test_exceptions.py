"""Unit tests for exception classes."""

import pytest

from writecraft.exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    NoApiKeyError,
    RateLimitError,
    StreamProtocolError,
    WritecraftError,
)


@pytest.mark.unit
class TestWritecraftError:
    """Test cases for base WritecraftError class."""

    def test_basic_error_creation(self):
        error = WritecraftError("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.code is None
        assert error.details == {}

    def test_error_with_code_and_details(self):
        error = WritecraftError("Test error", code="TEST_ERROR", details={"field": "x"})

        assert error.code == "TEST_ERROR"
        assert error.details == {"field": "x"}

    def test_is_exception(self):
        with pytest.raises(WritecraftError):
            raise WritecraftError("boom")


@pytest.mark.unit
class TestAPIError:
    def test_status_and_type(self):
        error = APIError("Server error: Overloaded", status_code=529, error_type="overloaded_error")

        assert error.status_code == 529
        assert error.error_type == "overloaded_error"
        assert isinstance(error, WritecraftError)

    def test_in_stream_error_has_no_status(self):
        assert APIError("api_error: boom").status_code is None

    def test_invalid_api_key(self):
        error = AuthenticationError.invalid_api_key()

        assert isinstance(error, APIError)
        assert error.message == "Invalid API key"
        assert error.status_code == 401
        assert error.code == "invalid_api_key"


@pytest.mark.unit
class TestRateLimitError:
    def test_defaults(self):
        error = RateLimitError("Slow down")

        assert error.message == "Slow down"
        assert error.status_code == 429
        assert error.retry_after is None

    def test_retry_after(self):
        assert RateLimitError("Slow down", retry_after=12.5).retry_after == 12.5


@pytest.mark.unit
class TestOtherErrors:
    def test_no_api_key_guidance(self):
        error = NoApiKeyError()

        assert "writecraft key set" in error.message
        assert "WRITECRAFT_API_KEY" in error.message
        assert error.code == "no_api_key"

    def test_no_api_key_custom_message(self):
        assert NoApiKeyError("missing").message == "missing"

    @pytest.mark.parametrize("cls", [NetworkError, StreamProtocolError, NoApiKeyError])
    def test_hierarchy(self, cls):
        assert issubclass(cls, WritecraftError)
        assert not issubclass(cls, APIError)
