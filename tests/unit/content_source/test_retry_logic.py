"""Unit tests for content_source.retry_logic module."""

from unittest.mock import Mock, patch

import pytest

from content_files.content_source.errors import SourceAccessError
from content_files.content_source.retry_logic import (
    MAX_RETRIES,
    retry_on_rate_limit,
)


class RateLimited(Exception):
    """Exception carrying an HTTP status code."""

    def __init__(self, status_code=429):
        super().__init__("slow down")
        self.status_code = status_code


class TestRetryOnRateLimit:
    """Test cases for retry_on_rate_limit."""

    @patch("content_files.content_source.retry_logic.time.sleep")
    def test_success_first_try(self, mock_sleep):
        """Successful calls are not retried."""
        func = Mock(return_value="ok")

        assert retry_on_rate_limit(func, 1, key="v") == "ok"
        func.assert_called_once_with(1, key="v")
        mock_sleep.assert_not_called()

    @patch("content_files.content_source.retry_logic.time.sleep")
    def test_retries_with_exponential_backoff(self, mock_sleep):
        """Rate limits are retried after 1s, 2s and 4s."""
        func = Mock(side_effect=[RateLimited(), RateLimited(), RateLimited(), "ok"])

        assert retry_on_rate_limit(func) == "ok"
        assert [call.args[0] for call in mock_sleep.call_args_list] == [1, 2, 4]

    @patch("content_files.content_source.retry_logic.time.sleep")
    def test_gives_up_after_max_retries(self, mock_sleep):
        """Persistent rate limits raise SourceAccessError."""
        func = Mock(side_effect=RateLimited())

        with pytest.raises(SourceAccessError):
            retry_on_rate_limit(func)

        assert func.call_count == MAX_RETRIES + 1

    @pytest.mark.parametrize("error", [
        Exception("HTTP 429"),
        Exception("Too Many Requests"),
        Exception("rate limit exceeded"),
    ])
    @patch("content_files.content_source.retry_logic.time.sleep")
    def test_detects_rate_limit_messages(self, mock_sleep, error):
        """Rate limits are recognised from the error message."""
        func = Mock(side_effect=[error, "ok"])

        assert retry_on_rate_limit(func) == "ok"

    @patch("content_files.content_source.retry_logic.time.sleep")
    def test_detects_response_status(self, mock_sleep):
        """Rate limits are recognised from an attached response."""
        error = Exception("failed")
        error.response = Mock(status_code=429)
        func = Mock(side_effect=[error, "ok"])

        assert retry_on_rate_limit(func) == "ok"

    @patch("content_files.content_source.retry_logic.time.sleep")
    def test_other_errors_pass_through(self, mock_sleep):
        """Non rate limit errors are raised immediately."""
        func = Mock(side_effect=RateLimited(status_code=500))

        with pytest.raises(RateLimited):
            retry_on_rate_limit(func)

        func.assert_called_once()
        mock_sleep.assert_not_called()
