"""
Tests for the model-backed intent classifier and its production hardening:
retry/timeout, transient error detection, backoff.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from callcenter.orchestrator.llm_client import (
    LLMIntentClassifier,
    LLM_BACKOFF_BASE_SECONDS,
    LLM_MAX_RETRIES,
    NO_MATCH,
    _is_transient_error,
    _retry_with_backoff,
    build_prompt,
)
from callcenter.shared.config import AnthropicConfig

INTENTS = ["ORDER_LOOKUP", "REFUND", "RETURN_REQUEST"]


def _response(text: str, input_tokens: int = 12, output_tokens: int = 3):
    block = MagicMock()
    block.type = "text"
    block.text = text
    response = MagicMock()
    response.content = [block]
    response.usage.input_tokens = input_tokens
    response.usage.output_tokens = output_tokens
    return response


# ---------------------------------------------------------------------------
# Unit tests: prompt + parsing
# ---------------------------------------------------------------------------

class TestBuildPrompt:
    def test_lists_every_intent(self):
        prompt = build_prompt("paisa kab milega", "ecommerce", INTENTS)
        for intent in INTENTS:
            assert f"- {intent}" in prompt
        assert "paisa kab milega" in prompt
        assert NO_MATCH in prompt


class TestParseIntent:
    def test_exact(self):
        assert LLMIntentClassifier._parse_intent("REFUND", INTENTS) == "REFUND"

    def test_case_and_punctuation(self):
        assert LLMIntentClassifier._parse_intent(" refund. ", INTENTS) == "REFUND"

    def test_sentence_around_intent(self):
        assert LLMIntentClassifier._parse_intent("The intent is RETURN_REQUEST", INTENTS) == "RETURN_REQUEST"

    def test_no_match(self):
        assert LLMIntentClassifier._parse_intent(NO_MATCH, INTENTS) is None

    def test_empty(self):
        assert LLMIntentClassifier._parse_intent(None, INTENTS) is None
        assert LLMIntentClassifier._parse_intent("", INTENTS) is None


# ---------------------------------------------------------------------------
# Unit tests: LLMIntentClassifier
# ---------------------------------------------------------------------------

class TestClassifierNoKey:
    @pytest.mark.asyncio
    @patch("callcenter.orchestrator.llm_client.anthropic.AsyncAnthropic")
    async def test_no_key_skips_model(self, mock_anthropic):
        classifier = LLMIntentClassifier(AnthropicConfig(api_key=""))
        assert await classifier.classify("anything", "ecommerce", INTENTS) is None
        mock_anthropic.assert_not_called()

    def test_usage_starts_at_zero(self):
        usage = LLMIntentClassifier(AnthropicConfig(api_key="")).get_usage()
        assert usage["total_input_tokens"] == 0
        assert usage["total_output_tokens"] == 0


class TestClassifierWithModel:
    @pytest.mark.asyncio
    @patch("callcenter.orchestrator.llm_client.anthropic.AsyncAnthropic")
    async def test_classify_returns_intent_and_tracks_usage(self, mock_cls):
        mock_client = mock_cls.return_value
        mock_client.messages.create = AsyncMock(return_value=_response("REFUND"))

        classifier = LLMIntentClassifier(AnthropicConfig(api_key="sk-ant-test", model="claude-test"))
        result = await classifier.classify("mujhe paise wapas do", "ecommerce", INTENTS)

        assert result == "REFUND"
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert "mujhe paise wapas do" in kwargs["messages"][0]["content"]
        assert classifier.get_usage() == {"total_input_tokens": 12, "total_output_tokens": 3}

    @pytest.mark.asyncio
    @patch("callcenter.orchestrator.llm_client.anthropic.AsyncAnthropic")
    async def test_empty_intent_list_skips_model(self, mock_cls):
        mock_client = mock_cls.return_value
        mock_client.messages.create = AsyncMock()

        classifier = LLMIntentClassifier(AnthropicConfig(api_key="sk-ant-test"))
        assert await classifier.classify("x", "ecommerce", []) is None
        mock_client.messages.create.assert_not_called()

    @pytest.mark.asyncio
    @patch("callcenter.orchestrator.llm_client.anthropic.AsyncAnthropic")
    async def test_permanent_error_returns_none(self, mock_cls):
        mock_client = mock_cls.return_value
        mock_client.messages.create = AsyncMock(side_effect=Exception("Invalid API key provided"))

        classifier = LLMIntentClassifier(AnthropicConfig(api_key="sk-ant-bad"))
        assert await classifier.classify("x", "ecommerce", INTENTS) is None
        assert mock_client.messages.create.await_count == 1


# ===========================================================================
# Hardening tests: _is_transient_error()
# ===========================================================================

class TestIsTransientError:
    """Tests for transient vs permanent error classification."""

    def test_timeout_is_transient(self):
        assert _is_transient_error(Exception("Request timed out")) is True

    def test_rate_limit_is_transient(self):
        assert _is_transient_error(Exception("rate_limit_error: too many requests")) is True

    def test_overloaded_is_transient(self):
        assert _is_transient_error(Exception("Server overloaded, try again")) is True

    def test_503_is_transient(self):
        assert _is_transient_error(Exception("HTTP 503 Service Unavailable")) is True

    def test_connection_error_is_transient(self):
        assert _is_transient_error(Exception("Connection reset by peer")) is True

    def test_invalid_api_key_is_permanent(self):
        assert _is_transient_error(Exception("Invalid API key provided")) is False

    def test_model_not_found_is_permanent(self):
        assert _is_transient_error(Exception("Model not found: claude-invalid")) is False

    def test_empty_error_is_permanent(self):
        assert _is_transient_error(Exception("")) is False


# ===========================================================================
# Hardening tests: _retry_with_backoff()
# ===========================================================================

class TestRetryWithBackoff:
    """Tests for the retry/timeout wrapper around model calls."""

    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self):
        async def _coro():
            return "REFUND"

        assert await _retry_with_backoff(lambda: _coro(), "test op") == "REFUND"

    @pytest.mark.asyncio
    async def test_retries_on_transient_error(self):
        """Transient error on first call, success on second."""
        call_count = 0

        async def _coro():
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise Exception("Connection reset by peer")
            return "recovered"

        with patch("callcenter.orchestrator.llm_client.asyncio.sleep", new_callable=AsyncMock):
            result = await _retry_with_backoff(lambda: _coro(), "test op")

        assert result == "recovered"
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_permanent_error_no_retry(self):
        call_count = 0

        async def _coro():
            nonlocal call_count
            call_count += 1
            raise Exception("Invalid API key provided")

        assert await _retry_with_backoff(lambda: _coro(), "test op") is None
        assert call_count == 1  # Only one attempt

    @pytest.mark.asyncio
    async def test_all_retries_exhausted(self):
        call_count = 0

        async def _coro():
            nonlocal call_count
            call_count += 1
            raise Exception("Connection timeout")

        with patch("callcenter.orchestrator.llm_client.asyncio.sleep", new_callable=AsyncMock):
            result = await _retry_with_backoff(lambda: _coro(), "test op")

        assert result is None
        assert call_count == LLM_MAX_RETRIES

    @pytest.mark.asyncio
    async def test_timeout_triggers_retry(self):
        """asyncio.TimeoutError should trigger retry, not immediate failure."""
        call_count = 0

        async def _coro():
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise asyncio.TimeoutError()
            return "ok after timeout"

        with patch("callcenter.orchestrator.llm_client.asyncio.sleep", new_callable=AsyncMock):
            result = await _retry_with_backoff(lambda: _coro(), "test op")

        assert call_count == 2
        assert result == "ok after timeout"

    @pytest.mark.asyncio
    async def test_backoff_timing(self):
        """Verify exponential backoff sleep is called with correct values."""
        sleep_calls = []

        async def _mock_sleep(seconds):
            sleep_calls.append(seconds)

        async def _coro():
            raise Exception("overloaded server 529")

        with patch("callcenter.orchestrator.llm_client.asyncio.sleep", side_effect=_mock_sleep):
            await _retry_with_backoff(lambda: _coro(), "test op")

        # Sleep after attempts 1 and 2, not after the last one
        assert len(sleep_calls) == LLM_MAX_RETRIES - 1
        assert sleep_calls[0] == LLM_BACKOFF_BASE_SECONDS * 1
        assert sleep_calls[1] == LLM_BACKOFF_BASE_SECONDS * 2
