"""
Model-backed intent classification via the Anthropic API.

Used only as a fallback when the regex patterns cannot place an utterance.

Production hardening:
- All LLM calls wrapped in asyncio.wait_for() with configurable timeout
- Exponential backoff retry (3 attempts) on transient failures
- Clear error categorization: transient vs permanent failures
"""

import asyncio
import logging
from typing import Optional

import anthropic

from callcenter.shared.config import AnthropicConfig
from callcenter.shared.interfaces import IIntentClassifier

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Retry / timeout constants
# ---------------------------------------------------------------------------

LLM_CALL_TIMEOUT_SECONDS = 10       # Callers are on the line; keep this short
LLM_MAX_RETRIES = 3                  # Total attempts (1 initial + 2 retries)
LLM_BACKOFF_BASE_SECONDS = 0.5      # Exponential backoff base: 0.5s, 1s, 2s

# Errors that are worth retrying (transient)
_TRANSIENT_ERROR_KEYWORDS = (
    "timeout", "timed out", "rate_limit", "rate limit",
    "overloaded", "capacity", "529", "503", "502",
    "connection", "reset", "eof", "broken pipe",
)

NO_MATCH = "NONE"


def _is_transient_error(error: Exception) -> bool:
    """Determine if an error is transient and worth retrying."""
    error_str = str(error).lower()
    return any(keyword in error_str for keyword in _TRANSIENT_ERROR_KEYWORDS)


async def _retry_with_backoff(coro_factory, operation_name: str) -> Optional[str]:
    """
    Execute an async operation with timeout + exponential backoff retry.

    Args:
        coro_factory: A callable that returns a new coroutine on each call.
        operation_name: For logging (e.g., "Intent classification").

    Returns:
        The coroutine's text result, or None on permanent or final failure.
    """
    last_error = None
    for attempt in range(1, LLM_MAX_RETRIES + 1):
        try:
            return await asyncio.wait_for(coro_factory(), timeout=LLM_CALL_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            last_error = TimeoutError(
                f"{operation_name} timed out after {LLM_CALL_TIMEOUT_SECONDS}s"
            )
            logger.warning(f"{operation_name} timeout (attempt {attempt}/{LLM_MAX_RETRIES})")
        except Exception as e:
            last_error = e
            if not _is_transient_error(e):
                logger.error(f"{operation_name} permanent error: {e}")
                return None
            logger.warning(
                f"{operation_name} transient error (attempt {attempt}/{LLM_MAX_RETRIES}): {e}"
            )

        if attempt < LLM_MAX_RETRIES:
            backoff = LLM_BACKOFF_BASE_SECONDS * (2 ** (attempt - 1))
            logger.info(f"{operation_name} retrying in {backoff:.1f}s...")
            await asyncio.sleep(backoff)

    logger.error(f"{operation_name} failed after {LLM_MAX_RETRIES} attempts: {last_error}")
    return None


def build_prompt(transcript: str, sector: str, intents: list[str]) -> str:
    options = "\n".join(f"- {i}" for i in intents)
    return (
        f"You route calls for a {sector} customer-service line. "
        f"The caller may mix Hindi and English.\n\n"
        f"Caller said: \"{transcript}\"\n\n"
        f"Pick the single best intent from this list:\n{options}\n\n"
        f"Reply with the intent name only, or {NO_MATCH} if none fit."
    )


class LLMIntentClassifier(IIntentClassifier):
    """Claude-backed intent picker."""

    def __init__(self, config: AnthropicConfig):
        self._config = config
        self._client = anthropic.AsyncAnthropic(api_key=config.api_key) if config.api_key else None
        self._total_input = 0
        self._total_output = 0

    async def classify(self, transcript: str, sector: str, intents: list[str]) -> Optional[str]:
        if self._client is None:
            logger.debug("No Anthropic API key - skipping model intent fallback")
            return None
        if not intents:
            return None

        kwargs = {
            "model": self._config.model,
            "max_tokens": self._config.max_tokens,
            "messages": [{"role": "user", "content": build_prompt(transcript, sector, intents)}],
        }
        text = await _retry_with_backoff(lambda: self._raw_call(kwargs), "Intent classification")
        return self._parse_intent(text, intents)

    async def _raw_call(self, kwargs: dict) -> str:
        """Single Anthropic API call attempt (used by retry wrapper)."""
        response = await self._client.messages.create(**kwargs)
        usage = response.usage
        self._total_input += usage.input_tokens
        self._total_output += usage.output_tokens
        return "".join(block.text for block in response.content if block.type == "text")

    @staticmethod
    def _parse_intent(text: Optional[str], intents: list[str]) -> Optional[str]:
        if not text:
            return None
        answer = text.strip().strip(".").upper()
        if answer in intents:
            return answer
        # Tolerate a short sentence around the intent name
        for intent in intents:
            if intent in answer:
                return intent
        return None

    def get_usage(self) -> dict:
        return {"total_input_tokens": self._total_input, "total_output_tokens": self._total_output}
