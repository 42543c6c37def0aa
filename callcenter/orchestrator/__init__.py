"""Call routing: intent detection, model fallback, agent orchestration."""

__all__ = [
    "engine",
    "intent",
    "llm_client",
    "patterns",
]
