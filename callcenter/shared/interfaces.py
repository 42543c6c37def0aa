"""
Abstract interfaces (Ports) for the call-center services.
Following Dependency Inversion Principle - depend on abstractions, not concretions.
"""

from abc import ABC, abstractmethod
from typing import Optional


class IIntentClassifier(ABC):
    """Interface for a model-backed intent classifier (used when regexes miss)."""

    @abstractmethod
    async def classify(
        self, transcript: str, sector: str, intents: list[str]
    ) -> Optional[str]:
        """Return one of `intents`, or None if the utterance fits none of them."""


class ICredentialTester(ABC):
    """Interface for probing third-party credentials against the live API."""

    @abstractmethod
    async def test(self, api_type: str, credentials: dict) -> bool:
        """Return True if the provider accepted the credentials.

        Raises CredentialTestError for api types it does not know how to check.
        """

    @abstractmethod
    def supported_types(self) -> list[str]:
        """Return the api types this tester can check."""
