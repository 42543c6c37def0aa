"""
Domain exceptions.
Raised by agents, the orchestrator and services; translated to HTTP status
codes at the API layer.
"""

from typing import Optional


class CallCenterError(Exception):
    """Base class for all domain errors."""


class AgentNotAvailableError(CallCenterError):
    """Requested agent type is not registered for the sector (or capacity is exhausted)."""

    def __init__(self, agent_type: str, sector: str, reason: str = ""):
        self.agent_type = agent_type
        self.sector = sector
        message = reason or f"Agent {agent_type} not available for sector {sector}"
        super().__init__(message)


class AgentValidationError(CallCenterError):
    """A supplied field failed agent-level validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class AgentEscalation(CallCenterError):
    """The agent cannot resolve the request and hands it to a human."""

    def __init__(self, message: str, reason: str, **extra):
        self.message = message
        self.reason = reason
        self.extra = extra
        super().__init__(message)


class NeedMoreInfo(CallCenterError):
    """The agent needs clarification on a field it already received."""

    def __init__(self, message: str, field: str, **extra):
        self.message = message
        self.field = field
        self.extra = extra
        super().__init__(message)


class CredentialNotFoundError(CallCenterError):
    """No stored credential matches the lookup."""


class CredentialInactiveError(CallCenterError):
    """Credential exists but has not been verified/activated."""


class CredentialTestError(CallCenterError):
    """A credential check against the third-party API failed."""


class EncryptionKeyError(CallCenterError):
    """The configured credential encryption key is unusable."""
