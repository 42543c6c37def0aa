"""
Domain models for the call-center backend.
Pure data classes with no external dependencies (Clean Architecture inner layer).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class AgentState(Enum):
    """Lifecycle states of a per-call agent."""
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    WAITING_FOR_INFO = "WAITING_FOR_INFO"
    COMPLETED = "COMPLETED"
    ESCALATED = "ESCALATED"
    ERROR = "ERROR"
    CANCELLED = "CANCELLED"


class AgentEventType(Enum):
    """Events an agent emits while executing."""
    COMPLETE = "complete"
    ERROR = "error"
    NEED_INFO = "need_info"
    NEED_ESCALATION = "need_escalation"


# Events after which the agent is done with the call
TERMINAL_EVENTS = frozenset({AgentEventType.COMPLETE, AgentEventType.NEED_ESCALATION})


class Intent:
    """Generic intents recognised in every sector."""
    GREETING = "GREETING"
    CANCEL_ACTION = "CANCEL_ACTION"
    ESCALATION = "ESCALATION"
    UNKNOWN = "UNKNOWN"


@dataclass
class AgentEvent:
    """A single event emitted by an agent."""
    event_type: AgentEventType
    call_id: str
    agent_type: str
    payload: dict = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return self.event_type in TERMINAL_EVENTS

    def to_dict(self) -> dict:
        return {
            "type": self.event_type.value,
            "call_id": self.call_id,
            "agent_type": self.agent_type,
            "payload": self.payload,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class IntentResult:
    """Outcome of intent detection on a single utterance."""
    intent: str
    confidence: float
    sector: str = "ecommerce"
    entities: dict = field(default_factory=dict)
    requires_agent: bool = False
    should_cancel_agent: bool = False
    should_escalate: bool = False
    source: str = "regex"  # regex | llm

    def to_dict(self) -> dict:
        return {
            "intent": self.intent,
            "confidence": self.confidence,
            "sector": self.sector,
            "entities": self.entities,
            "requires_agent": self.requires_agent,
            "should_cancel_agent": self.should_cancel_agent,
            "should_escalate": self.should_escalate,
            "source": self.source,
        }


@dataclass
class ActiveAgent:
    """Book-keeping for an agent bound to a live call."""
    agent: Any
    sector: str
    agent_name: str = ""
    client_id: Optional[int] = None
    start_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "call_id": self.agent.call_id,
            "agent": self.agent_name or self.agent.name,
            "agent_type": self.agent.agent_type,
            "state": self.agent.state.value,
            "sector": self.sector,
            "client_id": self.client_id,
            "start_time": self.start_time.isoformat(),
            "duration_seconds": round(
                (datetime.now(timezone.utc) - self.start_time).total_seconds(), 2
            ),
        }
