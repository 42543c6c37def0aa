"""
Base Agent - Abstract base class for all per-intent call agents.

Each agent:
1. Declares the fields it needs (required_fields) and how to ask for them
2. Refuses to run until every required field is present
3. Looks up its (mock) backing data and formats a reply
4. Emits exactly one event per execute(): complete, error, need_info or
   need_escalation
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from callcenter.shared.errors import AgentEscalation, AgentValidationError, NeedMoreInfo
from callcenter.shared.models import AgentEvent, AgentEventType, AgentState

logger = logging.getLogger(__name__)

EventListener = Callable[[AgentEvent], None]


def make_reference(prefix: str) -> str:
    """Human-quotable reference such as APPT_1718000000000."""
    return f"{prefix}_{int(time.time() * 1000)}"


class BaseAgent(ABC):
    """Abstract base class for all sector agents."""

    required_fields: tuple = ()
    sector: str = "ecommerce"
    agent_type: str = "BASE"
    field_prompts: dict = {}

    def __init__(self, call_id: str, initial_data: Optional[dict] = None):
        self.call_id = call_id
        self.data: dict = dict(initial_data or {})
        self.state = AgentState.IDLE
        self.result: Optional[dict] = None
        self.events: list[AgentEvent] = []
        self._listeners: dict[AgentEventType, list[EventListener]] = {}

    @property
    def name(self) -> str:
        return type(self).__name__

    # --- Events ---

    def on(self, event_type: AgentEventType, listener: EventListener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def emit(self, event_type: AgentEventType, payload: dict) -> AgentEvent:
        event = AgentEvent(
            event_type=event_type,
            call_id=self.call_id,
            agent_type=self.agent_type,
            payload=payload,
        )
        self.events.append(event)
        for listener in self._listeners.get(event_type, []):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Listener for {event_type.value} on {self.name} failed: {e}")
        return event

    # --- Data ---

    def update_data(self, data: Optional[dict]) -> None:
        """Merge newly collected fields into the agent's working data."""
        if data:
            self.data.update({k: v for k, v in data.items() if v is not None})

    def missing_fields(self) -> list[str]:
        missing = []
        for f in self.required_fields:
            value = self.data.get(f)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(f)
        return missing

    def has_required_data(self) -> bool:
        return not self.missing_fields()

    def get_prompt_for_field(self, field: str) -> str:
        prompt = self.field_prompts.get(field)
        if prompt:
            return prompt
        return f"Could you please provide your {field.replace('_', ' ')}?"

    # --- Execution ---

    async def execute(self) -> AgentEvent:
        """Run the agent once against its current data and return the emitted event."""
        self.state = AgentState.RUNNING
        logger.info(f"[{self.sector}] {self.name} running for call {self.call_id}")

        missing = self.missing_fields()
        if missing:
            self.state = AgentState.WAITING_FOR_INFO
            return self.emit(AgentEventType.NEED_INFO, {
                "message": self.get_prompt_for_field(missing[0]),
                "field": missing[0],
                "missing_fields": missing,
            })

        try:
            result = await self.handle()
        except AgentValidationError as e:
            self.state = AgentState.WAITING_FOR_INFO
            logger.info(f"[{self.sector}] {self.name} validation failed: {e.message}")
            return self.emit(AgentEventType.ERROR, {"message": e.message, "field": e.field})
        except NeedMoreInfo as e:
            self.state = AgentState.WAITING_FOR_INFO
            return self.emit(AgentEventType.NEED_INFO, {
                "message": e.message, "field": e.field, **e.extra,
            })
        except AgentEscalation as e:
            self.state = AgentState.ESCALATED
            logger.warning(f"[{self.sector}] {self.name} escalated for call {self.call_id}: {e.reason}")
            return self.emit(AgentEventType.NEED_ESCALATION, {
                "message": e.message, "reason": e.reason, **e.extra,
            })
        except Exception as e:
            self.state = AgentState.ERROR
            logger.error(f"[{self.sector}] {self.name} failed for call {self.call_id}: {e}")
            return self.emit(AgentEventType.ERROR, {"message": str(e)})

        self.result = result
        self.state = AgentState.COMPLETED
        logger.info(f"[{self.sector}] {self.name} completed for call {self.call_id}")
        return self.emit(AgentEventType.COMPLETE, result)

    @abstractmethod
    async def handle(self) -> dict:
        """Do the agent's work on validated data and return the result.

        Raise AgentValidationError, NeedMoreInfo or AgentEscalation to
        short-circuit with the corresponding event.
        """

    def cancel(self) -> None:
        self.state = AgentState.CANCELLED
        logger.info(f"{self.name} cancelled for call {self.call_id}")

    def to_dict(self) -> dict:
        return {
            "call_id": self.call_id,
            "agent": self.name,
            "agent_type": self.agent_type,
            "sector": self.sector,
            "state": self.state.value,
            "data": self.data,
            "result": self.result,
            "missing_fields": self.missing_fields(),
        }
