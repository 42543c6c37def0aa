"""
Orchestrator engine - routes caller utterances to per-sector agents.

Holds the registry of agents each sector offers (cached with a flat TTL)
and the single active agent bound to each live call.
"""

import asyncio
import logging
from threading import Lock
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from callcenter.agents.base_agent import BaseAgent
from callcenter.agents.catalog import agent_for_intent, agents_for_sector, resolve_agent_class
from callcenter.db.models import SectorAgent
from callcenter.orchestrator.intent import IntentDetector
from callcenter.shared.cache import TTLCache
from callcenter.shared.constants import (
    AGENT_CACHE_TTL_SECONDS,
    DEFAULT_LANGUAGE,
    DEFAULT_SECTOR,
    MAX_ACTIVE_AGENTS,
)
from callcenter.shared.errors import AgentNotAvailableError
from callcenter.shared.models import ActiveAgent, AgentState, Intent

logger = logging.getLogger(__name__)


class AgentOrchestrator:
    """
    Launches, tracks and retires agents for live calls.

    At most one agent is active per call: launching a different agent for
    the same call cancels the previous one first. Calls are keyed by
    (client_id, call_id), so one tenant never sees another tenant's agent
    even when their call IDs collide.
    """

    def __init__(
        self,
        session_factory=None,
        cache_ttl: float = AGENT_CACHE_TTL_SECONDS,
        max_capacity: int = MAX_ACTIVE_AGENTS,
        intent_detector: Optional[IntentDetector] = None,
    ):
        self._session_factory = session_factory
        self._agent_cache = TTLCache(default_ttl=cache_ttl)
        self._max_capacity = max_capacity
        self._intent = intent_detector or IntentDetector(session_factory)
        self._lock = Lock()
        self.active_agents: dict[tuple, ActiveAgent] = {}

    @property
    def intent_detector(self) -> IntentDetector:
        return self._intent

    # --- Sector agent registry ---

    def _load_agents_from_db(self, sector: str) -> Optional[dict[str, type]]:
        if self._session_factory is None:
            return None
        try:
            with self._session_factory() as session:
                rows = (
                    session.query(SectorAgent)
                    .filter(SectorAgent.sector == sector, SectorAgent.enabled.is_(True))
                    .order_by(SectorAgent.priority.asc(), SectorAgent.id.asc())
                    .all()
                )
        except SQLAlchemyError as e:
            logger.warning(f"Failed to load agents for {sector} from database, using built-ins: {e}")
            return None

        agents = {}
        for row in rows:
            cls = resolve_agent_class(row.agent_class)
            if cls is None:
                logger.warning(f"Unknown agent class {row.agent_class} for {sector}/{row.agent_type}, skipping")
                continue
            agents[row.agent_type] = cls

        if not agents:
            return None
        logger.info(f"Loaded {len(agents)} agents for sector {sector} from database")
        return agents

    async def load_agents_for_sector(self, sector: str) -> dict[str, type]:
        """Agent name -> class for the sector. DB rows when present, built-ins otherwise."""
        agents = await self._agent_cache.get_or_set(
            sector, lambda: asyncio.to_thread(self._load_agents_from_db, sector)
        )
        if agents:
            return agents
        logger.debug(f"Using built-in agents for sector {sector}")
        return agents_for_sector(sector)

    def clear_agent_cache(self) -> int:
        count = self._agent_cache.clear()
        logger.info(f"Agent cache cleared ({count} sectors)")
        return count

    def get_agent_for_intent(self, intent: str, sector: str = DEFAULT_SECTOR) -> str:
        return agent_for_intent(intent, sector)

    # --- Active agents ---

    async def launch_agent(
        self,
        call_id: str,
        agent_type: str,
        sector: str = DEFAULT_SECTOR,
        initial_data: Optional[dict] = None,
        client_id: Optional[int] = None,
    ) -> BaseAgent:
        available = await self.load_agents_for_sector(sector)
        agent_cls = available.get(agent_type)
        if agent_cls is None:
            logger.warning(
                f"Agent {agent_type} not available for sector {sector} "
                f"(available: {', '.join(available)})"
            )
            raise AgentNotAvailableError(agent_type, sector)

        key = (client_id, call_id)
        with self._lock:
            existing = self.active_agents.get(key)
            if existing is not None:
                if existing.agent_name == agent_type:
                    existing.agent.update_data(initial_data)
                    logger.info(f"Updated existing {agent_type} for call {call_id}")
                    return existing.agent
                logger.info(
                    f"Replacing {existing.agent_name} with {agent_type} for call {call_id}"
                )
                self._cancel_locked(key)

            if len(self.active_agents) >= self._max_capacity:
                raise AgentNotAvailableError(
                    agent_type, sector,
                    reason=f"Agent capacity reached ({self._max_capacity} active)",
                )

            agent = agent_cls(call_id, initial_data)
            self.active_agents[key] = ActiveAgent(
                agent=agent, sector=sector, agent_name=agent_type, client_id=client_id,
            )
            active_count = len(self.active_agents)

        logger.info(
            f"Agent {agent_type} launched for call {call_id} "
            f"[client {client_id}, {sector}] ({active_count} active)"
        )
        return agent

    def _cancel_locked(self, key: tuple) -> bool:
        entry = self.active_agents.pop(key, None)
        if entry is None:
            return False
        entry.agent.cancel()
        return True

    def cancel_agent(self, call_id: str, client_id: Optional[int] = None) -> bool:
        with self._lock:
            cancelled = self._cancel_locked((client_id, call_id))
        if cancelled:
            logger.info(f"Agent cancelled for call {call_id} [client {client_id}]")
        return cancelled

    def complete_agent(self, call_id: str, client_id: Optional[int] = None) -> bool:
        """Retire the call's agent if its last event was terminal."""
        key = (client_id, call_id)
        with self._lock:
            entry = self.active_agents.get(key)
            if entry is None or not entry.agent.events or not entry.agent.events[-1].is_terminal:
                return False
            del self.active_agents[key]
        logger.info(f"Agent {entry.agent_name} finished for call {call_id} ({entry.agent.state.value})")
        return True

    def get_active_agent(self, call_id: str, client_id: Optional[int] = None) -> Optional[ActiveAgent]:
        with self._lock:
            return self.active_agents.get((client_id, call_id))

    def get_active_agents(self, client_id: Optional[int] = None) -> list[ActiveAgent]:
        with self._lock:
            entries = list(self.active_agents.values())
        if client_id is None:
            return entries
        return [e for e in entries if e.client_id == client_id]

    def get_health(self) -> dict:
        with self._lock:
            active = len(self.active_agents)
        return {
            "active_agents": active,
            "max_capacity": self._max_capacity,
            "utilization_percent": round(active / self._max_capacity * 100, 2) if self._max_capacity else 0.0,
            "healthy": active < self._max_capacity,
            "cached_sectors": len(self._agent_cache.keys()),
        }

    # --- Conversation turn ---

    async def handle_utterance(
        self,
        call_id: str,
        transcript: str,
        sector: str = DEFAULT_SECTOR,
        client_defaults: Optional[dict] = None,
        language: str = DEFAULT_LANGUAGE,
        client_id: Optional[int] = None,
    ) -> dict:
        """
        Run one caller utterance through intent detection and the call's agent.

        Returns {intent, agent_type, event}; agent_type and event are None
        when no agent ran for this turn.
        """
        detection = await self._intent.detect_async(transcript, sector, language)
        response = {"intent": detection.to_dict(), "agent_type": None, "event": None}

        if detection.should_cancel_agent:
            response["cancelled"] = self.cancel_agent(call_id, client_id)
            return response

        if detection.intent == Intent.ESCALATION:
            self.cancel_agent(call_id, client_id)
            return response

        active = self.get_active_agent(call_id, client_id)
        if not detection.requires_agent:
            if active is None or active.agent.state != AgentState.WAITING_FOR_INFO:
                return response
            # Caller is answering the agent's last question
            agent_name = active.agent_name
            agent = active.agent
            answer = self._intent.extract_entities(transcript.lower().strip(), sector)
            missing = agent.missing_fields()
            if missing and missing[0] not in answer:
                answer[missing[0]] = transcript.strip()
            agent.update_data(answer)
        else:
            agent_name = self.get_agent_for_intent(detection.intent, sector)
            initial = {**(client_defaults or {}), **detection.entities}
            try:
                agent = await self.launch_agent(call_id, agent_name, sector, initial, client_id)
            except AgentNotAvailableError as e:
                logger.warning(f"No agent for {detection.intent} on call {call_id}: {e}")
                response["agent_type"] = agent_name
                response["error"] = str(e)
                response["intent"]["should_escalate"] = True
                return response

        event = await agent.execute()
        if event.is_terminal:
            self.complete_agent(call_id, client_id)

        response["agent_type"] = agent_name
        response["event"] = event.to_dict()
        return response
