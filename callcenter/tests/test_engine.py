"""
Tests for the AgentOrchestrator — agent registry loading, the one-agent-per-call
rule, capacity limits and full conversation turns.
"""

import pytest

from callcenter.agents import ecommerce, healthcare
from callcenter.db.models import SectorAgent
from callcenter.orchestrator.engine import AgentOrchestrator
from callcenter.shared.errors import AgentNotAvailableError
from callcenter.shared.models import AgentState, Intent


# ═══════════════════════════════════════════════════════════════
# REGISTRY
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestLoadAgents:
    async def test_builtins_without_database(self):
        orch = AgentOrchestrator()
        agents = await orch.load_agents_for_sector("healthcare")
        assert agents["TriageAgent"] is healthcare.TriageAgent

    async def test_seeded_rows(self, session_factory):
        orch = AgentOrchestrator(session_factory)
        agents = await orch.load_agents_for_sector("ecommerce")
        assert agents["TrackingAgent"] is ecommerce.OrderTrackingAgent
        assert len(agents) == len(ecommerce.AGENTS)
        assert orch.get_health()["cached_sectors"] == 1

    async def test_disabled_rows_are_excluded(self, session_factory):
        with session_factory() as session:
            row = (
                session.query(SectorAgent)
                .filter(SectorAgent.sector == "ecommerce", SectorAgent.agent_type == "RefundAgent")
                .one()
            )
            row.enabled = False
            session.commit()

        orch = AgentOrchestrator(session_factory)
        with pytest.raises(AgentNotAvailableError):
            await orch.launch_agent("c1", "RefundAgent", "ecommerce")

    async def test_unknown_class_rows_are_skipped(self, session_factory):
        with session_factory() as session:
            session.add(SectorAgent(sector="automotive", agent_type="Ghost", agent_class="agents.automotive.Ghost"))
            session.add(SectorAgent(
                sector="automotive", agent_type="Triage", agent_class="agents.healthcare.TriageAgent",
            ))
            session.commit()

        orch = AgentOrchestrator(session_factory)
        agents = await orch.load_agents_for_sector("automotive")
        assert agents == {"Triage": healthcare.TriageAgent}

    async def test_clear_agent_cache(self, session_factory):
        orch = AgentOrchestrator(session_factory)
        await orch.load_agents_for_sector("ecommerce")
        await orch.load_agents_for_sector("fintech")
        assert orch.clear_agent_cache() == 2


# ═══════════════════════════════════════════════════════════════
# ACTIVE AGENTS
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestActiveAgents:
    async def test_launch_registers_agent(self):
        orch = AgentOrchestrator()
        agent = await orch.launch_agent("c1", "OrderLookupAgent", "ecommerce", {"order_id": "1001"}, client_id=7)
        entry = orch.get_active_agent("c1", client_id=7)
        assert entry.agent is agent
        assert entry.client_id == 7
        assert entry.to_dict()["agent"] == "OrderLookupAgent"

    async def test_unknown_agent_raises(self):
        orch = AgentOrchestrator()
        with pytest.raises(AgentNotAvailableError, match="not available for sector healthcare"):
            await orch.launch_agent("c1", "RefundAgent", "healthcare")

    async def test_same_agent_relaunch_merges_data(self):
        orch = AgentOrchestrator()
        first = await orch.launch_agent("c1", "ReturnAgent", "ecommerce", {"order_id": "1001"})
        second = await orch.launch_agent("c1", "ReturnAgent", "ecommerce", {"reason": "damaged"})
        assert first is second
        assert first.data == {"order_id": "1001", "reason": "damaged"}

    async def test_different_agent_replaces_and_cancels(self):
        orch = AgentOrchestrator()
        first = await orch.launch_agent("c1", "ReturnAgent", "ecommerce")
        await orch.launch_agent("c1", "RefundAgent", "ecommerce")
        assert first.state == AgentState.CANCELLED
        assert orch.get_active_agent("c1").agent_name == "RefundAgent"
        assert len(orch.active_agents) == 1

    async def test_capacity_limit(self):
        orch = AgentOrchestrator(max_capacity=1)
        await orch.launch_agent("c1", "RefundAgent", "ecommerce")
        with pytest.raises(AgentNotAvailableError, match="capacity"):
            await orch.launch_agent("c2", "RefundAgent", "ecommerce")
        assert orch.get_health()["healthy"] is False

    async def test_cancel_agent(self):
        orch = AgentOrchestrator()
        agent = await orch.launch_agent("c1", "RefundAgent", "ecommerce")
        assert orch.cancel_agent("c1") is True
        assert agent.state == AgentState.CANCELLED
        assert orch.cancel_agent("c1") is False

    async def test_complete_only_after_terminal_event(self):
        orch = AgentOrchestrator()
        agent = await orch.launch_agent("c1", "RefundAgent", "ecommerce")
        assert orch.complete_agent("c1") is False

        await agent.execute()  # need_info
        assert orch.complete_agent("c1") is False

        agent.update_data({"order_id": "1001"})
        await agent.execute()
        assert orch.complete_agent("c1") is True
        assert orch.get_active_agent("c1") is None

    async def test_active_agents_filtered_by_client(self):
        orch = AgentOrchestrator()
        await orch.launch_agent("a", "RefundAgent", "ecommerce", client_id=1)
        await orch.launch_agent("b", "RefundAgent", "ecommerce", client_id=2)
        assert [e.agent.call_id for e in orch.get_active_agents(client_id=2)] == ["b"]
        assert len(orch.get_active_agents()) == 2

    async def test_same_call_id_is_separate_per_client(self):
        orch = AgentOrchestrator()
        first = await orch.launch_agent("1", "ReturnAgent", "ecommerce", client_id=1)
        second = await orch.launch_agent("1", "OrderLookupAgent", "ecommerce", client_id=2)
        assert first.state != AgentState.CANCELLED
        assert orch.get_active_agent("1", client_id=1).agent is first
        assert orch.get_active_agent("1", client_id=2).agent is second
        assert orch.cancel_agent("1", client_id=3) is False
        assert orch.cancel_agent("1", client_id=2) is True
        assert orch.get_active_agent("1", client_id=1).agent is first

    async def test_health(self):
        orch = AgentOrchestrator(max_capacity=4)
        await orch.launch_agent("a", "RefundAgent", "ecommerce")
        health = orch.get_health()
        assert health["active_agents"] == 1
        assert health["utilization_percent"] == 25.0
        assert health["healthy"] is True


# ═══════════════════════════════════════════════════════════════
# CONVERSATION TURNS
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestHandleUtterance:
    async def test_intent_launches_and_completes(self):
        orch = AgentOrchestrator()
        result = await orch.handle_utterance("c1", "where is my order 1001", "ecommerce")
        assert result["intent"]["intent"] == "ORDER_LOOKUP"
        assert result["agent_type"] == "OrderLookupAgent"
        assert result["event"]["type"] == "complete"
        assert orch.get_active_agent("c1") is None

    async def test_follow_up_answers_fill_missing_fields(self):
        orch = AgentOrchestrator()
        first = await orch.handle_utterance("c1", "I want to return something", "ecommerce")
        assert first["event"]["type"] == "need_info"
        assert first["event"]["payload"]["field"] == "order_id"

        second = await orch.handle_utterance("c1", "1001", "ecommerce")
        assert second["agent_type"] == "ReturnAgent"
        assert second["event"]["payload"]["field"] == "reason"

        third = await orch.handle_utterance("c1", "it arrived damaged", "ecommerce")
        assert third["event"]["type"] == "complete"
        assert third["event"]["payload"]["reason"] == "it arrived damaged"
        assert orch.get_active_agent("c1") is None

    async def test_client_defaults_reach_agent(self):
        orch = AgentOrchestrator()
        result = await orch.handle_utterance(
            "c1", "refund for order 1004", "ecommerce", client_defaults={"refund_auto_threshold": 10000},
        )
        assert result["event"]["type"] == "complete"

    async def test_escalation_event_retires_agent(self):
        orch = AgentOrchestrator()
        result = await orch.handle_utterance("c1", "refund for order 1004", "ecommerce")
        assert result["event"]["type"] == "need_escalation"
        assert orch.get_active_agent("c1") is None

    async def test_cancel_phrase_cancels_agent(self):
        orch = AgentOrchestrator()
        await orch.handle_utterance("c1", "I want to return something", "ecommerce")
        result = await orch.handle_utterance("c1", "rehne do", "ecommerce")
        assert result["intent"]["intent"] == Intent.CANCEL_ACTION
        assert result["cancelled"] is True
        assert orch.get_active_agent("c1") is None

    async def test_escalation_request_cancels_agent(self):
        orch = AgentOrchestrator()
        await orch.handle_utterance("c1", "I want to return something", "ecommerce")
        result = await orch.handle_utterance("c1", "let me speak to a human", "ecommerce")
        assert result["intent"]["intent"] == Intent.ESCALATION
        assert result["event"] is None
        assert orch.get_active_agent("c1") is None

    async def test_greeting_without_agent_does_nothing(self):
        orch = AgentOrchestrator()
        result = await orch.handle_utterance("c1", "hello", "ecommerce")
        assert result["agent_type"] is None
        assert result["event"] is None

    async def test_unavailable_agent_reports_error(self, session_factory):
        with session_factory() as session:
            session.query(SectorAgent).filter(
                SectorAgent.sector == "ecommerce", SectorAgent.agent_type == "RefundAgent",
            ).update({"enabled": False})
            session.commit()

        orch = AgentOrchestrator(session_factory)
        result = await orch.handle_utterance("c1", "refund please", "ecommerce")
        assert result["agent_type"] == "RefundAgent"
        assert "not available" in result["error"]
        assert result["intent"]["should_escalate"] is True
        assert result["event"] is None

    async def test_other_sector_routing(self):
        orch = AgentOrchestrator()
        result = await orch.handle_utterance("c9", "my internet down in zip 90210", "telecom")
        assert result["agent_type"] == "OutageNotificationAgent"
        assert result["event"]["payload"]["field"] == "service_type"

    async def test_seeded_travel_sector_collects_booking(self, session_factory):
        orch = AgentOrchestrator(session_factory)
        first = await orch.handle_utterance("t1", "my flight got cancelled", "travel")
        assert first["agent_type"] == "DisruptionAlertAgent"
        assert first["event"]["payload"]["field"] == "booking_reference"

        second = await orch.handle_utterance("t1", "BK123ABC", "travel")
        assert second["event"]["type"] == "complete"
        assert second["event"]["payload"]["disruption_type"] == "FLIGHT_CANCELLATION"
        assert orch.get_active_agent("t1") is None

    async def test_support_escalation_in_one_utterance(self):
        orch = AgentOrchestrator()
        result = await orch.handle_utterance("s1", "please escalate tkt_42 because account compromised", "support")
        assert result["agent_type"] == "IssueEscalationAgent"
        assert result["event"]["payload"]["escalated_to"] == "Security"

    async def test_answer_never_reaches_another_clients_agent(self):
        orch = AgentOrchestrator()
        agent = await orch.launch_agent("1", "OrderLookupAgent", "ecommerce", client_id=2)
        await agent.execute()
        result = await orch.handle_utterance("1", "1001", "ecommerce", client_id=1)
        assert result["event"] is None
        waiting = orch.get_active_agent("1", client_id=2)
        assert waiting.agent.state == AgentState.WAITING_FOR_INFO
        assert "order_id" not in waiting.agent.data
