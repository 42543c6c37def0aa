"""
Call history and the live call-event entry point.

Every query is scoped to the authenticated tenant; a call owned by another
tenant is reported as not found.
"""

import logging
import math
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session

from callcenter.api.auth import TenantContext, require_tenant
from callcenter.api.deps import get_db, get_orchestrator
from callcenter.db.models import Action, Call, Client, Entity, SectorConfiguration, utcnow
from callcenter.orchestrator.engine import AgentOrchestrator
from callcenter.services.sector_config import agent_policy
from callcenter.shared.constants import (
    CALL_STATUS_FILTERS,
    DEFAULT_LANGUAGE,
    DEFAULT_PAGE_LIMIT,
    MAX_LOOKBACK_DAYS,
    MAX_PAGE_LIMIT,
)
from callcenter.shared.models import AgentEventType, Intent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calls", tags=["calls"])

# Agent event -> stored action status
ACTION_STATUS = {
    AgentEventType.COMPLETE.value: "success",
    AgentEventType.ERROR.value: "failed",
    AgentEventType.NEED_INFO.value: "pending",
    AgentEventType.NEED_ESCALATION.value: "pending",
}


class CallUpdateRequest(BaseModel):
    resolved: Optional[bool] = None
    transcript_full: Optional[str] = None
    recording_url: Optional[str] = None


class CallEventRequest(BaseModel):
    call_sid: str
    transcript: str
    phone_from: Optional[str] = None
    phone_to: Optional[str] = None
    direction: str = "inbound"
    sector: Optional[str] = None
    language: str = DEFAULT_LANGUAGE
    customer_name: Optional[str] = None


def _get_call(db: Session, tenant: TenantContext, call_id: int) -> Call:
    call = db.query(Call).filter(Call.id == call_id, Call.client_id == tenant.client_id).first()
    if call is None:
        raise HTTPException(404, "Call not found")
    return call


@router.get("/")
def list_calls(
    limit: int = DEFAULT_PAGE_LIMIT,
    offset: int = 0,
    sector: Optional[str] = None,
    agent: Optional[str] = None,
    status: Optional[str] = None,
    days: Optional[int] = None,
    search: Optional[str] = None,
    resolved: Optional[bool] = None,
    phone_from: Optional[str] = None,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    page_limit = min(max(limit, 1), MAX_PAGE_LIMIT)
    page_offset = max(offset, 0)

    query = db.query(Call).filter(Call.client_id == tenant.client_id)
    if sector and sector.strip():
        query = query.filter(Call.sector == sector.strip())
    if agent and agent.strip():
        query = query.filter(Call.agent_type == agent.strip())
    if status in CALL_STATUS_FILTERS:
        if status == "completed":
            query = query.filter(Call.resolved.is_(True))
        elif status == "escalated":
            query = query.filter(Call.escalated.is_(True))
        else:
            query = query.filter(Call.status == "failed")
    if days is not None:
        window = min(max(days, 1), MAX_LOOKBACK_DAYS)
        query = query.filter(Call.start_ts >= utcnow() - timedelta(days=window))
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(
            Call.customer_name.ilike(term),
            Call.phone_from.ilike(term),
            Call.phone_to.ilike(term),
        ))
    if resolved is not None:
        query = query.filter(Call.resolved.is_(resolved))
    if phone_from:
        query = query.filter(Call.phone_from == phone_from)

    total = query.count()
    rows = (
        query.order_by(Call.start_ts.desc(), Call.id.desc())
        .limit(page_limit)
        .offset(page_offset)
        .all()
    )
    return {
        "success": True,
        "data": [c.to_dict() for c in rows],
        "total": total,
        "page": page_offset // page_limit + 1,
        "pages": math.ceil(total / page_limit),
        "limit": page_limit,
        "offset": page_offset,
    }


@router.post("/events")
async def handle_call_event(
    req: CallEventRequest,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    """Feed one caller utterance to the call's agent and record what happened."""
    transcript = req.transcript.strip()
    if not transcript:
        raise HTTPException(400, "transcript is required")
    sector = (req.sector or tenant.sector).lower()

    call = (
        db.query(Call)
        .filter(Call.client_id == tenant.client_id, Call.call_sid == req.call_sid)
        .order_by(Call.id.desc())
        .first()
    )
    if call is None:
        call = Call(
            client_id=tenant.client_id,
            call_sid=req.call_sid,
            phone_from=req.phone_from,
            phone_to=req.phone_to,
            customer_name=req.customer_name,
            direction=req.direction,
            sector=sector,
        )
        db.add(call)
        db.flush()
        logger.info(f"Call {call.id} started ({req.call_sid}) for client {tenant.client_id}")
    elif call.end_ts is not None:
        raise HTTPException(409, "Call has already ended")

    call.transcript_full = f"{call.transcript_full}\n{transcript}" if call.transcript_full else transcript

    client = db.get(Client, tenant.client_id)
    defaults = client.agent_defaults() if client else {}
    sector_config = (
        db.query(SectorConfiguration)
        .filter(
            SectorConfiguration.client_id == tenant.client_id,
            SectorConfiguration.sector == sector,
            SectorConfiguration.enabled.is_(True),
        )
        .first()
    )
    if sector_config and isinstance(sector_config.config, dict):
        defaults.update(agent_policy(sector, sector_config.config))

    # Orchestrator lookups run on their own sessions
    db.commit()

    result = await orchestrator.handle_utterance(
        call_id=str(call.id),
        transcript=transcript,
        sector=sector,
        client_defaults=defaults,
        language=req.language,
        client_id=tenant.client_id,
    )

    intent = result["intent"]
    for entity_type, value in intent["entities"].items():
        db.add(Entity(call_id=call.id, entity_type=entity_type, value=str(value), confidence=intent["confidence"]))

    event = result.get("event")
    if result.get("agent_type"):
        call.agent_type = result["agent_type"]
        action = Action(
            call_id=call.id,
            action_type=result["agent_type"],
            params=intent["entities"],
            confidence=intent["confidence"],
        )
        if event is None:
            action.status = "failed"
            action.error_message = result.get("error")
        else:
            action.status = ACTION_STATUS.get(event["type"], "pending")
            if event["type"] == AgentEventType.ERROR.value:
                action.error_message = event["payload"].get("message")
            else:
                action.result = event["payload"]
        db.add(action)

    if event and event["type"] == AgentEventType.COMPLETE.value:
        call.resolved = True
        call.status = "completed"
    elif (
        (event and event["type"] == AgentEventType.NEED_ESCALATION.value)
        or intent["intent"] == Intent.ESCALATION
        or result.get("error")
    ):
        call.escalated = True
        call.status = "escalated"

    db.commit()
    return {"success": True, "call_id": call.id, **result}


@router.get("/{call_id}")
def get_call(
    call_id: int,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    call = _get_call(db, tenant, call_id)
    return {
        "call": call.to_dict(),
        "actions": [a.to_dict() for a in call.actions],
        "entities": [e.to_dict() for e in call.entities],
    }


@router.patch("/{call_id}")
def update_call(
    call_id: int,
    req: CallUpdateRequest,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    updates = req.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        raise HTTPException(400, "No valid fields to update")

    call = _get_call(db, tenant, call_id)
    for key, value in updates.items():
        setattr(call, key, value)
    db.commit()
    logger.info(f"Call {call_id} updated: {', '.join(updates)}")
    return {"call": call.to_dict()}


@router.get("/{call_id}/transcript")
def get_transcript(
    call_id: int,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    call = _get_call(db, tenant, call_id)
    return {
        "call_id": call.id,
        "transcript": call.transcript_full,
        "start_ts": call.to_dict()["start_ts"],
        "end_ts": call.to_dict()["end_ts"],
    }


@router.get("/{call_id}/recording")
def get_recording(
    call_id: int,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    call = _get_call(db, tenant, call_id)
    if not call.recording_url:
        raise HTTPException(404, "Recording not available")
    return {"call_id": call.id, "recording_url": call.recording_url}


@router.post("/{call_id}/end")
def end_call(
    call_id: int,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    call = _get_call(db, tenant, call_id)
    if call.end_ts is None:
        call.end_ts = utcnow()
        call.duration_seconds = max(int((call.end_ts - call.start_ts).total_seconds()), 0)
        if call.status == "in_progress":
            call.status = "completed" if call.resolved else "failed"
        db.commit()
        logger.info(f"Call {call_id} ended after {call.duration_seconds}s")

    cancelled = orchestrator.cancel_agent(str(call.id), tenant.client_id)
    return {"success": True, "call": call.to_dict(), "agent_cancelled": cancelled}

