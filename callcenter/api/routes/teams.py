"""
Team members and their agent assignments.

Responses use the {success, data, error} envelope; errors raised here are
rendered in the same envelope by the app's exception handlers.
"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session, joinedload, selectinload

from callcenter.api.auth import TenantContext, require_tenant
from callcenter.api.deps import get_db
from callcenter.db.models import Team, TeamAgentAssignment, TeamMember, TeamPerformance, User
from callcenter.shared.constants import DEFAULT_PROFICIENCY, PERFORMANCE_TREND_DAYS, TEAM_ROLES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/teams", tags=["teams"])

DEFAULT_TEAM_NAME = "Default Team"
DEFAULT_TEAM_SECTOR = "general"


class MemberCreateRequest(BaseModel):
    name: str
    email: str
    role: str
    team_id: Optional[int] = None
    title: Optional[str] = None


class MemberUpdateRequest(BaseModel):
    title: Optional[str] = None
    role: Optional[str] = None
    active: Optional[bool] = None


class AgentAssignment(BaseModel):
    agent_type: Optional[str] = None
    proficiency_level: int = DEFAULT_PROFICIENCY


class AssignmentsRequest(BaseModel):
    assignments: list[AgentAssignment]


def envelope(data) -> dict:
    return {"success": True, "data": data, "error": None}


def _tenant_member(db: Session, tenant: TenantContext, member_id: int) -> Optional[TeamMember]:
    return (
        db.query(TeamMember)
        .join(Team, TeamMember.team_id == Team.id)
        .filter(TeamMember.id == member_id, Team.client_id == tenant.client_id)
        .first()
    )


def _owned_member(db: Session, tenant: TenantContext, member_id: int) -> TeamMember:
    member = _tenant_member(db, tenant, member_id)
    if member is None:
        raise HTTPException(403, "Access denied")
    return member


def _member_with_agents(member: TeamMember) -> dict:
    data = member.to_dict()
    data["assigned_agents"] = [a.to_dict() for a in member.assignments]
    return data


@router.get("/")
def list_members(
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    members = (
        db.query(TeamMember)
        .join(Team, TeamMember.team_id == Team.id)
        .filter(Team.client_id == tenant.client_id)
        .options(joinedload(TeamMember.user), selectinload(TeamMember.assignments))
        .order_by(TeamMember.created_at.desc(), TeamMember.id.desc())
        .all()
    )
    logger.info(f"Team members fetched for client {tenant.client_id} ({len(members)})")
    return envelope([_member_with_agents(m) for m in members])


@router.post("/members", status_code=201)
def create_member(
    req: MemberCreateRequest,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    if not req.name.strip() or not req.email.strip() or not req.role:
        raise HTTPException(400, "Missing required fields: name, email, role")
    if req.role not in TEAM_ROLES:
        raise HTTPException(400, f"Invalid role. Must be: {', '.join(TEAM_ROLES)}")

    if req.team_id is not None:
        team = db.get(Team, req.team_id)
        if team is None or team.client_id != tenant.client_id:
            raise HTTPException(403, "Access denied - team not found")
    else:
        team = (
            db.query(Team)
            .filter(Team.client_id == tenant.client_id)
            .order_by(Team.id.asc())
            .first()
        )
        if team is None:
            team = Team(client_id=tenant.client_id, name=DEFAULT_TEAM_NAME, sector=DEFAULT_TEAM_SECTOR)
            db.add(team)
            db.flush()
            logger.info(f"Created default team {team.id} for client {tenant.client_id}")

    email = req.email.strip().lower()
    user = db.query(User).filter(User.client_id == tenant.client_id, User.email == email).first()
    if user is None:
        user = User(client_id=tenant.client_id, email=email, name=req.name.strip(), role="team_member")
        db.add(user)
        db.flush()

    member = TeamMember(
        team_id=team.id,
        user_id=user.id,
        title=req.title or req.name.strip(),
        role=req.role,
        active=True,
    )
    db.add(member)
    db.commit()
    logger.info(f"Team member {member.id} created for client {tenant.client_id} ({req.role})")
    return envelope(member.to_dict())


@router.get("/members/{member_id}")
def get_member(
    member_id: int,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    member = _tenant_member(db, tenant, member_id)
    if member is None:
        raise HTTPException(404, "Team member not found")
    data = _member_with_agents(member)
    data["primary_sector"] = member.team.sector
    return envelope(data)


@router.put("/members/{member_id}")
def update_member(
    member_id: int,
    req: MemberUpdateRequest,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    member = _owned_member(db, tenant, member_id)
    updates = req.model_dump(exclude_unset=True)
    if "role" in updates and updates["role"] not in TEAM_ROLES:
        raise HTTPException(400, "Invalid role")
    if not updates:
        raise HTTPException(400, "No fields to update")

    for key, value in updates.items():
        setattr(member, key, value)
    db.commit()
    logger.info(f"Team member {member_id} updated: {', '.join(updates)}")
    return envelope(member.to_dict())


@router.delete("/members/{member_id}")
def deactivate_member(
    member_id: int,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    member = _owned_member(db, tenant, member_id)
    member.active = False
    db.commit()
    logger.info(f"Team member {member_id} deactivated")
    return envelope({"id": member.id, "active": False})


@router.put("/members/{member_id}/agents")
def assign_agents(
    member_id: int,
    req: AssignmentsRequest,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    """Replace all of a member's agent assignments."""
    member = _owned_member(db, tenant, member_id)

    wanted = [a for a in req.assignments if a.agent_type]
    for assignment in wanted:
        if not 0 <= assignment.proficiency_level <= 100:
            raise HTTPException(400, "proficiency_level must be between 0-100")

    member.assignments = [
        TeamAgentAssignment(agent_type=a.agent_type, proficiency_level=a.proficiency_level)
        for a in wanted
    ]
    db.commit()
    logger.info(f"Agent assignments updated for member {member_id} ({len(wanted)})")
    return envelope({
        "team_member_id": member.id,
        "assignments": [
            {"id": a.id, "agent_type": a.agent_type, "proficiency_level": a.proficiency_level}
            for a in member.assignments
        ],
    })


@router.get("/members/{member_id}/assignments")
def list_assignments(
    member_id: int,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    member = _owned_member(db, tenant, member_id)
    return envelope([a.to_dict() for a in member.assignments])


@router.get("/members/{member_id}/performance")
def member_performance(
    member_id: int,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    member = _owned_member(db, tenant, member_id)

    agents = sorted(member.assignments, key=lambda a: a.calls_handled, reverse=True)
    since = date.today() - timedelta(days=PERFORMANCE_TREND_DAYS)
    trend = (
        db.query(TeamPerformance)
        .filter(TeamPerformance.team_member_id == member.id, TeamPerformance.date >= since)
        .order_by(TeamPerformance.date.desc())
        .all()
    )
    return envelope({
        "member": {
            "id": member.id,
            "title": member.title,
            "role": member.role,
            "performance_score": member.performance_score,
            "avg_rating": member.avg_rating,
            "calls_this_week": member.calls_this_week,
            "calls_total": member.calls_total,
            "success_rate": member.success_rate,
        },
        "agents": [a.to_dict() for a in agents],
        "daily_trend": [row.to_dict() for row in trend],
    })
