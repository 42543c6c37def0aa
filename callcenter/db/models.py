"""
Relational schema (SQLAlchemy ORM).

Every tenant-owned table carries client_id directly or reaches it through a
parent row (team_members -> teams, actions -> calls). Timestamps are stored
as naive UTC.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value is not None else None


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True, unique=True, index=True)
    phone = Column(String, nullable=True)
    sector = Column(String, nullable=False, default="ecommerce")
    return_window_days = Column(Integer, nullable=False, default=14)
    refund_auto_threshold = Column(Float, nullable=False, default=2000)
    cancel_window_hours = Column(Integer, nullable=False, default=24)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    def agent_defaults(self) -> dict:
        """Policy values handed to agents as initial data."""
        return {
            "return_window_days": self.return_window_days,
            "refund_auto_threshold": self.refund_auto_threshold,
            "cancel_window_hours": self.cancel_window_hours,
        }


class SectorConfiguration(Base):
    __tablename__ = "sector_configurations"
    __table_args__ = (UniqueConstraint("client_id", "sector", name="uq_sector_config_client_sector"),)

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    sector = Column(String, nullable=False)
    config = Column(JSON, nullable=False, default=dict)
    enabled = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "sector": self.sector,
            "config": self.config or {},
            "enabled": self.enabled,
            "updated_at": _iso(self.updated_at),
        }


class SectorAgent(Base):
    __tablename__ = "sector_agents"
    __table_args__ = (UniqueConstraint("sector", "agent_type", name="uq_sector_agent"),)

    id = Column(Integer, primary_key=True, index=True)
    sector = Column(String, nullable=False, index=True)
    agent_type = Column(String, nullable=False)
    agent_class = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)
    priority = Column(Integer, nullable=False, default=100)
    success_rate = Column(Float, nullable=True)
    avg_handling_time = Column(Integer, nullable=True)


class SectorEntity(Base):
    __tablename__ = "sector_entities"

    id = Column(Integer, primary_key=True, index=True)
    sector = Column(String, nullable=False, index=True)
    entity_type = Column(String, nullable=False)
    display_name = Column(String, nullable=True)
    description = Column(Text, nullable=True)


class SectorIntentPattern(Base):
    __tablename__ = "sector_intent_patterns"

    id = Column(Integer, primary_key=True, index=True)
    sector = Column(String, nullable=False, index=True)
    intent = Column(String, nullable=False)
    language = Column(String, nullable=False, default="en")
    regex_pattern = Column(String, nullable=False)
    priority = Column(Integer, nullable=False, default=100)


class User(Base):
    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("client_id", "email", name="uq_user_client_email"),)

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    email = Column(String, nullable=False)
    name = Column(String, nullable=True)
    role = Column(String, nullable=False, default="team_member")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    sector = Column(String, nullable=False, default="general")
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime, default=utcnow)

    members = relationship("TeamMember", back_populates="team")


class TeamMember(Base):
    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    title = Column(String, nullable=True)
    role = Column(String, nullable=False, default="member")
    performance_score = Column(Float, nullable=False, default=0)
    avg_rating = Column(Float, nullable=False, default=0)
    calls_this_week = Column(Integer, nullable=False, default=0)
    calls_total = Column(Integer, nullable=False, default=0)
    success_rate = Column(Float, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    joined_at = Column(DateTime, default=utcnow)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    team = relationship("Team", back_populates="members")
    user = relationship("User")
    assignments = relationship(
        "TeamAgentAssignment",
        back_populates="member",
        cascade="all, delete-orphan",
        order_by="TeamAgentAssignment.agent_type",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "user_id": self.user_id,
            "email": self.user.email if self.user else None,
            "title": self.title,
            "role": self.role,
            "performance_score": self.performance_score,
            "avg_rating": self.avg_rating,
            "calls_this_week": self.calls_this_week,
            "calls_total": self.calls_total,
            "success_rate": self.success_rate,
            "active": self.active,
            "joined_at": _iso(self.joined_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class TeamAgentAssignment(Base):
    __tablename__ = "team_agent_assignments"

    id = Column(Integer, primary_key=True, index=True)
    team_member_id = Column(Integer, ForeignKey("team_members.id"), nullable=False, index=True)
    agent_type = Column(String, nullable=False)
    proficiency_level = Column(Integer, nullable=False, default=50)
    calls_handled = Column(Integer, nullable=False, default=0)
    success_rate = Column(Float, nullable=False, default=0)
    avg_handling_time = Column(Integer, nullable=False, default=0)
    last_used = Column(DateTime, nullable=True)

    member = relationship("TeamMember", back_populates="assignments")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "agent_type": self.agent_type,
            "proficiency_level": self.proficiency_level,
            "calls_handled": self.calls_handled,
            "success_rate": self.success_rate,
            "avg_handling_time": self.avg_handling_time,
            "last_used": _iso(self.last_used),
        }


class TeamPerformance(Base):
    __tablename__ = "team_performance"

    id = Column(Integer, primary_key=True, index=True)
    team_member_id = Column(Integer, ForeignKey("team_members.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    calls_handled = Column(Integer, nullable=False, default=0)
    success_rate = Column(Float, nullable=False, default=0)
    avg_handling_time = Column(Integer, nullable=False, default=0)
    customer_satisfaction = Column(Float, nullable=True)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "calls_handled": self.calls_handled,
            "success_rate": self.success_rate,
            "avg_handling_time": self.avg_handling_time,
            "customer_satisfaction": self.customer_satisfaction,
        }


class Call(Base):
    __tablename__ = "calls"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    call_sid = Column(String, nullable=True, index=True)
    phone_from = Column(String, nullable=True)
    phone_to = Column(String, nullable=True)
    customer_name = Column(String, nullable=True)
    direction = Column(String, nullable=False, default="inbound")
    sector = Column(String, nullable=True)
    agent_type = Column(String, nullable=True)
    start_ts = Column(DateTime, nullable=False, default=utcnow)
    end_ts = Column(DateTime, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    transcript_full = Column(Text, nullable=True)
    recording_url = Column(String, nullable=True)
    resolved = Column(Boolean, nullable=False, default=False)
    escalated = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default="in_progress")  # in_progress | completed | escalated | failed
    customer_satisfaction = Column(Float, nullable=True)

    actions = relationship("Action", back_populates="call", order_by="Action.id")
    entities = relationship("Entity", back_populates="call", order_by="Entity.id")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "call_sid": self.call_sid,
            "phone_from": self.phone_from,
            "phone_to": self.phone_to,
            "customer_name": self.customer_name,
            "direction": self.direction,
            "sector": self.sector,
            "agent_type": self.agent_type,
            "start_ts": _iso(self.start_ts),
            "end_ts": _iso(self.end_ts),
            "duration_seconds": self.duration_seconds,
            "transcript_full": self.transcript_full,
            "recording_url": self.recording_url,
            "resolved": self.resolved,
            "escalated": self.escalated,
            "status": self.status,
            "customer_satisfaction": self.customer_satisfaction,
        }


class Action(Base):
    __tablename__ = "actions"

    id = Column(Integer, primary_key=True, index=True)
    call_id = Column(Integer, ForeignKey("calls.id"), nullable=False, index=True)
    action_type = Column(String, nullable=False)
    params = Column(JSON, nullable=True)
    status = Column(String, nullable=False, default="pending")  # pending | success | failed
    result = Column(JSON, nullable=True)
    confidence = Column(Float, nullable=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    call = relationship("Call", back_populates="actions")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action_type": self.action_type,
            "params": self.params,
            "status": self.status,
            "result": self.result,
            "confidence": self.confidence,
            "error_message": self.error_message,
            "created_at": _iso(self.created_at),
        }


class Entity(Base):
    __tablename__ = "entities"

    id = Column(Integer, primary_key=True, index=True)
    call_id = Column(Integer, ForeignKey("calls.id"), nullable=False, index=True)
    entity_type = Column(String, nullable=False)
    value = Column(String, nullable=False)
    confidence = Column(Float, nullable=True)

    call = relationship("Call", back_populates="entities")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "entity_type": self.entity_type,
            "value": self.value,
            "confidence": self.confidence,
        }


class ApiCredential(Base):
    __tablename__ = "api_credentials"
    __table_args__ = (
        UniqueConstraint("client_id", "api_type", "sector", name="uq_credential_client_api_sector"),
    )

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    api_type = Column(String, nullable=False)
    provider_name = Column(String, nullable=True)
    sector = Column(String, nullable=False)
    encrypted_credentials = Column(Text, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending | active
    verified_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_public_dict(self) -> dict:
        """Metadata only; the ciphertext never leaves the service layer."""
        return {
            "id": self.id,
            "api_type": self.api_type,
            "provider_name": self.provider_name,
            "sector": self.sector,
            "status": self.status,
            "verified_at": _iso(self.verified_at),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
