"""Sector configuration and the per-sector agent/entity/intent catalogs."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from callcenter.api.auth import TenantContext, require_tenant
from callcenter.api.deps import get_db
from callcenter.db.models import (
    SectorAgent,
    SectorConfiguration,
    SectorEntity,
    SectorIntentPattern,
    utcnow,
)
from callcenter.services.sector_config import format_sector_name, validate_sector_config
from callcenter.services.sector_requirements import public_requirements, validate_sector_fields
from callcenter.shared.constants import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sectors", tags=["sectors"])


class SectorConfigRequest(BaseModel):
    config: Any = None
    enabled: Optional[bool] = None


class RequirementsValidateRequest(BaseModel):
    values: dict = {}


def _sector_row(db: Session, tenant: TenantContext, sector: str) -> Optional[SectorConfiguration]:
    return (
        db.query(SectorConfiguration)
        .filter(SectorConfiguration.client_id == tenant.client_id, SectorConfiguration.sector == sector)
        .first()
    )


def _set_enabled(db: Session, tenant: TenantContext, sector: str, enabled: bool) -> SectorConfiguration:
    row = _sector_row(db, tenant, sector)
    if row is None:
        raise HTTPException(404, "Sector configuration not found")
    row.enabled = enabled
    row.updated_at = utcnow()
    db.commit()
    logger.info(f"Sector {sector} {'enabled' if enabled else 'disabled'} for client {tenant.client_id}")
    return row


@router.get("/")
def list_sectors(
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(SectorConfiguration)
        .filter(SectorConfiguration.client_id == tenant.client_id)
        .order_by(SectorConfiguration.sector.asc())
        .all()
    )
    return {
        "sectors": [
            {
                "id": row.sector,
                "name": format_sector_name(row.sector),
                "enabled": row.enabled,
                "lastUpdated": row.to_dict()["updated_at"],
            }
            for row in rows
        ]
    }


@router.get("/config/{sector}")
def get_sector_config(
    sector: str,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    row = _sector_row(db, tenant, sector)
    if row is None:
        raise HTTPException(403, "Access denied to this sector")
    return row.to_dict()


@router.put("/config/{sector}")
def update_sector_config(
    sector: str,
    req: SectorConfigRequest,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    row = _sector_row(db, tenant, sector)
    if row is None:
        raise HTTPException(403, "Access denied to this sector")
    if not isinstance(req.config, dict):
        raise HTTPException(400, "Invalid configuration object")

    valid, errors = validate_sector_config(sector, req.config)
    if not valid:
        raise HTTPException(400, {"error": "Validation failed", "details": errors})

    row.config = req.config
    row.enabled = req.enabled is not False
    row.updated_at = utcnow()
    db.commit()
    logger.info(f"Sector {sector} config updated for client {tenant.client_id}: {', '.join(req.config)}")
    return row.to_dict()


@router.get("/{sector}/agents")
def list_sector_agents(
    sector: str,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(SectorAgent)
        .filter(SectorAgent.sector == sector, SectorAgent.enabled.is_(True))
        .order_by(SectorAgent.priority.asc(), SectorAgent.id.asc())
        .all()
    )
    agents = [
        {
            "id": row.id,
            "type": row.agent_type,
            "name": row.display_name,
            "description": row.description,
            "priority": row.priority,
        }
        for row in rows
    ]
    return {"sector": sector, "agents": agents}


@router.get("/{sector}/entities")
def list_sector_entities(
    sector: str,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(SectorEntity)
        .filter(SectorEntity.sector == sector)
        .order_by(SectorEntity.entity_type.asc())
        .all()
    )
    entities = [
        {"id": row.id, "type": row.entity_type, "name": row.display_name, "description": row.description}
        for row in rows
    ]
    return {"sector": sector, "entities": entities}


@router.get("/{sector}/intent-patterns")
def list_intent_patterns(
    sector: str,
    language: str = DEFAULT_LANGUAGE,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    rows = (
        db.query(SectorIntentPattern)
        .filter(SectorIntentPattern.sector == sector, SectorIntentPattern.language == language)
        .order_by(SectorIntentPattern.priority.asc(), SectorIntentPattern.id.asc())
        .all()
    )
    patterns = [
        {"id": row.id, "intent": row.intent, "pattern": row.regex_pattern, "priority": row.priority}
        for row in rows
    ]
    return {"sector": sector, "language": language, "patterns": patterns}


@router.post("/{sector}/enable")
def enable_sector(
    sector: str,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    row = _set_enabled(db, tenant, sector, True)
    return {"sector": row.sector, "enabled": True, "message": "Sector enabled successfully"}


@router.post("/{sector}/disable")
def disable_sector(
    sector: str,
    tenant: TenantContext = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    row = _set_enabled(db, tenant, sector, False)
    return {"sector": row.sector, "enabled": False, "message": "Sector disabled successfully"}


@router.get("/{sector}/requirements")
def get_requirements(sector: str, tenant: TenantContext = Depends(require_tenant)):
    requirements = public_requirements(sector)
    if requirements is None:
        raise HTTPException(404, f"No requirements defined for sector {sector}")
    return {"sector": sector, "requirements": requirements}


@router.post("/{sector}/requirements/validate")
def validate_requirements(
    sector: str,
    req: RequirementsValidateRequest,
    tenant: TenantContext = Depends(require_tenant),
):
    if public_requirements(sector) is None:
        raise HTTPException(404, f"No requirements defined for sector {sector}")
    errors = validate_sector_fields(sector, req.values)
    return {"sector": sector, "valid": not errors, "errors": errors}
