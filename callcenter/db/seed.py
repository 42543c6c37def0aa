"""
Schema creation and catalog seeding.

Sector agents, entities and intent patterns are seeded from the built-in
catalogs once per sector; rows that already exist for a sector are left
alone so operators can edit them.
"""

import logging
import re

from sqlalchemy.orm import Session

from callcenter.agents.catalog import SECTOR_AGENTS
from callcenter.db.models import SectorAgent, SectorEntity, SectorIntentPattern
from callcenter.db.session import Database
from callcenter.orchestrator.patterns import ENTITY_PATTERNS, SECTOR_INTENT_PATTERNS
from callcenter.shared.constants import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)


def _display_name(agent_name: str) -> str:
    base = agent_name[:-len("Agent")] if agent_name.endswith("Agent") else agent_name
    return re.sub(r"(?<=[a-z])(?=[A-Z])", " ", base)


def _sector_has_rows(session: Session, model, sector: str) -> bool:
    return session.query(model.id).filter(model.sector == sector).first() is not None


def seed_sector_agents(session: Session) -> int:
    added = 0
    for sector, agents in SECTOR_AGENTS.items():
        if _sector_has_rows(session, SectorAgent, sector):
            continue
        for offset, (name, cls) in enumerate(agents.items()):
            doc = (cls.__doc__ or "").strip().splitlines()
            session.add(SectorAgent(
                sector=sector,
                agent_type=name,
                agent_class=f"agents.{sector}.{name}",
                display_name=_display_name(name),
                description=doc[0] if doc else None,
                enabled=True,
                priority=100 + offset,
            ))
            added += 1
    return added


def seed_sector_entities(session: Session) -> int:
    added = 0
    for sector, entities in ENTITY_PATTERNS.items():
        if _sector_has_rows(session, SectorEntity, sector):
            continue
        for entity_type in entities:
            session.add(SectorEntity(
                sector=sector,
                entity_type=entity_type,
                display_name=entity_type.replace("_", " ").title(),
            ))
            added += 1
    return added


def seed_intent_patterns(session: Session, language: str = DEFAULT_LANGUAGE) -> int:
    added = 0
    for sector, intents in SECTOR_INTENT_PATTERNS.items():
        if _sector_has_rows(session, SectorIntentPattern, sector):
            continue
        priority = 100
        for intent, patterns in intents.items():
            for pattern in patterns:
                session.add(SectorIntentPattern(
                    sector=sector,
                    intent=intent,
                    language=language,
                    regex_pattern=pattern,
                    priority=priority,
                ))
            priority += 1
            added += len(patterns)
    return added


def seed_catalog(session: Session) -> dict:
    counts = {
        "sector_agents": seed_sector_agents(session),
        "sector_entities": seed_sector_entities(session),
        "sector_intent_patterns": seed_intent_patterns(session),
    }
    if any(counts.values()):
        logger.info(f"Seeded catalog rows: {counts}")
    return counts


def init_db(database: Database) -> dict:
    """Create tables and seed the sector catalog."""
    database.create_all()
    with database.session() as session:
        return seed_catalog(session)
