"""
Runtime state shared by the app and its routers, plus the FastAPI
dependencies that hand it out.

The lifespan in callcenter.api.app fills these globals; until it has, every
dependency below answers 503.
"""

from typing import Iterator, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from callcenter.db.session import Database
from callcenter.orchestrator.engine import AgentOrchestrator
from callcenter.services.credential_manager import CredentialManager
from callcenter.shared.config import AppConfig

# Global references set during lifespan
_config: Optional[AppConfig] = None
_database: Optional[Database] = None
_orchestrator: Optional[AgentOrchestrator] = None
_credential_manager: Optional[CredentialManager] = None
_auth_secret: str = ""


def install(
    config: AppConfig,
    database: Database,
    orchestrator: AgentOrchestrator,
    credential_manager: CredentialManager,
    auth_secret: str,
) -> None:
    global _config, _database, _orchestrator, _credential_manager, _auth_secret
    _config = config
    _database = database
    _orchestrator = orchestrator
    _credential_manager = credential_manager
    _auth_secret = auth_secret


def reset() -> None:
    global _config, _database, _orchestrator, _credential_manager, _auth_secret
    _config = None
    _database = None
    _orchestrator = None
    _credential_manager = None
    _auth_secret = ""


def get_config() -> AppConfig:
    if _config is None:
        raise HTTPException(503, "Not ready")
    return _config


def get_auth_secret() -> str:
    if not _auth_secret:
        raise HTTPException(503, "Not ready")
    return _auth_secret


def get_db() -> Iterator[Session]:
    if _database is None:
        raise HTTPException(503, "Database not initialized")
    session = _database.session_factory()
    try:
        yield session
    finally:
        session.close()


def get_orchestrator() -> AgentOrchestrator:
    if _orchestrator is None:
        raise HTTPException(503, "Orchestrator not initialized")
    return _orchestrator


def get_credential_manager() -> CredentialManager:
    if _credential_manager is None:
        raise HTTPException(503, "Credential manager not initialized")
    return _credential_manager
