"""
FastAPI application - API gateway for the call-center dashboard and the
telephony event feed.
"""

import contextvars
import logging
import os
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exception_handlers import (
    http_exception_handler,
    request_validation_exception_handler,
)
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from callcenter.api import deps
from callcenter.api.auth import TenantContext, issue_token, require_tenant
from callcenter.api.deps import get_auth_secret, get_config, get_db, get_orchestrator
from callcenter.api.routes import (
    analytics_router,
    calls_router,
    credentials_router,
    sectors_router,
    teams_router,
)
from callcenter.db.models import Client, User
from callcenter.db.seed import init_db
from callcenter.db.session import Database
from callcenter.orchestrator.engine import AgentOrchestrator
from callcenter.orchestrator.intent import IntentDetector
from callcenter.orchestrator.llm_client import LLMIntentClassifier
from callcenter.services.credential_manager import CredentialCipher, CredentialManager
from callcenter.services.credential_tester import CredentialTester
from callcenter.shared.audit_log import ImmutableAuditLog
from callcenter.shared.config import AppConfig, Environment, load_config
from callcenter.shared.errors import AgentNotAvailableError, EncryptionKeyError

logger = logging.getLogger(__name__)

TEAMS_PREFIX = "/api/teams"

# ── Request ID tracking via ContextVar ────────────────────────────────────────
_request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


class RequestIDFilter(logging.Filter):
    """Injects the current request ID into every log record."""
    def filter(self, record):
        record.request_id = _request_id_ctx.get("-")
        return True


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Generates a unique request ID, stores it in ContextVar, adds to response header."""
    async def dispatch(self, request: Request, call_next):
        request_id = uuid.uuid4().hex[:12]
        _request_id_ctx.set(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def configure_logging(config: AppConfig) -> None:  # pragma: no cover
    log_level = getattr(logging, config.log_level, logging.INFO)
    log_format = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s:%(message)s"

    # Install the RequestID filter and formatter on ALL loggers
    rid_filter = RequestIDFilter()
    formatter = logging.Formatter(log_format)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.addFilter(rid_filter)

    if not root_logger.handlers:
        console = logging.StreamHandler()
        console.setLevel(log_level)
        root_logger.addHandler(console)

    for handler in root_logger.handlers:
        handler.setFormatter(formatter)
        handler.addFilter(rid_filter)

    # uvicorn loggers don't propagate to root
    for uv_logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        uv_log = logging.getLogger(uv_logger_name)
        uv_log.addFilter(rid_filter)
        for handler in uv_log.handlers:
            handler.setFormatter(formatter)
            handler.addFilter(rid_filter)

    if config.log_file_dir:
        os.makedirs(config.log_file_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        log_file = os.path.join(config.log_file_dir, f"callcenter_{timestamp}.log")
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(rid_filter)
        root_logger.addHandler(file_handler)
        for uv_logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
            logging.getLogger(uv_logger_name).addHandler(file_handler)
        logger.info(f"Logging to file: {log_file}")


def _secret_or_ephemeral(value: str, name: str, config: AppConfig, generate) -> str:
    if value:
        return value
    if config.environment == Environment.PRODUCTION:
        raise RuntimeError(f"{name} must be set in production")
    logger.warning(f"{name} not set - using an ephemeral value; data and tokens will not survive a restart")
    return generate()


def init_services(config: AppConfig) -> Database:
    """Build the database, credential manager and orchestrator and publish them to the routers."""
    database = Database(config.database)
    counts = init_db(database)
    logger.info(f"Database ready ({sum(counts.values())} catalog rows seeded)")

    key = _secret_or_ephemeral(
        config.security.credential_encryption_key, "CREDENTIAL_ENCRYPTION_KEY", config,
        CredentialCipher.generate_key,
    )
    auth_secret = _secret_or_ephemeral(
        config.security.auth_secret, "AUTH_SECRET", config, lambda: uuid.uuid4().hex,
    )
    try:
        cipher = CredentialCipher(key)
    except EncryptionKeyError as e:
        raise RuntimeError(f"Invalid CREDENTIAL_ENCRYPTION_KEY: {e}") from e

    audit_log = ImmutableAuditLog(config.audit_log_path)
    tester = CredentialTester(config.security.credential_test_timeout_seconds)
    credential_manager = CredentialManager(database.session_factory, cipher, audit_log, tester)

    classifier = LLMIntentClassifier(config.anthropic) if config.anthropic.intent_fallback_enabled else None
    intent_detector = IntentDetector(
        database.session_factory,
        cache_ttl=config.orchestrator.intent_cache_ttl_seconds,
        llm_classifier=classifier,
    )
    orchestrator = AgentOrchestrator(
        database.session_factory,
        cache_ttl=config.orchestrator.agent_cache_ttl_seconds,
        max_capacity=config.orchestrator.max_active_agents,
        intent_detector=intent_detector,
    )

    deps.install(config, database, orchestrator, credential_manager, auth_secret)
    return database


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover
    """Application startup and shutdown."""
    config = load_config()
    configure_logging(config)
    database = init_services(config)
    logger.info(f"Call center backend started ({config.environment.value})")
    yield
    deps.reset()
    database.dispose()
    logger.info("Call center backend shutdown")


app = FastAPI(
    title="CallCenter",
    description="Multi-tenant AI call-center backend",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(load_config().cors_origins),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(RequestIDMiddleware)

app.include_router(calls_router)
app.include_router(teams_router)
app.include_router(sectors_router)
app.include_router(credentials_router)
app.include_router(analytics_router)


# --- Team routes answer in the {success, data, error} envelope ---

@app.exception_handler(StarletteHTTPException)
async def envelope_http_errors(request: Request, exc: StarletteHTTPException):
    if request.url.path.startswith(TEAMS_PREFIX):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "data": None, "error": exc.detail},
        )
    return await http_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def envelope_validation_errors(request: Request, exc: RequestValidationError):
    if request.url.path.startswith(TEAMS_PREFIX):
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg', 'invalid')}" if field else first.get("msg", "Invalid request")
        return JSONResponse(status_code=400, content={"success": False, "data": None, "error": message})
    return await request_validation_exception_handler(request, exc)


# --- Pydantic models for request validation ---

class TokenRequest(BaseModel):
    client_id: int
    email: Optional[str] = None


class LaunchAgentRequest(BaseModel):
    call_id: str
    agent_type: str
    sector: Optional[str] = None
    initial_data: Optional[dict] = None


# --- API Endpoints ---

@app.get("/api/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/api/status")
async def get_status(orchestrator: AgentOrchestrator = Depends(get_orchestrator)):
    return {
        "orchestrator": orchestrator.get_health(),
        "intent_cache": orchestrator.intent_detector.cache_stats(),
    }


@app.post("/api/auth/token")
async def create_token(
    req: TokenRequest,
    config: AppConfig = Depends(get_config),
    secret: str = Depends(get_auth_secret),
    db: Session = Depends(get_db),
):
    """Development helper: mint a tenant token without a login flow."""
    if config.environment == Environment.PRODUCTION:
        raise HTTPException(404, "Not found")

    client = db.get(Client, req.client_id)
    if client is None:
        raise HTTPException(404, "Client not found")
    if not client.active:
        raise HTTPException(403, "Client is inactive")

    user_id = None
    if req.email:
        user = (
            db.query(User)
            .filter(User.client_id == client.id, User.email == req.email.strip().lower())
            .first()
        )
        if user is None:
            raise HTTPException(404, "User not found")
        user_id = user.id

    return {
        "token": issue_token(client.id, user_id, secret),
        "token_type": "bearer",
        "expires_in": config.security.auth_token_ttl_seconds,
    }


@app.post("/api/agents/launch")
async def launch_agent(
    req: LaunchAgentRequest,
    tenant: TenantContext = Depends(require_tenant),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    sector = (req.sector or tenant.sector).lower()
    try:
        agent = await orchestrator.launch_agent(
            req.call_id, req.agent_type, sector, req.initial_data, tenant.client_id,
        )
    except AgentNotAvailableError as e:
        raise HTTPException(400, str(e))

    event = await agent.execute()
    if event.is_terminal:
        orchestrator.complete_agent(req.call_id, tenant.client_id)
    return {"success": True, "agent": agent.to_dict(), "event": event.to_dict()}


@app.get("/api/agents/active")
async def list_active_agents(
    tenant: TenantContext = Depends(require_tenant),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    active = orchestrator.get_active_agents(client_id=tenant.client_id)
    return {"count": len(active), "agents": [a.to_dict() for a in active]}


@app.delete("/api/agents/{call_id}")
async def cancel_agent(
    call_id: str,
    tenant: TenantContext = Depends(require_tenant),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    if not orchestrator.cancel_agent(call_id, tenant.client_id):
        raise HTTPException(404, f"No active agent for call {call_id}")
    return {"success": True, "call_id": call_id}


@app.post("/api/agents/cache/clear")
async def clear_agent_cache(
    tenant: TenantContext = Depends(require_tenant),
    orchestrator: AgentOrchestrator = Depends(get_orchestrator),
):
    agents = orchestrator.clear_agent_cache()
    patterns = orchestrator.intent_detector.clear_cache()
    logger.info(f"Caches cleared by client {tenant.client_id}")
    return {"success": True, "cleared": {"agents": agents, "intent_patterns": patterns}}
