"""
Centralized configuration management for the call-center backend.
Uses environment variables with secure defaults following 12-factor app principles.
"""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv
from enum import Enum


class Environment(Enum):
    """Deployment environments."""
    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass(frozen=True)
class DatabaseConfig:
    """Relational store configuration (any SQLAlchemy URL)."""
    url: str = "sqlite:///./data/callcenter.db"
    echo: bool = False


@dataclass(frozen=True)
class SecurityConfig:
    """Immutable security configuration for tenant auth and credential storage."""
    auth_secret: str = ""
    auth_token_ttl_seconds: int = 86400  # 24 hours
    auth_required: bool = True
    credential_encryption_key: str = ""  # 64 hex chars = 32 bytes (AES-256)
    credential_test_timeout_seconds: float = 5.0


@dataclass(frozen=True)
class OrchestratorConfig:
    """Agent orchestration limits and cache lifetimes."""
    agent_cache_ttl_seconds: int = 3600
    intent_cache_ttl_seconds: int = 3600
    max_active_agents: int = 1000
    default_sector: str = "ecommerce"


@dataclass(frozen=True)
class AnthropicConfig:
    """Anthropic API configuration (optional intent fallback)."""
    api_key: str = ""
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 512
    intent_fallback_enabled: bool = False


@dataclass(frozen=True)
class AppConfig:
    """Root application configuration - assembled from environment."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    anthropic: AnthropicConfig = field(default_factory=AnthropicConfig)
    audit_log_path: str = "./data/audit.jsonl"
    log_file_dir: str = ""  # Directory for timestamped log files; empty = no file logging
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"
    environment: Environment = Environment.PRODUCTION
    cors_origins: tuple = ("http://localhost:3000", "http://localhost:5173")


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes"}


def load_config() -> AppConfig:
    """
    Load configuration from environment variables.
    Secure defaults are used when env vars are not set.
    """
    load_dotenv()  # Load .env file if present
    env_str = os.environ.get("ENVIRONMENT", "production").lower()
    try:
        environment = Environment(env_str)
    except ValueError:
        environment = Environment.PRODUCTION  # Fail safe

    database = DatabaseConfig(
        url=os.environ.get("DATABASE_URL", "sqlite:///./data/callcenter.db"),
        echo=_env_bool("DATABASE_ECHO", "0"),
    )

    security = SecurityConfig(
        auth_secret=os.environ.get("AUTH_SECRET", ""),
        auth_token_ttl_seconds=int(os.environ.get("AUTH_TOKEN_TTL_SECONDS", "86400")),
        auth_required=_env_bool("AUTH_REQUIRED", "1"),
        credential_encryption_key=os.environ.get("CREDENTIAL_ENCRYPTION_KEY", ""),
        credential_test_timeout_seconds=float(
            os.environ.get("CREDENTIAL_TEST_TIMEOUT", "5.0")
        ),
    )

    orchestrator = OrchestratorConfig(
        agent_cache_ttl_seconds=int(os.environ.get("AGENT_CACHE_TTL", "3600")),
        intent_cache_ttl_seconds=int(os.environ.get("INTENT_CACHE_TTL", "3600")),
        max_active_agents=int(os.environ.get("MAX_ACTIVE_AGENTS", "1000")),
        default_sector=os.environ.get("DEFAULT_SECTOR", "ecommerce").lower(),
    )

    anthropic = AnthropicConfig(
        api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
        model=os.environ.get("ANTHROPIC_MODEL", "claude-sonnet-4-20250514"),
        max_tokens=int(os.environ.get("ANTHROPIC_MAX_TOKENS", "512")),
        intent_fallback_enabled=_env_bool("LLM_INTENT_FALLBACK", "0"),
    )

    origins = os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")

    return AppConfig(
        database=database,
        security=security,
        orchestrator=orchestrator,
        anthropic=anthropic,
        audit_log_path=os.environ.get("AUDIT_LOG_PATH", "./data/audit.jsonl"),
        log_file_dir=os.environ.get("LOG_FILE_DIR", ""),
        api_host=os.environ.get("API_HOST", "0.0.0.0"),
        api_port=int(os.environ.get("API_PORT", "8000")),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        environment=environment,
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )
