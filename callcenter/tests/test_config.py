"""
Tests for shared/config.py — configuration loading and defaults.
"""

import os
import pytest
from unittest.mock import patch

from callcenter.shared.config import (
    AnthropicConfig, AppConfig, DatabaseConfig, Environment,
    OrchestratorConfig, SecurityConfig, load_config,
)


class TestEnvironment:
    def test_values(self):
        assert Environment("development") == Environment.DEVELOPMENT
        assert Environment("test") == Environment.TEST
        assert Environment("production") == Environment.PRODUCTION


class TestDefaults:
    def test_database_default_is_sqlite_file(self):
        assert DatabaseConfig().url.startswith("sqlite:///")

    def test_security_requires_auth_by_default(self):
        cfg = SecurityConfig()
        assert cfg.auth_required is True
        assert cfg.auth_token_ttl_seconds == 86400
        assert cfg.auth_secret == ""

    def test_orchestrator_limits(self):
        cfg = OrchestratorConfig()
        assert cfg.max_active_agents == 1000
        assert cfg.agent_cache_ttl_seconds == 3600
        assert cfg.default_sector == "ecommerce"

    def test_llm_fallback_off_by_default(self):
        assert AnthropicConfig().intent_fallback_enabled is False

    def test_app_defaults_to_production(self):
        assert AppConfig().environment == Environment.PRODUCTION

    def test_config_is_frozen(self):
        cfg = SecurityConfig()
        with pytest.raises(AttributeError):
            cfg.auth_secret = "changed"


class TestLoadConfig:
    @patch.dict(os.environ, {}, clear=True)
    @patch("callcenter.shared.config.load_dotenv")
    def test_empty_environment_uses_defaults(self, _dotenv):
        cfg = load_config()
        assert cfg.environment == Environment.PRODUCTION
        assert cfg.security.auth_required is True
        assert cfg.cors_origins == ("http://localhost:3000", "http://localhost:5173")

    @patch.dict(os.environ, {
        "ENVIRONMENT": "development",
        "DATABASE_URL": "postgresql://cc:cc@db/callcenter",
        "AUTH_SECRET": "s3cret",
        "AUTH_REQUIRED": "false",
        "AUTH_TOKEN_TTL_SECONDS": "600",
        "CREDENTIAL_ENCRYPTION_KEY": "ab" * 32,
        "MAX_ACTIVE_AGENTS": "5",
        "DEFAULT_SECTOR": "Healthcare",
        "LLM_INTENT_FALLBACK": "1",
        "LOG_LEVEL": "debug",
        "CORS_ORIGINS": "https://a.example, https://b.example,",
    }, clear=True)
    @patch("callcenter.shared.config.load_dotenv")
    def test_reads_environment(self, _dotenv):
        cfg = load_config()
        assert cfg.environment == Environment.DEVELOPMENT
        assert cfg.database.url == "postgresql://cc:cc@db/callcenter"
        assert cfg.security.auth_secret == "s3cret"
        assert cfg.security.auth_required is False
        assert cfg.security.auth_token_ttl_seconds == 600
        assert cfg.security.credential_encryption_key == "ab" * 32
        assert cfg.orchestrator.max_active_agents == 5
        assert cfg.orchestrator.default_sector == "healthcare"
        assert cfg.anthropic.intent_fallback_enabled is True
        assert cfg.log_level == "DEBUG"
        assert cfg.cors_origins == ("https://a.example", "https://b.example")

    @patch.dict(os.environ, {"ENVIRONMENT": "staging"}, clear=True)
    @patch("callcenter.shared.config.load_dotenv")
    def test_unknown_environment_fails_safe(self, _dotenv):
        assert load_config().environment == Environment.PRODUCTION
