"""
Shared test fixtures for the call-center test suite.
"""

import os
import sys
import tempfile

import pytest

# Ensure callcenter is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from callcenter.api import deps
from callcenter.api.app import init_services
from callcenter.api.auth import issue_token
from callcenter.db.models import Client, SectorConfiguration, User
from callcenter.db.seed import init_db
from callcenter.db.session import Database
from callcenter.services.credential_manager import CredentialCipher
from callcenter.shared.audit_log import ImmutableAuditLog
from callcenter.shared.config import (
    AppConfig, DatabaseConfig, Environment, SecurityConfig,
)

AUTH_SECRET = "test-auth-secret"
ENCRYPTION_KEY = "0123456789abcdef" * 4


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def app_config(tmp_dir):
    return AppConfig(
        database=DatabaseConfig(url="sqlite://"),
        security=SecurityConfig(
            auth_secret=AUTH_SECRET,
            credential_encryption_key=ENCRYPTION_KEY,
        ),
        audit_log_path=os.path.join(tmp_dir, "audit.jsonl"),
        environment=Environment.TEST,
    )


@pytest.fixture
def database():
    """Fresh in-memory database with the sector catalog seeded."""
    db = Database(DatabaseConfig(url="sqlite://"))
    init_db(db)
    yield db
    db.dispose()


@pytest.fixture
def session_factory(database):
    return database.session_factory


@pytest.fixture
def cipher():
    return CredentialCipher(ENCRYPTION_KEY)


@pytest.fixture
def audit_log(tmp_dir):
    return ImmutableAuditLog(os.path.join(tmp_dir, "audit.jsonl"))


def seed_tenants(db: Database) -> dict:
    """Two active tenants in different sectors plus an inactive one."""
    with db.session() as session:
        acme = Client(name="Acme Store", email="ops@acme.test", sector="ecommerce")
        clinic = Client(name="City Clinic", email="desk@clinic.test", sector="healthcare")
        dormant = Client(name="Dormant Co", email="hello@dormant.test", active=False)
        session.add_all([acme, clinic, dormant])
        session.flush()

        user = User(client_id=acme.id, email="asha@acme.test", name="Asha")
        session.add(user)
        session.add_all([
            SectorConfiguration(client_id=acme.id, sector="ecommerce", config={"return_window_days": 14}),
            SectorConfiguration(client_id=acme.id, sector="healthcare", config={}, enabled=False),
            SectorConfiguration(client_id=clinic.id, sector="healthcare", config={}),
        ])
        session.flush()
        return {
            "acme": acme.id,
            "clinic": clinic.id,
            "dormant": dormant.id,
            "acme_user": user.id,
        }


@pytest.fixture
def tenants(database):
    return seed_tenants(database)


@pytest.fixture
def services(app_config):
    """Initialise the app's runtime state the way the lifespan does."""
    db = init_services(app_config)
    yield db
    deps.reset()
    db.dispose()


@pytest.fixture
def api_tenants(services):
    return seed_tenants(services)


@pytest.fixture
def tokens(api_tenants):
    return {
        name: issue_token(api_tenants[name], None, AUTH_SECRET)
        for name in ("acme", "clinic", "dormant")
    }
