"""
Tenant authentication.

Bearer tokens are base64url("client_id:user_id:iat:nonce:sig") where
sig = sha256(payload + ":" + secret). Every router depends on
require_tenant and filters its queries by the resulting client_id.
"""

import base64
import binascii
import hashlib
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from callcenter.api.deps import get_auth_secret, get_config, get_db
from callcenter.db.models import Client
from callcenter.shared.config import AppConfig, Environment
from callcenter.shared.constants import DEFAULT_SECTOR

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    """The authenticated tenant a request acts for."""
    client_id: int
    user_id: Optional[int] = None
    sector: str = DEFAULT_SECTOR


def _sign(payload: str, secret: str) -> str:
    return hashlib.sha256(f"{payload}:{secret}".encode("utf-8")).hexdigest()


def issue_token(client_id: int, user_id: Optional[int], secret: str, issued_at: Optional[int] = None) -> str:
    iat = int(time.time()) if issued_at is None else issued_at
    payload = f"{client_id}:{user_id if user_id is not None else ''}:{iat}:{secrets.token_hex(8)}"
    raw = f"{payload}:{_sign(payload, secret)}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def verify_token(token: str, secret: str, ttl_seconds: int) -> Optional[tuple[int, Optional[int]]]:
    """Return (client_id, user_id) for a valid, unexpired token; None otherwise."""
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError):
        return None

    payload, sep, signature = raw.rpartition(":")
    expected = _sign(payload, secret)
    if not sep or not secrets.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
        return None

    parts = payload.split(":")
    if len(parts) != 4:
        return None
    client_part, user_part, iat_part, _nonce = parts
    try:
        client_id = int(client_part)
        user_id = int(user_part) if user_part else None
        iat = int(iat_part)
    except ValueError:
        return None

    if time.time() - iat > ttl_seconds:
        return None
    return client_id, user_id


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _identify(request: Request, config: AppConfig, secret: str) -> Optional[tuple[int, Optional[int]]]:
    token = _bearer_token(request)
    if token:
        return verify_token(token, secret, config.security.auth_token_ttl_seconds)

    # Header-only identity is accepted only when auth is switched off outside production
    if not config.security.auth_required and config.environment != Environment.PRODUCTION:
        header = request.headers.get("X-Client-ID", "")
        if header.isdigit():
            return int(header), None
    return None


def require_tenant(
    request: Request,
    config: AppConfig = Depends(get_config),
    secret: str = Depends(get_auth_secret),
    db: Session = Depends(get_db),
) -> TenantContext:
    identity = _identify(request, config, secret)
    if identity is None:
        raise HTTPException(401, "Unauthorized")
    client_id, user_id = identity

    client = db.get(Client, client_id)
    if client is None:
        raise HTTPException(404, "Client not found")
    if not client.active:
        logger.warning(f"Rejected request for inactive client {client_id}")
        raise HTTPException(403, "Client is inactive")

    return TenantContext(client_id=client_id, user_id=user_id, sector=client.sector or DEFAULT_SECTOR)
