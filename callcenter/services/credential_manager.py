"""
Credential Manager - encrypted storage of per-tenant third-party API credentials.

Credentials are JSON-encoded, encrypted with AES-256-CBC (random IV, PKCS7
padding) and stored as "iv_hex:ciphertext_hex". Plaintext only leaves this
module through get_credential(), and every such read is audited.
"""

import json
import logging
import os
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from callcenter.db.models import ApiCredential, utcnow
from callcenter.shared.audit_log import ImmutableAuditLog, actor_for_client
from callcenter.shared.errors import (
    CredentialInactiveError,
    CredentialNotFoundError,
    CredentialTestError,
    EncryptionKeyError,
)
from callcenter.shared.interfaces import ICredentialTester

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_ACTIVE = "active"

_IV_BYTES = 16
_BLOCK_BITS = 128


class CredentialCipher:
    """AES-256-CBC wrapper around a 32-byte key given as 64 hex characters."""

    def __init__(self, hex_key: str):
        try:
            key = bytes.fromhex(hex_key or "")
        except ValueError as e:
            raise EncryptionKeyError("Credential encryption key must be hex-encoded") from e
        if len(key) != 32:
            raise EncryptionKeyError(
                f"Credential encryption key must be 32 bytes (64 hex chars), got {len(key)} bytes"
            )
        self._key = key

    @staticmethod
    def generate_key() -> str:
        return os.urandom(32).hex()

    def encrypt(self, data) -> str:
        iv = os.urandom(_IV_BYTES)
        padder = padding.PKCS7(_BLOCK_BITS).padder()
        plaintext = padder.update(json.dumps(data).encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(plaintext) + encryptor.finalize()
        return f"{iv.hex()}:{ciphertext.hex()}"

    def decrypt(self, token: str):
        try:
            iv_hex, ct_hex = token.split(":", 1)
            iv = bytes.fromhex(iv_hex)
            ciphertext = bytes.fromhex(ct_hex)
            decryptor = Cipher(algorithms.AES(self._key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(_BLOCK_BITS).unpadder()
            plaintext = unpadder.update(padded) + unpadder.finalize()
            return json.loads(plaintext.decode("utf-8"))
        except ValueError as e:
            # Covers malformed tokens, bad padding (wrong key) and bad JSON
            raise EncryptionKeyError("Unable to decrypt credential") from e


# ── API catalog per sector ───────────────────────────────────

def _field(name, label, type_="text", required=True, **extra) -> dict:
    return {"name": name, "label": label, "type": type_, "required": required, **extra}


SECTOR_APIS: dict[str, list[dict]] = {
    "ecommerce": [
        {
            "type": "shopify",
            "name": "Shopify Store",
            "required": True,
            "fields": [
                _field("store_url", "Store URL", placeholder="mystore.myshopify.com"),
                _field("access_token", "Access Token", "password"),
            ],
            "help": "Get from Shopify Admin > Settings > Apps and Integrations > API Credentials",
        },
        {
            "type": "tracking_api",
            "name": "Shipment Tracking (Shiprocket/DHL)",
            "required": True,
            "fields": [
                _field("provider", "Tracking Provider", "select", options=["shiprocket", "dhl", "fedex"]),
                _field("api_key", "API Key", "password"),
                _field("api_secret", "API Secret", "password", required=False),
            ],
        },
        {
            "type": "payment",
            "name": "Payment Gateway (Stripe/RazorPay)",
            "required": False,
            "fields": [
                _field("gateway", "Payment Gateway", "select", options=["stripe", "razorpay"]),
                _field("api_key", "Secret Key", "password"),
            ],
        },
    ],
    "healthcare": [
        {
            "type": "emr_epic",
            "name": "Epic EMR System",
            "required": True,
            "fields": [
                _field("api_url", "Epic API URL"),
                _field("client_id", "Client ID"),
                _field("client_secret", "Client Secret", "password"),
                _field("practice_id", "Practice ID"),
            ],
            "help": "Contact Epic support for API credentials",
        },
        {
            "type": "emr_cerner",
            "name": "Cerner EMR System",
            "required": True,
            "fields": [
                _field("api_url", "Cerner API URL"),
                _field("api_key", "API Key", "password"),
                _field("system_id", "System ID"),
            ],
        },
        {
            "type": "hipaa_compliance",
            "name": "HIPAA Compliance Setup",
            "required": True,
            "fields": [
                _field("business_associate_agreement", "BAA Signed?", "checkbox"),
                _field("encryption_enabled", "Enable Encryption?", "checkbox"),
            ],
        },
    ],
    "realestate": [
        {
            "type": "mls_nar",
            "name": "MLS (Real Estate Database)",
            "required": True,
            "fields": [
                _field("api_key", "MLS API Key", "password"),
                _field("board_id", "Board ID"),
                _field("username", "Username"),
            ],
            "help": "Get from your local MLS board or NAR",
        },
        {
            "type": "crm",
            "name": "Real Estate CRM",
            "required": False,
            "fields": [
                _field("crm_type", "CRM Type", "select", options=["salesforce", "zoho", "pipedrive"]),
                _field("api_key", "API Key", "password"),
            ],
        },
    ],
    "government": [
        {
            "type": "citizen_portal",
            "name": "Government Citizen Portal",
            "required": True,
            "fields": [
                _field("portal_url", "Portal URL"),
                _field("api_key", "API Key", "password"),
                _field("department_code", "Department Code"),
            ],
        },
    ],
    "fintech": [
        {
            "type": "stripe",
            "name": "Stripe Payment Gateway",
            "required": True,
            "fields": [_field("secret_key", "Secret Key", "password")],
        },
        {
            "type": "razorpay",
            "name": "RazorPay Payment Gateway",
            "required": True,
            "fields": [
                _field("key_id", "Key ID"),
                _field("key_secret", "Key Secret", "password"),
            ],
        },
    ],
    "logistics": [
        {
            "type": "shiprocket",
            "name": "Shiprocket Tracking",
            "required": True,
            "fields": [
                _field("api_key", "API Key", "password"),
                _field("api_email", "Email", "email"),
            ],
        },
    ],
    "education": [
        {
            "type": "school_management",
            "name": "School Management System",
            "required": True,
            "fields": [
                _field("system_type", "System Type", "select", options=["sms", "powerschool", "custom"]),
                _field("api_url", "API URL"),
                _field("api_key", "API Key", "password"),
            ],
        },
    ],
}

PROVIDER_TYPES: dict[str, list[dict]] = {
    "ecommerce": [
        {"type": "shopify", "name": "Shopify Store"},
        {"type": "woocommerce", "name": "WooCommerce"},
        {"type": "magento", "name": "Magento"},
    ],
    "healthcare": [
        {"type": "emr_epic", "name": "Epic EMR"},
        {"type": "emr_cerner", "name": "Cerner EMR"},
        {"type": "emr_meditech", "name": "Meditech EMR"},
    ],
    "realestate": [
        {"type": "mls_nar", "name": "MLS (NAR)"},
        {"type": "zillow", "name": "Zillow"},
    ],
    "fintech": [
        {"type": "stripe", "name": "Stripe"},
        {"type": "razorpay", "name": "RazorPay"},
    ],
}


def get_apis_for_sector(sector: str) -> list[dict]:
    return SECTOR_APIS.get(sector, [])


def get_provider_types(sector: str) -> list[dict]:
    return PROVIDER_TYPES.get(sector, [])


# ── Manager ──────────────────────────────────────────────────

class CredentialManager:
    """Encrypts, stores, verifies and audits tenant API credentials."""

    def __init__(
        self,
        session_factory,
        cipher: CredentialCipher,
        audit_log: Optional[ImmutableAuditLog] = None,
        tester: Optional[ICredentialTester] = None,
    ):
        self._session_factory = session_factory
        self._cipher = cipher
        self._audit_log = audit_log
        self._tester = tester

    def _audit(self, client_id: int, action: str, resource_id: str, **metadata) -> None:
        if self._audit_log is not None:
            self._audit_log.record(
                actor=actor_for_client(client_id),
                action=action,
                resource_type="credential",
                resource_id=resource_id,
                metadata=metadata,
            )

    def store_credential(
        self,
        client_id: int,
        sector: str,
        api_type: str,
        provider_name: Optional[str],
        credentials: dict,
    ) -> int:
        """Insert or replace the tenant's credential for (api_type, sector); status resets to pending."""
        encrypted = self._cipher.encrypt(credentials)
        with self._session_factory() as session:
            row = (
                session.query(ApiCredential)
                .filter(
                    ApiCredential.client_id == client_id,
                    ApiCredential.api_type == api_type,
                    ApiCredential.sector == sector,
                )
                .first()
            )
            if row is None:
                row = ApiCredential(client_id=client_id, api_type=api_type, sector=sector)
                session.add(row)
            row.provider_name = provider_name
            row.encrypted_credentials = encrypted
            row.status = STATUS_PENDING
            row.verified_at = None
            row.updated_at = utcnow()
            session.commit()
            credential_id = row.id

        logger.info(f"Credential stored: client={client_id} {sector}/{api_type} id={credential_id}")
        self._audit(client_id, "STORE", f"{sector}/{api_type}", credential_id=credential_id)
        return credential_id

    def activate(self, credential_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(ApiCredential, credential_id)
            if row is None:
                raise CredentialNotFoundError(f"Credential {credential_id} not found")
            row.status = STATUS_ACTIVE
            row.verified_at = utcnow()
            session.commit()
            client_id, resource = row.client_id, f"{row.sector}/{row.api_type}"

        logger.info(f"Credential {credential_id} activated")
        self._audit(client_id, "ACTIVATE", resource, credential_id=credential_id)

    def get_credential(self, client_id: int, sector: str, api_type: str) -> dict:
        """Decrypted credential for an active (verified) entry."""
        with self._session_factory() as session:
            row = (
                session.query(ApiCredential)
                .filter(
                    ApiCredential.client_id == client_id,
                    ApiCredential.sector == sector,
                    ApiCredential.api_type == api_type,
                )
                .first()
            )
            if row is None:
                raise CredentialNotFoundError(f"Credential not found: {sector}/{api_type}")
            if row.status != STATUS_ACTIVE:
                raise CredentialInactiveError(f"Credential is {row.status}, not active")
            encrypted = row.encrypted_credentials

        credentials = self._cipher.decrypt(encrypted)
        self._audit(client_id, "READ", f"{sector}/{api_type}")
        return credentials

    def list_credentials(self, client_id: int, sector: Optional[str] = None) -> list[dict]:
        with self._session_factory() as session:
            query = session.query(ApiCredential).filter(ApiCredential.client_id == client_id)
            if sector is not None:
                query = query.filter(ApiCredential.sector == sector)
            rows = query.order_by(ApiCredential.created_at.desc(), ApiCredential.id.desc()).all()
            return [row.to_public_dict() for row in rows]

    def delete_credential(self, client_id: int, credential_id: int) -> None:
        with self._session_factory() as session:
            row = session.get(ApiCredential, credential_id)
            if row is None:
                raise CredentialNotFoundError(f"Credential {credential_id} not found")
            if row.client_id != client_id:
                raise PermissionError(f"Credential {credential_id} belongs to another client")
            resource = f"{row.sector}/{row.api_type}"
            session.delete(row)
            session.commit()

        logger.info(f"Credential {credential_id} deleted by client {client_id}")
        self._audit(client_id, "DELETE", resource, credential_id=credential_id)

    async def test_credential(self, api_type: str, credentials: dict) -> dict:
        """Check the provider; never raises for an unknown type or a rejected credential."""
        if self._tester is None:
            return {"valid": False, "error": "Credential testing is not configured"}
        try:
            valid = await self._tester.test(api_type, credentials)
        except CredentialTestError as e:
            logger.warning(f"Credential test failed for {api_type}: {e}")
            return {"valid": False, "error": str(e)}

        if not valid:
            logger.warning(f"Credential test failed for {api_type}: rejected by provider")
            return {
                "valid": False,
                "error": "Credential verification failed - invalid or expired credentials",
            }
        logger.info(f"Credential test passed for {api_type}")
        return {"valid": True}
