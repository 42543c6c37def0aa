"""
Tenant API credentials (/api/settings).

Credentials are verified against the provider before they are stored, and
list endpoints return metadata only.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from callcenter.api.auth import TenantContext, require_tenant
from callcenter.api.deps import get_credential_manager
from callcenter.services.credential_manager import (
    CredentialManager,
    get_apis_for_sector,
    get_provider_types,
)
from callcenter.shared.errors import CredentialNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["settings"])


class CredentialTestRequest(BaseModel):
    credentials: Optional[dict] = None


class CredentialSaveRequest(BaseModel):
    credentials: Optional[dict] = None
    provider_name: Optional[str] = None


def _failed(error: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": error})


@router.get("/sector/{sector}/apis")
def list_sector_apis(sector: str, tenant: TenantContext = Depends(require_tenant)):
    return {"success": True, "sector": sector, "apis": get_apis_for_sector(sector)}


@router.get("/credentials/{sector}")
def list_credentials(
    sector: str,
    tenant: TenantContext = Depends(require_tenant),
    manager: CredentialManager = Depends(get_credential_manager),
):
    return {
        "success": True,
        "sector": sector,
        "credentials": manager.list_credentials(tenant.client_id, sector),
    }


@router.post("/credentials/{sector}/{api_type}/test")
async def test_credential(
    sector: str,
    api_type: str,
    req: CredentialTestRequest,
    tenant: TenantContext = Depends(require_tenant),
    manager: CredentialManager = Depends(get_credential_manager),
):
    if not req.credentials:
        raise HTTPException(400, "Credentials required for testing")

    result = await manager.test_credential(api_type, req.credentials)
    if not result["valid"]:
        return _failed(result.get("error") or f"{api_type} credential verification failed")
    return {"success": True, "message": f"{sector}/{api_type} credentials verified successfully"}


@router.post("/credentials/{sector}/{api_type}/save")
async def save_credential(
    sector: str,
    api_type: str,
    req: CredentialSaveRequest,
    tenant: TenantContext = Depends(require_tenant),
    manager: CredentialManager = Depends(get_credential_manager),
):
    if not req.credentials or not req.provider_name:
        raise HTTPException(400, "Credentials and provider name required")

    result = await manager.test_credential(api_type, req.credentials)
    if not result["valid"]:
        return _failed(result.get("error") or "Credential verification failed")

    credential_id = manager.store_credential(
        tenant.client_id, sector, api_type, req.provider_name, req.credentials
    )
    manager.activate(credential_id)
    logger.info(f"Credential saved and verified: client={tenant.client_id} {sector}/{api_type}")
    return {"success": True, "credential_id": credential_id, "message": "Credential saved and verified"}


@router.delete("/credentials/{credential_id}")
def delete_credential(
    credential_id: int,
    tenant: TenantContext = Depends(require_tenant),
    manager: CredentialManager = Depends(get_credential_manager),
):
    try:
        manager.delete_credential(tenant.client_id, credential_id)
    except CredentialNotFoundError:
        raise HTTPException(404, "Credential not found")
    except PermissionError:
        raise HTTPException(403, "Access denied")
    return {"success": True, "message": "Credential deleted"}


@router.get("/provider-types/{sector}")
def list_provider_types(sector: str, tenant: TenantContext = Depends(require_tenant)):
    return {"success": True, "sector": sector, "providers": get_provider_types(sector)}
