"""HTTP routers, one per resource; each is tenant-scoped through require_tenant."""

from callcenter.api.routes.analytics import router as analytics_router
from callcenter.api.routes.calls import router as calls_router
from callcenter.api.routes.credentials import router as credentials_router
from callcenter.api.routes.sectors import router as sectors_router
from callcenter.api.routes.teams import router as teams_router

__all__ = [
    "analytics_router",
    "calls_router",
    "credentials_router",
    "sectors_router",
    "teams_router",
]
