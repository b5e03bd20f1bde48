"""
API v1 Router - Aggregates all v1 endpoints.
Base Path: /v1
"""

from fastapi import APIRouter

from vrcatalog.api.v1 import accounts, assets, elements, health

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(assets.router, prefix="/assets", tags=["assets"])
api_router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
api_router.include_router(elements.router, prefix="/elements", tags=["elements"])
