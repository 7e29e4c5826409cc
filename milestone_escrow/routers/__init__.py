"""API routers for the milestone escrow backend."""
from fastapi import APIRouter

from . import accounts, escrow, health, registry


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(registry.router)
    api_router.include_router(escrow.router)
    api_router.include_router(accounts.router)
    return api_router
