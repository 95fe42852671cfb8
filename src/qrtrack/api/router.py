"""Main API router that aggregates all route modules."""

from fastapi import APIRouter

from qrtrack.api import accounts, caption, custom_data, health, projects, users

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(accounts.router, tags=["accounts"])
api_router.include_router(users.router, prefix="/user", tags=["accounts"])
api_router.include_router(projects.router, tags=["projects"])
api_router.include_router(custom_data.router, tags=["custom-data"])
api_router.include_router(caption.router, tags=["caption"])
