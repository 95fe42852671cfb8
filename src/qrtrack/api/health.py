"""Health check endpoints."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from qrtrack.api.deps import AccountStore, ProjectStore
from qrtrack.errors import AppError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health_check():
    """Basic health check - just confirms the service is running."""
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}


@router.get("/ready")
async def readiness_check(accounts: AccountStore, projects: ProjectStore):
    """Readiness check - confirms both document stores are reachable."""
    errors = {}
    for name, store in (("accounts", accounts), ("projects", projects)):
        try:
            await store.ping()
        except AppError as e:
            logger.error(f"{name} store readiness check failed: {e.detail or e.message}")
            errors[name] = e.message

    response = {
        "status": "ok" if not errors else "degraded",
        "accounts": "error" if "accounts" in errors else "connected",
        "projects": "error" if "projects" in errors else "connected",
    }
    if errors:
        return JSONResponse(status_code=503, content=response)
    return response
