"""Public scan tracking redirect."""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import RedirectResponse

from qrtrack.api.deps import ProjectStore
from qrtrack.api.utils import get_project
from qrtrack.models import Project
from qrtrack.services.geolocation import lookup_location
from qrtrack.services.resilience import retry_on_conflict
from qrtrack.services.scans import append_event, build_event, client_ip, normalize_destination

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/track/{project_id}")
async def track(project_id: str, request: Request, store: ProjectStore):
    """Count a scan, record the event and redirect to the project's destination."""
    # 404 before spending time on the geolocation lookup
    await get_project(store, project_id)

    ip = client_ip(request)
    event = build_event(request.headers.get("user-agent", ""), ip, await lookup_location(ip))

    async def record_scan() -> Project:
        project = await get_project(store, project_id)
        project.scan_count += 1
        project.scan_events = append_event(project.scan_events, event)
        await store.replace(project.to_document(), etag=project.etag)
        return project

    project = await retry_on_conflict(record_scan)
    logger.debug(f"Scan {project.scan_count} recorded for {project.id}")

    return RedirectResponse(
        url=normalize_destination(project.text),
        status_code=status.HTTP_302_FOUND,
    )
