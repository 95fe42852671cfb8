"""QR project endpoints. Every route requires a session and ownership."""

import logging

from fastapi import APIRouter, status
from fastapi.concurrency import run_in_threadpool

from qrtrack.api.deps import CurrentAccount, ProjectStore
from qrtrack.api.utils import get_owned_project, require
from qrtrack.config import settings
from qrtrack.models import DEFAULT_BG_COLOR, DEFAULT_QR_COLOR, PROJECT_KIND, Project
from qrtrack.schemas.common import MessageResponse
from qrtrack.schemas.projects import ColorUpdate, ProjectCreate, ProjectUpdate
from qrtrack.services.records import apply_updates, has_value
from qrtrack.services.scans import summarize_events
from qrtrack.utils.image import render_qr_data_url

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_FIELDS = ("name", "text", "qr_image", "qr_color", "bg_color")
COLOR_FIELDS = ("qr_color", "bg_color", "qr_image")


def tracking_url(project_id: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/track/{project_id}"


async def render_project_image(project: Project) -> str:
    return await run_in_threadpool(
        render_qr_data_url,
        tracking_url(project.id),
        project.qr_color,
        project.bg_color,
    )


@router.post("/save-project", status_code=status.HTTP_201_CREATED)
async def save_project(request: ProjectCreate, account: CurrentAccount, store: ProjectStore):
    """Create a project owned by the signed-in account."""
    require("Name and text are required.", request.name, request.text)

    project = Project(
        name=request.name,
        text=request.text,
        qr_image=request.qr_image or None,
        qr_color=request.qr_color or DEFAULT_QR_COLOR,
        bg_color=request.bg_color or DEFAULT_BG_COLOR,
        owner_id=account.id,
        owner_email=account.email,
    )
    if not project.qr_image:
        project.qr_image = await render_project_image(project)

    await store.create(project.to_document())
    logger.info(f"Saved project {project.id} for {account.id}")
    return {"message": "Project saved.", "project": project.to_response()}


@router.get("/get-projects")
async def get_projects(account: CurrentAccount, store: ProjectStore):
    """List the signed-in account's projects, newest first."""
    documents = await store.find(
        {"ownerId": account.id, "kind": PROJECT_KIND},
        order_by="createdAt",
        descending=True,
    )
    return {"projects": [Project.from_document(doc).to_response() for doc in documents]}


@router.get("/get-project/{project_id}")
async def get_project(project_id: str, account: CurrentAccount, store: ProjectStore):
    project = await get_owned_project(store, project_id, account)
    return {"project": project.to_response()}


@router.put("/update-project/{project_id}")
async def update_project(
    project_id: str,
    request: ProjectUpdate,
    account: CurrentAccount,
    store: ProjectStore,
):
    """Partially update a project; blank fields keep their stored values."""
    project = await get_owned_project(store, project_id, account)
    updated, changed = apply_updates(project, request.model_dump(), PROJECT_FIELDS)
    if changed:
        await store.replace(updated.to_document(), etag=project.etag)
    return {"message": "Project updated.", "project": updated.to_response()}


@router.put("/update-color/{project_id}")
async def update_color(
    project_id: str,
    request: ColorUpdate,
    account: CurrentAccount,
    store: ProjectStore,
):
    """Update colours and/or image. Re-renders the code when colours change without an image."""
    project = await get_owned_project(store, project_id, account)
    updated, changed = apply_updates(project, request.model_dump(), COLOR_FIELDS)
    if not changed:
        return {"message": "Nothing to update.", "project": project.to_response()}

    if not has_value(request.qr_image) and {"qr_color", "bg_color"} & set(changed):
        updated.qr_image = await render_project_image(updated)

    await store.replace(updated.to_document(), etag=project.etag)
    return {"message": "Project colors updated.", "project": updated.to_response()}


@router.delete("/delete-project/{project_id}", response_model=MessageResponse)
async def delete_project(project_id: str, account: CurrentAccount, store: ProjectStore):
    project = await get_owned_project(store, project_id, account)
    await store.delete(project.id)
    return MessageResponse(message="Project deleted.")


@router.get("/get-scan-count/{project_id}")
async def get_scan_count(project_id: str, account: CurrentAccount, store: ProjectStore):
    project = await get_owned_project(store, project_id, account)
    return {"scanCount": project.scan_count}


@router.get("/get-scan-analytics/{project_id}")
async def get_scan_analytics(project_id: str, account: CurrentAccount, store: ProjectStore):
    """Scan counter, the retained scan events and a summary of them."""
    project = await get_owned_project(store, project_id, account)
    return {
        "scanCount": project.scan_count,
        "scanEvents": [
            event.model_dump(mode="json", by_alias=True, exclude_none=True)
            for event in project.scan_events
        ],
        "summary": summarize_events(project.scan_events),
    }
