"""Public scan tracking tests."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from qrtrack.database import MemoryDocumentStore
from qrtrack.errors import ConflictError
from qrtrack.models import Account, Project, ScanEvent, ScanLocation
from tests.conftest import make_project

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


@pytest.mark.asyncio
async def test_track_redirects_and_counts(
    client: AsyncClient, project: Project, project_store: MemoryDocumentStore
):
    response = await client.get(f"/track/{project.id}", headers={"User-Agent": IPHONE_UA})
    assert response.status_code == 302
    assert response.headers["location"] == "https://example.com/menu"

    stored = Project.from_document(await project_store.read(project.id))
    assert stored.scan_count == 1
    assert len(stored.scan_events) == 1
    event = stored.scan_events[0]
    assert event.user_agent == IPHONE_UA
    assert event.device == "mobile"
    assert event.os == "iOS"
    assert event.location is None


@pytest.mark.asyncio
async def test_track_keeps_existing_scheme(
    client: AsyncClient, account: Account, project_store: MemoryDocumentStore
):
    project = await make_project(project_store, account, text="http://example.com/plain")
    response = await client.get(f"/track/{project.id}")
    assert response.headers["location"] == "http://example.com/plain"


@pytest.mark.asyncio
async def test_track_full_log_evicts_oldest(
    client: AsyncClient,
    account: Account,
    project_store: MemoryDocumentStore,
    full_event_log: list[ScanEvent],
):
    project = await make_project(
        project_store, account, scan_count=5, scan_events=full_event_log
    )

    response = await client.get(f"/track/{project.id}")
    assert response.status_code == 302

    stored = Project.from_document(await project_store.read(project.id))
    assert stored.scan_count == 6
    assert len(stored.scan_events) == 100
    assert stored.scan_events[0].user_agent == "agent-1"
    assert stored.scan_events[-1].timestamp == max(e.timestamp for e in stored.scan_events)


@pytest.mark.asyncio
async def test_track_missing_project(client: AsyncClient):
    response = await client.get("/track/does-not-exist")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_track_is_public_for_owned_projects(client: AsyncClient, project: Project):
    response = await client.get(f"/track/{project.id}")
    assert response.status_code == 302


@pytest.mark.asyncio
async def test_track_records_forwarded_ip_and_location(
    client: AsyncClient, project: Project, project_store: MemoryDocumentStore
):
    location = ScanLocation(city="Toronto", region="Ontario", country="Canada", lat=43.7, lon=-79.4)
    with patch(
        "qrtrack.api.tracking.lookup_location", new_callable=AsyncMock, return_value=location
    ) as mock_lookup:
        response = await client.get(
            f"/track/{project.id}", headers={"X-Forwarded-For": "8.8.8.8, 10.0.0.1"}
        )

    assert response.status_code == 302
    mock_lookup.assert_awaited_once_with("8.8.8.8")
    event = Project.from_document(await project_store.read(project.id)).scan_events[0]
    assert event.ip == "8.8.8.8"
    assert event.location == location


@pytest.mark.asyncio
async def test_track_geolocation_failure_does_not_block(
    client: AsyncClient, project: Project, project_store: MemoryDocumentStore
):
    with patch(
        "qrtrack.api.tracking.lookup_location", new_callable=AsyncMock, return_value=None
    ):
        response = await client.get(
            f"/track/{project.id}", headers={"X-Forwarded-For": "8.8.8.8"}
        )

    assert response.status_code == 302
    stored = Project.from_document(await project_store.read(project.id))
    assert stored.scan_count == 1
    assert stored.scan_events[0].location is None


@pytest.mark.asyncio
async def test_track_retries_on_concurrent_write(
    client: AsyncClient, project: Project, project_store: MemoryDocumentStore
):
    original_replace = project_store.replace
    calls = 0

    async def flaky_replace(document, etag=None):
        nonlocal calls
        calls += 1
        if calls == 1:
            raise ConflictError("Document was modified concurrently")
        return await original_replace(document, etag=etag)

    project_store.replace = flaky_replace

    response = await client.get(f"/track/{project.id}")
    assert response.status_code == 302
    assert calls == 2
    stored = Project.from_document(await project_store.read(project.id))
    assert stored.scan_count == 1


@pytest.mark.asyncio
async def test_track_gives_up_after_repeated_conflicts(
    client: AsyncClient, project: Project, project_store: MemoryDocumentStore
):
    project_store.replace = AsyncMock(side_effect=ConflictError("modified concurrently"))

    response = await client.get(f"/track/{project.id}")
    assert response.status_code == 409
    assert project_store.replace.await_count == 3
