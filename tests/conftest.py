"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, patch

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ["STORE_BACKEND"] = "memory"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SESSION_SECRET"] = "test-session-secret-that-is-long-enough"

import pytest
from httpx import ASGITransport, AsyncClient

from qrtrack.api.deps import get_account_store, get_custom_store_factory, get_project_store
from qrtrack.database import MemoryDocumentStore
from qrtrack.main import app
from qrtrack.models import Account, Project, ScanEvent
from qrtrack.services.auth import create_token
from qrtrack.services.email import email_service
from qrtrack.services.passwords import hash_password

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def mock_send_code():
    """Capture outgoing one-time codes instead of sending email."""
    with patch.object(email_service, "send_code", new_callable=AsyncMock) as mock_send:
        yield mock_send


@pytest.fixture
def account_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def project_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
async def client(
    account_store: MemoryDocumentStore,
    project_store: MemoryDocumentStore,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client backed by in-memory stores."""
    app.dependency_overrides[get_account_store] = lambda: account_store
    app.dependency_overrides[get_project_store] = lambda: project_store
    app.dependency_overrides[get_custom_store_factory] = lambda: None

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_account(
    store: MemoryDocumentStore,
    email: str = "test@example.com",
    password: str = TEST_PASSWORD,
    verified: bool = True,
    **fields: Any,
) -> Account:
    """Insert an account and return it as stored."""
    account = Account(
        id=email,
        email=email,
        name=fields.pop("name", "Test User"),
        password=fields.pop("raw_password", None) or hash_password(password),
        verified=verified,
        **fields,
    )
    return Account.from_document(await store.create(account.to_document()))


async def make_project(store: MemoryDocumentStore, owner: Account | None, **fields: Any) -> Project:
    """Insert a project and return it as stored."""
    project = Project(
        name=fields.pop("name", "Menu"),
        text=fields.pop("text", "example.com/menu"),
        owner_id=owner.id if owner else None,
        owner_email=owner.email if owner else None,
        **fields,
    )
    return Project.from_document(await store.create(project.to_document()))


@pytest.fixture
async def account(account_store: MemoryDocumentStore) -> Account:
    """Create a verified test account."""
    return await make_account(account_store)


@pytest.fixture
async def other_account(account_store: MemoryDocumentStore) -> Account:
    """Create a second verified account."""
    return await make_account(account_store, email="other@example.com", name="Other User")


@pytest.fixture
def account_token(account: Account) -> str:
    """Create a session token for the test account."""
    return create_token(account)


@pytest.fixture
def auth_headers(account_token: str) -> dict[str, str]:
    """Create authorization headers for the test account."""
    return {"Authorization": f"Bearer {account_token}"}


@pytest.fixture
async def project(project_store: MemoryDocumentStore, account: Account) -> Project:
    """Create a project owned by the test account."""
    return await make_project(project_store, account)


@pytest.fixture
def full_event_log() -> list[ScanEvent]:
    """100 scan events, oldest first."""
    start = datetime(2024, 1, 1, tzinfo=UTC)
    return [
        ScanEvent(timestamp=start + timedelta(minutes=i), user_agent=f"agent-{i}", ip="10.0.0.1")
        for i in range(100)
    ]


# Helper to make authenticated requests
class AuthenticatedClient:
    """Wrapper for AsyncClient with authentication."""

    def __init__(self, client: AsyncClient, headers: dict[str, str]):
        self.client = client
        self.headers = headers

    async def get(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.post(url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.put(url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.request("DELETE", url, **kwargs)


@pytest.fixture
def authenticated_client(client: AsyncClient, auth_headers: dict[str, str]) -> AuthenticatedClient:
    """Create an authenticated test client."""
    return AuthenticatedClient(client, auth_headers)
