"""FastAPI dependencies for dependency injection."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from qrtrack.database import CustomStoreFactory, DocumentStore
from qrtrack.errors import NotFoundError, UnauthorizedError
from qrtrack.models import Account
from qrtrack.services.auth import AuthError, decode_token

logger = logging.getLogger(__name__)


def get_account_store(request: Request) -> DocumentStore:
    """Accounts store, created once in the application lifespan."""
    return request.app.state.account_store


def get_project_store(request: Request) -> DocumentStore:
    """QR projects store, created once in the application lifespan."""
    return request.app.state.project_store


def get_custom_store_factory(request: Request) -> CustomStoreFactory:
    """Factory opening one-off stores for caller-supplied credentials."""
    return request.app.state.custom_store_factory


AccountStore = Annotated[DocumentStore, Depends(get_account_store)]
ProjectStore = Annotated[DocumentStore, Depends(get_project_store)]
CustomStoreFactoryDep = Annotated[CustomStoreFactory, Depends(get_custom_store_factory)]

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_account(
    store: AccountStore,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Account:
    """Get the account behind the bearer token or raise 401."""
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    try:
        payload = decode_token(credentials.credentials)
    except AuthError as e:
        logger.debug(f"Token verification failed: {e!r}")
        raise UnauthorizedError("Invalid or expired token", detail=str(e)) from e

    account_id = payload.get("sub")
    if not account_id:
        raise UnauthorizedError("Invalid token: missing subject")

    try:
        document = await store.read(account_id)
    except NotFoundError as e:
        raise UnauthorizedError("Account no longer exists") from e

    return Account.from_document(document)


# Type aliases for common dependencies
CurrentAccount = Annotated[Account, Depends(get_current_account)]
