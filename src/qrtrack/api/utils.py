"""Shared API utilities."""

from typing import Any

from qrtrack.database import DocumentStore
from qrtrack.errors import ForbiddenError, NotFoundError, ValidationError
from qrtrack.models import Account, Project
from qrtrack.services.records import Access, authorize


def require(message: str, *values: Any) -> None:
    """Raise a 400 unless every value is present and non-blank."""
    for value in values:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(message)


async def get_account_by_email(store: DocumentStore, email: str) -> Account | None:
    """Look up an account by email address."""
    document = await store.find_one(email=email)
    return Account.from_document(document) if document else None


async def get_project(store: DocumentStore, project_id: str) -> Project:
    """Get a project by id.

    Raises:
        NotFoundError: 404 if the project does not exist
    """
    try:
        document = await store.read(project_id)
    except NotFoundError as e:
        raise NotFoundError("Project not found.") from e
    return Project.from_document(document)


async def get_owned_project(store: DocumentStore, project_id: str, account: Account) -> Project:
    """Get a project the account may act on.

    Raises:
        NotFoundError: 404 if the project does not exist
        ForbiddenError: 403 if it belongs to another account
    """
    project = await get_project(store, project_id)
    if authorize(project.owner_id, account.id) is Access.DENY:
        raise ForbiddenError("You do not have access to this project.")
    return project
