"""Endpoints for the signed-in account."""

import logging

from fastapi import APIRouter

from qrtrack.api.deps import AccountStore, CurrentAccount, ProjectStore
from qrtrack.models import PROJECT_KIND, AccountRead
from qrtrack.schemas.accounts import DeleteAccountResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=AccountRead)
async def get_current_account_info(account: CurrentAccount):
    """Get the signed-in account."""
    return AccountRead.from_account(account)


@router.delete("/account", response_model=DeleteAccountResponse)
async def delete_own_account(
    account: CurrentAccount,
    accounts: AccountStore,
    projects: ProjectStore,
):
    """Delete the signed-in account and every project it owns."""
    owned = await projects.find({"ownerId": account.id, "kind": PROJECT_KIND})
    for document in owned:
        await projects.delete(document["id"])

    await accounts.delete(account.id)
    logger.info(f"Deleted account {account.id} and {len(owned)} project(s)")

    return DeleteAccountResponse(
        message="Account and associated projects deleted.",
        deleted_projects=len(owned),
    )
