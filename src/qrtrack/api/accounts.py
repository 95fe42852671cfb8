"""Account endpoints: registration, verification, login and password reset."""

import logging

from fastapi import APIRouter, status
from fastapi.concurrency import run_in_threadpool

from qrtrack.api.deps import AccountStore
from qrtrack.api.utils import get_account_by_email, require
from qrtrack.database import DocumentStore
from qrtrack.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)
from qrtrack.models import Account, AccountRead
from qrtrack.schemas.accounts import (
    AccountResponse,
    EmailRequest,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    TokenResponse,
    UpdateUserRequest,
    VerifyCodeRequest,
)
from qrtrack.schemas.common import MessageResponse
from qrtrack.services.auth import create_token
from qrtrack.services.email import CodePurpose, EmailDeliveryError, email_service
from qrtrack.services.passwords import (
    MAX_PASSWORD_BYTES,
    hash_password,
    needs_rehash,
    verify_password,
)
from qrtrack.services.records import apply_updates
from qrtrack.services.tokens import TokenStatus, generate_code, validate_token

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid credentials"
UPDATABLE_FIELDS = ("name", "phone", "birthday")


async def _send_code(email: str, code: str, purpose: CodePurpose, failure_message: str) -> None:
    try:
        await email_service.send_code(email, code, purpose)
    except EmailDeliveryError as e:
        raise UpstreamError(failure_message, detail=str(e)) from e


async def _create_account(request: RegisterRequest, store: DocumentStore) -> Account:
    require(
        "Name, email, and password are required.",
        request.name,
        request.email,
        request.password,
    )

    if await get_account_by_email(store, request.email):
        raise ConflictError("User already exists with this email.")

    code, expires = generate_code()
    account = Account(
        id=request.email,
        email=request.email,
        name=request.name,
        phone=request.phone or None,
        birthday=request.birthday or None,
        password=await run_in_threadpool(hash_password, request.password),
        verification_code=code,
        verification_expires=expires,
    )
    await store.create(account.to_document())
    logger.info(f"Registered account {account.id}")

    await _send_code(account.email, code, CodePurpose.VERIFICATION, "Error registering user")
    return account


async def _authenticate(request: LoginRequest, store: DocumentStore) -> Account:
    """Check credentials; unknown email and wrong password fail identically."""
    require("Email and password are required", request.email, request.password)

    account = await get_account_by_email(store, request.email)
    if account is None:
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not await run_in_threadpool(verify_password, account.password, request.password):
        raise UnauthorizedError(INVALID_CREDENTIALS)

    if not account.verified:
        raise ForbiddenError("Please verify your email before logging in.")

    # Overlong legacy credentials stay as they are; bcrypt cannot hold them
    if needs_rehash(account.password) and len(request.password.encode()) <= MAX_PASSWORD_BYTES:
        account.password = await run_in_threadpool(hash_password, request.password)
        account.touch()
        await store.replace(account.to_document(), etag=account.etag)
        logger.info(f"Rehashed legacy credential for {account.id}")

    return account


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, store: AccountStore):
    """Create an account and email a verification code."""
    await _create_account(request, store)
    return MessageResponse(message="User registered. Check your email for the verification code.")


@router.post("/register2", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register2(request: RegisterRequest, store: AccountStore):
    """Create an account for the session-based flow; responds with the account id."""
    account = await _create_account(request, store)
    return RegisterResponse(
        message="User registered. Check your email for the verification code.",
        id=account.id,
    )


@router.post("/login", response_model=AccountResponse)
async def login(request: LoginRequest, store: AccountStore):
    """Legacy login: checks credentials and returns the account, no session."""
    account = await _authenticate(request, store)
    return AccountResponse(message="Login successful", user=AccountRead.from_account(account))


@router.post("/login2", response_model=TokenResponse)
async def login2(request: LoginRequest, store: AccountStore):
    """Check credentials and issue a session token."""
    account = await _authenticate(request, store)
    return TokenResponse(
        message="Login successful",
        access_token=create_token(account),
        user=AccountRead.from_account(account),
    )


@router.post("/verify-code", response_model=MessageResponse)
async def verify_code(request: VerifyCodeRequest, store: AccountStore):
    """Consume a pending verification code."""
    require("Email and code are required.", request.email, request.code)

    account = await get_account_by_email(store, request.email)
    if account is None:
        raise ValidationError("User not found.")
    if account.verified:
        return MessageResponse(message="Already verified.")

    result = validate_token(account.verification_code, account.verification_expires, request.code)
    if result is TokenStatus.NOT_PENDING:
        raise ValidationError("No verification code is pending. Request a new code.")
    if result is TokenStatus.EXPIRED:
        raise ValidationError("Verification code has expired.")
    if result is TokenStatus.MISMATCH:
        raise ValidationError("Invalid verification code.")

    account.verified = True
    account.clear_verification()
    account.touch()
    await store.replace(account.to_document(), etag=account.etag)
    return MessageResponse(message="Email verified.")


@router.post("/resend-code", response_model=MessageResponse)
async def resend_code(request: EmailRequest, store: AccountStore):
    """Issue a fresh verification code to an unverified account."""
    require("Email is required.", request.email)

    account = await get_account_by_email(store, request.email)
    if account is None:
        raise NotFoundError("User not found.")
    if account.verified:
        raise ValidationError("Account is already verified.")

    code, expires = generate_code()
    account.verification_code = code
    account.verification_expires = expires
    account.touch()
    await store.replace(account.to_document(), etag=account.etag)

    await _send_code(
        account.email, code, CodePurpose.VERIFICATION, "Failed to send verification code."
    )
    return MessageResponse(message="Verification code sent to email.")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(request: EmailRequest, store: AccountStore):
    """Issue a password reset code."""
    require("Email is required.", request.email)

    account = await get_account_by_email(store, request.email)
    if account is None:
        raise NotFoundError("User not found.")

    code, expires = generate_code()
    account.reset_code = code
    account.reset_expires = expires
    account.touch()
    await store.replace(account.to_document(), etag=account.etag)

    await _send_code(account.email, code, CodePurpose.PASSWORD_RESET, "Failed to send reset code.")
    return MessageResponse(message="Reset code sent to email.")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(request: ResetPasswordRequest, store: AccountStore):
    """Consume a reset code and set a new password."""
    require("All fields are required.", request.email, request.code, request.new_password)

    account = await get_account_by_email(store, request.email)
    if account is None:
        raise ValidationError("Invalid or expired reset code.")

    result = validate_token(account.reset_code, account.reset_expires, request.code)
    if result is not TokenStatus.VALID:
        raise ValidationError("Invalid or expired reset code.")

    if await run_in_threadpool(verify_password, account.password, request.new_password):
        raise ValidationError("New password cannot be the same as the old password.")

    account.password = await run_in_threadpool(hash_password, request.new_password)
    account.clear_reset()
    account.touch()
    await store.replace(account.to_document(), etag=account.etag)
    return MessageResponse(message="Password reset successfully.")


@router.put("/update-user", response_model=AccountResponse)
async def update_user(request: UpdateUserRequest, store: AccountStore):
    """Update name/phone/birthday; blank values leave the stored value alone."""
    require("Email is required to update user data.", request.email)

    account = await get_account_by_email(store, request.email)
    if account is None:
        raise NotFoundError("User not found.")

    updated, changed = apply_updates(account, request.model_dump(), UPDATABLE_FIELDS)
    if changed:
        await store.replace(updated.to_document(), etag=account.etag)
    return AccountResponse(
        message="User updated successfully.", user=AccountRead.from_account(updated)
    )


@router.delete("/delete-account", response_model=MessageResponse)
async def delete_account(request: EmailRequest, store: AccountStore):
    """Delete an account by email."""
    require("Email is required.", request.email)

    account = await get_account_by_email(store, request.email)
    if account is None:
        raise NotFoundError("User not found.")

    await store.delete(account.id)
    return MessageResponse(message="Account deleted successfully.")
