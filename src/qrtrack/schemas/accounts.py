"""Account request/response schemas.

Request fields are optional at the schema level; handlers check presence so
missing fields produce the endpoint's own 400 message.
"""

from qrtrack.models import AccountRead, CamelModel


class RegisterRequest(CamelModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    birthday: str | None = None
    password: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class VerifyCodeRequest(CamelModel):
    email: str | None = None
    code: str | None = None


class EmailRequest(CamelModel):
    email: str | None = None


class ResetPasswordRequest(CamelModel):
    email: str | None = None
    code: str | None = None
    new_password: str | None = None


class UpdateUserRequest(CamelModel):
    email: str | None = None
    name: str | None = None
    phone: str | None = None
    birthday: str | None = None


class RegisterResponse(CamelModel):
    message: str
    id: str | None = None


class AccountResponse(CamelModel):
    message: str
    user: AccountRead


class TokenResponse(CamelModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: AccountRead


class DeleteAccountResponse(CamelModel):
    message: str
    deleted_projects: int = 0
