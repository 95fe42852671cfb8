"""Account model."""

from datetime import datetime

from pydantic import Field

from qrtrack.models.base import CamelModel, Document

ACCOUNT_KIND = "user"


class Account(Document):
    """User account. The email is both the id and the partition key."""

    kind: str = ACCOUNT_KIND
    email: str
    name: str | None = None
    phone: str | None = None
    birthday: str | None = None
    password: str
    verified: bool = False
    verification_code: str | None = None
    verification_expires: datetime | None = None
    reset_code: str | None = None
    reset_expires: datetime | None = None

    def clear_verification(self) -> None:
        self.verification_code = None
        self.verification_expires = None

    def clear_reset(self) -> None:
        self.reset_code = None
        self.reset_expires = None


class AccountRead(CamelModel):
    """Public view of an account. Never includes credentials or pending codes."""

    id: str
    email: str
    name: str | None = None
    phone: str | None = None
    birthday: str | None = None
    verified: bool = False
    created_at: datetime | None = Field(default=None)

    @classmethod
    def from_account(cls, account: Account) -> "AccountRead":
        return cls(
            id=account.id,
            email=account.email,
            name=account.name,
            phone=account.phone,
            birthday=account.birthday,
            verified=account.verified,
            created_at=account.created_at,
        )
