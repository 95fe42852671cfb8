"""Project and custom-data request schemas."""

import re
from urllib.parse import urlparse

from pydantic import field_validator

from qrtrack.config import settings
from qrtrack.models import CamelModel

_RESOURCE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,255}$")


class ProjectCreate(CamelModel):
    name: str | None = None
    text: str | None = None
    qr_image: str | None = None
    qr_color: str | None = None
    bg_color: str | None = None


class ProjectUpdate(CamelModel):
    name: str | None = None
    text: str | None = None
    qr_image: str | None = None
    qr_color: str | None = None
    bg_color: str | None = None


class ColorUpdate(CamelModel):
    qr_color: str | None = None
    bg_color: str | None = None
    qr_image: str | None = None


class CustomStoreTarget(CamelModel):
    """Caller-supplied store credentials for a one-off query.

    Validated strictly before any outbound connection is attempted.
    """

    endpoint: str
    key: str
    database_id: str
    container_id: str

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        parsed = urlparse(value.strip())
        if parsed.scheme != "https" or not parsed.hostname:
            raise ValueError("endpoint must be an https URL")
        suffix = settings.custom_store_allowed_suffix
        if suffix and not parsed.hostname.endswith(suffix):
            raise ValueError(f"endpoint host must end with {suffix}")
        return value.strip()

    @field_validator("key")
    @classmethod
    def _check_key(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("key must not be empty")
        return value.strip()

    @field_validator("database_id", "container_id")
    @classmethod
    def _check_resource_id(cls, value: str) -> str:
        if not _RESOURCE_ID_RE.match(value):
            raise ValueError("must be 1-255 letters, digits, '_' or '-'")
        return value
