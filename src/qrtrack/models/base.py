"""Base document model with common fields."""

import time
from datetime import UTC, datetime
from typing import Any, Self

from nanoid import generate as nanoid_generate
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from qrtrack.database import strip_metadata


def utcnow() -> datetime:
    return datetime.now(UTC)


def generate_project_id() -> str:
    """Generate a timestamp+random project id, e.g. ``1718000000000-V1StGXR8``."""
    return f"{int(time.time() * 1000)}-{nanoid_generate(size=8)}"


class CamelModel(BaseModel):
    """Model serialised with camelCase keys, matching the stored documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Document(CamelModel):
    """A record stored in the document database.

    Unknown fields on legacy records are preserved on round trips. The store's
    ``_etag`` is kept aside so writes can be made conditional on it.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    kind: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    etag: str | None = Field(default=None, exclude=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Self:
        """Build a model from a raw store document."""
        return cls.model_validate({**strip_metadata(document), "etag": document.get("_etag")})

    def to_document(self) -> dict[str, Any]:
        """Serialise for the store. Unset optional fields are omitted entirely."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def touch(self) -> None:
        self.updated_at = utcnow()
