"""Partial record updates and ownership checks."""

from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any, TypeVar

from qrtrack.models import Document

D = TypeVar("D", bound=Document)


class Access(StrEnum):
    ALLOW = "allow"
    DENY = "deny"


def has_value(value: Any) -> bool:
    """True for values that may overwrite a stored field."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def apply_updates(
    record: D,
    updates: Mapping[str, Any],
    fields: Iterable[str],
) -> tuple[D, list[str]]:
    """Copy ``fields`` from ``updates`` onto a copy of ``record``.

    Only provided, non-empty values overwrite; everything else keeps the stored
    value. ``updated_at`` is refreshed when at least one field changed.

    Returns:
        Tuple of (updated record, names of changed fields)
    """
    changes = {
        name: updates[name]
        for name in fields
        if has_value(updates.get(name)) and updates[name] != getattr(record, name)
    }
    if not changes:
        return record, []

    updated = record.model_copy(update=changes)
    updated.touch()
    return updated, list(changes)


def authorize(owner_id: str | None, requester_id: str) -> Access:
    """Allow when the resource has no owner (legacy records) or the requester owns it."""
    if owner_id is None or owner_id == requester_id:
        return Access.ALLOW
    return Access.DENY
