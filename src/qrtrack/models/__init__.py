"""Document models."""

from qrtrack.models.account import ACCOUNT_KIND, Account, AccountRead
from qrtrack.models.base import CamelModel, Document, generate_project_id, utcnow
from qrtrack.models.project import (
    DEFAULT_BG_COLOR,
    DEFAULT_QR_COLOR,
    PROJECT_KIND,
    Project,
    ScanEvent,
    ScanLocation,
)

__all__ = [
    "ACCOUNT_KIND",
    "DEFAULT_BG_COLOR",
    "DEFAULT_QR_COLOR",
    "PROJECT_KIND",
    "Account",
    "AccountRead",
    "CamelModel",
    "Document",
    "Project",
    "ScanEvent",
    "ScanLocation",
    "generate_project_id",
    "utcnow",
]
