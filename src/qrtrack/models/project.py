"""QR project model and embedded scan events."""

from datetime import datetime

from pydantic import Field

from qrtrack.models.base import CamelModel, Document, generate_project_id, utcnow

PROJECT_KIND = "qrProject"
DEFAULT_QR_COLOR = "#000000"
DEFAULT_BG_COLOR = "#ffffff"


class ScanLocation(CamelModel):
    """Best-effort geolocation of a scan."""

    city: str | None = None
    region: str | None = None
    country: str | None = None
    lat: float | None = None
    lon: float | None = None


class ScanEvent(CamelModel):
    """One redirect-through access of a project."""

    timestamp: datetime = Field(default_factory=utcnow)
    user_agent: str = ""
    browser: str | None = None
    os: str | None = None
    device: str = "unknown"
    ip: str | None = None
    location: ScanLocation | None = None


class Project(Document):
    """A QR project: a destination payload plus its scan analytics."""

    id: str = Field(default_factory=generate_project_id)
    kind: str = PROJECT_KIND
    name: str
    text: str
    qr_image: str | None = None
    qr_color: str = DEFAULT_QR_COLOR
    bg_color: str = DEFAULT_BG_COLOR
    scan_count: int = Field(default=0, ge=0)
    scan_events: list[ScanEvent] = Field(default_factory=list)
    owner_id: str | None = None
    owner_email: str | None = None

    def to_response(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
