"""Best-effort reverse geolocation of scan source IPs."""

import logging

import httpx

from qrtrack.config import settings
from qrtrack.models import ScanLocation
from qrtrack.services.scans import is_public_ip

logger = logging.getLogger(__name__)


async def lookup_location(ip: str | None) -> ScanLocation | None:
    """Resolve an IP to a location, or None.

    Private, loopback and malformed addresses are never looked up. Any
    failure, including the timeout, yields None.
    """
    if not is_public_ip(ip):
        return None

    url = settings.geolocation_url.format(ip=ip)
    try:
        async with httpx.AsyncClient(timeout=settings.geolocation_timeout) as client:
            response = await client.get(url)
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.debug(f"Geolocation lookup failed for {ip}: {e!r}")
        return None

    if not isinstance(data, dict) or data.get("status") != "success":
        return None

    return ScanLocation(
        city=data.get("city"),
        region=data.get("regionName"),
        country=data.get("country"),
        lat=data.get("lat"),
        lon=data.get("lon"),
    )
