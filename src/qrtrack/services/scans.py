"""Scan event construction, accumulation and summaries."""

import ipaddress
from collections import Counter
from collections.abc import Sequence
from typing import Any

from fastapi import Request
from user_agents import parse as parse_user_agent

from qrtrack.config import settings
from qrtrack.models import ScanEvent, ScanLocation


def append_event(
    events: Sequence[ScanEvent],
    event: ScanEvent,
    capacity: int | None = None,
) -> list[ScanEvent]:
    """Return a new oldest-first list with ``event`` appended, capped at ``capacity``."""
    capacity = capacity or settings.scan_event_capacity
    updated = [*events, event]
    if len(updated) > capacity:
        updated = updated[len(updated) - capacity :]
    return updated


def classify_device(user_agent: str) -> tuple[str | None, str | None, str]:
    """Return (browser, os, device class) for a raw User-Agent header."""
    if not user_agent:
        return None, None, "unknown"

    parsed = parse_user_agent(user_agent)
    if parsed.is_bot:
        device = "bot"
    elif parsed.is_tablet:
        device = "tablet"
    elif parsed.is_mobile:
        device = "mobile"
    elif parsed.is_pc:
        device = "desktop"
    else:
        device = "unknown"
    return parsed.browser.family, parsed.os.family, device


def client_ip(request: Request) -> str | None:
    """Best-effort source IP: first X-Forwarded-For hop, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def is_public_ip(ip: str | None) -> bool:
    if not ip:
        return False
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return False
    return address.is_global


def build_event(user_agent: str, ip: str | None, location: ScanLocation | None) -> ScanEvent:
    browser, os_family, device = classify_device(user_agent)
    return ScanEvent(
        user_agent=user_agent,
        browser=browser,
        os=os_family,
        device=device,
        ip=ip,
        location=location,
    )


def summarize_events(events: Sequence[ScanEvent]) -> dict[str, Any]:
    """Count recent scans by device, browser, OS and country."""
    return {
        "devices": dict(Counter(event.device for event in events)),
        "browsers": dict(Counter(event.browser or "Unknown" for event in events)),
        "operatingSystems": dict(Counter(event.os or "Unknown" for event in events)),
        "countries": dict(
            Counter(
                event.location.country
                for event in events
                if event.location and event.location.country
            )
        ),
        "lastScanAt": events[-1].timestamp.isoformat() if events else None,
    }


def normalize_destination(text: str) -> str:
    """Prefix ``https://`` when the stored payload has no URL scheme."""
    target = text.strip()
    if "://" in target or target.startswith(("mailto:", "tel:", "sms:")):
        return target
    return f"https://{target}"
