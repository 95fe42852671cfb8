"""Scan event tests."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from qrtrack.models import ScanEvent, ScanLocation
from qrtrack.services.scans import (
    append_event,
    build_event,
    classify_device,
    client_ip,
    is_public_ip,
    normalize_destination,
    summarize_events,
)

CHROME_DESKTOP = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
IPAD = (
    "Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
)
GOOGLEBOT = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"


def events(n: int) -> list[ScanEvent]:
    start = datetime(2024, 1, 1, tzinfo=UTC)
    return [ScanEvent(timestamp=start + timedelta(seconds=i), user_agent=str(i)) for i in range(n)]


class TestAppendEvent:
    def test_appends_below_capacity(self):
        existing = events(3)
        new = ScanEvent(user_agent="new")
        result = append_event(existing, new, capacity=5)
        assert [e.user_agent for e in result] == ["0", "1", "2", "new"]
        assert len(existing) == 3

    def test_evicts_oldest_at_capacity(self):
        result = append_event(events(100), ScanEvent(user_agent="new"), capacity=100)
        assert len(result) == 100
        assert result[0].user_agent == "1"
        assert result[-1].user_agent == "new"

    def test_trims_oversized_legacy_log(self):
        result = append_event(events(120), ScanEvent(user_agent="new"), capacity=100)
        assert len(result) == 100
        assert result[0].user_agent == "21"

    def test_default_capacity(self):
        result = append_event(events(100), ScanEvent(user_agent="new"))
        assert len(result) == 100


class TestClassifyDevice:
    def test_desktop(self):
        browser, os_family, device = classify_device(CHROME_DESKTOP)
        assert browser == "Chrome"
        assert os_family == "Windows"
        assert device == "desktop"

    def test_mobile(self):
        _browser, os_family, device = classify_device(IPHONE)
        assert os_family == "iOS"
        assert device == "mobile"

    def test_tablet(self):
        assert classify_device(IPAD)[2] == "tablet"

    def test_bot(self):
        assert classify_device(GOOGLEBOT)[2] == "bot"

    def test_empty(self):
        assert classify_device("") == (None, None, "unknown")


class TestClientIp:
    def make_request(self, headers: dict[str, str], host: str | None = "127.0.0.1"):
        request = MagicMock()
        request.headers = headers
        request.client = MagicMock(host=host) if host else None
        return request

    def test_forwarded_first_hop(self):
        request = self.make_request({"x-forwarded-for": "203.0.113.7, 10.0.0.2"})
        assert client_ip(request) == "203.0.113.7"

    def test_peer_address(self):
        assert client_ip(self.make_request({})) == "127.0.0.1"

    def test_no_client(self):
        assert client_ip(self.make_request({}, host=None)) is None


def test_is_public_ip():
    assert is_public_ip("8.8.8.8")
    assert not is_public_ip("10.0.0.1")
    assert not is_public_ip("127.0.0.1")
    assert not is_public_ip("::1")
    assert not is_public_ip("not-an-ip")
    assert not is_public_ip(None)


def test_build_event():
    location = ScanLocation(country="Canada")
    event = build_event(IPHONE, "8.8.8.8", location)
    assert event.device == "mobile"
    assert event.ip == "8.8.8.8"
    assert event.location == location
    assert event.timestamp.tzinfo is not None


def test_summarize_events():
    log = [
        build_event(IPHONE, "8.8.8.8", ScanLocation(country="Canada")),
        build_event(IPHONE, "8.8.4.4", ScanLocation(country="Canada")),
        build_event(CHROME_DESKTOP, "1.1.1.1", None),
    ]
    summary = summarize_events(log)
    assert summary["devices"] == {"mobile": 2, "desktop": 1}
    assert summary["operatingSystems"]["iOS"] == 2
    assert summary["countries"] == {"Canada": 2}
    assert summary["lastScanAt"] == log[-1].timestamp.isoformat()


def test_summarize_empty():
    summary = summarize_events([])
    assert summary["devices"] == {}
    assert summary["lastScanAt"] is None


class TestNormalizeDestination:
    def test_bare_host(self):
        assert normalize_destination("example.com/menu") == "https://example.com/menu"

    def test_existing_scheme(self):
        assert normalize_destination("http://example.com") == "http://example.com"
        assert normalize_destination("https://example.com") == "https://example.com"

    def test_non_http_schemes(self):
        assert normalize_destination("mailto:a@example.com") == "mailto:a@example.com"
        assert normalize_destination("tel:+15550100") == "tel:+15550100"

    def test_strips_whitespace(self):
        assert normalize_destination("  example.com ") == "https://example.com"
