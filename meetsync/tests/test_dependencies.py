"""Tests for dependency injection."""

from unittest.mock import MagicMock

import pytest

from meetsync.errors import ServiceUnavailableError


def _request(service):
    request = MagicMock()
    request.app.state = MagicMock(spec=["event_service"])
    request.app.state.event_service = service
    return request


class TestGetEventService:

    def test_returns_service_when_initialized(self):
        from meetsync.dependencies import get_event_service

        service = MagicMock()
        assert get_event_service(_request(service)) is service

    def test_raises_when_not_initialized(self):
        from meetsync.dependencies import get_event_service

        with pytest.raises(ServiceUnavailableError) as exc_info:
            get_event_service(_request(None))
        assert "Event store not initialized" in str(exc_info.value.detail)

    def test_optional_returns_none(self):
        from meetsync.dependencies import get_optional_event_service

        assert get_optional_event_service(_request(None)) is None


def test_health_reports_unhealthy_store(client, monkeypatch):
    service = client.app.state.event_service

    async def failing_ping():
        return False

    monkeypatch.setattr(service.store, "ping", failing_ping)
    res = client.get("/health")
    assert res.json() == {"status": "ok", "store": "unhealthy"}
