"""Tests for API endpoints (no external API keys required)."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from src.api.concurrency import InFlightGuard, get_request_guard
from src.api.main import app
from src.extraction.gateway import get_gateway

from conftest import StubGateway

client = TestClient(app)

JOHN_ITEM = {
    "action": "send the report",
    "assignee": "John",
    "timeline": "Friday",
    "context": "John will send the report by Friday.",
}


@pytest.fixture
def use_gateway() -> Iterator[object]:
    """Install a StubGateway for the duration of a test: ``use_gateway(payload=...)``."""

    def install(payload: object = None, error: str | None = None) -> StubGateway:
        gateway = StubGateway(payload=payload, error=error)
        app.dependency_overrides[get_gateway] = lambda: gateway
        return gateway

    yield install
    app.dependency_overrides.pop(get_gateway, None)


def test_health() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_routes_registered() -> None:
    routes = app.openapi()["paths"]
    assert "/api/action-items" in routes
    assert "/api/action-items/upload" in routes
    assert "/api/knowledge-map" in routes
    assert "/api/summary" in routes


# ---------------------------------------------------------------------------
# /api/action-items
# ---------------------------------------------------------------------------


class TestExtractText:
    def test_requires_transcript(self) -> None:
        response = client.post("/api/action-items", json={})
        assert response.status_code == 422

    def test_extracts_items(self, use_gateway) -> None:
        gateway = use_gateway(payload={"actionItems": [JOHN_ITEM]})

        response = client.post(
            "/api/action-items", json={"transcript": "John will send the report by Friday."}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["actionItems"][0]["action"] == "send the report"
        assert data["actionItems"][0]["assignee"] == "John"
        assert data["actionItems"][0]["assigner"] is None
        assert gateway.call_count == 1

    def test_blank_transcript_no_remote_call(self, use_gateway) -> None:
        gateway = use_gateway(payload={"actionItems": [JOHN_ITEM]})

        response = client.post("/api/action-items", json={"transcript": "   "})

        assert response.status_code == 200
        assert response.json() == {"actionItems": []}
        assert gateway.call_count == 0

    def test_gateway_failure_returns_502(self, use_gateway) -> None:
        use_gateway(error="Completion service error: overloaded")

        response = client.post("/api/action-items", json={"transcript": "Alice: ship it."})

        assert response.status_code == 502
        assert "overloaded" in response.json()["detail"]


# ---------------------------------------------------------------------------
# /api/action-items/upload
# ---------------------------------------------------------------------------


class TestExtractUpload:
    def test_requires_file(self) -> None:
        response = client.post("/api/action-items/upload")
        assert response.status_code == 422

    def test_txt_upload(self, use_gateway) -> None:
        gateway = use_gateway(payload={"actionItems": [JOHN_ITEM]})

        response = client.post(
            "/api/action-items/upload",
            files={"file": ("meeting.txt", b"John will send the report by Friday.", "text/plain")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["filename"] == "meeting.txt"
        assert data["transcript"] == "John will send the report by Friday."
        assert len(data["actionItems"]) == 1
        assert "John will send the report by Friday." in gateway.last_prompt

    def test_unsupported_type_returns_415(self, use_gateway) -> None:
        gateway = use_gateway(payload={"actionItems": []})

        response = client.post(
            "/api/action-items/upload",
            files={"file": ("audio.mp3", b"\xff\xfb\x90\x00", "audio/mpeg")},
        )

        assert response.status_code == 415
        assert gateway.call_count == 0

    def test_undecodable_returns_400(self, use_gateway) -> None:
        use_gateway(payload={"actionItems": []})

        response = client.post(
            "/api/action-items/upload",
            files={"file": ("notes.txt", b"\xff\xfe\x00bad", "text/plain")},
        )

        assert response.status_code == 400
        assert "UTF-8" in response.json()["detail"]

    def test_too_large_returns_413(self, use_gateway) -> None:
        use_gateway(payload={"actionItems": []})

        with patch("src.api.routes.extraction.settings") as mock_settings:
            mock_settings.max_upload_bytes = 10
            response = client.post(
                "/api/action-items/upload",
                files={"file": ("notes.txt", b"x" * 11, "text/plain")},
            )

        assert response.status_code == 413


# ---------------------------------------------------------------------------
# /api/knowledge-map
# ---------------------------------------------------------------------------


class TestKnowledgeMapEndpoint:
    def test_empty_items(self, use_gateway) -> None:
        gateway = use_gateway(payload={"mapDescription": "x", "nodes": [], "edges": []})

        response = client.post("/api/knowledge-map", json={"actionItems": []})

        assert response.status_code == 200
        data = response.json()
        assert data["nodes"] == []
        assert data["edges"] == []
        assert data["mapDescription"]
        assert gateway.call_count == 0

    def test_dangling_edges_filtered(self, use_gateway) -> None:
        use_gateway(
            payload={
                "mapDescription": "A map.",
                "nodes": [{"id": "a", "type": "topic", "label": "A"}],
                "edges": [{"id": "e1", "source": "a", "target": "b"}],
            }
        )

        response = client.post("/api/knowledge-map", json={"actionItems": [JOHN_ITEM]})

        assert response.status_code == 200
        data = response.json()
        assert data["edges"] == []
        assert data["nodes"] == [{"id": "a", "type": "topic", "label": "A"}]

    def test_invalid_items_rejected(self) -> None:
        response = client.post("/api/knowledge-map", json={"actionItems": [{"action": "x"}]})
        assert response.status_code == 422

    def test_gateway_failure_returns_502(self, use_gateway) -> None:
        use_gateway(error="timeout")
        response = client.post("/api/knowledge-map", json={"actionItems": [JOHN_ITEM]})
        assert response.status_code == 502
        assert "timeout" in response.json()["detail"]


# ---------------------------------------------------------------------------
# /api/summary
# ---------------------------------------------------------------------------


class TestSummaryEndpoint:
    def test_summary(self, use_gateway) -> None:
        use_gateway(payload={"summary": "Reports are due Friday."})
        response = client.post("/api/summary", json={"transcript": "John: report by Friday."})
        assert response.status_code == 200
        assert response.json() == {"summary": "Reports are due Friday."}

    def test_failure_returns_502(self, use_gateway) -> None:
        use_gateway(error="boom")
        response = client.post("/api/summary", json={"transcript": "Some talk."})
        assert response.status_code == 502


# ---------------------------------------------------------------------------
# Reject-while-pending
# ---------------------------------------------------------------------------


class TestInFlightGuard:
    def test_second_request_rejected_while_first_pending(self) -> None:
        guard = InFlightGuard()

        async def scenario() -> int:
            async with guard.hold("first"):
                assert guard.busy
                with pytest.raises(HTTPException) as excinfo:
                    async with guard.hold("second"):
                        pass
                return excinfo.value.status_code

        assert asyncio.run(scenario()) == 409
        assert not guard.busy

    def test_released_after_failure(self) -> None:
        guard = InFlightGuard()

        async def scenario() -> None:
            with pytest.raises(RuntimeError):
                async with guard.hold("first"):
                    raise RuntimeError("boom")
            async with guard.hold("second"):
                pass

        asyncio.run(scenario())
        assert not guard.busy

    def test_endpoint_returns_409_when_busy(self, use_gateway) -> None:
        busy_guard = InFlightGuard()
        busy_guard._lock.locked = lambda: True  # type: ignore[method-assign]
        app.dependency_overrides[get_request_guard] = lambda: busy_guard
        gateway = use_gateway(payload={"actionItems": []})
        try:
            response = client.post("/api/action-items", json={"transcript": "Hello."})
        finally:
            app.dependency_overrides.pop(get_request_guard, None)

        assert response.status_code == 409
        assert gateway.call_count == 0
