"""Tests for the HTTP surface."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from fundbot.app import create_app
from fundbot.config import Settings
from fundbot.errors import UnsupportedOperationError


def make_orchestrator(reply="Total AUM: ₹200.50 (across 2 records)", error=None):
    orchestrator = MagicMock()
    orchestrator.handle_turn = AsyncMock(return_value=reply, side_effect=error)
    orchestrator.llm_client.close = AsyncMock()
    orchestrator.dispatcher.repository.close = AsyncMock()
    return orchestrator


@pytest.fixture
def orchestrator():
    return make_orchestrator()


@pytest.fixture
def client(orchestrator):
    return TestClient(create_app(settings=Settings(), orchestrator=orchestrator))


class TestChatEndpoint:
    def test_success(self, client, orchestrator):
        res = client.post("/api/chat", json={"message": "Calculate AUM for client 11181"})
        assert res.status_code == 200
        body = res.json()
        assert body["response"] == "Total AUM: ₹200.50 (across 2 records)"
        assert body["processed"] is True
        datetime.fromisoformat(body["timestamp"])
        orchestrator.handle_turn.assert_awaited_once_with("Calculate AUM for client 11181")

    @pytest.mark.parametrize(
        "payload",
        [{}, {"message": 123}, {"message": "   "}, {"message": None}, ["not", "an", "object"]],
    )
    def test_invalid_message(self, client, orchestrator, payload):
        res = client.post("/api/chat", json=payload)
        assert res.status_code == 400
        assert set(res.json()) == {"error", "timestamp"}
        orchestrator.handle_turn.assert_not_awaited()

    def test_malformed_body(self, client):
        res = client.post("/api/chat", content=b"{not json", headers={"Content-Type": "application/json"})
        assert res.status_code == 400

    def test_unsupported_operation_is_500(self):
        orchestrator = make_orchestrator(error=UnsupportedOperationError("deleteEverything"))
        client = TestClient(create_app(settings=Settings(), orchestrator=orchestrator))
        res = client.post("/api/chat", json={"message": "delete all clients"})
        assert res.status_code == 500
        assert set(res.json()) == {"error", "timestamp"}


class TestServiceEndpoints:
    def test_root(self, client):
        body = client.get("/").json()
        assert body["status"] == "running"
        assert "Find user with PAN ABGPA5303H" in body["examples"]

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "healthy"}

    def test_lifespan_closes_collaborators(self, orchestrator, tmp_path, monkeypatch):
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        with TestClient(create_app(settings=Settings(), orchestrator=orchestrator)) as client:
            assert client.get("/api/health").status_code == 200
        orchestrator.llm_client.close.assert_awaited_once()
        orchestrator.dispatcher.repository.close.assert_awaited_once()
