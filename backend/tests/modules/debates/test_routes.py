"""
Tests for debate API endpoints.

Tests the REST endpoints and the SSE stream with a mocked service.
"""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.dependencies import get_debate_service
from modules.debates.exceptions import UnknownDebateError
from modules.debates.models import (
    DebateListItem,
    DebateListResponse,
    DebateMessage,
    DebateMessageType,
    DebatePhase,
    SubscriptionTokenResponse,
)
from modules.realtime.tokens import issue_subscription_token

from tests.factories import make_debate

DEBATE_ID = "debate-123"


@pytest.fixture
def app():
    """Create a fresh app for each test."""
    return create_app()


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.trigger_debate = AsyncMock(return_value=DEBATE_ID)
    service.get_debate = AsyncMock(return_value=make_debate(DEBATE_ID))
    service.list_debates = AsyncMock()
    return service


@pytest.fixture
def client(app, mock_service):
    app.dependency_overrides[get_debate_service] = lambda: mock_service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestTriggerDebate:
    """Tests for POST /api/debates"""

    def test_trigger_accepted(self, client, mock_service):
        """Should accept the trigger and return the channel."""
        response = client.post("/api/debates", json={"topic": "Is AI good?", "request_id": "123"})

        assert response.status_code == 202
        assert response.json() == {"debate_id": DEBATE_ID, "channel": f"debate:{DEBATE_ID}"}
        mock_service.trigger_debate.assert_awaited_once_with("Is AI good?", "123")

    def test_trigger_rejects_empty_topic(self, client):
        response = client.post("/api/debates", json={"topic": ""})
        assert response.status_code == 422


class TestGetDebates:
    """Tests for GET /api/debates and GET /api/debates/{id}"""

    def test_list(self, client, mock_service):
        mock_service.list_debates.return_value = DebateListResponse(
            debates=[
                DebateListItem(
                    id=DEBATE_ID,
                    topic="Is AI good?",
                    status=DebatePhase.COMPLETED,
                    progress=1.0,
                    winner="Alex Rivera",
                    created_at=datetime.now(timezone.utc),
                )
            ],
            total=1,
        )
        response = client.get("/api/debates")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["debates"][0]["winner"] == "Alex Rivera"

    def test_get_snapshot(self, client):
        response = client.get(f"/api/debates/{DEBATE_ID}")
        assert response.status_code == 200
        assert response.json()["status"] == "preparing"

    def test_get_not_found(self, client, mock_service):
        mock_service.get_debate.return_value = None
        response = client.get("/api/debates/debate-missing")
        assert response.status_code == 404


class TestIssueToken:
    """Tests for POST /api/debates/{id}/token"""

    def test_issue_token(self, client, mock_service):
        mock_service.issue_token.return_value = SubscriptionTokenResponse(
            token="abc",
            channel=f"debate:{DEBATE_ID}",
            topics=["updates"],
            expires_at=datetime.now(timezone.utc),
        )
        response = client.post(f"/api/debates/{DEBATE_ID}/token")
        assert response.status_code == 200
        assert response.json()["token"] == "abc"

    def test_issue_token_unknown_debate(self, client, mock_service):
        mock_service.issue_token.side_effect = UnknownDebateError("debate-missing")
        response = client.post("/api/debates/debate-missing/token")
        assert response.status_code == 404


class TestStreamDebate:
    """Tests for GET /api/debates/{id}/stream"""

    def test_requires_token(self, client):
        response = client.get(f"/api/debates/{DEBATE_ID}/stream")
        assert response.status_code == 422

    def test_rejects_bad_token(self, client):
        response = client.get(f"/api/debates/{DEBATE_ID}/stream", params={"token": "not-a-jwt"})
        assert response.status_code == 401

    def test_rejects_token_for_other_channel(self, client):
        token, _ = issue_subscription_token("debate-other")
        response = client.get(f"/api/debates/{DEBATE_ID}/stream", params={"token": token})
        assert response.status_code == 401

    def test_unknown_debate(self, client, mock_service):
        mock_service.get_debate.return_value = None
        token, _ = issue_subscription_token(DEBATE_ID)
        response = client.get(f"/api/debates/{DEBATE_ID}/stream", params={"token": token})
        assert response.status_code == 404

    def test_streams_messages(self, client, mock_service):
        """Should stream each message as an SSE event named after its type."""

        async def mock_subscribe(debate_id):
            yield DebateMessage(
                type=DebateMessageType.STATUS,
                debate_id=debate_id,
                sequence=1,
                data={"phase": "opening-statements", "progress": 0.0},
            )
            yield DebateMessage(
                type=DebateMessageType.VERDICT_FINAL,
                debate_id=debate_id,
                sequence=2,
                data={"pro": 24.0, "con": 18.0, "winner": "Alex Rivera", "margin": 6.0},
            )

        mock_service.subscribe = mock_subscribe
        token, _ = issue_subscription_token(DEBATE_ID)

        with client.stream("GET", f"/api/debates/{DEBATE_ID}/stream", params={"token": token}) as response:
            assert response.status_code == 200
            assert "text/event-stream" in response.headers.get("content-type", "")

            events, payloads = [], []
            for line in response.iter_lines():
                if line.startswith("event:"):
                    events.append(line.split(":", 1)[1].strip())
                elif line.startswith("data:"):
                    payloads.append(json.loads(line.split(":", 1)[1]))

        assert events == ["status", "verdict-final"]
        assert payloads[1]["data"]["winner"] == "Alex Rivera"
        assert "side" not in payloads[0]
