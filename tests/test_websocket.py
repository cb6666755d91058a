"""Tests for the chat-view WebSocket."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from fluent_tutor.api.websocket import ChatView
from fluent_tutor.config import Settings
from fluent_tutor.conversation.scenarios import get_scenario
from fluent_tutor.main import create_app
from fluent_tutor.models.scenario import ChatMode
from fluent_tutor.speech.errors import SPEECH_ERROR_MESSAGES
from fluent_tutor.storage.user_context import UserContextStore


@pytest.fixture
def client(tmp_path, store, tutor):
    settings = Settings(openai_api_key="test-key", data_dir=tmp_path)
    with TestClient(create_app(settings, store=store, tutor=tutor)) as c:
        c.post("/api/login", json={"name": "Alice Chen"})
        yield c


def _start(client, mode="free"):
    return client.post(
        "/api/sessions", json={"scenario_id": "coffee-shop", "mode": mode}
    ).json()["id"]


def _receive_until(ws, msg_type):
    received = []
    while True:
        data = ws.receive_json()
        received.append(data)
        if data["type"] == msg_type:
            return received


class TestChatView:
    def test_session_state_on_connect(self, client):
        session_id = _start(client)
        with client.websocket_connect(f"/ws/sessions/{session_id}") as ws:
            state = ws.receive_json()
        assert state["type"] == "session_state"
        assert state["session_id"] == session_id
        assert state["state"] == "awaiting_user_turn"
        assert len(state["messages"]) == 1
        assert state["current_task"] is None

    def test_send_streams_events(self, client):
        session_id = _start(client)
        with client.websocket_connect(f"/ws/sessions/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "send", "text": "I want latte"})
            received = _receive_until(ws, "task")

        types = [m["type"] for m in received]
        assert types == ["message", "composing", "composing", "message", "speak", "task"]
        assert received[0]["message"]["role"] == "user"
        assert received[3]["message"]["translation"]
        assert received[4]["text"].startswith("Sure!")

    def test_guided_task_update(self, client, tutor, guided_turn):
        tutor.get_tutor_turn.return_value = guided_turn
        session_id = _start(client, mode="guided")
        with client.websocket_connect(f"/ws/sessions/{session_id}") as ws:
            state = ws.receive_json()
            assert state["current_task"] == "请问候店员并点一杯不加糖的拿铁"
            ws.send_json({"type": "send", "text": "Hello, a latte please"})
            task = _receive_until(ws, "task")[-1]
        assert task["current_task"] == "请告诉店员你想要冰的"

    def test_speech_error_notice(self, client):
        session_id = _start(client)
        with client.websocket_connect(f"/ws/sessions/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "speech_error", "code": "not-allowed"})
            notice = ws.receive_json()
        assert notice == {"type": "notice", "message": SPEECH_ERROR_MESSAGES["not-allowed"]}

    def test_unknown_session_closed(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/ws/sessions/nope") as ws:
                ws.receive_json()
        assert exc_info.value.code == 1008

    def test_disconnect_leaves_chat_view(self, client):
        session_id = _start(client)
        with client.websocket_connect(f"/ws/sessions/{session_id}") as ws:
            ws.receive_json()
            ws.send_json({"type": "speech_error", "code": "no-speech"})
            ws.receive_json()
        users = client.app.state.users
        assert users.current.sessions.current is None


async def test_stopping_one_view_keeps_other_views_session(tmp_path, store, tutor):
    settings = Settings(openai_api_key="test-key", data_dir=tmp_path)
    workspace = UserContextStore(store, tutor).login("Alice Chen")
    coffee = workspace.sessions.start_or_resume(get_scenario("coffee-shop"), ChatMode.FREE)
    coffee_view = ChatView(AsyncMock(), workspace, coffee.id, settings)
    await coffee_view.start()
    taxi = workspace.sessions.start_or_resume(get_scenario("taxi-ride"), ChatMode.FREE)
    taxi_view = ChatView(AsyncMock(), workspace, taxi.id, settings)
    await taxi_view.start()

    await coffee_view.stop()
    assert workspace.sessions.current.id == taxi.id

    await taxi_view.stop()
    assert workspace.sessions.current is None
