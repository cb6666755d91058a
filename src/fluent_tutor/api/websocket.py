"""Chat-view WebSocket: one connection per open conversation screen."""

from typing import Any

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from fluent_tutor.activity.ledger import ProgressHeartbeat
from fluent_tutor.config import Settings
from fluent_tutor.conversation.registry import SessionNotFoundError
from fluent_tutor.speech.errors import describe_speech_error
from fluent_tutor.storage.user_context import UserContextStore
from fluent_tutor.tutor.client import TutorServiceError
from fluent_tutor.workspace import Workspace

logger = structlog.get_logger()

FORWARDED_EVENTS = ("composing", "message", "speak")


class ChatView:
    """Relays dialogue events for one session to the browser.

    While the view is open a heartbeat records presence time; the browser
    performs text-to-speech when it receives ``speak``.

    Args:
        websocket: Browser connection.
        workspace: Active user's working set.
        session_id: Session shown in this view.
        settings: Application settings.
    """

    def __init__(
        self,
        websocket: WebSocket,
        workspace: Workspace,
        session_id: str,
        settings: Settings,
    ):
        self.websocket = websocket
        self.workspace = workspace
        self.session_id = session_id
        self.heartbeat = ProgressHeartbeat(
            workspace.activity,
            interval=settings.heartbeat_interval_seconds,
            increment=settings.heartbeat_increment_seconds,
        )

    async def start(self) -> None:
        for event_type in FORWARDED_EVENTS:
            self.workspace.dialogue.on(event_type, self._forward)
        self.heartbeat.start()
        messages = await self.workspace.dialogue.open(self.session_id)
        await self._send({
            "type": "session_state",
            "session_id": self.session_id,
            "state": self.workspace.dialogue.state(self.session_id).value,
            "messages": [m.model_dump(mode="json") for m in messages],
            "current_task": self.workspace.dialogue.current_task(self.session_id),
        })

    async def stop(self) -> None:
        for event_type in FORWARDED_EVENTS:
            self.workspace.dialogue.off(event_type, self._forward)
        await self.heartbeat.stop()
        current = self.workspace.sessions.current
        if current is not None and current.id == self.session_id:
            self.workspace.sessions.close()

    async def handle(self, data: dict[str, Any]) -> None:
        msg_type = data.get("type", "")
        if msg_type == "send":
            await self.workspace.dialogue.send(self.session_id, str(data.get("text", "")))
            await self._send({
                "type": "task",
                "current_task": self.workspace.dialogue.current_task(self.session_id),
            })
        elif msg_type == "speech_error":
            code = data.get("code")
            logger.info("speech_error_reported", code=code)
            await self._send({"type": "notice", "message": describe_speech_error(code)})
        else:
            logger.warning("unknown_chat_message", msg_type=msg_type)

    async def _forward(self, event: dict[str, Any]) -> None:
        if event.get("session_id") != self.session_id:
            return
        payload = dict(event)
        message = payload.get("message")
        if message is not None:
            payload["message"] = message.model_dump(mode="json")
        await self._send(payload)

    async def _send(self, data: dict) -> None:
        """Send a message to the browser WebSocket."""
        try:
            await self.websocket.send_json(data)
        except Exception:
            logger.warning("browser_send_failed")


async def handle_chat_websocket(
    websocket: WebSocket,
    session_id: str,
    users: UserContextStore,
    settings: Settings,
) -> None:
    """Handle a browser chat-view connection."""
    await websocket.accept()
    workspace = users.current
    if workspace is None or workspace.sessions.find(session_id) is None:
        await websocket.close(code=1008, reason="Unknown session")
        return

    view = ChatView(websocket, workspace, session_id, settings)
    try:
        await view.start()
        while True:
            data = await websocket.receive_json()
            await view.handle(data)
    except WebSocketDisconnect:
        logger.info("chat_view_disconnected", session_id=session_id)
    except TutorServiceError:
        logger.exception("chat_view_open_failed", session_id=session_id)
        await websocket.close(code=1011, reason="Failed to start the session")
    except SessionNotFoundError:
        logger.info("chat_view_session_gone", session_id=session_id)
    finally:
        await view.stop()
