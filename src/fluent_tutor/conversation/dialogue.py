"""Turn-taking between the learner and the tutor collaborator.

Free mode opens with the scenario's fixed line; guided mode opens with a
generated introduction and the first task. Every user line is appended
before the tutor is asked, and the reply is appended to whatever the
session holds when it arrives.
"""

from collections import Counter
from collections.abc import Callable, Coroutine, Sequence
from enum import StrEnum
from typing import Any

import structlog

from fluent_tutor.conversation.registry import SessionRegistry
from fluent_tutor.models.chat import ChatMessage, Role
from fluent_tutor.models.scenario import ChatMode
from fluent_tutor.storage.context import UserContext
from fluent_tutor.tutor.client import TutorService

logger = structlog.get_logger()

FALLBACK_REPLY = "I'm having trouble connecting to the server. Please try again."

EventHandler = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]


class DialogueState(StrEnum):
    AWAITING_FIRST_LINE = "awaiting_first_line"
    AWAITING_FIRST_TASK = "awaiting_first_task"
    AWAITING_USER_TURN = "awaiting_user_turn"
    AWAITING_USER_ATTEMPT = "awaiting_user_attempt"
    AWAITING_AI_TURN = "awaiting_ai_turn"


def current_task(messages: Sequence[ChatMessage]) -> str | None:
    """The guided task of the most recent AI message, if it carries one."""
    for message in reversed(messages):
        if message.role == Role.AI:
            return message.guided_task
    return None


class TutoringDialogue:
    """Drives free and guided conversations for the active user.

    Emits ``composing``, ``message`` and ``speak`` events to handlers
    registered with :meth:`on`.

    Args:
        context: Active user namespace.
        registry: The user's session registry.
        tutor: Tutor collaborator.
        history_window: Number of prior messages sent with each turn.
    """

    def __init__(
        self,
        context: UserContext,
        registry: SessionRegistry,
        tutor: TutorService,
        history_window: int = 6,
    ):
        self._context = context
        self._registry = registry
        self._tutor = tutor
        self.history_window = history_window
        self._composing: Counter[str] = Counter()
        self._event_handlers: dict[str, list[EventHandler]] = {}

    def on(self, event_type: str, handler: EventHandler) -> None:
        self._event_handlers.setdefault(event_type, []).append(handler)

    def off(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._event_handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    async def _emit(self, event_type: str, **payload: Any) -> None:
        event = {"type": event_type, **payload}
        for handler in list(self._event_handlers.get(event_type, [])):
            try:
                await handler(event)
            except Exception:
                logger.exception("dialogue_handler_error", event_type=event_type)

    def is_composing(self, session_id: str) -> bool:
        return self._composing[session_id] > 0

    async def _set_composing(self, session_id: str, composing: bool) -> None:
        """Count outstanding tutor calls; the indicator clears when none remain."""
        if composing:
            self._composing[session_id] += 1
            if self._composing[session_id] > 1:
                return
        else:
            self._composing[session_id] -= 1
            if self._composing[session_id] > 0:
                return
            del self._composing[session_id]
        await self._emit("composing", session_id=session_id, composing=composing)

    def state(self, session_id: str) -> DialogueState:
        session = self._registry.get(session_id)
        guided = session.mode == ChatMode.GUIDED
        if self.is_composing(session_id):
            return DialogueState.AWAITING_AI_TURN
        if not session.messages:
            return DialogueState.AWAITING_FIRST_TASK if guided else DialogueState.AWAITING_FIRST_LINE
        return DialogueState.AWAITING_USER_ATTEMPT if guided else DialogueState.AWAITING_USER_TURN

    def _target_alive(self, session_id: str) -> bool:
        return self._context.active and self._registry.find(session_id) is not None

    async def open(self, session_id: str) -> list[ChatMessage]:
        """Seed an empty session with its first AI message.

        Resumed sessions are returned as they are, without speaking.

        Raises:
            TutorServiceError: The guided introduction could not be generated.
        """
        session = self._registry.get(session_id)
        if session.messages:
            return list(session.messages)

        if session.mode == ChatMode.FREE:
            opening = ChatMessage(role=Role.AI, text=session.scenario.initial_message)
        else:
            await self._set_composing(session_id, True)
            try:
                intro = await self._tutor.start_guided_intro(session.scenario)
            finally:
                await self._set_composing(session_id, False)
            opening = intro.to_message()

        if not self._target_alive(session_id):
            logger.info("stale_opening_dropped", session_id=session_id)
            return []
        session = self._registry.get(session_id)
        if session.messages:
            return list(session.messages)

        self._registry.append_turn(session_id, [opening])
        logger.info("session_opened", session_id=session_id, mode=session.mode.value)
        await self._emit("message", session_id=session_id, message=opening)
        await self._emit("speak", session_id=session_id, text=opening.text)
        return [opening]

    async def send(self, session_id: str, text: str) -> ChatMessage | None:
        """Send one learner line and append the tutor's annotated reply.

        Returns:
            The AI message appended, or None when the text was blank or the
            reply arrived after the session or user went away.
        """
        if not text.strip():
            return None

        session = self._registry.get(session_id)
        history = list(session.messages)
        user_message = ChatMessage.from_user(text)
        self._registry.append_turn(session_id, [*history, user_message])
        await self._emit("message", session_id=session_id, message=user_message)

        await self._set_composing(session_id, True)
        try:
            turn = await self._tutor.get_tutor_turn(
                history[-self.history_window:], text, session.scenario, session.mode
            )
            reply = turn.to_message()
            if session.mode == ChatMode.FREE and reply.guided_task is not None:
                reply = reply.model_copy(update={"guided_task": None})
            succeeded = True
        except Exception:
            logger.exception("tutor_turn_failed", session_id=session_id)
            reply = ChatMessage(role=Role.AI, text=FALLBACK_REPLY)
            succeeded = False
        finally:
            await self._set_composing(session_id, False)

        if not self._target_alive(session_id):
            logger.info("stale_turn_dropped", session_id=session_id)
            return None

        latest = self._registry.get(session_id).messages
        self._registry.append_turn(session_id, [*latest, reply])
        await self._emit("message", session_id=session_id, message=reply)
        if succeeded:
            await self._emit("speak", session_id=session_id, text=reply.text)
        return reply

    def current_task(self, session_id: str) -> str | None:
        return current_task(self._registry.get(session_id).messages)
