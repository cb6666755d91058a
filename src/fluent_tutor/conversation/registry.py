"""Conversation session registry for the active user."""

from collections.abc import Callable, Sequence
from datetime import date, timedelta

import structlog
from pydantic import TypeAdapter

from fluent_tutor.models.chat import ChatMessage, ConversationSession
from fluent_tutor.models.clock import epoch_ms, local_date
from fluent_tutor.models.scenario import ChatMode, Scenario
from fluent_tutor.storage.context import SESSIONS, UserContext

logger = structlog.get_logger()

TODAY_LABEL = "Today"
YESTERDAY_LABEL = "Yesterday"

_ADAPTER = TypeAdapter(list[ConversationSession])


class SessionNotFoundError(KeyError):
    """No session with the given id exists for the active user."""


class SessionRegistry:
    """Ordered list of sessions, most recently started or resumed first.

    At most one session exists per (scenario id, mode); starting the same
    pair again resumes it. The current session is held as an id so the
    chat view and the history list always read the same record.

    Args:
        context: Active user namespace.
        clock: Epoch-millisecond time source.
    """

    def __init__(self, context: UserContext, clock: Callable[[], int] = epoch_ms):
        self._context = context
        self._clock = clock
        self.sessions: list[ConversationSession] = context.load(SESSIONS, _ADAPTER, list)
        self._current_id: str | None = None

    def _persist(self) -> None:
        self._context.persist(SESSIONS, _ADAPTER.dump_python(self.sessions, mode="json"))

    def _index(self, session_id: str) -> int:
        for index, session in enumerate(self.sessions):
            if session.id == session_id:
                return index
        raise SessionNotFoundError(session_id)

    def _tick(self, previous: int) -> int:
        """A timestamp strictly after ``previous``."""
        return max(self._clock(), previous + 1)

    def _new_id(self) -> str:
        stamp = self._clock()
        existing = {s.id for s in self.sessions}
        while str(stamp) in existing:
            stamp += 1
        return str(stamp)

    def find(self, session_id: str) -> ConversationSession | None:
        return next((s for s in self.sessions if s.id == session_id), None)

    def get(self, session_id: str) -> ConversationSession:
        return self.sessions[self._index(session_id)]

    @property
    def current(self) -> ConversationSession | None:
        if self._current_id is None:
            return None
        return self.find(self._current_id)

    def start_or_resume(self, scenario: Scenario, mode: ChatMode) -> ConversationSession:
        """Resume the (scenario, mode) session if one exists, else create it."""
        existing = next(
            (s for s in self.sessions if s.matches(scenario.id, mode)), None
        )
        if existing is not None:
            return self.resume(existing.id)

        now = self._clock()
        session = ConversationSession(
            id=self._new_id(),
            scenario=scenario,
            mode=mode,
            start_time=now,
            last_updated=now,
        )
        self.sessions.insert(0, session)
        self._current_id = session.id
        self._persist()
        logger.info(
            "session_created",
            session_id=session.id,
            scenario_id=scenario.id,
            mode=mode.value,
        )
        return session

    def resume(self, session_id: str) -> ConversationSession:
        """Bump a session's last_updated and move it to the front."""
        index = self._index(session_id)
        session = self.sessions.pop(index)
        session = session.model_copy(update={"last_updated": self._tick(session.last_updated)})
        self.sessions.insert(0, session)
        self._current_id = session.id
        self._persist()
        logger.info("session_resumed", session_id=session.id)
        return session

    def append_turn(self, session_id: str, messages: Sequence[ChatMessage]) -> ConversationSession:
        """Replace a session's messages wholesale and bump last_updated."""
        index = self._index(session_id)
        session = self.sessions[index]
        session = session.model_copy(
            update={
                "messages": tuple(messages),
                "last_updated": self._tick(session.last_updated),
            }
        )
        self.sessions[index] = session
        self._persist()
        return session

    def close(self) -> None:
        """Leave the chat view."""
        self._current_id = None

    def reset(self) -> None:
        self.sessions = []
        self._current_id = None
        self._persist()

    def group_by_day(
        self, today: date | None = None
    ) -> list[tuple[str, list[ConversationSession]]]:
        """Group sessions by local calendar day of last_updated.

        Groups and their sessions keep registry order, most recently started
        or resumed first.
        """
        today = today or date.today()
        yesterday = today - timedelta(days=1)
        groups: dict[str, list[ConversationSession]] = {}
        for session in self.sessions:
            day = local_date(session.last_updated)
            if day == today:
                label = TODAY_LABEL
            elif day == yesterday:
                label = YESTERDAY_LABEL
            else:
                label = day.isoformat()
            groups.setdefault(label, []).append(session)
        return list(groups.items())
