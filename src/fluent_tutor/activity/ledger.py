"""Daily practice-time ledger and the chat-view presence heartbeat."""

import asyncio
import math
from collections.abc import Callable
from datetime import date, timedelta

import structlog
from pydantic import BaseModel, TypeAdapter

from fluent_tutor.storage.context import ACTIVITY, UserContext

logger = structlog.get_logger()

_ADAPTER = TypeAdapter(dict[str, int])


class DayActivity(BaseModel):
    """One bar of the weekly chart."""

    date: str
    label: str
    minutes: int


def seconds_to_minutes(seconds: int) -> int:
    """Whole minutes, rounding halves up (125 s -> 2, 150 s -> 3)."""
    return math.floor(seconds / 60 + 0.5)


class ActivityLedger:
    """Seconds of tutoring time per local calendar day (YYYY-MM-DD).

    Args:
        context: Active user namespace.
        today: Local-date source.
    """

    def __init__(self, context: UserContext, today: Callable[[], date] = date.today):
        self._context = context
        self._today = today
        self.daily: dict[str, int] = context.load(ACTIVITY, _ADAPTER, dict)

    def record(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError("activity seconds must be non-negative")
        if not self._context.active:
            logger.info("stale_activity_dropped", seconds=seconds)
            return
        key = self._today().isoformat()
        self.daily[key] = self.daily.get(key, 0) + seconds
        self._context.persist(ACTIVITY, self.daily)

    def last_n_days(self, n: int) -> list[DayActivity]:
        """Exactly ``n`` entries ending today, oldest first."""
        today = self._today()
        days = []
        for offset in range(n - 1, -1, -1):
            day = today - timedelta(days=offset)
            key = day.isoformat()
            days.append(
                DayActivity(
                    date=key,
                    label=day.strftime("%a")[0],
                    minutes=seconds_to_minutes(self.daily.get(key, 0)),
                )
            )
        return days

    def total_minutes(self) -> int:
        return seconds_to_minutes(sum(self.daily.values()))

    def reset(self) -> None:
        self.daily = {}
        self._context.persist(ACTIVITY, self.daily)


class ProgressHeartbeat:
    """Reports fixed increments while a chat view is open.

    This is a coarse presence signal, not a stopwatch: every ``interval``
    seconds it records ``increment`` seconds regardless of what happened.

    Args:
        ledger: Ledger to record into.
        interval: Seconds between reports.
        increment: Seconds recorded per report.
    """

    def __init__(self, ledger: ActivityLedger, interval: float = 10.0, increment: int = 10):
        self.ledger = ledger
        self.interval = interval
        self.increment = increment
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None

    async def _loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval)
                self.ledger.record(self.increment)
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("heartbeat_loop_error")
