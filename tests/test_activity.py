"""Tests for the activity ledger and presence heartbeat."""

import asyncio
from datetime import date

import pytest

from fluent_tutor.activity.ledger import ActivityLedger, ProgressHeartbeat, seconds_to_minutes

TODAY = date(2026, 10, 19)


@pytest.fixture
def ledger(context):
    return ActivityLedger(context, today=lambda: TODAY)


class TestSecondsToMinutes:
    @pytest.mark.parametrize(
        "seconds,minutes",
        [(0, 0), (29, 0), (30, 1), (125, 2), (150, 3), (3600, 60)],
    )
    def test_rounding(self, seconds, minutes):
        assert seconds_to_minutes(seconds) == minutes


class TestRecord:
    def test_accumulates_per_day(self, ledger):
        ledger.record(100)
        ledger.record(25)
        assert ledger.daily == {"2026-10-19": 125}

    def test_negative_rejected(self, ledger):
        with pytest.raises(ValueError):
            ledger.record(-1)

    def test_persisted(self, ledger, context):
        ledger.record(40)
        assert ActivityLedger(context, today=lambda: TODAY).daily == {"2026-10-19": 40}

    def test_dropped_after_logout(self, ledger, context):
        context.close()
        ledger.record(40)
        assert ledger.daily == {}


class TestLastNDays:
    def test_seven_days_ending_today(self, ledger):
        ledger.record(125)
        days = ledger.last_n_days(7)
        assert len(days) == 7
        assert days[-1].date == "2026-10-19"
        assert days[-1].minutes == 2
        assert days[0].date == "2026-10-13"
        assert all(d.minutes == 0 for d in days[:-1])

    def test_weekday_labels(self, ledger):
        labels = [d.label for d in ledger.last_n_days(7)]
        assert labels == ["T", "W", "T", "F", "S", "S", "M"]

    def test_total_minutes(self, ledger, context):
        ledger.record(90)
        ledger.daily["2026-10-18"] = 60
        assert ledger.total_minutes() == 3

    def test_reset(self, ledger):
        ledger.record(90)
        ledger.reset()
        assert ledger.last_n_days(1)[0].minutes == 0


class TestProgressHeartbeat:
    async def test_records_fixed_increments(self, ledger):
        heartbeat = ProgressHeartbeat(ledger, interval=0.01, increment=10)
        heartbeat.start()
        assert heartbeat.running
        await asyncio.sleep(0.05)
        await heartbeat.stop()

        recorded = ledger.daily.get("2026-10-19", 0)
        assert recorded > 0
        assert recorded % 10 == 0
        assert not heartbeat.running

    async def test_stop_halts_reports(self, ledger):
        heartbeat = ProgressHeartbeat(ledger, interval=0.01, increment=10)
        heartbeat.start()
        await asyncio.sleep(0.03)
        await heartbeat.stop()
        after_stop = dict(ledger.daily)
        await asyncio.sleep(0.03)
        assert ledger.daily == after_stop

    async def test_start_is_idempotent(self, ledger):
        heartbeat = ProgressHeartbeat(ledger, interval=10.0)
        heartbeat.start()
        task = heartbeat._task
        heartbeat.start()
        assert heartbeat._task is task
        await heartbeat.stop()

    async def test_stop_without_start(self, ledger):
        await ProgressHeartbeat(ledger).stop()
