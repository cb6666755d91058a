"""Epoch-millisecond timestamps used by persisted records."""

import time
from datetime import date, datetime


def epoch_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def local_date(timestamp_ms: int) -> date:
    """Local calendar day of an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(timestamp_ms / 1000).date()
