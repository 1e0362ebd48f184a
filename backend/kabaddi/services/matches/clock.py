"""Match clock arithmetic.

Pure functions; nothing here touches the database or the request. A live
match stores ``remaining_duration`` as of ``match_start_time``, so the
current value is always ``remaining - elapsed`` for the open segment.
"""

import math
from datetime import datetime, timezone
from typing import Optional, Tuple


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def elapsed_seconds(start_time: Optional[datetime], now: datetime) -> int:
    """Whole seconds between start_time and now, rounded half up."""
    if start_time is None:
        return 0
    delta = (now - start_time).total_seconds()
    return int(math.floor(delta + 0.5))


def reconcile_live(remaining: int, start_time: Optional[datetime], now: datetime) -> Tuple[int, bool]:
    """Return (current remaining, timer expired) for a live segment."""
    if start_time is None:
        return remaining, False
    candidate = remaining - elapsed_seconds(start_time, now)
    if candidate <= 0:
        return 0, True
    return candidate, False


def consume_segment(remaining: int, start_time: Optional[datetime], now: datetime) -> int:
    """Charge the open segment against the budget; never signals completion."""
    return max(0, remaining - elapsed_seconds(start_time, now))


def clamp_non_negative(remaining: int) -> Tuple[int, bool]:
    if remaining is not None and remaining < 0:
        return 0, True
    return remaining, False


def project_status(status: str, remaining: int, start_time: Optional[datetime], now: datetime) -> Tuple[str, int, bool]:
    """Apply the live correction and the negative clamp to stored values.

    Returns (status, remaining, needs_persist). needs_persist is True when the
    stored row should be rewritten as completed.
    """
    needs_persist = False
    if status == 'live' and start_time is not None:
        remaining, expired = reconcile_live(remaining, start_time, now)
        if expired:
            status = 'completed'
            needs_persist = True
    remaining, clamped = clamp_non_negative(remaining)
    if clamped and status != 'completed':
        status = 'completed'
        needs_persist = True
    return status, remaining, needs_persist
