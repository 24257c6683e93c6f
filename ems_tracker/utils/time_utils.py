"""
Clock helpers.

Order ids are time-derived (epoch milliseconds) the way the
browser app minted them, but bumped past the previous id so that two
requests in the same millisecond still get distinct, increasing ids.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(tz=timezone.utc)


def epoch_millis(now: Optional[datetime] = None) -> int:
    """Return ``now`` (default: current time) as integer milliseconds since the epoch."""
    moment = now or utcnow()
    return int(moment.timestamp() * 1000)


def next_order_id(existing_ids: Iterable[int], now: Optional[datetime] = None) -> int:
    """Return a fresh order id strictly greater than every id in ``existing_ids``.

    Args:
        existing_ids: Ids already issued.
        now: Clock override for tests.

    Returns:
        ``max(epoch_millis(now), max(existing_ids) + 1)``.
    """
    candidate = epoch_millis(now)
    highest = max(existing_ids, default=None)
    if highest is not None and candidate <= highest:
        return highest + 1
    return candidate
