"""
============================================================
ENRON MAIL ACTIVITY — ACTIVE MONTHS
============================================================
Number of e-mails per calendar month, ignoring months with
no more activity than a threshold number of e-mails.

Months are bucketed in the UTC calendar so that bucket
boundaries do not depend on the host's locale.
============================================================
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from rows import Skip, SkipReason, parse_timestamp

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MS = timedelta(milliseconds=1)


def from_millis(millis: int) -> datetime:
    return EPOCH + timedelta(milliseconds=millis)


def to_millis(dt: datetime) -> int:
    return (dt - EPOCH) // _MS


def month_start(millis: int) -> int:
    """The first instant (day 1, 00:00:00.000 UTC) of the month containing millis."""
    dt = from_millis(millis)
    return to_millis(datetime(dt.year, dt.month, 1, tzinfo=timezone.utc))


def format_month(stamp: int) -> str:
    dt = from_millis(stamp)
    return f"{dt.month}/{dt.year}"


def count_months(timestamps: Iterable[Any]) -> Tuple[Counter, Counter]:
    """
    Count e-mails per month stamp.
    Returns (per_month, skipped) where skipped tallies unusable timestamps by reason.
    """
    per_month: Counter = Counter()
    skipped: Counter = Counter()
    for value in timestamps:
        ts = parse_timestamp(value)
        if isinstance(ts, Skip):
            skipped[ts.reason] += 1
            continue
        try:
            stamp = month_start(ts)
        except OverflowError:
            skipped[SkipReason.BAD_TIMESTAMP] += 1
            continue
        per_month[stamp] += 1
    return per_month, skipped


def filter_active(per_month: Mapping[int, int], threshold: int) -> Dict[int, int]:
    """Months with strictly more than threshold e-mails, by ascending stamp."""
    return {stamp: cnt for stamp, cnt in sorted(per_month.items()) if cnt > threshold}


def active_months(timestamps: Iterable[Any], threshold: int) -> Dict[int, int]:
    per_month, _ = count_months(timestamps)
    return filter_active(per_month, threshold)


def active_range(months: Mapping[int, int]) -> Optional[Tuple[int, int]]:
    """(first, last) month stamps, or None when no month is active."""
    if not months:
        return None
    return min(months), max(months)
