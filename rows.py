"""
Per-row parsing of the two database sources.

Every parser returns either the parsed row or a Skip describing why the
row was dropped, so callers fold over successes and tally the rest.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence, Union

import numpy as np
import pandas as pd
from pandas.errors import OutOfBoundsDatetime


class SkipReason:
    BAD_TIMESTAMP = "bad_timestamp"
    BAD_ID = "bad_id"
    MISSING_FIELD = "missing_field"
    OUTSIDE_ACTIVE = "outside_active"


@dataclass(frozen=True)
class Skip:
    reason: str
    value: Any = None


@dataclass(frozen=True)
class EventRow:
    timestamp: int  # UTC ms
    sender_id: int
    recipient_id: int


@dataclass(frozen=True)
class ActorRow:
    raw_id: int
    email: Optional[str]
    name: Optional[str]


_INT_RE = re.compile(r"[+-]?\d+")


def is_missing(value: Any) -> bool:
    if value is None or value is pd.NaT or value is pd.NA:
        return True
    return isinstance(value, (float, np.floating)) and math.isnan(value)


def parse_id(value: Any) -> Union[int, Skip]:
    if is_missing(value) or isinstance(value, (bool, np.bool_)):
        return Skip(SkipReason.BAD_ID, value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        if math.isfinite(value) and float(value).is_integer():
            return int(value)
        return Skip(SkipReason.BAD_ID, value)
    if isinstance(value, str) and _INT_RE.fullmatch(value.strip()):
        return int(value.strip())
    return Skip(SkipReason.BAD_ID, value)


def parse_timestamp(value: Any) -> Union[int, Skip]:
    """
    Epoch milliseconds (UTC) from an int, a datetime / pandas Timestamp
    (naive values are taken as UTC), a numeric string or an ISO-8601 string.
    """
    if is_missing(value) or isinstance(value, (bool, np.bool_)):
        return Skip(SkipReason.BAD_TIMESTAMP, value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        if math.isfinite(value):
            return int(value)
        return Skip(SkipReason.BAD_TIMESTAMP, value)
    if isinstance(value, str):
        text = value.strip()
        if _INT_RE.fullmatch(text):
            return int(text)
        try:
            value = pd.Timestamp(text)
        except ValueError:
            return Skip(SkipReason.BAD_TIMESTAMP, text)
    try:
        if isinstance(value, (datetime, np.datetime64)):
            value = pd.Timestamp(value)
        if not isinstance(value, pd.Timestamp) or value is pd.NaT:
            return Skip(SkipReason.BAD_TIMESTAMP, value)
        if value.tzinfo is None:
            value = value.tz_localize("UTC")
        else:
            value = value.tz_convert("UTC")
        return int(value.value // 1_000_000)
    except (OverflowError, OutOfBoundsDatetime):
        # Outside the nanosecond range pandas can represent.
        return Skip(SkipReason.BAD_TIMESTAMP, value)


def parse_event_row(row: Sequence[Any]) -> Union[EventRow, Skip]:
    """(timestamp, sender id, recipient id)"""
    if len(row) != 3:
        return Skip(SkipReason.MISSING_FIELD, row)
    stamp, sender, recipient = row
    ts = parse_timestamp(stamp)
    if isinstance(ts, Skip):
        return ts
    sender_id = parse_id(sender)
    if isinstance(sender_id, Skip):
        return sender_id
    recipient_id = parse_id(recipient)
    if isinstance(recipient_id, Skip):
        return recipient_id
    return EventRow(ts, sender_id, recipient_id)


def _text(value: Any) -> Optional[str]:
    return None if is_missing(value) else str(value)


def parse_actor_row(row: Sequence[Any]) -> Union[ActorRow, Skip]:
    """(person id, e-mail address or None, display name or None)"""
    if len(row) != 3:
        return Skip(SkipReason.MISSING_FIELD, row)
    pid, email, name = row
    raw_id = parse_id(pid)
    if isinstance(raw_id, Skip):
        return raw_id
    return ActorRow(raw_id, _text(email), _text(name))
