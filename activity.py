"""
============================================================
ENRON MAIL ACTIVITY — VALUE TYPES
============================================================
Sent / received counters for one person in one period (or
summed across periods), plus the ranking used to list people
from most to least active.
============================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np


# Counters are unsigned 64-bit, matching the width of the database ids.
MAX_COUNT = int(np.iinfo(np.uint64).max)


class CounterOverflow(ArithmeticError):
    """Raised when a sent/received counter would exceed MAX_COUNT."""

    def __init__(self, message: str, stamp: Optional[int] = None, actor_id: Optional[int] = None):
        super().__init__(message)
        self.stamp = stamp
        self.actor_id = actor_id


def _checked(value: int, field: str) -> int:
    if value > MAX_COUNT:
        raise CounterOverflow(f"{field} counter overflow: {value} > {MAX_COUNT}")
    return value


@dataclass(frozen=True)
class Activity:
    """Some e-mail activity: messages sent and received."""

    sent: int = 0
    recv: int = 0

    def __post_init__(self) -> None:
        if self.sent < 0 or self.recv < 0:
            raise ValueError(f"negative activity: sent={self.sent}, recv={self.recv}")
        _checked(self.sent, "sent")
        _checked(self.recv, "recv")

    @classmethod
    def zero(cls) -> "Activity":
        return cls(0, 0)

    @property
    def total(self) -> int:
        """The total number of e-mails sent and received."""
        return self.sent + self.recv

    def __add__(self, other: "Activity") -> "Activity":
        if not isinstance(other, Activity):
            return NotImplemented
        return Activity(
            _checked(self.sent + other.sent, "sent"),
            _checked(self.recv + other.recv, "recv"),
        )

    def inc_sent(self) -> "Activity":
        return Activity(_checked(self.sent + 1, "sent"), self.recv)

    def inc_recv(self) -> "Activity":
        return Activity(self.sent, _checked(self.recv + 1, "recv"))


def total_activity(activities: Iterable[Activity]) -> Activity:
    """Sum any number of activities, zero when there are none."""
    rtn = Activity.zero()
    for act in activities:
        rtn = rtn + act
    return rtn


@dataclass(frozen=True)
class PersonalActivity:
    """The e-mail activity attributed to one person (people.personid)."""

    actor_id: int
    activity: Activity

    @property
    def sent(self) -> int:
        return self.activity.sent

    @property
    def recv(self) -> int:
        return self.activity.recv

    @property
    def total(self) -> int:
        return self.activity.total


def ranking_key(entry: PersonalActivity) -> Tuple[int, int]:
    """Descending total number of e-mails, then ascending id."""
    return (-entry.total, entry.actor_id)


def rank(entries: Iterable[PersonalActivity]) -> List[PersonalActivity]:
    return sorted(entries, key=ranking_key)
