"""
============================================================
ENRON MAIL ACTIVITY — MAIL BUCKET
============================================================
A counter of e-mails sent and received by each person at
each period, keyed by the period's start stamp (UTC ms).

Buckets are not meant to be shared between workers: every
shard fills its own and the results are combined with
merge() / merge_all(), which only ever adds activities.
============================================================
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from activity import Activity, CounterOverflow, PersonalActivity, rank, total_activity


# Returned by time_range() when nothing has been recorded.
EMPTY_RANGE: Tuple[int, int] = (int(np.iinfo(np.int64).max), 0)


class MailBucket:
    """stamp -> actor id -> Activity."""

    def __init__(self):
        self._table: Dict[int, Dict[int, Activity]] = {}

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"MailBucket(periods={len(self._table)}, actors={len(self.actors())})"

    def is_empty(self) -> bool:
        return not self._table

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def record(self, stamp: int, sender_id: int, recipient_id: int) -> None:
        """
        Count one e-mail from sender_id to recipient_id during the period
        starting at stamp. Each side is incremented from its own prior value.
        """
        period = self._table.setdefault(stamp, {})
        try:
            period[sender_id] = period.get(sender_id, Activity.zero()).inc_sent()
        except CounterOverflow as exc:
            raise CounterOverflow(str(exc), stamp=stamp, actor_id=sender_id) from exc
        try:
            period[recipient_id] = period.get(recipient_id, Activity.zero()).inc_recv()
        except CounterOverflow as exc:
            raise CounterOverflow(str(exc), stamp=stamp, actor_id=recipient_id) from exc

    def add(self, stamp: int, actor_id: int, activity: Activity) -> None:
        period = self._table.setdefault(stamp, {})
        try:
            period[actor_id] = period.get(actor_id, Activity.zero()) + activity
        except CounterOverflow as exc:
            raise CounterOverflow(str(exc), stamp=stamp, actor_id=actor_id) from exc

    def merge(self, other: "MailBucket") -> "MailBucket":
        """Fold another bucket's counts into this one. Returns self."""
        for stamp, period in other._table.items():
            for actor_id, act in period.items():
                self.add(stamp, actor_id, act)
        return self

    @classmethod
    def merge_all(cls, buckets: Iterable["MailBucket"]) -> "MailBucket":
        rtn = cls()
        for bucket in buckets:
            rtn.merge(bucket)
        return rtn

    def unify(self, unified: Mapping[int, int]) -> "MailBucket":
        """
        A new bucket with every actor re-keyed to its unified id. Actors
        missing from the mapping keep their raw id.
        """
        rtn = MailBucket()
        for stamp, period in self._table.items():
            for actor_id, act in period.items():
                rtn.add(stamp, unified.get(actor_id, actor_id), act)
        return rtn

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def stamps(self) -> List[int]:
        return sorted(self._table)

    def actors(self) -> List[int]:
        ids = set()
        for period in self._table.values():
            ids.update(period)
        return sorted(ids)

    def time_range(self) -> Tuple[int, int]:
        """The first and last period stamps, or EMPTY_RANGE."""
        if not self._table:
            return EMPTY_RANGE
        return min(self._table), max(self._table)

    def total_period_activity(self, stamp: int) -> Activity:
        """The total number of e-mails during the given period."""
        period = self._table.get(stamp)
        if period is None:
            return Activity.zero()
        return total_activity(period.values())

    def total_personal_activity(self) -> List[PersonalActivity]:
        """The total activity of each person, most to least active."""
        totals: Dict[int, Activity] = {}
        for period in self._table.values():
            for actor_id, act in period.items():
                totals[actor_id] = totals.get(actor_id, Activity.zero()) + act
        return rank(PersonalActivity(actor_id, act) for actor_id, act in totals.items())

    def personal_activity(self, actor_id: int) -> List[Activity]:
        """One entry per recorded period, ascending, zero where the person was silent."""
        zero = Activity.zero()
        return [self._table[stamp].get(actor_id, zero) for stamp in self.stamps()]

    def get(self, stamp: int, actor_id: int) -> Optional[Activity]:
        period = self._table.get(stamp)
        return None if period is None else period.get(actor_id)

    def to_frame(self) -> pd.DataFrame:
        """Long table of every recorded cell, sorted by stamp then actor."""
        records = [
            (stamp, actor_id, act.sent, act.recv)
            for stamp in self.stamps()
            for actor_id, act in sorted(self._table[stamp].items())
        ]
        return pd.DataFrame(
            records, columns=["stamp", "actor_id", "sent", "recv"]
        ).astype({"stamp": "int64", "actor_id": "int64", "sent": "uint64", "recv": "uint64"})
