from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd
import pytest

from activity import Activity
from parse import bucket_events_csv, process_chunk, read_actors_csv, read_timestamps_csv
from rows import SkipReason


def _ms(year: int, month: int, day: int = 1) -> int:
    return int(datetime(year, month, day, tzinfo=timezone.utc).timestamp()) * 1000


JAN, FEB, MAR = _ms(2001, 1), _ms(2001, 2), _ms(2001, 3)

EVENT_LINES = [
    f"{_ms(2001, 1, 5)},1,2",
    f"{_ms(2001, 1, 20)},2,1",
    "2001-02-14T09:30:00Z,1,3",
    f"{_ms(2001, 3, 3)},3,2",
    "not-a-date,1,2",
    f"{_ms(2001, 3, 4)},,2",
]


def test_process_chunk_buckets_by_month() -> None:
    chunk = pd.DataFrame(
        [(str(_ms(2001, 1, 5)), "1", "2"), ("2001-02-14T09:30:00Z", "1", "3"), ("oops", "1", "2")],
        columns=["timestamp", "sender_id", "recipient_id"],
    )
    bucket, skipped = process_chunk(chunk)
    assert bucket.stamps() == [JAN, FEB]
    assert bucket.get(JAN, 2) == Activity(0, 1)
    assert bucket.get(FEB, 1) == Activity(1, 0)
    assert skipped == {SkipReason.BAD_TIMESTAMP: 1}


def test_process_chunk_restricted_to_months() -> None:
    chunk = pd.DataFrame(
        [(str(_ms(2001, 1, 5)), "1", "2"), (str(_ms(2001, 2, 5)), "1", "2")],
        columns=["timestamp", "sender_id", "recipient_id"],
    )
    bucket, skipped = process_chunk(chunk, months={FEB})
    assert bucket.stamps() == [FEB]
    assert skipped == {SkipReason.OUTSIDE_ACTIVE: 1}


@pytest.mark.parametrize("workers", [1, 2])
@pytest.mark.parametrize("chunk_size", [1, 2, 100])
def test_bucket_events_csv_independent_of_chunking_and_workers(write_csv, chunk_size: int, workers: int) -> None:
    path = write_csv("events.csv", "timestamp,sender_id,recipient_id", EVENT_LINES)
    bucket, skipped = bucket_events_csv(path, chunk_size=chunk_size, workers=workers)

    assert bucket.stamps() == [JAN, FEB, MAR]
    assert [(pa.actor_id, pa.sent, pa.recv) for pa in bucket.total_personal_activity()] == [
        (1, 2, 1),
        (2, 1, 2),
        (3, 1, 1),
    ]
    assert skipped[SkipReason.BAD_TIMESTAMP] == 1
    assert skipped[SkipReason.BAD_ID] == 1


def test_bucket_events_csv_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        bucket_events_csv(str(tmp_path / "nope.csv"))


def test_readers(write_csv) -> None:
    events = write_csv("events.csv", "timestamp,sender_id,recipient_id", EVENT_LINES)
    values = list(read_timestamps_csv(events, chunk_size=2))
    assert len(values) == len(EVENT_LINES)
    assert values[4] == "not-a-date"

    actors = write_csv(
        "people.csv",
        "person_id,email,name",
        ['1,klay@enron.com,"Kenneth Lay"', "2,,", "3,jskilling@enron.com,"],
    )
    rows = list(read_actors_csv(actors))
    assert rows[0] == ("1", "klay@enron.com", "Kenneth Lay")
    assert pd.isna(rows[1][1]) and pd.isna(rows[1][2])
    assert rows[2][1] == "jskilling@enron.com"
