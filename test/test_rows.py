from __future__ import annotations

from datetime import datetime, timezone

import numpy as np
import pandas as pd
import pytest

from rows import ActorRow, EventRow, Skip, SkipReason, parse_actor_row, parse_event_row, parse_id, parse_timestamp

JAN_1_2001 = 978307200000


@pytest.mark.parametrize(
    "value",
    [
        JAN_1_2001,
        np.int64(JAN_1_2001),
        str(JAN_1_2001),
        "2001-01-01T00:00:00Z",
        "2001-01-01 00:00:00",
        "2000-12-31T19:00:00-05:00",
        datetime(2001, 1, 1, tzinfo=timezone.utc),
        datetime(2001, 1, 1),
        pd.Timestamp("2001-01-01", tz="UTC"),
    ],
)
def test_parse_timestamp_accepts_common_forms(value) -> None:
    assert parse_timestamp(value) == JAN_1_2001


@pytest.mark.parametrize("value", [None, float("nan"), pd.NaT, "", "not a date", "0000-00-00 00:00:00", "0001-01-01", "1500-06-01", True])
def test_parse_timestamp_skips_malformed(value) -> None:
    result = parse_timestamp(value)
    assert isinstance(result, Skip)
    assert result.reason == SkipReason.BAD_TIMESTAMP


def test_parse_id() -> None:
    assert parse_id("42") == 42
    assert parse_id(42.0) == 42
    assert isinstance(parse_id("4x"), Skip)
    assert isinstance(parse_id(1.5), Skip)
    assert isinstance(parse_id(None), Skip)


def test_parse_event_row() -> None:
    assert parse_event_row((str(JAN_1_2001), "1", "2")) == EventRow(JAN_1_2001, 1, 2)
    assert parse_event_row(("bad", "1", "2")).reason == SkipReason.BAD_TIMESTAMP
    assert parse_event_row((JAN_1_2001, "x", "2")).reason == SkipReason.BAD_ID
    assert parse_event_row((JAN_1_2001, 1)).reason == SkipReason.MISSING_FIELD


def test_parse_actor_row_maps_missing_text_to_none() -> None:
    assert parse_actor_row(("7", float("nan"), "Kenneth Lay")) == ActorRow(7, None, "Kenneth Lay")
    assert parse_actor_row((7, "klay@enron.com", None)) == ActorRow(7, "klay@enron.com", None)
    assert isinstance(parse_actor_row((None, "a@b.com", "A")), Skip)
