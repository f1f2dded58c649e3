from __future__ import annotations

from datetime import datetime, timezone

from active_months import active_months, active_range, count_months, format_month, month_start


def _ms(year: int, month: int, day: int = 1, hour: int = 0, minute: int = 0) -> int:
    return int(datetime(year, month, day, hour, minute, tzinfo=timezone.utc).timestamp()) * 1000


def test_month_start_is_first_instant_in_utc() -> None:
    assert month_start(_ms(2001, 1, 17, 13, 45) + 123) == _ms(2001, 1)
    assert month_start(_ms(2001, 1)) == _ms(2001, 1)
    assert month_start(_ms(2001, 1) - 1) == _ms(2000, 12)
    assert month_start(-1) == _ms(1969, 12)


def test_format_month() -> None:
    assert format_month(_ms(2001, 10)) == "10/2001"


def test_threshold_is_strict() -> None:
    events = [_ms(2001, 1, 1 + (i % 28), i % 24) for i in range(150)]
    assert active_months(events, 150) == {}
    assert active_months(events, 149) == {_ms(2001, 1): 150}


def test_result_ordered_by_ascending_stamp() -> None:
    events = [_ms(2001, 3)] * 3 + [_ms(2000, 11)] * 2 + [_ms(2001, 1)] * 1
    months = active_months(reversed(events), 0)
    assert list(months) == [_ms(2000, 11), _ms(2001, 1), _ms(2001, 3)]
    assert list(months.values()) == [2, 1, 3]
    assert active_range(months) == (_ms(2000, 11), _ms(2001, 3))


def test_malformed_timestamps_are_skipped() -> None:
    events = [_ms(2001, 5, 2), "garbage", None, "2001-05-09T10:00:00Z"]
    per_month, skipped = count_months(events)
    assert per_month == {_ms(2001, 5): 2}
    assert sum(skipped.values()) == 2


def test_empty_input() -> None:
    assert active_months([], 0) == {}
    assert active_range({}) is None


def test_timestamps_outside_pandas_range_are_skipped() -> None:
    per_month, skipped = count_months(["0001-01-01", "1500-06-01", _ms(2001, 5, 2)])
    assert per_month == {_ms(2001, 5): 1}
    assert skipped == {"bad_timestamp": 2}
