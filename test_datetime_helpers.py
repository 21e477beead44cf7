from datetime import datetime, timedelta, timezone

from utils.datetime_helpers import (
    ensure_utc,
    format_utc_datetime,
    from_utc_to_local,
)


def test_utc_timestamps_get_z_suffix():
    ts = datetime(2025, 6, 7, 13, 25, 39, 765881, tzinfo=timezone.utc)
    assert format_utc_datetime(ts) == "2025-06-07T13:25:39.765881Z"


def test_naive_timestamps_are_assumed_utc():
    assert format_utc_datetime(datetime(2025, 6, 7, 13, 25)) == "2025-06-07T13:25:00Z"


def test_offset_timestamps_are_converted_to_utc():
    eastern = timezone(timedelta(hours=-4))
    assert format_utc_datetime(datetime(2025, 6, 7, 9, 0, tzinfo=eastern)) == "2025-06-07T13:00:00Z"


def test_none_passes_through():
    assert format_utc_datetime(None) is None


def test_ensure_utc_and_local_conversion():
    naive = datetime(2025, 1, 15, 12, 0)
    assert ensure_utc(naive).tzinfo == timezone.utc
    assert from_utc_to_local(naive, "America/New_York").hour == 7
