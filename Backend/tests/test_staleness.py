"""
Tests for answer staleness evaluation.
"""
from datetime import datetime, timedelta, timezone

import pytest

from services.staleness import MissingClockError, days_since_update, is_stale
from tests.fixtures import NOW, days_ago, make_answer, make_decay_config


MONTHLY = make_decay_config("decay_monthly", 30, "monthly")


def test_boundary_exactly_interval_is_not_stale():
    """30 days old with a 30 day interval is still fresh (strict greater-than)."""
    answer = make_answer(last_updated=days_ago(30))
    assert is_stale(answer, MONTHLY, False, NOW) is False


def test_boundary_one_day_past_interval_is_stale():
    answer = make_answer(last_updated=days_ago(31))
    assert is_stale(answer, MONTHLY, False, NOW) is True


def test_partial_days_are_floored():
    """30 days and 23 hours is still 30 whole days."""
    answer = make_answer(last_updated=NOW - timedelta(days=30, hours=23, minutes=59))
    assert days_since_update(answer.last_updated, NOW) == 30
    assert is_stale(answer, MONTHLY, False, NOW) is False


def test_unanswered_is_never_stale():
    assert is_stale(None, MONTHLY, False, NOW) is False


def test_immutable_is_never_stale():
    ten_years = make_answer(last_updated=days_ago(3650))
    assert is_stale(ten_years, MONTHLY, True, NOW) is False
    assert is_stale(ten_years, make_decay_config("decay_daily", 1), True, NOW) is False


def test_no_config_is_never_stale():
    answer = make_answer(last_updated=days_ago(10_000))
    assert is_stale(answer, None, False, NOW) is False
    assert is_stale(answer, make_decay_config("decay_never", None, "never"), False, NOW) is False


def test_answer_without_timestamp_is_not_stale():
    answer = make_answer().model_copy(update={"last_updated": None})
    assert is_stale(answer, MONTHLY, False, NOW) is False


def test_future_timestamp_is_not_stale():
    answer = make_answer(last_updated=NOW + timedelta(days=5))
    assert days_since_update(answer.last_updated, NOW) == -5
    assert is_stale(answer, MONTHLY, False, NOW) is False


def test_naive_timestamps_are_treated_as_utc():
    naive_now = datetime(2026, 1, 15, 12, 0)
    answer = make_answer(last_updated=datetime(2025, 12, 14, 12, 0))
    assert days_since_update(answer.last_updated, naive_now) == 32
    assert is_stale(answer, MONTHLY, False, naive_now) is True


def test_timezone_offsets_compare_on_instant():
    plus_two = timezone(timedelta(hours=2))
    last = datetime(2025, 12, 16, 14, 0, tzinfo=plus_two)  # 12:00 UTC
    assert days_since_update(last, NOW) == 30


def test_missing_clock_fails_fast():
    answer = make_answer(last_updated=days_ago(100))
    with pytest.raises(MissingClockError):
        is_stale(answer, MONTHLY, False, None)
    with pytest.raises(MissingClockError):
        is_stale(None, None, False, None)
    with pytest.raises(MissingClockError, match="datetime"):
        is_stale(answer, MONTHLY, False, "2026-01-01")


def test_same_inputs_same_result():
    answer = make_answer(last_updated=days_ago(45))
    results = {is_stale(answer, MONTHLY, False, NOW) for _ in range(5)}
    assert results == {True}
