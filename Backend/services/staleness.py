# Backend/services/staleness.py
"""
Staleness evaluation for profile answers.

Staleness is a projection over the current time and is never stored. The
clock is always passed in by the caller.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from app.core.profile_config import MS_PER_DAY
from app.models.profile import DecayConfig, ProfileAnswer


class MissingClockError(ValueError):
    """Raised when staleness is evaluated without an explicit current time."""


def require_clock(now: Optional[datetime]) -> datetime:
    if now is None:
        raise MissingClockError("now is required: pass the current time explicitly")
    if not isinstance(now, datetime):
        raise MissingClockError(f"now must be a datetime, got {type(now).__name__}")
    return as_utc(now)


def as_utc(value: datetime) -> datetime:
    # Naive timestamps are stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since_update(last_updated: datetime, now: datetime) -> int:
    """
    Whole days elapsed between last_updated and now (floor of elapsed ms / ms per day).
    """
    now = require_clock(now)
    elapsed = now - as_utc(last_updated)
    elapsed_ms = (elapsed.days * 86_400 + elapsed.seconds) * 1000 + elapsed.microseconds // 1000
    return elapsed_ms // MS_PER_DAY


def is_stale(
    answer: Optional[ProfileAnswer],
    decay_config: Optional[DecayConfig],
    is_immutable: bool,
    now: datetime,
) -> bool:
    """
    Whether an answer has outlived its decay interval.

    Unanswered questions are incomplete, not stale. Immutable questions and
    questions without a decaying config never go stale.
    """
    now = require_clock(now)
    if answer is None or is_immutable:
        return False
    if decay_config is None or not decay_config.interval_days:
        return False
    if answer.last_updated is None:
        return False
    return days_since_update(answer.last_updated, now) > decay_config.interval_days
