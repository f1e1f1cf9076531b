# Backend/tests/fixtures/__init__.py
"""
Test fixtures for the profile decay engine tests.

Factory functions for creating test data:
- make_decay_config()
- make_category()
- make_question()
- make_answer()
"""

from typing import Any, Optional
from datetime import datetime, timedelta, timezone

from app.models.profile import DecayConfig, ProfileAnswer, ProfileCategory, ProfileQuestion

# Fixed clock shared by all engine tests
NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def days_ago(days: float, now: datetime = NOW) -> datetime:
    return now - timedelta(days=days)


def make_decay_config(
    config_key: str = "decay_quarterly",
    interval_days: Optional[int] = 90,
    interval_type: str = "quarterly",
    is_active: bool = True,
) -> DecayConfig:
    """Factory function to create a decay config."""
    return DecayConfig(
        config_key=config_key,
        interval_type=interval_type,
        interval_days=interval_days,
        is_active=is_active,
    )


def make_category(
    id: str = "cat-demographics",
    name: str = "demographics",
    level: int = 2,
    display_order: int = 1,
    default_decay_config_key: Optional[str] = None,
    is_active: bool = True,
) -> ProfileCategory:
    """Factory function to create a profile category."""
    return ProfileCategory(
        id=id,
        name=name,
        display_name=name.title(),
        level=level,
        display_order=display_order,
        default_decay_config_key=default_decay_config_key,
        is_active=is_active,
    )


def make_question(
    id: str = "q-income",
    question_key: Optional[str] = None,
    category_id: str = "cat-demographics",
    level: int = 2,
    is_required: bool = True,
    is_immutable: bool = False,
    decay_config_key: Optional[str] = None,
    applicability: str = "global",
    country_codes: Optional[list] = None,
    options: Any = None,
    display_order: int = 1,
    is_draft: bool = False,
    is_active: bool = True,
    question_type: str = "select",
) -> ProfileQuestion:
    """Factory function to create a profile question."""
    return ProfileQuestion(
        id=id,
        question_key=question_key or id.removeprefix("q-"),
        question_text=f"What is your {question_key or id}?",
        question_type=question_type,
        category_id=category_id,
        level=level,
        is_required=is_required,
        is_immutable=is_immutable,
        decay_config_key=decay_config_key,
        applicability=applicability,
        country_codes=country_codes or [],
        options=options,
        display_order=display_order,
        is_draft=is_draft,
        is_active=is_active,
    )


def make_answer(
    question_id: str = "q-income",
    answer_value: Optional[str] = "R10000-R20000",
    answer_json: Any = None,
    last_updated: Optional[datetime] = None,
    user_id: str = "user-1",
) -> ProfileAnswer:
    """Factory function to create a profile answer (updated now unless given)."""
    return ProfileAnswer(
        user_id=user_id,
        question_id=question_id,
        answer_value=answer_value,
        answer_json=answer_json,
        last_updated=last_updated if last_updated is not None else NOW,
    )
