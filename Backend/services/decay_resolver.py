# Backend/services/decay_resolver.py
"""
Decay config resolution.

Decay intervals are referenced by config_key from questions (override) and
categories (default). The registry is the lookup table; resolution never
raises on bad data, it degrades to "no decay".
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from app.core.logging import get_logger
from app.models.profile import DecayConfig, ProfileCategory, ProfileQuestion

logger = get_logger()

DecayConfigRecord = Union[DecayConfig, Mapping[str, Any]]


def _coerce_config(record: DecayConfigRecord) -> Optional[DecayConfig]:
    """
    Turn a raw config row into a DecayConfig.

    Rows with an unusable interval are kept as never-decaying configs so that a
    question pointing at them does not silently inherit its category default.
    """
    if isinstance(record, DecayConfig):
        return record
    if not isinstance(record, Mapping):
        logger.warning("decay_config_malformed", reason="not_a_mapping")
        return None

    key = record.get("config_key")
    if not key:
        logger.warning("decay_config_malformed", reason="missing_config_key")
        return None

    try:
        return DecayConfig(**dict(record))
    except ValidationError as e:
        logger.warning(
            "decay_config_malformed",
            config_key=key,
            interval_days=record.get("interval_days"),
            error=str(e.errors()[0].get("msg")) if e.errors() else str(e),
        )
        interval_type = record.get("interval_type")
        description = record.get("description")
        is_active = record.get("is_active", True)
        fallback = {
            "config_key": str(key),
            "description": description if isinstance(description, str) else None,
            "is_active": is_active if isinstance(is_active, bool) else True,
        }
        typed = interval_type if isinstance(interval_type, str) and interval_type else None
        # Keep the interval when it is the only usable part of the row
        try:
            return DecayConfig(
                interval_type=typed or "days", interval_days=record.get("interval_days"), **fallback
            )
        except ValidationError:
            return DecayConfig(interval_type=typed or "never", interval_days=None, **fallback)


class DecayConfigRegistry:
    """Indexed map config_key → DecayConfig (active configs only)."""

    def __init__(self, configs: Optional[Iterable[DecayConfigRecord]] = None):
        self._by_key: Dict[str, DecayConfig] = {}
        for record in configs or []:
            config = _coerce_config(record)
            if config is None:
                continue
            if not config.is_active:
                logger.debug("decay_config_inactive_skipped", config_key=config.config_key)
                continue
            self._by_key[config.config_key] = config

    def __len__(self) -> int:
        return len(self._by_key)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def get(self, key: Optional[str]) -> Optional[DecayConfig]:
        if not key:
            return None
        return self._by_key.get(key)

    def configs(self) -> list[DecayConfig]:
        return list(self._by_key.values())


def as_registry(configs: Union[DecayConfigRegistry, Iterable[DecayConfigRecord], None]) -> DecayConfigRegistry:
    if isinstance(configs, DecayConfigRegistry):
        return configs
    return DecayConfigRegistry(configs)


def resolve_decay_config(
    question: ProfileQuestion,
    category: Optional[ProfileCategory],
    registry: DecayConfigRegistry,
) -> Optional[DecayConfig]:
    """
    Resolve the effective decay config for a question.

    The question-level reference wins when it resolves; a dangling question
    reference falls through to the category default. Returns None when
    neither resolves (the answer never goes stale).
    """
    question_key = getattr(question, "decay_config_key", None)
    config = registry.get(question_key)
    if config is not None:
        return config

    if question_key:
        logger.debug(
            "decay_config_reference_unresolved",
            question_id=getattr(question, "id", None),
            config_key=question_key,
            scope="question",
        )

    category_key = getattr(category, "default_decay_config_key", None) if category else None
    config = registry.get(category_key)
    if config is None and category_key:
        logger.debug(
            "decay_config_reference_unresolved",
            category_id=getattr(category, "id", None),
            config_key=category_key,
            scope="category",
        )
    return config
