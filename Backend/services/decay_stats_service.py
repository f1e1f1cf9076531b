# Backend/services/decay_stats_service.py
"""
Admin staleness statistics across all users' answers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, Union

from app.core.logging import get_logger
from app.models.profile import ProfileAnswer, ProfileCategory, ProfileQuestion, StalenessStats
from services.decay_resolver import DecayConfigRecord, DecayConfigRegistry, as_registry, resolve_decay_config
from services.staleness import is_stale, require_clock

logger = get_logger()


def compute_staleness_stats(
    questions: Iterable[ProfileQuestion],
    categories: Iterable[ProfileCategory],
    answers: Iterable[ProfileAnswer],
    decay_configs: Union[DecayConfigRegistry, Iterable[DecayConfigRecord], None],
    now: datetime,
) -> StalenessStats:
    """
    Count answers that are subject to decay and how many of them are stale.

    Only answers to questions with a decaying config count; immutable
    questions are left out.

    Returns:
        StalenessStats with total_answers, stale_answers and staleness_rate (percent, 1 decimal)
    """
    now = require_clock(now)
    registry = as_registry(decay_configs)
    categories_by_id: Dict[str, ProfileCategory] = {c.id: c for c in categories}
    questions_by_id: Dict[str, ProfileQuestion] = {q.id: q for q in questions}

    total = 0
    stale = 0
    for answer in answers:
        question = questions_by_id.get(answer.question_id)
        if question is None or question.is_immutable:
            continue
        config = resolve_decay_config(question, categories_by_id.get(question.category_id), registry)
        if config is None or not config.decays:
            continue
        total += 1
        if is_stale(answer, config, question.is_immutable, now):
            stale += 1

    rate = round(stale * 100 / total, 1) if total else 0.0
    logger.info("staleness_stats_computed", total_answers=total, stale_answers=stale, staleness_rate=rate)
    return StalenessStats(total_answers=total, stale_answers=stale, staleness_rate=rate)
