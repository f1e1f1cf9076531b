# Backend/services/completion_policy.py
"""
Completion policy over an aggregated profile catalog.

Derives level completion, stale answers, the prompt queue and the profile
state. Everything is recomputed from the catalog on every read.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, Tuple

from app.core.profile_config import POLICY_PROGRESSIVE, POLICY_REQUIRED, get_level_policy
from app.models.profile import (
    CategoryCatalog,
    ProfileState,
    ProfileStatus,
    ResolvedCatalogEntry,
)

# Queue tiers
_TIER_REQUIRED_UNANSWERED = 0
_TIER_STALE = 1


def _entries_at_level(categories: Iterable[CategoryCatalog], level: int) -> Iterator[ResolvedCatalogEntry]:
    for category in categories:
        if category.level == level:
            yield from category.entries


def categories_at_level(categories: Iterable[CategoryCatalog], level: int) -> List[CategoryCatalog]:
    return [c for c in categories if c.level == level]


def level_complete(categories: Iterable[CategoryCatalog], level: int) -> bool:
    """True iff every required question at the level has a non-empty answer."""
    return all(e.is_answered for e in _entries_at_level(categories, level) if e.question.is_required)


def level_completion_percentage(categories: Iterable[CategoryCatalog], level: int) -> int:
    """Answered share of all questions at the level, rounded half-up; 0 without questions."""
    entries = list(_entries_at_level(categories, level))
    total = len(entries)
    if total == 0:
        return 0
    answered = sum(1 for e in entries if e.is_answered)
    # integer half-up rounding, no float drift
    return (answered * 200 + total) // (2 * total)


def stale_questions(categories: Iterable[CategoryCatalog]) -> List[ResolvedCatalogEntry]:
    return [
        entry
        for category in categories
        for entry in category.entries
        if entry.is_stale and entry.is_answered and not entry.question.is_immutable
    ]


def prioritized_queue(categories: Sequence[CategoryCatalog]) -> List[ResolvedCatalogEntry]:
    """
    Questions that need the user's attention, most blocking first.

    Required-and-unanswered questions come first, then stale answers. Within a
    tier, category display order and then question display order decide.
    """
    ranked: List[Tuple[Tuple[int, int, int, int, int], ResolvedCatalogEntry]] = []
    for cat_pos, category in enumerate(categories):
        for q_pos, entry in enumerate(category.entries):
            if entry.question.is_required and not entry.is_answered:
                tier = _TIER_REQUIRED_UNANSWERED
            elif entry.is_stale and entry.is_answered and not entry.question.is_immutable:
                tier = _TIER_STALE
            else:
                continue
            key = (tier, category.display_order, cat_pos, entry.question.display_order, q_pos)
            ranked.append((key, entry))

    ranked.sort(key=lambda item: item[0])
    return [entry for _, entry in ranked]


def profile_status(categories: Sequence[CategoryCatalog]) -> ProfileStatus:
    """
    Derive where the user stands in the profiling journey.

    NOT_STARTED → IN_PROGRESS(level) → LEVEL_COMPLETE(level) → NEEDS_REFRESH → CURRENT.
    CURRENT falls back to NEEDS_REFRESH purely through the passage of time.
    """
    stale_count = len(stale_questions(categories))
    levels = sorted({c.level for c in categories})

    if not any(e.is_answered for c in categories for e in c.entries):
        first_level = levels[0] if levels else None
        return ProfileStatus(state=ProfileState.not_started, level=first_level, stale_count=stale_count)

    for level in levels:
        if get_level_policy(level) == POLICY_REQUIRED and not level_complete(categories, level):
            return ProfileStatus(state=ProfileState.in_progress, level=level, stale_count=stale_count)

    if stale_count > 0:
        return ProfileStatus(state=ProfileState.needs_refresh, stale_count=stale_count)

    gated = [lvl for lvl in levels if get_level_policy(lvl) == POLICY_REQUIRED]
    open_enrichment = [
        lvl for lvl in levels
        if get_level_policy(lvl) == POLICY_PROGRESSIVE and level_completion_percentage(categories, lvl) < 100
    ]
    if open_enrichment:
        return ProfileStatus(
            state=ProfileState.level_complete,
            level=gated[-1] if gated else None,
            stale_count=0,
        )

    return ProfileStatus(state=ProfileState.current, stale_count=0)
