# Backend/services/profile_service.py
"""
Profile summary service.

Builds what the dashboard needs from one user's already-fetched records:
level 2 gating, level 3 progress, stale answers, the prompt queue and the
derived profile state. Summaries are memoized for a short window keyed by
(user, inputs hash, clock bucket).
"""

from __future__ import annotations

import hashlib
import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from app.core.config import settings
from app.core.logging import get_logger
from app.core.profile_config import ENRICHMENT_LEVEL, GATING_LEVEL, TEAM_USER_TYPE
from app.core.request_id import with_user_id
from app.models.profile import (
    AnswerOption,
    CatalogWarning,
    CountryQuestionOptions,
    ProfileAnswer,
    ProfileCategory,
    ProfileContext,
    ProfileQuestion,
    ProfileState,
    ProfileStatus,
    ProfileSummary,
)
from services.catalog_aggregator import build_catalog
from services.completion_policy import (
    categories_at_level,
    level_complete,
    level_completion_percentage,
    prioritized_queue,
    profile_status,
    stale_questions,
)
from services.decay_resolver import DecayConfigRecord, DecayConfigRegistry, as_registry
from services.staleness import require_clock

logger = get_logger()


def resolve_country_code(profile: ProfileContext, default: Optional[str] = None) -> str:
    """
    Country used for question applicability: ISO code, then dial code, then the configured default.
    """
    for candidate in (profile.country_iso, profile.country_code):
        if candidate and str(candidate).strip():
            return str(candidate).strip().upper()

    fallback = (default or settings.DEFAULT_COUNTRY_CODE).upper()
    logger.warning("profile_country_missing_using_default", user_id=profile.user_id, country_code=fallback)
    return fallback


def is_team_user(profile: ProfileContext) -> bool:
    return profile.user_type == TEAM_USER_TYPE


def team_user_summary() -> ProfileSummary:
    """Team accounts have no profiling requirements."""
    return ProfileSummary(
        level2_complete=True,
        level3_percentage=100,
        stale_question_count=0,
        status=ProfileStatus(state=ProfileState.current),
    )


def build_profile_summary(
    profile: ProfileContext,
    *,
    questions: Iterable[ProfileQuestion],
    categories: Iterable[ProfileCategory],
    country_option_overrides: Iterable[CountryQuestionOptions] = (),
    structured_options: Iterable[AnswerOption] = (),
    answers: Iterable[ProfileAnswer] = (),
    decay_configs: Union[DecayConfigRegistry, Iterable[DecayConfigRecord], None] = None,
    now: datetime,
    include_drafts: bool = False,
) -> ProfileSummary:
    now = require_clock(now)

    with with_user_id(profile.user_id):
        if is_team_user(profile):
            logger.debug("profile_summary_team_user_bypass")
            return team_user_summary()

        country_code = resolve_country_code(profile)
        warnings: List[CatalogWarning] = []
        catalog = build_catalog(
            questions,
            categories,
            country_option_overrides,
            structured_options,
            answers,
            country_code=country_code,
            now=now,
            decay_configs=as_registry(decay_configs),
            include_drafts=include_drafts,
            warnings=warnings,
        )

        stale = stale_questions(catalog)
        summary = ProfileSummary(
            categories=catalog,
            level2_categories=categories_at_level(catalog, GATING_LEVEL),
            level3_categories=categories_at_level(catalog, ENRICHMENT_LEVEL),
            level2_complete=level_complete(catalog, GATING_LEVEL),
            level3_percentage=level_completion_percentage(catalog, ENRICHMENT_LEVEL),
            stale_question_count=len(stale),
            stale_questions=stale,
            queue=prioritized_queue(catalog),
            status=profile_status(catalog),
            warnings=warnings,
        )

        logger.info(
            "profile_summary_built",
            country_code=country_code,
            state=summary.status.state.value,
            level2_complete=summary.level2_complete,
            level3_percentage=summary.level3_percentage,
            stale_count=summary.stale_question_count,
            warnings=len(warnings),
        )
        return summary


# -------- Memo ---------------------------------------------------------------

def inputs_hash(*collections: Iterable[Any]) -> str:
    """Stable digest over record collections (pydantic models or plain values)."""
    digest = hashlib.sha256()
    for collection in collections:
        digest.update(b"|")
        for item in collection or ():
            if hasattr(item, "model_dump_json"):
                digest.update(item.model_dump_json().encode("utf-8"))
            else:
                digest.update(repr(item).encode("utf-8"))
            digest.update(b";")
    return digest.hexdigest()


class ProfileSummaryCache:
    """Short-TTL memo of profile summaries."""

    def __init__(self, ttl_seconds: Optional[int] = None):
        self.ttl_seconds = max(1, int(ttl_seconds or settings.PROFILE_CACHE_TTL_SECONDS))
        self._entries: Dict[Tuple[str, str, int], Dict[str, Any]] = {}

    def clock_bucket(self, now: datetime) -> int:
        return int(require_clock(now).timestamp() // self.ttl_seconds)

    def get(self, key: Tuple[str, str, int]) -> Optional[ProfileSummary]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if time.time() >= entry["expires_at"]:
            self._entries.pop(key, None)
            return None
        return entry["summary"]

    def put(self, key: Tuple[str, str, int], summary: ProfileSummary) -> None:
        self._prune()
        self._entries[key] = {"summary": summary, "expires_at": time.time() + self.ttl_seconds}

    def _prune(self) -> None:
        now = time.time()
        for key in [k for k, v in self._entries.items() if now >= v["expires_at"]]:
            self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


_summary_cache: Optional[ProfileSummaryCache] = None


def get_summary_cache() -> ProfileSummaryCache:
    global _summary_cache
    if _summary_cache is None:
        _summary_cache = ProfileSummaryCache()
    return _summary_cache


def get_profile_summary(
    profile: ProfileContext,
    *,
    questions: Sequence[ProfileQuestion],
    categories: Sequence[ProfileCategory],
    country_option_overrides: Sequence[CountryQuestionOptions] = (),
    structured_options: Sequence[AnswerOption] = (),
    answers: Sequence[ProfileAnswer] = (),
    decay_configs: Optional[Sequence[DecayConfigRecord]] = None,
    now: datetime,
    include_drafts: bool = False,
    cache: Optional[ProfileSummaryCache] = None,
) -> ProfileSummary:
    """
    Memoized build_profile_summary; identical inputs within one clock bucket reuse the result.
    """
    cache = cache if cache is not None else get_summary_cache()
    key = (
        profile.user_id,
        inputs_hash(
            [profile],
            questions,
            categories,
            country_option_overrides,
            structured_options,
            answers,
            decay_configs or (),
            [include_drafts],
        ),
        cache.clock_bucket(now),
    )

    cached = cache.get(key)
    if cached is not None:
        logger.debug("profile_summary_cache_hit", user_id=profile.user_id)
        return cached

    summary = build_profile_summary(
        profile,
        questions=questions,
        categories=categories,
        country_option_overrides=country_option_overrides,
        structured_options=structured_options,
        answers=answers,
        decay_configs=decay_configs,
        now=now,
        include_drafts=include_drafts,
    )
    cache.put(key, summary)
    return summary
