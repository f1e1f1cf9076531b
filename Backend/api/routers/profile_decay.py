# Backend/api/routers/profile_decay.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from app.core.feature_flags import require_feature
from app.core.logging import get_logger
from app.models.decay_presets import get_decay_presets
from app.models.profile import (
    AnswerOption,
    CountryQuestionOptions,
    DecayConfig,
    ProfileAnswer,
    ProfileCategory,
    ProfileContext,
    ProfileQuestion,
    ProfileSummary,
    StalenessStats,
)
from services.decay_stats_service import compute_staleness_stats
from services.profile_service import get_profile_summary

router = APIRouter(prefix="/profile/decay", tags=["profile-decay"])
logger = get_logger()


class ProfileDecaySummaryRequest(BaseModel):
    profile: ProfileContext
    categories: List[ProfileCategory] = Field(default_factory=list)
    questions: List[ProfileQuestion] = Field(default_factory=list)
    answers: List[ProfileAnswer] = Field(default_factory=list)
    answer_options: List[AnswerOption] = Field(default_factory=list)
    country_options: List[CountryQuestionOptions] = Field(default_factory=list)
    # Raw rows: malformed configs degrade to "no decay" instead of a 422
    decay_configs: Optional[List[Dict[str, Any]]] = None
    include_drafts: bool = False
    now: Optional[datetime] = None


class StalenessStatsRequest(BaseModel):
    categories: List[ProfileCategory] = Field(default_factory=list)
    questions: List[ProfileQuestion] = Field(default_factory=list)
    answers: List[ProfileAnswer] = Field(default_factory=list)
    decay_configs: Optional[List[Dict[str, Any]]] = None
    now: Optional[datetime] = None


def _server_now(now: Optional[datetime]) -> datetime:
    # The HTTP layer owns the clock; the engine only ever sees an explicit value
    return now or datetime.now(timezone.utc)


def _decay_configs_or_presets(raw: Optional[List[Dict[str, Any]]]) -> List[Union[Dict[str, Any], DecayConfig]]:
    if raw is not None:
        return list(raw)
    try:
        return list(get_decay_presets())
    except (FileNotFoundError, ValueError) as e:
        logger.error("decay_presets_unavailable", error=str(e))
        raise HTTPException(status_code=503, detail="Decay presets unavailable")


@router.post("/summary", response_model=ProfileSummary)
async def post_profile_summary(body: ProfileDecaySummaryRequest):
    """
    Derive staleness, level completion and the prompt queue for one user.
    """
    require_feature("profile_decay_enabled")
    if body.include_drafts:
        require_feature("draft_preview_enabled")

    return get_profile_summary(
        body.profile,
        questions=body.questions,
        categories=body.categories,
        country_option_overrides=body.country_options,
        structured_options=body.answer_options,
        answers=body.answers,
        decay_configs=_decay_configs_or_presets(body.decay_configs),
        now=_server_now(body.now),
        include_drafts=body.include_drafts,
    )


@router.post("/stats", response_model=StalenessStats)
async def post_staleness_stats(body: StalenessStatsRequest):
    """
    Admin overview: answers subject to decay, stale answers and the staleness rate.
    """
    require_feature("decay_stats_enabled")

    return compute_staleness_stats(
        body.questions,
        body.categories,
        body.answers,
        _decay_configs_or_presets(body.decay_configs),
        _server_now(body.now),
    )


@router.get("/presets", response_model=List[DecayConfig])
async def get_presets():
    require_feature("profile_decay_enabled")
    return _decay_configs_or_presets(None)
