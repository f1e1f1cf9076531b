from __future__ import annotations

import os
from typing import Dict


def _flag(env_name: str, default: str) -> bool:
    return os.getenv(env_name, default).lower() == "true"


FEATURE_FLAGS: Dict[str, bool] = {
    "profile_decay_enabled": _flag("FEATURE_PROFILE_DECAY", "true"),
    "decay_stats_enabled": _flag("FEATURE_DECAY_STATS", "true"),
    # Draft questions are only for admin preview contexts
    "draft_preview_enabled": _flag("FEATURE_DRAFT_PREVIEW", "false"),
}


def is_feature_enabled(feature_name: str) -> bool:
    return FEATURE_FLAGS.get(feature_name, False)


def require_feature(feature_name: str) -> None:
    """Raise 501 if feature is disabled."""
    if not is_feature_enabled(feature_name):
        from fastapi import HTTPException
        raise HTTPException(
            status_code=501,
            detail=f"Feature '{feature_name}' is not enabled"
        )
