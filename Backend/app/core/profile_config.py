# Backend/app/core/profile_config.py
"""
Profiling level policies and decay constants.

Levels do not share one completion rule: the signup and pre-earning levels
gate on required questions, the enrichment level only reports a percentage.
"""

from typing import Dict

MS_PER_DAY = 1000 * 60 * 60 * 24

# Completion policy per profiling level
POLICY_REQUIRED = "required"        # complete iff every required question is answered
POLICY_PROGRESSIVE = "progressive"  # percentage only, never blocks progression

LEVEL_POLICIES: Dict[int, str] = {
    1: POLICY_REQUIRED,
    2: POLICY_REQUIRED,
    3: POLICY_PROGRESSIVE,
}

# Levels surfaced by the profile summary
GATING_LEVEL = 2
ENRICHMENT_LEVEL = 3

# Team accounts skip profiling entirely
TEAM_USER_TYPE = "looplly_team_user"

APPLICABILITY_GLOBAL = "global"
APPLICABILITY_COUNTRY_SPECIFIC = "country_specific"


def get_level_policy(level: int) -> str:
    """
    Get the completion policy for a level.

    Args:
        level: Profiling level (1, 2, 3, ...)

    Returns:
        Policy name (unknown levels gate on required questions)
    """
    return LEVEL_POLICIES.get(level, POLICY_REQUIRED)
