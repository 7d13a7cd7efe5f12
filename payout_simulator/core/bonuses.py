"""Quarterly and continuity bonus calculation."""

import logging
from typing import Sequence

from ..models.schemas import CONTINUITY_TIER_COUNT, QUARTERLY_TIER_COUNT, TierRule
from ..utils.validation import ensure_number, validate_fte, validate_tier_set
from .tiers import step_lookup

logger = logging.getLogger(__name__)


def compute_quarterly_bonus(achievement_pct: float, fte: float,
                            quarterly_tiers: Sequence[TierRule]) -> float:
    """Flat bonus of the tier containing ``achievement_pct``, scaled by FTE."""
    achievement_pct = ensure_number(achievement_pct, "achievement_pct")
    fte = validate_fte(fte)
    validate_tier_set(quarterly_tiers, QUARTERLY_TIER_COUNT, "quarterly_tiers", contiguous=False)
    return step_lookup(quarterly_tiers, achievement_pct) * fte


def compute_continuity_bonus(prev_achievement_pct: float, curr_achievement_pct: float,
                             fte: float, continuity_threshold: float,
                             continuity_tiers: Sequence[TierRule]) -> float:
    """
    Bonus for sustaining performance across two consecutive quarters.

    Nothing is paid unless both quarters reach ``continuity_threshold``;
    the amount is then looked up on the current quarter only. The first
    quarter of the year has no predecessor and is handled by the caller.
    """
    prev_achievement_pct = ensure_number(prev_achievement_pct, "prev_achievement_pct")
    curr_achievement_pct = ensure_number(curr_achievement_pct, "curr_achievement_pct")
    fte = validate_fte(fte)
    continuity_threshold = ensure_number(continuity_threshold, "continuity_threshold")
    validate_tier_set(continuity_tiers, CONTINUITY_TIER_COUNT, "continuity_tiers", contiguous=False)

    if prev_achievement_pct < continuity_threshold or curr_achievement_pct < continuity_threshold:
        return 0.0

    return step_lookup(continuity_tiers, curr_achievement_pct) * fte
