"""Yearly payout aggregation."""

import logging
from typing import Sequence

from ..models.schemas import (
    CompensationConfig,
    PayoutBreakdown,
    PerformanceProfile,
    PerformanceTrajectory,
)
from ..utils.validation import (
    QUARTERS_PER_YEAR,
    validate_achievements,
    validate_fte,
    validate_monthly_sales,
)
from .bonuses import compute_continuity_bonus, compute_quarterly_bonus
from .commission import compute_commission

logger = logging.getLogger(__name__)


def compute_total_payout(quarterly_achievements: Sequence[float],
                         monthly_sales: Sequence[float], fte: float,
                         config: CompensationConfig) -> PayoutBreakdown:
    """
    Compute the full-year payout breakdown for one performer.

    Args:
        quarterly_achievements: Achievement percentage for Q1-Q4
        monthly_sales: Sales for January-December
        fte: Full-time equivalent in [0, 1]
        config: Payout structure

    Returns:
        PayoutBreakdown with per-period amounts and totals
    """
    achievements = validate_achievements(quarterly_achievements)
    sales = validate_monthly_sales(monthly_sales)
    fte = validate_fte(fte)

    quarterly_bonuses = tuple(
        compute_quarterly_bonus(achievement, fte, config.quarterly_tiers)
        for achievement in achievements
    )

    continuity_bonuses = (0.0,) + tuple(
        compute_continuity_bonus(
            achievements[quarter - 1],
            achievements[quarter],
            fte,
            config.continuity_threshold,
            config.continuity_tiers,
        )
        for quarter in range(1, QUARTERS_PER_YEAR)
    )

    commissions = tuple(
        compute_commission(
            sales_value,
            fte,
            config.use_rolling_average,
            month_index,
            config.previous_months,
            sales,
            config.commission_tiers,
        )
        for month_index, sales_value in enumerate(sales)
    )

    total_quarterly_bonus = sum(quarterly_bonuses)
    total_continuity_bonus = sum(continuity_bonuses)
    total_commission = sum(commissions)

    breakdown = PayoutBreakdown(
        commissions=commissions,
        quarterly_bonuses=quarterly_bonuses,
        continuity_bonuses=continuity_bonuses,
        total_commission=total_commission,
        total_quarterly_bonus=total_quarterly_bonus,
        total_continuity_bonus=total_continuity_bonus,
        total_payout=total_quarterly_bonus + total_continuity_bonus + total_commission,
        avg_achievement=sum(achievements) / QUARTERS_PER_YEAR,
        yearly_revenue=sum(sales),
    )
    logger.debug(f"Computed payout {breakdown.total_payout:.2f} for structure '{config.name}'")
    return breakdown


def compute_trajectory_payout(trajectory: PerformanceTrajectory, fte: float,
                              config: CompensationConfig) -> PayoutBreakdown:
    return compute_total_payout(
        trajectory.quarterly_achievements, trajectory.monthly_sales, fte, config
    )


def compute_profile_payout(profile: PerformanceProfile,
                           config: CompensationConfig) -> PayoutBreakdown:
    """Payout breakdown for a stored performance profile."""
    return compute_trajectory_payout(profile.trajectory, profile.fte, config)
