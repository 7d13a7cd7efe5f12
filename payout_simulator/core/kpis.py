"""Headline KPIs for a computed payout."""

import logging
from typing import Sequence, Tuple

from ..models.schemas import KpiMetrics, PayoutBreakdown, TierRule
from ..utils.validation import MONTHS_PER_YEAR, QUARTERS_PER_YEAR, ensure_number
from .tiers import sort_tiers

logger = logging.getLogger(__name__)


def quarterly_payouts(breakdown: PayoutBreakdown) -> Tuple[float, ...]:
    """Quarterly bonus, continuity bonus and the quarter's three commissions, per quarter."""
    months_per_quarter = MONTHS_PER_YEAR // QUARTERS_PER_YEAR
    totals = []
    for quarter in range(QUARTERS_PER_YEAR):
        start = quarter * months_per_quarter
        commission = sum(breakdown.commissions[start:start + months_per_quarter])
        totals.append(
            breakdown.quarterly_bonuses[quarter]
            + breakdown.continuity_bonuses[quarter]
            + commission
        )
    return tuple(totals)


def compute_kpis(breakdown: PayoutBreakdown, yearly_target: float,
                 quarterly_tiers: Sequence[TierRule]) -> KpiMetrics:
    """
    Revenue against target, payout cost and the next bonus threshold.

    The next threshold is the lowest quarterly tier start strictly above the
    average achievement; ``None`` once the top tier is reached.
    """
    yearly_target = ensure_number(yearly_target, "yearly_target")
    revenue = breakdown.yearly_revenue

    next_threshold = None
    for tier in sort_tiers(quarterly_tiers):
        if tier.lower_bound > breakdown.avg_achievement:
            next_threshold = tier.lower_bound
            break

    return KpiMetrics(
        revenue_vs_target_pct=revenue / yearly_target * 100 if yearly_target > 0 else 0.0,
        payout_pct_of_revenue=breakdown.total_payout / revenue * 100 if revenue > 0 else 0.0,
        avg_monthly_commission=breakdown.total_commission / MONTHS_PER_YEAR,
        quarterly_payouts=quarterly_payouts(breakdown),
        next_threshold=next_threshold,
        gap_to_next_threshold=(
            next_threshold - breakdown.avg_achievement if next_threshold is not None else None
        ),
    )
