"""
Risk assessment of a payout structure.

Payout is simulated at a low, a target and a high uniform achievement and
compared with the profit the matching revenue would produce. The structure
is rated on compensation as a share of that profit.
"""

import logging
from typing import Dict, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from ..models.schemas import CompensationConfig, RiskAssessment, RiskRating, RiskScenario
from ..utils.validation import (
    MONTHS_PER_YEAR,
    QUARTERS_PER_YEAR,
    ensure_number,
    validate_fte,
)
from .payout import compute_total_payout

logger = logging.getLogger(__name__)

HIGH_RISK_RECOMMENDATION = (
    "The current compensation structure presents significant financial risk at high "
    "achievement levels. Consider capping bonuses or implementing a declining rate "
    "structure for achievements above 130%."
)
MEDIUM_RISK_RECOMMENDATION = (
    "The compensation structure is moderately risky at target achievement. Consider "
    "optimizing the threshold levels to better align with business margins."
)
LOW_RISK_RECOMMENDATION = (
    "The compensation structure is well balanced with good alignment between "
    "performance and payout. The risk to company profitability is minimal even at "
    "high achievement levels."
)

RISK_LADDER_LEVELS = (80, 90, 100, 110, 120, 150)


class RiskSettings(BaseModel):
    """Scenario definition and rating thresholds; overridable from YAML."""
    model_config = ConfigDict(frozen=True)

    low_achievement_pct: float = 80.0
    target_achievement_pct: float = 100.0
    high_achievement_pct: float = 150.0
    base_monthly_sales: float = 20000.0
    profit_margin: float = 0.30
    # Payout as % of profit; exceeded strictly to escalate the rating
    high_risk_threshold: float = 30.0
    medium_risk_threshold: float = 20.0
    high_risk_recommendation: str = HIGH_RISK_RECOMMENDATION
    medium_risk_recommendation: str = MEDIUM_RISK_RECOMMENDATION
    low_risk_recommendation: str = LOW_RISK_RECOMMENDATION


def scenario_payout(achievement_pct: float, fte: float, config: CompensationConfig,
                    base_monthly_sales: float) -> float:
    """Total payout with every quarter at ``achievement_pct`` and sales scaled to match."""
    achievements = [achievement_pct] * QUARTERS_PER_YEAR
    monthly_sales = [base_monthly_sales * achievement_pct / 100] * MONTHS_PER_YEAR
    return compute_total_payout(achievements, monthly_sales, fte, config).total_payout


def _scenario(achievement_pct: float, yearly_target: float, fte: float,
              config: CompensationConfig, settings: RiskSettings) -> RiskScenario:
    payout = scenario_payout(achievement_pct, fte, config, settings.base_monthly_sales)
    revenue = yearly_target * achievement_pct / 100
    profit = revenue * settings.profit_margin
    return RiskScenario(
        achievement_pct=achievement_pct,
        payout=payout,
        revenue=revenue,
        profit=profit,
        payout_pct_of_profit=payout / profit * 100 if profit > 0 else 0.0,
    )


def rate_risk(target_ratio: float, high_ratio: float,
              settings: Optional[RiskSettings] = None) -> Tuple[RiskRating, str]:
    settings = settings or RiskSettings()
    if high_ratio > settings.high_risk_threshold:
        return RiskRating.HIGH, settings.high_risk_recommendation
    if target_ratio > settings.medium_risk_threshold:
        return RiskRating.MEDIUM, settings.medium_risk_recommendation
    return RiskRating.LOW, settings.low_risk_recommendation


def generate_risk_assessment(yearly_target: float, fte: float, config: CompensationConfig,
                             settings: Optional[RiskSettings] = None) -> RiskAssessment:
    """
    Rate a payout structure on compensation as a share of profit.

    Args:
        yearly_target: Yearly revenue target in euros
        fte: Full-time equivalent in [0, 1]
        config: Payout structure
        settings: Scenario and threshold overrides

    Returns:
        RiskAssessment with the three scenarios, rating and recommendation
    """
    yearly_target = ensure_number(yearly_target, "yearly_target")
    fte = validate_fte(fte)
    settings = settings or RiskSettings()

    low = _scenario(settings.low_achievement_pct, yearly_target, fte, config, settings)
    target = _scenario(settings.target_achievement_pct, yearly_target, fte, config, settings)
    high = _scenario(settings.high_achievement_pct, yearly_target, fte, config, settings)

    rating, recommendation = rate_risk(
        target.payout_pct_of_profit, high.payout_pct_of_profit, settings
    )
    logger.debug(
        f"Risk for '{config.name}': {rating.value} "
        f"(target {target.payout_pct_of_profit:.1f}%, high {high.payout_pct_of_profit:.1f}%)"
    )

    return RiskAssessment(
        low=low,
        target=target,
        high=high,
        risk_rating=rating,
        recommendation=recommendation,
    )


def risk_payout_ladder(fte: float, config: CompensationConfig,
                       levels: Sequence[float] = RISK_LADDER_LEVELS,
                       settings: Optional[RiskSettings] = None) -> Dict[float, float]:
    """Payout at each uniform achievement level, keyed by level."""
    fte = validate_fte(fte)
    settings = settings or RiskSettings()
    return {
        level: scenario_payout(level, fte, config, settings.base_monthly_sales)
        for level in levels
    }
