"""
Elasticity simulation: how total payout responds to achievement.

The performer's monthly sales are first normalised to what they would have
been at 100% achievement, then rescaled to every whole percentage from 0 to
200. Continuity bonuses depend on the quarter-to-quarter path rather than on
a single achievement level and are left out of every point.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from ..exceptions import AchievementOutOfRangeError
from ..models.schemas import (
    CompensationConfig,
    ElasticityInsight,
    ElasticityPoint,
    RangeElasticity,
    RangeSlope,
    RoiAnalysis,
    RoiPoint,
)
from ..utils.validation import (
    MONTHS_PER_YEAR,
    QUARTERS_PER_YEAR,
    validate_achievements,
    validate_fte,
    validate_monthly_sales,
)
from .bonuses import compute_quarterly_bonus
from .commission import compute_commission

logger = logging.getLogger(__name__)

MIN_ACHIEVEMENT = 0
MAX_ACHIEVEMENT = 200
TARGET_ACHIEVEMENT = 100

# (name, first achievement, last achievement), both ends inclusive
ACHIEVEMENT_RANGES: Tuple[Tuple[str, int, int], ...] = (
    ("0to40", 0, 40),
    ("41to70", 41, 70),
    ("71to89", 71, 89),
    ("90to99", 90, 99),
    ("100to104", 100, 104),
    ("105to114", 105, 114),
    ("115to129", 115, 129),
    ("130plus", 130, 200),
)

MIN_RECOMMENDED_TARGET = 90
ROI_STEP = 10


def normalize_monthly_sales(quarterly_achievements: Sequence[float],
                            monthly_sales: Sequence[float]) -> Tuple[float, ...]:
    """
    Rescale each month to 100% achievement using its own quarter.

    Months of a quarter with 0% achievement cannot be rescaled and are
    returned unchanged.
    """
    achievements = validate_achievements(quarterly_achievements)
    sales = validate_monthly_sales(monthly_sales)
    months_per_quarter = MONTHS_PER_YEAR // QUARTERS_PER_YEAR

    normalized = []
    for month_index, sales_value in enumerate(sales):
        factor = achievements[month_index // months_per_quarter] / 100
        normalized.append(sales_value / factor if factor > 0 else sales_value)
    return tuple(normalized)


def _point_for(achievement: int, normalized_sales: Sequence[float], fte: float,
               config: CompensationConfig) -> ElasticityPoint:
    scaled_sales = [sales_value * achievement / 100 for sales_value in normalized_sales]

    quarterly_bonus = (
        compute_quarterly_bonus(achievement, fte, config.quarterly_tiers) * QUARTERS_PER_YEAR
    )
    # Seed months keep their actual values; only the simulated year is rescaled.
    commission = sum(
        compute_commission(
            sales_value,
            fte,
            config.use_rolling_average,
            month_index,
            config.previous_months,
            scaled_sales,
            config.commission_tiers,
        )
        for month_index, sales_value in enumerate(scaled_sales)
    )

    return ElasticityPoint(
        achievement=achievement,
        commission=commission,
        quarterly_bonus=quarterly_bonus,
        total_excluding_continuity=commission + quarterly_bonus,
    )


def simulate_elasticity(quarterly_achievements: Sequence[float],
                        monthly_sales: Sequence[float], fte: float,
                        config: CompensationConfig) -> Tuple[ElasticityPoint, ...]:
    """
    Simulate payout at every whole achievement percentage from 0 to 200.

    Args:
        quarterly_achievements: Actual achievement for Q1-Q4
        monthly_sales: Actual sales for January-December
        fte: Full-time equivalent in [0, 1]
        config: Payout structure

    Returns:
        201 ElasticityPoints ordered by achievement
    """
    fte = validate_fte(fte)
    normalized_sales = normalize_monthly_sales(quarterly_achievements, monthly_sales)

    curve = tuple(
        _point_for(achievement, normalized_sales, fte, config)
        for achievement in range(MIN_ACHIEVEMENT, MAX_ACHIEVEMENT + 1)
    )
    logger.debug(f"Simulated {len(curve)} elasticity points for structure '{config.name}'")
    return curve


def point_at(curve: Sequence[ElasticityPoint], achievement: int) -> ElasticityPoint:
    """Return the point of ``curve`` at a whole achievement percentage."""
    if (isinstance(achievement, bool) or not isinstance(achievement, int)
            or not MIN_ACHIEVEMENT <= achievement <= MAX_ACHIEVEMENT):
        logger.error(f"Elasticity point requested outside 0-200: {achievement!r}")
        raise AchievementOutOfRangeError(achievement)

    for point in curve:
        if point.achievement == achievement:
            return point

    logger.error(f"Curve has no point at achievement {achievement}")
    raise AchievementOutOfRangeError(achievement)


def _range_slope(curve: Sequence[ElasticityPoint], start: int, end: int) -> Optional[float]:
    points = [point for point in curve if start <= point.achievement <= end]
    if len(points) < 2:
        return None

    first, last = points[0], points[-1]
    achievement_diff = last.achievement - first.achievement
    if achievement_diff <= 0:
        return 0.0
    return (last.total_excluding_continuity - first.total_excluding_continuity) / achievement_diff


def elasticity_per_range(curve: Sequence[ElasticityPoint],
                         yearly_target: float) -> List[RangeElasticity]:
    """
    Payout increase per achievement point in each named range, against the
    revenue one achievement point is worth.

    ``roi`` is revenue per point divided by payout per point; flat ranges
    and ranges with fewer than two points report 0.
    """
    results = []
    for name, start, end in ACHIEVEMENT_RANGES:
        slope = _range_slope(curve, start, end)
        if slope is None:
            results.append(RangeElasticity(
                name=name, start=start, end=end,
                elasticity=0.0, revenue_per_point=0.0, roi=0.0,
            ))
            continue

        revenue_per_point = yearly_target / 100
        roi = revenue_per_point / slope if revenue_per_point > 0 and slope != 0 else 0.0
        results.append(RangeElasticity(
            name=name, start=start, end=end,
            elasticity=slope, revenue_per_point=revenue_per_point, roi=roi,
        ))
    return results


def elasticity_insight(curve: Sequence[ElasticityPoint],
                       use_rolling_average: bool = False) -> ElasticityInsight:
    """Steepest range, most efficient achievement point and the minimum target to aim for."""
    slopes = []
    for name, start, end in ACHIEVEMENT_RANGES:
        slope = _range_slope(curve, start, end)
        if slope is not None:
            slopes.append(RangeSlope(name=name, start=start, end=end, slope=slope))

    # Later ranges win ties; nothing is steepest when every slope is negative.
    steepest = None
    steepest_slope = 0.0
    for range_slope in slopes:
        if range_slope.slope >= steepest_slope:
            steepest, steepest_slope = range_slope, range_slope.slope

    optimal_achievement = 0
    best_ratio = 0.0
    for point in curve:
        if point.achievement <= 0:
            continue
        ratio = point.total_excluding_continuity / point.achievement
        if ratio > best_ratio:
            optimal_achievement, best_ratio = point.achievement, ratio

    return ElasticityInsight(
        slopes=tuple(slopes),
        steepest=steepest,
        optimal_achievement=optimal_achievement,
        recommended_min_target=max(MIN_RECOMMENDED_TARGET, optimal_achievement),
        uses_rolling_average=use_rolling_average,
    )


def simulate_roi(curve: Sequence[ElasticityPoint], yearly_target: float) -> RoiAnalysis:
    """
    Revenue against payout every 10% from 0 to 200.

    Marginal revenue and compensation are taken across the 90-110% window
    around target, per achievement point.
    """
    points = []
    for achievement in range(MIN_ACHIEVEMENT, MAX_ACHIEVEMENT + 1, ROI_STEP):
        payout = point_at(curve, achievement).total_excluding_continuity
        revenue = yearly_target * achievement / 100
        points.append(RoiPoint(
            achievement=achievement,
            revenue=revenue,
            payout=payout,
            roi=revenue / payout if payout > 0 else 0.0,
        ))

    by_achievement = {point.achievement: point for point in points}
    target = by_achievement[TARGET_ACHIEVEMENT]
    before = by_achievement[TARGET_ACHIEVEMENT - ROI_STEP]
    after = by_achievement[TARGET_ACHIEVEMENT + ROI_STEP]
    window = 2 * ROI_STEP

    return RoiAnalysis(
        points=tuple(points),
        target_roi=target.roi,
        marginal_revenue=(after.revenue - before.revenue) / window,
        marginal_compensation=(after.payout - before.payout) / window,
    )


def elasticity_frame(curve: Sequence[ElasticityPoint]) -> pd.DataFrame:
    """Tabular view of an elasticity curve, one row per achievement level."""
    columns = ["achievement", "commission", "quarterly_bonus", "total_excluding_continuity"]
    return pd.DataFrame([point.model_dump() for point in curve], columns=columns)
