"""
Compensation philosophy scoring.

Scores a payout structure on four dimensions (size of prize, reward
distribution, near-miss tension and threshold spacing) from its elasticity
curve. Every score starts at a neutral 5, moves by fixed band deltas and is
clamped to 1..10.
"""

import logging
import math
from typing import List, Sequence, Tuple

from ..models.schemas import (
    DistributionMetrics,
    ElasticityPoint,
    NearMissMetrics,
    PayMixMetrics,
    PayoutJump,
    PhilosophyMetrics,
    PsychDistanceMetrics,
    PsychologyMetrics,
    RiskAssessment,
    SizeOfPrizeMetrics,
    Typicality,
)
from ..utils.validation import ensure_number
from .elasticity import MAX_ACHIEVEMENT, point_at

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5
MIN_SCORE = 1
MAX_SCORE = 10

# Achievement levels whose spacing stands in for the threshold ladder
CANONICAL_THRESHOLD_POINTS = (90, 100, 105, 115, 130)

# Candidate jumps compared when looking for the strongest payout step
JUMP_CANDIDATES = ((95, 100), (99, 100), (100, 105), (105, 115))
TARGET_JUMP = (99, 100)

# Size of prize bands
TARGET_MULTIPLE_VERY_LOW = 1.5
TARGET_MULTIPLE_LOW = 2.0
TARGET_MULTIPLE_GOOD_MAX = 3.0
PAYOUT_PCT_OF_REVENUE_HIGH = 5.0
PAYOUT_PCT_OF_REVENUE_LOW = 1.0
PAYOUT_PCT_OF_REVENUE_GOOD = (1.5, 3.0)

# Distribution bands, shares of maximum payout in percent
BELOW_SHARE_VERY_LOW = 15.0
BELOW_SHARE_LOW = 25.0
BELOW_SHARE_HIGH = 50.0
BELOW_SHARE_GOOD = (25.0, 40.0)
AT_SHARE_LOW = 10.0
AT_SHARE_GOOD = (15.0, 25.0)
ABOVE_SHARE_VERY_LOW = 30.0
ABOVE_SHARE_LOW = 40.0
ABOVE_SHARE_GOOD = (40.0, 60.0)

# Near-miss bands, relative payout jump from 99% to 100% in percent
TARGET_JUMP_STRONG = 15.0
TARGET_JUMP_GOOD = 10.0
TARGET_JUMP_WEAK = 5.0

# Psychological distance bands, average threshold gap in points
GAP_OPTIMAL = (10.0, 15.0)
GAP_VERY_NARROW = 5.0
GAP_NARROW = 10.0
GAP_VERY_WIDE = 25.0
GAP_WIDE = 15.0

# Benchmark ranges for typicality indicators
TYPICAL_TARGET_MULTIPLE = (2.0, 3.0)
TYPICAL_RELATIVE_SIZE = (1.0, 3.0)
TYPICAL_PAY_MIX = (15.0, 35.0)
TYPICAL_BELOW_SHARE = (20.0, 40.0)
TYPICAL_AT_SHARE = (10.0, 25.0)
TYPICAL_ABOVE_SHARE = (40.0, 60.0)
TYPICAL_TARGET_JUMP = (10.0, 20.0)

SIZE_OF_PRIZE_LABELS = ("Limited", "Moderate", "Substantial", "Exceptional")
DISTRIBUTION_LABELS = ("Imbalanced", "Somewhat Balanced", "Well Balanced", "Optimally Balanced")
PSYCHOLOGY_LABELS = ("Weak", "Moderate", "Effective", "Highly Effective")
NEAR_MISS_LABELS = ("Weak", "Moderate", "Strong", "Very Strong")
PSYCH_DISTANCE_LABELS = ("Poor", "Moderate", "Good", "Optimal")

SIZE_OF_PRIZE_DESCRIPTIONS = (
    "Limited overall compensation potential that may not strongly motivate exceptional performance",
    "Moderate compensation package that provides reasonable incentives for achievement",
    "Substantial compensation package with strong incentives for high performance",
    "Exceptional compensation potential that creates powerful incentives for outstanding performance",
)
DISTRIBUTION_DESCRIPTIONS = (
    "Imbalanced allocation between below-target, at-target, and above-target performance",
    "Somewhat balanced reward distribution across performance levels",
    "Well-balanced reward distribution that supports multiple performance scenarios",
    "Optimally balanced distribution that creates the perfect tension between support and stretch",
)
PSYCHOLOGY_DESCRIPTIONS = (
    "Limited use of psychological motivators to drive desired behaviors",
    "Moderate implementation of behavioral psychology principles",
    "Effective use of psychological mechanisms to drive target achievement",
    "Sophisticated implementation of behavioral psychology principles for maximum motivation",
)

# Upper score of each label band; anything above the last is the top band
LABEL_BANDS = (3, 5, 7)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def clamp_score(score: float) -> int:
    return int(max(MIN_SCORE, min(MAX_SCORE, score)))


def band_text(score: int, texts: Sequence[str]) -> str:
    """Pick the label or description for ``score`` from a four-band table."""
    for index, upper in enumerate(LABEL_BANDS):
        if score <= upper:
            return texts[index]
    return texts[-1]


def typicality(value: float, bounds: Tuple[float, float]) -> Typicality:
    lower, upper = bounds
    if value < lower:
        return Typicality.BELOW
    if value > upper:
        return Typicality.ABOVE
    return Typicality.TYPICAL


def _within(value: float, bounds: Tuple[float, float]) -> bool:
    return bounds[0] <= value <= bounds[1]


def _safe_pct(numerator: float, denominator: float) -> float:
    return numerator / denominator * 100 if denominator > 0 else 0.0


def score_size_of_prize(target_multiple: float, target_payout_percentage: float) -> int:
    score = NEUTRAL_SCORE

    if target_multiple < TARGET_MULTIPLE_VERY_LOW:
        score -= 2
    elif target_multiple < TARGET_MULTIPLE_LOW:
        score -= 1

    if TARGET_MULTIPLE_LOW <= target_multiple <= TARGET_MULTIPLE_GOOD_MAX:
        score += 2
    elif target_multiple > TARGET_MULTIPLE_GOOD_MAX:
        score += 1

    if target_payout_percentage > PAYOUT_PCT_OF_REVENUE_HIGH:
        score -= 1
    elif target_payout_percentage < PAYOUT_PCT_OF_REVENUE_LOW:
        score -= 1
    elif _within(target_payout_percentage, PAYOUT_PCT_OF_REVENUE_GOOD):
        score += 1

    return clamp_score(score)


def score_distribution(below_share: float, at_share: float, above_share: float) -> int:
    score = NEUTRAL_SCORE

    if below_share < BELOW_SHARE_VERY_LOW:
        score -= 2
    elif below_share < BELOW_SHARE_LOW:
        score -= 1
    elif below_share > BELOW_SHARE_HIGH:
        score -= 2
    elif _within(below_share, BELOW_SHARE_GOOD):
        score += 1

    if at_share < AT_SHARE_LOW:
        score -= 1
    elif _within(at_share, AT_SHARE_GOOD):
        score += 1

    if above_share < ABOVE_SHARE_VERY_LOW:
        score -= 2
    elif above_share < ABOVE_SHARE_LOW:
        score -= 1
    elif _within(above_share, ABOVE_SHARE_GOOD):
        score += 2

    return clamp_score(score)


def score_near_miss(target_jump_percentage: float, is_target_jump_primary: bool) -> int:
    score = NEUTRAL_SCORE

    if target_jump_percentage >= TARGET_JUMP_STRONG:
        score += 2
    elif target_jump_percentage >= TARGET_JUMP_GOOD:
        score += 1
    elif target_jump_percentage < TARGET_JUMP_WEAK:
        score -= 2
    else:
        score -= 1

    if is_target_jump_primary:
        score += 1

    return clamp_score(score)


def score_psych_distance(avg_gap: float) -> int:
    score = NEUTRAL_SCORE

    if _within(avg_gap, GAP_OPTIMAL):
        score += 2
    elif avg_gap < GAP_VERY_NARROW:
        score -= 2
    elif avg_gap < GAP_NARROW:
        score -= 1
    elif avg_gap > GAP_VERY_WIDE:
        score -= 2
    elif avg_gap > GAP_WIDE:
        score -= 1

    return clamp_score(score)


def threshold_gaps(points: Sequence[float] = CANONICAL_THRESHOLD_POINTS) -> List[float]:
    return [float(current - previous) for previous, current in zip(points, points[1:])]


def payout_jumps(curve: Sequence[ElasticityPoint]) -> List[PayoutJump]:
    """Candidate jumps, largest change first; equal changes keep candidate order."""
    jumps = []
    for from_pct, to_pct in JUMP_CANDIDATES:
        from_value = point_at(curve, from_pct).total_excluding_continuity
        change = point_at(curve, to_pct).total_excluding_continuity - from_value
        jumps.append(PayoutJump(
            from_pct=from_pct,
            to_pct=to_pct,
            change=change,
            change_percentage=_safe_pct(change, from_value),
        ))
    return sorted(jumps, key=lambda jump: -jump.change)


def compute_philosophy_metrics(elasticity_points: Sequence[ElasticityPoint],
                               risk_assessment: RiskAssessment, base_salary: float,
                               yearly_target: float,
                               continuity_threshold: float) -> PhilosophyMetrics:
    """
    Score a payout structure from its elasticity curve.

    Args:
        elasticity_points: Full 0-200% curve from ``simulate_elasticity``
        risk_assessment: Risk assessment of the same structure
        base_salary: Yearly fixed salary, used for pay mix
        yearly_target: Yearly revenue target in euros
        continuity_threshold: Echoed for reporting

    Returns:
        PhilosophyMetrics with scores, labels, typicality and radar data
    """
    base_salary = ensure_number(base_salary, "base_salary")
    yearly_target = ensure_number(yearly_target, "yearly_target")
    continuity_threshold = ensure_number(continuity_threshold, "continuity_threshold")

    def payout(achievement: int) -> float:
        return point_at(elasticity_points, achievement).total_excluding_continuity

    payout_at_90 = payout(90)
    payout_at_99 = payout(99)
    target_payout = payout(100)
    max_potential = payout(MAX_ACHIEVEMENT)

    # Size of prize
    target_multiple = max_potential / target_payout if target_payout > 0 else 0.0
    target_payout_percentage = _safe_pct(target_payout, yearly_target)
    size_of_prize_score = score_size_of_prize(target_multiple, target_payout_percentage)

    # Distribution of potential below, at and above target
    below_share = _safe_pct(payout_at_90, max_potential)
    at_share = _safe_pct(target_payout - payout_at_90, max_potential)
    above_share = _safe_pct(max_potential - target_payout, max_potential)
    distribution_score = score_distribution(below_share, at_share, above_share)

    # Near-miss tension at target
    jumps = payout_jumps(elasticity_points)
    primary_jump = jumps[0]
    is_target_jump_primary = (primary_jump.from_pct, primary_jump.to_pct) == TARGET_JUMP
    target_jump = target_payout - payout_at_99
    target_jump_percentage = _safe_pct(target_jump, payout_at_99)
    near_miss_score = score_near_miss(target_jump_percentage, is_target_jump_primary)

    # Psychological distance between thresholds
    gaps = threshold_gaps()
    avg_gap = sum(gaps) / len(gaps) if gaps else 0.0
    psych_distance_score = score_psych_distance(avg_gap)

    psychology_score = round_half_up((near_miss_score + psych_distance_score) / 2)

    pay_mix_ratio = _safe_pct(target_payout, base_salary)

    size_of_prize = SizeOfPrizeMetrics(
        score=size_of_prize_score,
        label=band_text(size_of_prize_score, SIZE_OF_PRIZE_LABELS),
        description=band_text(size_of_prize_score, SIZE_OF_PRIZE_DESCRIPTIONS),
        max_potential=max_potential,
        target_payout=target_payout,
        target_multiple=target_multiple,
        relative_size_percentage=target_payout_percentage,
        target_multiple_typicality=typicality(target_multiple, TYPICAL_TARGET_MULTIPLE),
        relative_size_typicality=typicality(target_payout_percentage, TYPICAL_RELATIVE_SIZE),
    )
    pay_mix = PayMixMetrics(
        base_salary=base_salary,
        target_variable=target_payout,
        target_total=base_salary + target_payout,
        ratio=pay_mix_ratio,
        typicality=typicality(pay_mix_ratio, TYPICAL_PAY_MIX),
    )
    distribution = DistributionMetrics(
        score=distribution_score,
        label=band_text(distribution_score, DISTRIBUTION_LABELS),
        description=band_text(distribution_score, DISTRIBUTION_DESCRIPTIONS),
        below_target_share=below_share,
        at_target_share=at_share,
        above_target_share=above_share,
        below_target_typicality=typicality(below_share, TYPICAL_BELOW_SHARE),
        at_target_typicality=typicality(at_share, TYPICAL_AT_SHARE),
        above_target_typicality=typicality(above_share, TYPICAL_ABOVE_SHARE),
    )
    psychology = PsychologyMetrics(
        score=psychology_score,
        label=band_text(psychology_score, PSYCHOLOGY_LABELS),
        description=band_text(psychology_score, PSYCHOLOGY_DESCRIPTIONS),
        near_miss=NearMissMetrics(
            score=near_miss_score,
            label=band_text(near_miss_score, NEAR_MISS_LABELS),
            target_jump=target_jump,
            target_jump_percentage=target_jump_percentage,
            target_jump_typicality=typicality(target_jump_percentage, TYPICAL_TARGET_JUMP),
            is_target_jump_primary=is_target_jump_primary,
            primary_jump=primary_jump,
            jumps=tuple(jumps),
        ),
        psych_distance=PsychDistanceMetrics(
            score=psych_distance_score,
            label=band_text(psych_distance_score, PSYCH_DISTANCE_LABELS),
            avg_gap=avg_gap,
            threshold_gaps=tuple(gaps),
        ),
        continuity_threshold=continuity_threshold,
    )

    metrics = PhilosophyMetrics(
        size_of_prize=size_of_prize,
        pay_mix=pay_mix,
        distribution=distribution,
        psychology=psychology,
        radar_data=(
            float(size_of_prize_score),
            min(10.0, below_share / 5),
            min(10.0, at_share / 3),
            min(10.0, above_share / 6),
            float(near_miss_score),
            float(psych_distance_score),
        ),
        risk_rating=risk_assessment.risk_rating,
        primary_improvement_area=primary_improvement_area(
            size_of_prize_score, distribution_score, psychology_score
        ),
    )
    logger.debug(
        f"Philosophy scores: prize={size_of_prize_score} distribution={distribution_score} "
        f"psychology={psychology_score}"
    )
    return metrics


def primary_improvement_area(size_of_prize_score: int, distribution_score: int,
                             psychology_score: int) -> str:
    """Dimension with the lowest score; ties resolve in dimension order."""
    lowest = min(size_of_prize_score, distribution_score, psychology_score)
    if lowest == size_of_prize_score:
        return "sizeOfPrize"
    if lowest == distribution_score:
        return "distribution"
    return "psychology"


IMPROVEMENT_AREA_TEXT = {
    "sizeOfPrize": "Enhancing the overall incentive potential would provide the greatest improvement.",
    "distribution": "Rebalancing the distribution of rewards across achievement levels would "
                    "optimize the model.",
    "psychology": "Strengthening the psychological mechanisms, especially around target "
                  "achievement, would make the model more effective.",
}


def executive_summary(metrics: PhilosophyMetrics) -> List[str]:
    """Plain-text summary lines, one per dimension plus the overall assessment."""
    prize = metrics.size_of_prize
    distribution = metrics.distribution
    near_miss = metrics.psychology.near_miss
    avg_gap = metrics.psychology.psych_distance.avg_gap

    if prize.score >= 7:
        prize_text = (
            f"With a maximum potential of {prize.target_multiple:.1f}x target, the model provides "
            f"strong incentives for high achievement. At target (100%), the variable compensation "
            f"represents {prize.relative_size_percentage:.1f}% of revenue."
        )
    elif prize.score <= 3:
        prize_text = (
            f"With only {prize.target_multiple:.1f}x target as maximum potential, the model may "
            f"not sufficiently motivate exceptional performance. At target, variable compensation "
            f"is {prize.relative_size_percentage:.1f}% of revenue."
        )
    else:
        prize_text = (
            f"The model offers a moderate {prize.target_multiple:.1f}x multiple from target to "
            f"maximum payout. At target, variable compensation is "
            f"{prize.relative_size_percentage:.1f}% of revenue."
        )

    if distribution.below_target_share < 20:
        distribution_text = (
            f"With only {distribution.below_target_share:.1f}% of potential below target, the "
            f"model creates high tension around achieving 100%."
        )
    elif distribution.below_target_share > BELOW_SHARE_HIGH:
        distribution_text = (
            f"With {distribution.below_target_share:.1f}% of potential below target, the model "
            f"provides strong support for underperformance periods."
        )
    else:
        distribution_text = (
            f"The model balances risk and reward with {distribution.below_target_share:.1f}% of "
            f"potential below target and {distribution.above_target_share:.1f}% above."
        )

    if near_miss.score <= 3:
        psychology_text = (
            f"The jump at target is relatively small ({near_miss.target_jump_percentage:.1f}% "
            f"increase), creating insufficient tension to reach exactly 100%."
        )
    elif near_miss.score >= 7:
        psychology_text = (
            f"The substantial jump at target ({near_miss.target_jump_percentage:.1f}% increase) "
            f"creates effective psychological tension to reach 100%."
        )
    else:
        psychology_text = (
            f"The moderate jump at target ({near_miss.target_jump_percentage:.1f}% increase) "
            f"provides reasonable motivation to achieve exactly 100%."
        )

    if avg_gap < 8:
        spacing = "quite narrow"
    elif avg_gap > 20:
        spacing = "quite wide"
    else:
        spacing = "reasonable"
    psychology_text += f" Threshold spacing is {spacing} ({avg_gap:.1f}% apart on average)."

    relative_size = prize.relative_size_percentage
    if relative_size > PAYOUT_PCT_OF_REVENUE_HIGH:
        financial_text = (
            f"At {relative_size:.1f}% of revenue, this model allocates a relatively high portion "
            f"of revenue to variable compensation (typical range is 1-3%)."
        )
    elif relative_size < PAYOUT_PCT_OF_REVENUE_LOW:
        financial_text = (
            f"At {relative_size:.1f}% of revenue, this model allocates a relatively low portion "
            f"of revenue to variable compensation (typical range is 1-3%)."
        )
    else:
        financial_text = (
            f"At {relative_size:.1f}% of revenue, this model falls within typical industry "
            f"ranges for variable compensation (1-3% of revenue)."
        )

    return [
        f"Overall Incentive: {prize.label} - {prize_text}",
        f"Reward Distribution: {distribution.label} - {distribution_text}",
        f"Psychological Mechanisms: {metrics.psychology.label} - {psychology_text}",
        f"Continuity bonuses require {metrics.psychology.continuity_threshold:.0f}% achievement "
        f"in consecutive quarters.",
        f"Primary Improvement Area: {IMPROVEMENT_AREA_TEXT[metrics.primary_improvement_area]}",
        f"Financial Perspective: {financial_text}",
        f"Risk Rating: {metrics.risk_rating.value}",
    ]
