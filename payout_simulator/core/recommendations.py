"""
Structure recommendations derived from philosophy metrics.

Each recommendation carries the concrete tier edits that implement it.
Applying recommendations never touches the source configuration; a new,
fully re-validated ``CompensationConfig`` is returned instead.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..exceptions import InvalidConfigurationError
from ..models.schemas import (
    CompensationConfig,
    ConfigChange,
    ElasticityPoint,
    GoalFocus,
    MetricChange,
    PerformanceProfile,
    PhilosophyMetrics,
    Recommendation,
    RecommendationImpact,
    TierSection,
)
from .elasticity import simulate_elasticity
from .philosophy import compute_philosophy_metrics, round_half_up
from .risk import RiskSettings, generate_risk_assessment

logger = logging.getLogger(__name__)

SIZE_OF_PRIZE_REVIEW_SCORE = 4
LOW_TARGET_MULTIPLE = 1.5
LOW_ABOVE_TARGET_SHARE = 30.0
LOW_BELOW_TARGET_SHARE = 20.0
HIGH_BELOW_TARGET_SHARE = 50.0
NEAR_MISS_REVIEW_SCORE = 4
PSYCH_DISTANCE_REVIEW_SCORE = 4
WIDE_GAP = 20.0
NARROW_GAP = 5.0

MAX_TOP_COMMISSION_RATE = 10.0
MIN_ENTRY_THRESHOLD = 70.0

_SECTION_FIELDS = {
    TierSection.COMMISSION: "commission_tiers",
    TierSection.QUARTERLY: "quarterly_tiers",
    TierSection.CONTINUITY: "continuity_tiers",
}
_TIER_ATTRIBUTES = ("lower_bound", "upper_bound", "value")


def _tier_change(section: TierSection, tiers, index: int, attribute: str,
                 new_value: float) -> ConfigChange:
    return ConfigChange(
        section=section,
        tier_index=index,
        attribute=attribute,
        old_value=getattr(tiers[index], attribute),
        new_value=new_value,
    )


def _matches_goal(recommendation: Recommendation, goal_focus: GoalFocus) -> bool:
    if goal_focus == GoalFocus.OVERALL:
        return True
    if goal_focus == GoalFocus.TARGET:
        return recommendation.type == "psychology" or "Target" in recommendation.title
    if goal_focus == GoalFocus.TOP_PERFORMERS:
        return recommendation.type == "sizeOfPrize" or (
            recommendation.type == "distribution" and "Above Target" in recommendation.title
        )
    if goal_focus == GoalFocus.BALANCE:
        return recommendation.type in ("distribution", "structure")
    return False


def generate_recommendations(metrics: PhilosophyMetrics, config: CompensationConfig,
                             goal_focus: Union[GoalFocus, str] = GoalFocus.OVERALL
                             ) -> List[Recommendation]:
    """
    Propose structure changes for the weakest philosophy dimensions.

    Args:
        metrics: Philosophy metrics of ``config``
        config: Payout structure the changes refer to
        goal_focus: ``overall``, ``target``, ``topPerformers`` or ``balance``

    Returns:
        Recommendations relevant to the goal, in rule order
    """
    try:
        goal_focus = GoalFocus(goal_focus)
    except ValueError:
        logger.error(f"Unknown goal focus: {goal_focus!r}")
        raise InvalidConfigurationError(f"unknown goal focus {goal_focus!r}", field="goal_focus")

    commission = config.commission_tiers
    quarterly = config.quarterly_tiers
    prize = metrics.size_of_prize
    distribution = metrics.distribution
    near_miss = metrics.psychology.near_miss
    psych_distance = metrics.psychology.psych_distance

    recommendations = []

    if prize.score <= SIZE_OF_PRIZE_REVIEW_SCORE and prize.target_multiple < LOW_TARGET_MULTIPLE:
        recommendations.append(Recommendation(
            title="Increase upside potential",
            impact="medium",
            reasoning=(
                f"The current model has limited upside with only a {prize.target_multiple:.1f}x "
                f"multiple from target to maximum payout. Increasing the commission rates and/or "
                f"bonuses for high achievement would create stronger incentives for top performance."
            ),
            type="sizeOfPrize",
            changes=(
                _tier_change(TierSection.COMMISSION, commission, 2, "value",
                             min(MAX_TOP_COMMISSION_RATE, commission[2].value * 1.33)),
                _tier_change(TierSection.QUARTERLY, quarterly, 4, "value",
                             quarterly[4].value * 1.25),
            ),
        ))

    if distribution.above_target_share < LOW_ABOVE_TARGET_SHARE:
        recommendations.append(Recommendation(
            title="Enhance above-target incentives",
            impact="medium",
            reasoning=(
                f"Only {distribution.above_target_share:.1f}% of potential compensation is "
                f"available above target, limiting motivation for exceptional performance. "
                f"Increasing rewards for achievements above 105% would create stronger incentives "
                f"for top performers."
            ),
            type="distribution",
            changes=(
                _tier_change(TierSection.QUARTERLY, quarterly, 3, "value", quarterly[3].value * 1.2),
                _tier_change(TierSection.QUARTERLY, quarterly, 4, "value", quarterly[4].value * 1.3),
            ),
        ))

    if distribution.below_target_share < LOW_BELOW_TARGET_SHARE:
        recommendations.append(Recommendation(
            title="Improve below-target support",
            impact="medium",
            reasoning=(
                f"Only {distribution.below_target_share:.1f}% of potential compensation is "
                f"available below target, creating high stress and potentially punitive "
                f"environment. Adding a lower tier commission and/or quarterly bonus would provide "
                f"better support for people having difficult periods."
            ),
            type="distribution",
            changes=(
                _tier_change(TierSection.QUARTERLY, quarterly, 0, "lower_bound",
                             max(MIN_ENTRY_THRESHOLD, quarterly[0].lower_bound - 15)),
                _tier_change(TierSection.QUARTERLY, quarterly, 0, "value", quarterly[0].value * 0.7),
            ),
        ))
    elif distribution.below_target_share > HIGH_BELOW_TARGET_SHARE:
        recommendations.append(Recommendation(
            title="Strengthen target achievement incentives",
            impact="high",
            reasoning=(
                f"{distribution.below_target_share:.1f}% of potential compensation is available "
                f"below target, which may reduce motivation to reach 100%. Shifting some "
                f"compensation from below-target to at-target would create stronger incentives to "
                f"reach the full goal."
            ),
            type="distribution",
            changes=(
                _tier_change(TierSection.QUARTERLY, quarterly, 0, "value", quarterly[0].value * 0.8),
                _tier_change(TierSection.QUARTERLY, quarterly, 1, "value", quarterly[1].value * 1.3),
            ),
        ))

    if near_miss.score <= NEAR_MISS_REVIEW_SCORE:
        recommendations.append(Recommendation(
            title="Enhance target achievement incentive",
            impact="high",
            reasoning=(
                f"The current payout increase at 100% achievement is only "
                f"{near_miss.target_jump_percentage:.1f}%, creating weak psychological tension. "
                f"Creating a significant but graduated increase around 100% would create a stronger "
                f"psychological incentive to reach target."
            ),
            type="psychology",
            changes=(
                _tier_change(TierSection.QUARTERLY, quarterly, 1, "lower_bound", 100.0),
                _tier_change(TierSection.QUARTERLY, quarterly, 1, "upper_bound", 102.0),
                _tier_change(TierSection.QUARTERLY, quarterly, 1, "value", quarterly[1].value * 1.25),
            ),
        ))

    if psych_distance.score <= PSYCH_DISTANCE_REVIEW_SCORE:
        avg_gap = psych_distance.avg_gap
        if avg_gap > WIDE_GAP:
            recommendations.append(Recommendation(
                title="Optimize threshold spacing",
                impact="medium",
                reasoning=(
                    f"The current average gap between thresholds ({avg_gap:.1f}%) is too wide, "
                    f"potentially making higher levels feel unattainable. Adding intermediate "
                    f"thresholds would create a more motivating ladder of achievement."
                ),
                type="psychology",
                changes=(
                    _tier_change(TierSection.QUARTERLY, quarterly, 2, "lower_bound", float(
                        round_half_up((quarterly[1].lower_bound + quarterly[2].lower_bound) / 2))),
                    _tier_change(TierSection.QUARTERLY, quarterly, 2, "upper_bound",
                                 quarterly[3].lower_bound - 1),
                    _tier_change(TierSection.QUARTERLY, quarterly, 2, "value", float(
                        round_half_up((quarterly[1].value + quarterly[3].value) / 2))),
                ),
            ))
        elif avg_gap < NARROW_GAP:
            recommendations.append(Recommendation(
                title="Optimize threshold spacing",
                impact="low",
                reasoning=(
                    f"The current average gap between thresholds ({avg_gap:.1f}%) is too narrow, "
                    f"potentially making threshold achievements feel trivial. Spacing thresholds "
                    f"further apart would create more meaningful achievement milestones."
                ),
                type="psychology",
                changes=(
                    _tier_change(TierSection.QUARTERLY, quarterly, 2, "lower_bound",
                                 quarterly[2].lower_bound + 5),
                    _tier_change(TierSection.QUARTERLY, quarterly, 3, "lower_bound",
                                 quarterly[3].lower_bound + 10),
                ),
            ))

    if not config.use_rolling_average:
        recommendations.append(Recommendation(
            title="Implement 3-month rolling average",
            impact="medium",
            reasoning=(
                "Using monthly sales data without averaging can lead to incentive for end-of-month "
                "or end-of-quarter sales manipulation. A 3-month rolling average would smooth out "
                "performance and reduce undesirable sales tactics."
            ),
            type="structure",
            changes=(
                ConfigChange(section=TierSection.ROLLING_AVERAGE, old_value=False, new_value=True),
            ),
        ))

    selected = [rec for rec in recommendations if _matches_goal(rec, goal_focus)]
    logger.debug(
        f"{len(selected)} of {len(recommendations)} recommendations match goal '{goal_focus.value}'"
    )
    return selected


def _apply_change(sections: Dict[str, List[dict]], update: Dict[str, object],
                  change: ConfigChange) -> None:
    if change.section == TierSection.ROLLING_AVERAGE:
        update["use_rolling_average"] = bool(change.new_value)
        return

    tiers = sections[_SECTION_FIELDS[change.section]]
    if change.tier_index is None or not 0 <= change.tier_index < len(tiers):
        logger.error(f"Change refers to a missing tier: {change}")
        raise InvalidConfigurationError(
            f"no tier {change.tier_index} in {change.section.value} tiers", field="changes"
        )
    if change.attribute not in _TIER_ATTRIBUTES:
        logger.error(f"Change refers to an unknown tier attribute: {change.attribute!r}")
        raise InvalidConfigurationError(
            f"unknown tier attribute {change.attribute!r}", field="changes"
        )
    tiers[change.tier_index][change.attribute] = change.new_value


def apply_recommendations(config: CompensationConfig,
                          recommendations: Iterable[Recommendation]) -> CompensationConfig:
    """
    Apply every change of every recommendation, in order, to a copy of ``config``.

    The combined result is validated once; intermediate states may be invalid.

    Raises:
        InvalidConfigurationError: If the resulting tiers break an invariant
    """
    sections = {
        field: [tier.model_dump() for tier in getattr(config, field)]
        for field in _SECTION_FIELDS.values()
    }
    update: Dict[str, object] = {}

    for recommendation in recommendations:
        for change in recommendation.changes:
            _apply_change(sections, update, change)

    update.update(sections)
    return config.with_changes(**update)


def apply_recommendation(config: CompensationConfig,
                         recommendation: Recommendation) -> CompensationConfig:
    return apply_recommendations(config, [recommendation])


# Headline metrics reported when a recommended structure replaces the current one
IMPACT_METRICS = (
    ("Target Payout (100%)", lambda metrics: metrics.size_of_prize.target_payout),
    ("Maximum Payout (200%)", lambda metrics: metrics.size_of_prize.max_potential),
    ("Jump at 100%", lambda metrics: metrics.psychology.near_miss.target_jump_percentage),
)


def metric_change(title: str, old_value: float, new_value: float) -> MetricChange:
    """Change between two values; the relative change is 0 when the old value is 0."""
    change = new_value - old_value
    return MetricChange(
        title=title,
        old_value=old_value,
        new_value=new_value,
        change=change,
        change_percentage=change / old_value * 100 if old_value else 0.0,
    )


def _profile_metrics(config: CompensationConfig, profile: PerformanceProfile,
                     base_salary: float, settings: Optional[RiskSettings]
                     ) -> Tuple[Tuple[ElasticityPoint, ...], PhilosophyMetrics]:
    curve = simulate_elasticity(
        profile.trajectory.quarterly_achievements,
        profile.trajectory.monthly_sales,
        profile.fte,
        config,
    )
    risk = generate_risk_assessment(profile.yearly_target, profile.fte, config, settings)
    metrics = compute_philosophy_metrics(
        curve, risk, base_salary, profile.yearly_target, config.continuity_threshold
    )
    return curve, metrics


def recommendation_impact(config: CompensationConfig,
                          recommendations: Iterable[Recommendation],
                          profile: PerformanceProfile, base_salary: float = 0.0,
                          settings: Optional[RiskSettings] = None) -> RecommendationImpact:
    """
    Re-simulate ``profile`` under the recommended structure and compare it
    with the current one.

    Args:
        config: Current payout structure
        recommendations: Recommendations to apply, in order
        profile: Performer both structures are simulated for
        base_salary: Yearly fixed salary, used for pay mix
        settings: Risk scenario overrides

    Returns:
        RecommendationImpact with the recommended config, the headline
        metric changes and both elasticity curves

    Raises:
        InvalidConfigurationError: If the recommended structure is invalid
    """
    recommended = apply_recommendations(config, recommendations)

    current_curve, current_metrics = _profile_metrics(config, profile, base_salary, settings)
    new_curve, new_metrics = _profile_metrics(recommended, profile, base_salary, settings)

    changes = tuple(
        metric_change(title, value_of(current_metrics), value_of(new_metrics))
        for title, value_of in IMPACT_METRICS
    )
    logger.info(
        f"Recommended structure for '{config.name}' moves target payout by "
        f"{changes[0].change_percentage:+.1f}%"
    )

    return RecommendationImpact(
        recommended_config=recommended,
        metrics=changes,
        current_elasticity=current_curve,
        recommended_elasticity=new_curve,
    )
