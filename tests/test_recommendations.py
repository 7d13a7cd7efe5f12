"""Tests for recommendations, applying them and scenario comparison."""
import logging

import pytest

from payout_simulator.core.comparison import (
    COMPARISON_COLUMNS,
    ELASTICITY_COMPARISON_COLUMNS,
    compare_elasticity,
    comparison_frame,
    elasticity_comparison_frame,
    run_comparison,
)
from payout_simulator.core.elasticity import simulate_elasticity
from payout_simulator.core.philosophy import compute_philosophy_metrics
from payout_simulator.core.recommendations import (
    apply_recommendation,
    apply_recommendations,
    generate_recommendations,
    metric_change,
    recommendation_impact,
)
from payout_simulator.core.risk import generate_risk_assessment
from payout_simulator.exceptions import InvalidConfigurationError
from payout_simulator.models.schemas import (
    ConfigChange,
    GoalFocus,
    Recommendation,
    TierSection,
)


@pytest.fixture
def flat_metrics(flat_config):
    curve = simulate_elasticity([100] * 4, [20000] * 12, 1.0, flat_config)
    risk = generate_risk_assessment(240000, 1.0, flat_config)
    return compute_philosophy_metrics(curve, risk, 50000, 240000, 100)


def _with_near_miss(metrics, **update):
    near_miss = metrics.psychology.near_miss.model_copy(update=update)
    psychology = metrics.psychology.model_copy(update={"near_miss": near_miss})
    return metrics.model_copy(update={"psychology": psychology})


def _with_psych_distance(metrics, **update):
    distance = metrics.psychology.psych_distance.model_copy(update=update)
    psychology = metrics.psychology.model_copy(update={"psych_distance": distance})
    return metrics.model_copy(update={"psychology": psychology})


def _with_distribution(metrics, **update):
    distribution = metrics.distribution.model_copy(update=update)
    return metrics.model_copy(update={"distribution": distribution})


class TestGenerateRecommendations:
    def test_healthy_structure_only_lacks_smoothing(self, flat_metrics, flat_config):
        recommendations = generate_recommendations(flat_metrics, flat_config)
        assert [r.title for r in recommendations] == ["Implement 3-month rolling average"]
        change = recommendations[0].changes[0]
        assert change.section == TierSection.ROLLING_AVERAGE
        assert change.new_value is True

    def test_smoothing_enabled_gives_nothing(self, flat_metrics, default_config):
        assert generate_recommendations(flat_metrics, default_config) == []

    def test_weak_near_miss(self, flat_metrics, default_config):
        metrics = _with_near_miss(flat_metrics, score=3, target_jump_percentage=4.0)
        [recommendation] = generate_recommendations(metrics, default_config)
        assert recommendation.type == "psychology"
        assert recommendation.impact == "high"
        assert [(c.tier_index, c.attribute, c.new_value) for c in recommendation.changes] == [
            (1, "lower_bound", 100.0), (1, "upper_bound", 102.0), (1, "value", 2000.0),
        ]
        assert recommendation.changes[2].old_value == 1600

    def test_small_upside(self, flat_metrics, default_config):
        prize = flat_metrics.size_of_prize.model_copy(update={"score": 3, "target_multiple": 1.2})
        metrics = flat_metrics.model_copy(update={"size_of_prize": prize})
        [recommendation] = generate_recommendations(metrics, default_config)
        assert recommendation.type == "sizeOfPrize"
        commission, quarterly = recommendation.changes
        assert commission.section == TierSection.COMMISSION
        assert commission.new_value == pytest.approx(7.98)
        assert quarterly.new_value == pytest.approx(3500)

    def test_top_commission_rate_is_capped(self, flat_metrics, default_config):
        prize = flat_metrics.size_of_prize.model_copy(update={"score": 3, "target_multiple": 1.2})
        metrics = flat_metrics.model_copy(update={"size_of_prize": prize})
        tiers = list(default_config.commission_tiers)
        tiers[2] = tiers[2].model_copy(update={"value": 9})
        config = default_config.with_changes(commission_tiers=tiers)
        [recommendation] = generate_recommendations(metrics, config)
        assert recommendation.changes[0].new_value == 10.0

    def test_below_target_share_rules_are_exclusive(self, flat_metrics, default_config):
        low = _with_distribution(flat_metrics, below_target_share=10.0)
        high = _with_distribution(flat_metrics, below_target_share=55.0)
        assert [r.title for r in generate_recommendations(low, default_config)] == [
            "Improve below-target support"
        ]
        assert [r.title for r in generate_recommendations(high, default_config)] == [
            "Strengthen target achievement incentives"
        ]

    def test_entry_threshold_floor(self, flat_metrics, default_config):
        metrics = _with_distribution(flat_metrics, below_target_share=10.0)
        [recommendation] = generate_recommendations(metrics, default_config)
        assert recommendation.changes[0].new_value == 75
        assert recommendation.changes[1].new_value == pytest.approx(840)

    def test_spacing_rules(self, flat_metrics, default_config):
        wide = _with_psych_distance(flat_metrics, score=3, avg_gap=25.0)
        narrow = _with_psych_distance(flat_metrics, score=3, avg_gap=4.0)
        middle = _with_psych_distance(flat_metrics, score=4, avg_gap=18.0)
        [wide_rec] = generate_recommendations(wide, default_config)
        assert [c.new_value for c in wide_rec.changes] == [103.0, 114, 2000.0]
        [narrow_rec] = generate_recommendations(narrow, default_config)
        assert narrow_rec.impact == "low"
        assert generate_recommendations(middle, default_config) == []

    def test_goal_focus_filters(self, flat_metrics, flat_config):
        metrics = _with_near_miss(
            _with_distribution(flat_metrics, above_target_share=20.0), score=3
        )
        everything = generate_recommendations(metrics, flat_config)
        assert [r.type for r in everything] == ["distribution", "psychology", "structure"]

        target = generate_recommendations(metrics, flat_config, GoalFocus.TARGET)
        assert [r.type for r in target] == ["psychology"]
        balance = generate_recommendations(metrics, flat_config, "balance")
        assert [r.type for r in balance] == ["distribution", "structure"]
        top = generate_recommendations(metrics, flat_config, "topPerformers")
        assert top == []

    def test_unknown_goal(self, flat_metrics, flat_config):
        with pytest.raises(InvalidConfigurationError):
            generate_recommendations(flat_metrics, flat_config, "everyone")


class TestApplyRecommendations:
    def test_apply_returns_new_config(self, flat_metrics, flat_config):
        [recommendation] = generate_recommendations(flat_metrics, flat_config)
        updated = apply_recommendation(flat_config, recommendation)
        assert updated.use_rolling_average is True
        assert flat_config.use_rolling_average is False
        assert updated.commission_tiers == flat_config.commission_tiers

    def test_apply_several(self, flat_metrics, default_config):
        metrics = _with_near_miss(
            _with_distribution(flat_metrics, above_target_share=20.0), score=3
        )
        updated = apply_recommendations(
            default_config, generate_recommendations(metrics, default_config)
        )
        quarterly = updated.quarterly_tiers
        assert (quarterly[1].lower_bound, quarterly[1].upper_bound) == (100, 102)
        assert quarterly[1].value == pytest.approx(2000)
        assert quarterly[3].value == pytest.approx(2880)
        assert quarterly[4].value == pytest.approx(3640)
        assert default_config.quarterly_tiers[4].value == 2800

    def test_invalid_result_is_rejected(self, flat_metrics, default_config):
        # Moving tier 2 down to 103 overlaps tier 1 (100-104)
        metrics = _with_psych_distance(flat_metrics, score=3, avg_gap=25.0)
        recommendations = generate_recommendations(metrics, default_config)
        with pytest.raises(InvalidConfigurationError):
            apply_recommendations(default_config, recommendations)

    def test_missing_tier_is_rejected(self, default_config):
        recommendation = Recommendation(
            title="Broken", impact="low", reasoning="", type="structure",
            changes=(ConfigChange(
                section=TierSection.QUARTERLY, tier_index=7, attribute="value",
                old_value=None, new_value=1,
            ),),
        )
        with pytest.raises(InvalidConfigurationError):
            apply_recommendation(default_config, recommendation)

    def test_unknown_attribute_is_rejected(self, default_config):
        recommendation = Recommendation(
            title="Broken", impact="low", reasoning="", type="structure",
            changes=(ConfigChange(
                section=TierSection.CONTINUITY, tier_index=0, attribute="rate",
                old_value=None, new_value=1,
            ),),
        )
        with pytest.raises(InvalidConfigurationError):
            apply_recommendation(default_config, recommendation)


class TestComparison:
    def test_structure_major_order(self, default_config, flat_config, golden_profile,
                                   flat_profile, caplog):
        caplog.set_level(logging.INFO, logger="payout_simulator")
        results = run_comparison([default_config, flat_config], [golden_profile, flat_profile])
        assert [(r.structure_name, r.performance_name) for r in results] == [
            ("Balanced Model", "Average Performer"),
            ("Balanced Model", "Steady Performer"),
            ("Flat", "Average Performer"),
            ("Flat", "Steady Performer"),
        ]
        assert round(results[0].breakdown.total_payout, 2) == 14060.00
        assert len(results[0].elasticity) == 201
        assert "Compared 2 structures across 2 profiles" in caplog.text

    def test_comparison_frame(self, default_config, golden_profile):
        frame = comparison_frame(run_comparison([default_config], [golden_profile]))
        assert list(frame.columns) == COMPARISON_COLUMNS
        row = frame.iloc[0]
        assert row["Structure"] == "Balanced Model"
        assert row["Avg Achievement"] == 107.5
        assert row["Continuity Bonus"] == pytest.approx(1100)

    def test_elasticity_comparison(self, default_config, flat_config, flat_profile):
        comparisons = compare_elasticity([default_config, flat_config], flat_profile)
        assert [c.structure_name for c in comparisons] == ["Balanced Model", "Flat"]

        frame = elasticity_comparison_frame(comparisons)
        assert list(frame.columns) == ELASTICITY_COMPARISON_COLUMNS
        flat_row = frame.iloc[1]
        assert flat_row["Target Payout (100%)"] == pytest.approx(8800)
        assert flat_row["High Payout (150%)"] == pytest.approx(17200)
        assert flat_row["Max Multiple"] == pytest.approx(2.5)

    def test_empty_inputs(self, default_config):
        assert run_comparison([default_config], []) == []
        assert comparison_frame([]).empty


class TestRecommendationImpact:
    def _near_miss_recommendations(self, flat_metrics, flat_config):
        metrics = _with_near_miss(flat_metrics, score=3)
        return generate_recommendations(metrics, flat_config, GoalFocus.TARGET)

    def test_headline_metrics(self, flat_metrics, flat_config, flat_profile, caplog):
        caplog.set_level(logging.INFO, logger="payout_simulator")
        recommendations = self._near_miss_recommendations(flat_metrics, flat_config)
        impact = recommendation_impact(flat_config, recommendations, flat_profile)

        target, maximum, jump = impact.metrics
        assert [m.title for m in impact.metrics] == [
            "Target Payout (100%)", "Maximum Payout (200%)", "Jump at 100%",
        ]
        assert (target.old_value, target.new_value) == (pytest.approx(8800), pytest.approx(10400))
        assert target.change == pytest.approx(1600)
        assert target.change_percentage == pytest.approx(1600 / 8800 * 100)

        assert maximum.old_value == pytest.approx(22000)
        assert maximum.change == pytest.approx(0)
        assert maximum.change_percentage == pytest.approx(0)

        old_jump = (8800 - 7152) / 7152 * 100
        new_jump = (10400 - 7152) / 7152 * 100
        assert jump.old_value == pytest.approx(old_jump)
        assert jump.new_value == pytest.approx(new_jump)
        assert jump.change_percentage == pytest.approx((new_jump - old_jump) / old_jump * 100)
        assert "moves target payout by +18.2%" in caplog.text

    def test_curves_and_recommended_config(self, flat_metrics, flat_config, flat_profile):
        recommendations = self._near_miss_recommendations(flat_metrics, flat_config)
        impact = recommendation_impact(flat_config, recommendations, flat_profile)

        assert len(impact.current_elasticity) == 201
        assert len(impact.recommended_elasticity) == 201
        assert impact.current_elasticity[100].total_excluding_continuity == pytest.approx(8800)
        assert impact.recommended_elasticity[100].total_excluding_continuity == pytest.approx(10400)
        assert impact.recommended_elasticity[99].total_excluding_continuity == pytest.approx(7152)
        tier = impact.recommended_config.quarterly_tiers[1]
        assert (tier.lower_bound, tier.upper_bound, tier.value) == (100, 102, pytest.approx(2000))
        assert flat_config.quarterly_tiers[1].value == 1600

    def test_no_recommendations_changes_nothing(self, flat_config, flat_profile):
        impact = recommendation_impact(flat_config, [], flat_profile)
        assert impact.recommended_config == flat_config
        assert all(m.change == 0 and m.change_percentage == 0 for m in impact.metrics)
        assert impact.current_elasticity == impact.recommended_elasticity

    def test_invalid_recommended_structure(self, flat_metrics, default_config, flat_profile):
        metrics = _with_psych_distance(flat_metrics, score=3, avg_gap=25.0)
        recommendations = generate_recommendations(metrics, default_config)
        with pytest.raises(InvalidConfigurationError):
            recommendation_impact(default_config, recommendations, flat_profile)

    def test_change_from_zero_has_no_percentage(self):
        change = metric_change("Jump at 100%", 0, 5)
        assert change.change == 5
        assert change.change_percentage == 0
        assert metric_change("x", 200, 150).change_percentage == pytest.approx(-25)
