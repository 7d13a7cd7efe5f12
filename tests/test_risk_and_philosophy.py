"""Tests for risk assessment, philosophy scoring and KPIs."""
import pytest

from payout_simulator.core.elasticity import simulate_elasticity
from payout_simulator.core.kpis import compute_kpis
from payout_simulator.core.payout import compute_total_payout
from payout_simulator.core.philosophy import (
    CANONICAL_THRESHOLD_POINTS,
    band_text,
    compute_philosophy_metrics,
    executive_summary,
    primary_improvement_area,
    round_half_up,
    score_distribution,
    score_near_miss,
    score_psych_distance,
    score_size_of_prize,
    typicality,
    SIZE_OF_PRIZE_LABELS,
)
from payout_simulator.core.risk import (
    HIGH_RISK_RECOMMENDATION,
    LOW_RISK_RECOMMENDATION,
    RiskSettings,
    generate_risk_assessment,
    rate_risk,
    risk_payout_ladder,
)
from payout_simulator.models.schemas import RiskRating, Typicality

from tests.helpers import GOLDEN_ACHIEVEMENTS, GOLDEN_SALES, make_tiers


def _boundary_config(config, top_bonus):
    """Commission and continuity switched off; only quarterly bonuses pay."""
    return config.with_changes(
        commission_tiers=make_tiers((10000, 25000, 0), (25000, 40000, 0), (40000, None, 0)),
        continuity_tiers=make_tiers((100, 104, 0), (105, 114, 0), (115, 129, 0), (130, None, 0)),
        quarterly_tiers=make_tiers(
            (90, 99, 1000), (100, 104, 7000), (105, 114, 8000), (115, 129, 9000),
            (130, None, top_bonus),
        ),
    )


class TestRiskAssessment:
    def test_default_structure_is_low_risk(self, default_config):
        risk = generate_risk_assessment(240000, 1.0, default_config)
        assert risk.target.payout == pytest.approx(9973.33, abs=0.01)
        assert risk.high.payout == pytest.approx(19050)
        assert risk.low.payout == pytest.approx(1493.33, abs=0.01)
        assert risk.target.payout_pct_of_profit == pytest.approx(13.85, abs=0.01)
        assert risk.high.payout_pct_of_profit == pytest.approx(17.64, abs=0.01)
        assert risk.risk_rating == RiskRating.LOW
        assert risk.recommendation == LOW_RISK_RECOMMENDATION

    def test_scenario_revenue_and_profit(self, default_config):
        risk = generate_risk_assessment(240000, 1.0, default_config)
        assert risk.high.revenue == pytest.approx(360000)
        assert risk.high.profit == pytest.approx(108000)
        assert set(risk.payout_percentages) == {"lowRisk", "target", "highRisk"}

    def test_exactly_thirty_percent_is_not_high(self, default_config):
        risk = generate_risk_assessment(400000, 1.0, _boundary_config(default_config, 13500))
        assert risk.high.payout_pct_of_profit == pytest.approx(30.0)
        assert risk.risk_rating == RiskRating.MEDIUM

    def test_above_thirty_percent_is_high(self, default_config):
        risk = generate_risk_assessment(400000, 1.0, _boundary_config(default_config, 13600))
        assert risk.risk_rating == RiskRating.HIGH
        assert risk.recommendation == HIGH_RISK_RECOMMENDATION

    def test_rating_thresholds_are_strict(self):
        assert rate_risk(20.0, 30.0)[0] == RiskRating.LOW
        assert rate_risk(20.01, 30.0)[0] == RiskRating.MEDIUM
        assert rate_risk(0.0, 30.01)[0] == RiskRating.HIGH

    def test_zero_target_gives_zero_ratios(self, default_config):
        risk = generate_risk_assessment(0, 1.0, default_config)
        assert risk.target.payout_pct_of_profit == 0
        assert risk.risk_rating == RiskRating.LOW

    def test_settings_override(self, default_config):
        settings = RiskSettings(profit_margin=0.05)
        risk = generate_risk_assessment(240000, 1.0, default_config, settings)
        assert risk.risk_rating == RiskRating.HIGH

    def test_payout_ladder(self, default_config):
        ladder = risk_payout_ladder(1.0, default_config)
        assert list(ladder) == [80, 90, 100, 110, 120, 150]
        assert ladder[100] == pytest.approx(9973.33, abs=0.01)
        values = list(ladder.values())
        assert values == sorted(values)


class TestScoringBands:
    def test_round_half_up(self):
        assert round_half_up(6.5) == 7
        assert round_half_up(5.5) == 6
        assert round_half_up(6.0) == 6

    def test_size_of_prize(self):
        assert score_size_of_prize(1.49, 2.0) == 4
        assert score_size_of_prize(2.0, 1.5) == 8
        assert score_size_of_prize(3.0, 3.0) == 8
        assert score_size_of_prize(3.5, 6.0) == 5
        assert score_size_of_prize(1.9, 0.5) == 3

    def test_distribution_clamps_to_one(self):
        assert score_distribution(10, 5, 20) == 1

    def test_distribution_best_case(self):
        assert score_distribution(30, 20, 50) == 9

    def test_near_miss(self):
        assert score_near_miss(15, True) == 8
        assert score_near_miss(10, False) == 6
        assert score_near_miss(5, False) == 4
        assert score_near_miss(4.99, False) == 3

    def test_psych_distance(self):
        assert score_psych_distance(10) == 7
        assert score_psych_distance(15) == 7
        assert score_psych_distance(4) == 3
        assert score_psych_distance(7) == 4
        assert score_psych_distance(20) == 4
        assert score_psych_distance(30) == 3

    def test_labels(self):
        assert [band_text(s, SIZE_OF_PRIZE_LABELS) for s in (1, 3, 4, 5, 6, 7, 8, 10)] == [
            "Limited", "Limited", "Moderate", "Moderate",
            "Substantial", "Substantial", "Exceptional", "Exceptional",
        ]

    def test_typicality(self):
        assert typicality(1.9, (2, 3)) == Typicality.BELOW
        assert typicality(2, (2, 3)) == Typicality.TYPICAL
        assert typicality(3.1, (2, 3)) == Typicality.ABOVE

    def test_primary_improvement_area_ties_in_dimension_order(self):
        assert primary_improvement_area(5, 5, 5) == "sizeOfPrize"
        assert primary_improvement_area(6, 4, 4) == "distribution"
        assert primary_improvement_area(6, 6, 2) == "psychology"


class TestPhilosophyMetrics:
    @pytest.fixture
    def metrics(self, flat_config):
        curve = simulate_elasticity([100] * 4, [20000] * 12, 1.0, flat_config)
        risk = generate_risk_assessment(240000, 1.0, flat_config)
        return compute_philosophy_metrics(curve, risk, 50000, 240000, 100)

    def test_size_of_prize(self, metrics):
        prize = metrics.size_of_prize
        assert prize.target_payout == pytest.approx(8800)
        assert prize.max_potential == pytest.approx(22000)
        assert prize.target_multiple == pytest.approx(2.5)
        assert prize.score == 7
        assert prize.label == "Substantial"

    def test_near_miss(self, metrics):
        near_miss = metrics.psychology.near_miss
        assert near_miss.target_jump == pytest.approx(1648)
        assert near_miss.target_jump_percentage == pytest.approx(23.04, abs=0.01)
        assert (near_miss.primary_jump.from_pct, near_miss.primary_jump.to_pct) == (105, 115)
        assert near_miss.is_target_jump_primary is False
        assert near_miss.score == 7

    def test_psych_distance_uses_canonical_points(self, metrics):
        distance = metrics.psychology.psych_distance
        assert CANONICAL_THRESHOLD_POINTS == (90, 100, 105, 115, 130)
        assert distance.threshold_gaps == (10, 5, 10, 15)
        assert distance.avg_gap == 10
        assert distance.score == 7
        assert metrics.psychology.score == 7
        assert metrics.psychology.label == "Effective"

    def test_distribution_shares(self, metrics):
        distribution = metrics.distribution
        assert distribution.below_target_share == pytest.approx(6720 / 22000 * 100)
        assert distribution.at_target_share == pytest.approx(2080 / 22000 * 100)
        assert distribution.above_target_share == pytest.approx(60)
        total = (distribution.below_target_share + distribution.at_target_share
                 + distribution.above_target_share)
        assert total == pytest.approx(100)

    def test_pay_mix_and_echoes(self, metrics):
        assert metrics.pay_mix.ratio == pytest.approx(8800 / 50000 * 100)
        assert metrics.pay_mix.target_total == pytest.approx(58800)
        assert metrics.psychology.continuity_threshold == 100
        assert metrics.risk_rating == RiskRating.LOW

    def test_radar_data(self, metrics):
        assert len(metrics.radar_data) == 6
        assert metrics.radar_data[0] == 7
        assert all(0 <= value <= 10 for value in metrics.radar_data)

    def test_larger_target_improves_relative_size(self, flat_config):
        curve = simulate_elasticity([100] * 4, [20000] * 12, 1.0, flat_config)
        risk = generate_risk_assessment(400000, 1.0, flat_config)
        metrics = compute_philosophy_metrics(curve, risk, 50000, 400000, 100)
        assert metrics.size_of_prize.score == 8

    def test_zero_curve_falls_back_to_zero(self, flat_config):
        curve = simulate_elasticity([100] * 4, [0] * 12, 0.0, flat_config)
        risk = generate_risk_assessment(0, 0.0, flat_config)
        metrics = compute_philosophy_metrics(curve, risk, 0, 0, 100)
        assert metrics.size_of_prize.target_multiple == 0
        assert metrics.distribution.below_target_share == 0
        assert metrics.psychology.near_miss.target_jump_percentage == 0
        assert metrics.pay_mix.ratio == 0

    def test_executive_summary(self, metrics):
        lines = executive_summary(metrics)
        assert lines[0].startswith("Overall Incentive: Substantial")
        assert any(line.startswith("Primary Improvement Area:") for line in lines)
        assert lines[-1] == "Risk Rating: Low"


class TestKpis:
    def test_golden_kpis(self, default_config):
        breakdown = compute_total_payout(GOLDEN_ACHIEVEMENTS, GOLDEN_SALES, 1.0, default_config)
        kpis = compute_kpis(breakdown, 357000, default_config.quarterly_tiers)
        assert kpis.revenue_vs_target_pct == pytest.approx(100)
        assert kpis.payout_pct_of_revenue == pytest.approx(14060 / 357000 * 100, abs=0.001)
        assert kpis.next_threshold == 115
        assert kpis.gap_to_next_threshold == pytest.approx(7.5)
        assert kpis.avg_monthly_commission == pytest.approx(5360 / 12, abs=0.01)
        assert sum(kpis.quarterly_payouts) == pytest.approx(breakdown.total_payout)

    def test_no_threshold_above_top_tier(self, default_config):
        breakdown = compute_total_payout([140] * 4, [30000] * 12, 1.0, default_config)
        kpis = compute_kpis(breakdown, 360000, default_config.quarterly_tiers)
        assert kpis.next_threshold is None
        assert kpis.gap_to_next_threshold is None

    def test_zero_divisors(self, default_config):
        breakdown = compute_total_payout([0] * 4, [0] * 12, 1.0, default_config)
        kpis = compute_kpis(breakdown, 0, default_config.quarterly_tiers)
        assert kpis.revenue_vs_target_pct == 0
        assert kpis.payout_pct_of_revenue == 0
