"""Builders and sample data shared by the test modules."""
import math

from payout_simulator.models.schemas import TierRule

GOLDEN_SALES = [20000, 22000, 25000, 28000, 30000, 32000, 35000, 28000, 30000, 32000, 35000, 40000]
GOLDEN_ACHIEVEMENTS = [95, 105, 110, 120]


def make_tiers(*rows):
    """Build TierRules from (lower, upper, value) rows; ``None`` upper is open-ended."""
    return tuple(
        TierRule(lower_bound=lower, upper_bound=math.inf if upper is None else upper, value=value)
        for lower, upper, value in rows
    )


def default_commission_tiers():
    return make_tiers((10000, 25000, 2), (25000, 40000, 4), (40000, None, 6))


def default_quarterly_tiers():
    return make_tiers(
        (90, 99, 1200), (100, 104, 1600), (105, 114, 2000), (115, 129, 2400), (130, None, 2800)
    )


def default_continuity_tiers():
    return make_tiers((100, 104, 400), (105, 114, 500), (115, 129, 600), (130, None, 750))
