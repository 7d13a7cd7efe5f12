"""Shared fixtures for the payout simulator tests."""
import pytest

from payout_simulator.models.schemas import (
    CompensationConfig,
    PerformanceProfile,
    PerformanceTrajectory,
)

from tests.helpers import (
    GOLDEN_ACHIEVEMENTS,
    GOLDEN_SALES,
    default_commission_tiers,
    default_continuity_tiers,
    default_quarterly_tiers,
)


@pytest.fixture
def default_config():
    return CompensationConfig(
        name="Balanced Model",
        commission_tiers=default_commission_tiers(),
        quarterly_tiers=default_quarterly_tiers(),
        continuity_threshold=100,
        continuity_tiers=default_continuity_tiers(),
        use_rolling_average=True,
        previous_months=(18000, 19000),
    )


@pytest.fixture
def flat_config(default_config):
    """Default tiers without commission smoothing."""
    return default_config.with_changes(name="Flat", use_rolling_average=False)


@pytest.fixture
def golden_trajectory():
    return PerformanceTrajectory(
        quarterly_achievements=GOLDEN_ACHIEVEMENTS, monthly_sales=GOLDEN_SALES
    )


@pytest.fixture
def golden_profile(golden_trajectory):
    return PerformanceProfile(
        name="Average Performer", fte=1.0, trajectory=golden_trajectory, yearly_target=357000
    )


@pytest.fixture
def flat_profile():
    """On-target performer with identical months."""
    return PerformanceProfile(
        name="Steady Performer",
        fte=1.0,
        trajectory=PerformanceTrajectory(
            quarterly_achievements=[100, 100, 100, 100], monthly_sales=[20000] * 12
        ),
        yearly_target=240000,
    )
