"""
Scenario comparison across payout structures and performance profiles.
"""

import logging
from typing import List, Optional, Sequence

import pandas as pd

from ..models.schemas import (
    CompensationConfig,
    ComparisonResult,
    ElasticityComparison,
    PerformanceProfile,
)
from ..utils.logging_utils import LoggerAdapter, correlation_scope
from .elasticity import MAX_ACHIEVEMENT, point_at, simulate_elasticity
from .payout import compute_profile_payout

logger = logging.getLogger(__name__)

COMPARISON_COLUMNS = [
    "Structure",
    "Performance",
    "Avg Achievement",
    "Total Payout",
    "Commission",
    "Quarterly Bonus",
    "Continuity Bonus",
]

ELASTICITY_COMPARISON_COLUMNS = [
    "Structure",
    "Target Payout (100%)",
    "High Payout (150%)",
    "Max Multiple",
]


def run_comparison(structures: Sequence[CompensationConfig],
                   profiles: Sequence[PerformanceProfile],
                   correlation_id: Optional[str] = None) -> List[ComparisonResult]:
    """
    Compute payout and elasticity for every structure/profile pair.

    Results are ordered structure-major, profile-minor. Records this module
    logs during the run share one correlation id (generated when not given).
    """
    results = []
    with correlation_scope(logger, correlation_id) as run_id:
        for structure in structures:
            for profile in profiles:
                run_logger = LoggerAdapter(
                    logger, {"structure": structure.name, "profile": profile.name}
                )
                breakdown = compute_profile_payout(profile, structure)
                elasticity = simulate_elasticity(
                    profile.trajectory.quarterly_achievements,
                    profile.trajectory.monthly_sales,
                    profile.fte,
                    structure,
                )
                run_logger.debug(f"Total payout {breakdown.total_payout:.2f}")
                results.append(ComparisonResult(
                    structure_name=structure.name,
                    performance_name=profile.name,
                    breakdown=breakdown,
                    elasticity=elasticity,
                ))

        logger.info(
            f"Compared {len(structures)} structures across {len(profiles)} profiles"
            f" (run {run_id})"
        )
    return results


def compare_elasticity(structures: Sequence[CompensationConfig],
                       profile: PerformanceProfile) -> List[ElasticityComparison]:
    """One elasticity curve per structure, all for the same performer."""
    return [
        ElasticityComparison(
            structure_name=structure.name,
            elasticity=simulate_elasticity(
                profile.trajectory.quarterly_achievements,
                profile.trajectory.monthly_sales,
                profile.fte,
                structure,
            ),
        )
        for structure in structures
    ]


def comparison_frame(results: Sequence[ComparisonResult]) -> pd.DataFrame:
    rows = [
        [
            result.structure_name,
            result.performance_name,
            result.breakdown.avg_achievement,
            result.breakdown.total_payout,
            result.breakdown.total_commission,
            result.breakdown.total_quarterly_bonus,
            result.breakdown.total_continuity_bonus,
        ]
        for result in results
    ]
    return pd.DataFrame(rows, columns=COMPARISON_COLUMNS)


def elasticity_comparison_frame(comparisons: Sequence[ElasticityComparison]) -> pd.DataFrame:
    """Target, high and maximum payout per structure, with the max-to-target multiple."""
    rows = []
    for comparison in comparisons:
        payout_at_100 = point_at(comparison.elasticity, 100).total_excluding_continuity
        payout_at_150 = point_at(comparison.elasticity, 150).total_excluding_continuity
        max_payout = point_at(comparison.elasticity, MAX_ACHIEVEMENT).total_excluding_continuity
        rows.append([
            comparison.structure_name,
            payout_at_100,
            payout_at_150,
            max_payout / payout_at_100 if payout_at_100 > 0 else 0.0,
        ])
    return pd.DataFrame(rows, columns=ELASTICITY_COMPARISON_COLUMNS)
