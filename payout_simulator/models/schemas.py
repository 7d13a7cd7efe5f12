# models/schemas.py - Pydantic models for the compensation engine
"""
Immutable value objects flowing through the calculation engine.

Inputs:
  TierRule, CompensationConfig, PerformanceTrajectory, PerformanceProfile
Outputs:
  PayoutBreakdown, ElasticityPoint, RiskAssessment, PhilosophyMetrics,
  KpiMetrics, Recommendation, ComparisonResult and the elasticity analyses

All models are frozen; a changed configuration is always a new instance.
"""
import logging
import math
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..exceptions import InvalidConfigurationError
from ..utils.validation import (
    ensure_number,
    validate_achievements,
    validate_fte,
    validate_monthly_sales,
    validate_seed_months,
    validate_sequence,
    validate_tier_set,
)

logger = logging.getLogger(__name__)

COMMISSION_TIER_COUNT = 3
QUARTERLY_TIER_COUNT = 5
CONTINUITY_TIER_COUNT = 4
MONTHS_PER_QUARTER = 3


class RiskRating(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class Typicality(str, Enum):
    BELOW = "below"
    TYPICAL = "typical"
    ABOVE = "above"


class GoalFocus(str, Enum):
    OVERALL = "overall"
    TARGET = "target"
    TOP_PERFORMERS = "topPerformers"
    BALANCE = "balance"


class TierSection(str, Enum):
    COMMISSION = "commission"
    QUARTERLY = "quarterly"
    CONTINUITY = "continuity"
    ROLLING_AVERAGE = "rollingAverage"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class _Input(_Frozen):
    """Caller-supplied model; construction failures surface as InvalidConfigurationError."""

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            field = data.get("name") or type(self).__name__
            logger.error(f"Invalid {type(self).__name__} '{field}': {e}")
            raise InvalidConfigurationError(str(e), field=field) from e


# Configuration inputs
class TierRule(_Input):
    """One range of an input value mapped to a rate or an amount.

    ``value`` is a percentage for commission tiers (``2.0`` means 2% of the
    sales inside the tier) and a flat euro amount for bonus tiers. A missing
    upper bound means the tier is open-ended.
    """
    lower_bound: float
    upper_bound: float = math.inf
    value: float

    @field_validator("upper_bound", mode="before")
    @classmethod
    def _open_ended_when_missing(cls, v):
        return math.inf if v is None else v

    @model_validator(mode="after")
    def _check_bounds(self):
        ensure_number(self.lower_bound, "lower_bound")
        ensure_number(self.upper_bound, "upper_bound", allow_infinite=True)
        ensure_number(self.value, "value")
        if self.upper_bound < self.lower_bound:
            raise ValueError(
                f"upper bound {self.upper_bound} is below lower bound {self.lower_bound}"
            )
        return self


class CompensationConfig(_Input):
    """Complete payout structure: tiers, continuity rule and commission smoothing."""
    name: str = "Custom"
    commission_tiers: Tuple[TierRule, ...]
    quarterly_tiers: Tuple[TierRule, ...]
    continuity_threshold: float
    continuity_tiers: Tuple[TierRule, ...]
    use_rolling_average: bool = True
    previous_months: Tuple[float, float] = (0.0, 0.0)
    # Carried for record round-trips; no calculation reads it.
    quarterly_weights: Tuple[float, float, float, float] = (25.0, 25.0, 25.0, 25.0)

    @field_validator("commission_tiers")
    @classmethod
    def _commission_tiers(cls, v):
        validate_tier_set(v, COMMISSION_TIER_COUNT, "commission_tiers", contiguous=True)
        return v

    @field_validator("quarterly_tiers")
    @classmethod
    def _quarterly_tiers(cls, v):
        validate_tier_set(v, QUARTERLY_TIER_COUNT, "quarterly_tiers", contiguous=False)
        return v

    @field_validator("continuity_tiers")
    @classmethod
    def _continuity_tiers(cls, v):
        validate_tier_set(v, CONTINUITY_TIER_COUNT, "continuity_tiers", contiguous=False)
        return v

    @field_validator("continuity_threshold")
    @classmethod
    def _continuity_threshold(cls, v):
        return ensure_number(v, "continuity_threshold")

    @field_validator("previous_months", mode="before")
    @classmethod
    def _previous_months(cls, v):
        return validate_seed_months(v)

    @field_validator("quarterly_weights", mode="before")
    @classmethod
    def _quarterly_weights(cls, v):
        return validate_sequence(v, 4, "quarterly_weights")

    def with_changes(self, **changes: Any) -> "CompensationConfig":
        """
        Return a re-validated copy with ``changes`` applied.

        Raises:
            InvalidConfigurationError: If the changed structure is invalid
        """
        data = self.model_dump()
        data.update(changes)
        return type(self)(**data)


class PerformanceTrajectory(_Input):
    """Quarterly achievement percentages and the matching 12 months of sales."""
    quarterly_achievements: Tuple[float, ...]
    monthly_sales: Tuple[float, ...]

    @field_validator("quarterly_achievements", mode="before")
    @classmethod
    def _achievements(cls, v):
        return validate_achievements(v)

    @field_validator("monthly_sales", mode="before")
    @classmethod
    def _sales(cls, v):
        return validate_monthly_sales(v)

    @staticmethod
    def quarter_of(month_index: int) -> int:
        return month_index // MONTHS_PER_QUARTER

    @property
    def yearly_revenue(self) -> float:
        return sum(self.monthly_sales)


class PerformanceProfile(_Input):
    """A named performer: FTE, trajectory and the yearly revenue target."""
    name: str = "Custom"
    fte: float
    trajectory: PerformanceTrajectory
    yearly_target: float

    @field_validator("fte", mode="before")
    @classmethod
    def _fte(cls, v):
        return validate_fte(v)

    @field_validator("yearly_target", mode="before")
    @classmethod
    def _yearly_target(cls, v):
        return ensure_number(v, "yearly_target")


# Calculation outputs
class PayoutBreakdown(_Frozen):
    commissions: Tuple[float, ...]
    quarterly_bonuses: Tuple[float, ...]
    continuity_bonuses: Tuple[float, ...]
    total_commission: float
    total_quarterly_bonus: float
    total_continuity_bonus: float
    total_payout: float
    avg_achievement: float
    yearly_revenue: float


class ElasticityPoint(_Frozen):
    """Payout at one uniform achievement level; continuity bonus excluded."""
    achievement: int = Field(ge=0, le=200)
    commission: float
    quarterly_bonus: float
    total_excluding_continuity: float


class RangeElasticity(_Frozen):
    name: str
    start: int
    end: int
    elasticity: float
    revenue_per_point: float
    roi: float


class RangeSlope(_Frozen):
    name: str
    start: int
    end: int
    slope: float


class ElasticityInsight(_Frozen):
    slopes: Tuple[RangeSlope, ...]
    steepest: Optional[RangeSlope] = None
    optimal_achievement: int
    recommended_min_target: int
    uses_rolling_average: bool


class RoiPoint(_Frozen):
    achievement: int
    revenue: float
    payout: float
    roi: float


class RoiAnalysis(_Frozen):
    points: Tuple[RoiPoint, ...]
    target_roi: float
    marginal_revenue: float
    marginal_compensation: float


class RiskScenario(_Frozen):
    achievement_pct: float
    payout: float
    revenue: float
    profit: float
    payout_pct_of_profit: float


class RiskAssessment(_Frozen):
    low: RiskScenario
    target: RiskScenario
    high: RiskScenario
    risk_rating: RiskRating
    recommendation: str

    @property
    def payout_percentages(self) -> Dict[str, float]:
        return {
            "lowRisk": self.low.payout_pct_of_profit,
            "target": self.target.payout_pct_of_profit,
            "highRisk": self.high.payout_pct_of_profit,
        }


class SizeOfPrizeMetrics(_Frozen):
    score: int
    label: str
    description: str
    max_potential: float
    target_payout: float
    target_multiple: float
    relative_size_percentage: float
    target_multiple_typicality: Typicality
    relative_size_typicality: Typicality


class PayMixMetrics(_Frozen):
    base_salary: float
    target_variable: float
    target_total: float
    ratio: float
    typicality: Typicality


class DistributionMetrics(_Frozen):
    score: int
    label: str
    description: str
    below_target_share: float
    at_target_share: float
    above_target_share: float
    below_target_typicality: Typicality
    at_target_typicality: Typicality
    above_target_typicality: Typicality


class PayoutJump(_Frozen):
    from_pct: int
    to_pct: int
    change: float
    change_percentage: float


class NearMissMetrics(_Frozen):
    score: int
    label: str
    target_jump: float
    target_jump_percentage: float
    target_jump_typicality: Typicality
    is_target_jump_primary: bool
    primary_jump: PayoutJump
    jumps: Tuple[PayoutJump, ...]


class PsychDistanceMetrics(_Frozen):
    score: int
    label: str
    avg_gap: float
    threshold_gaps: Tuple[float, ...]


class PsychologyMetrics(_Frozen):
    score: int
    label: str
    description: str
    near_miss: NearMissMetrics
    psych_distance: PsychDistanceMetrics
    continuity_threshold: float


class PhilosophyMetrics(_Frozen):
    size_of_prize: SizeOfPrizeMetrics
    pay_mix: PayMixMetrics
    distribution: DistributionMetrics
    psychology: PsychologyMetrics
    radar_data: Tuple[float, ...]
    risk_rating: RiskRating
    primary_improvement_area: str


class KpiMetrics(_Frozen):
    revenue_vs_target_pct: float
    payout_pct_of_revenue: float
    avg_monthly_commission: float
    quarterly_payouts: Tuple[float, ...]
    next_threshold: Optional[float] = None
    gap_to_next_threshold: Optional[float] = None


class ConfigChange(_Frozen):
    """One edit to a payout structure.

    ``tier_index`` refers to the declared order of the tier tuple in the
    section; ``attribute`` is ``lower_bound``, ``upper_bound`` or ``value``.
    Rolling-average changes carry neither.
    """
    section: TierSection
    tier_index: Optional[int] = None
    attribute: Optional[str] = None
    old_value: Any
    new_value: Any


class Recommendation(_Frozen):
    title: str
    impact: str
    reasoning: str
    type: str
    changes: Tuple[ConfigChange, ...]


class ComparisonResult(_Frozen):
    structure_name: str
    performance_name: str
    breakdown: PayoutBreakdown
    elasticity: Tuple[ElasticityPoint, ...]


class ElasticityComparison(_Frozen):
    structure_name: str
    elasticity: Tuple[ElasticityPoint, ...]


class MetricChange(_Frozen):
    title: str
    old_value: float
    new_value: float
    change: float
    change_percentage: float


class RecommendationImpact(_Frozen):
    """Headline metrics and elasticity curves before and after applying recommendations."""
    recommended_config: CompensationConfig
    metrics: Tuple[MetricChange, ...]
    current_elasticity: Tuple[ElasticityPoint, ...]
    recommended_elasticity: Tuple[ElasticityPoint, ...]
