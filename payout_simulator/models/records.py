# models/records.py - Persisted payout structure and performance profile shapes
"""
camelCase record models matching the JSON written by the scenario manager,
plus converters to and from the engine's value objects.

JSON has no infinity, so an open-ended tier is stored with ``upTo: null``.
"""
import logging
import math
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import InvalidConfigurationError
from .schemas import CompensationConfig, PerformanceProfile, PerformanceTrajectory, TierRule

logger = logging.getLogger(__name__)


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CommissionThresholdRecord(_Record):
    threshold: float
    up_to: Optional[float] = Field(default=None, alias="upTo")
    percentage: float


class BonusThresholdRecord(_Record):
    threshold: float
    up_to: Optional[float] = Field(default=None, alias="upTo")
    bonus: float


class PayoutStructureRecord(_Record):
    """Stored payout structure"""
    name: str
    use_rolling_average: bool = Field(alias="useRollingAverage")
    previous_months: List[float] = Field(alias="previousMonths")
    commission_thresholds: List[CommissionThresholdRecord] = Field(alias="commissionThresholds")
    quarterly_thresholds: List[BonusThresholdRecord] = Field(alias="quarterlyThresholds")
    continuity_threshold: float = Field(alias="continuityThreshold")
    continuity_thresholds: List[BonusThresholdRecord] = Field(alias="continuityThresholds")
    quarterly_weights: List[float] = Field(
        default_factory=lambda: [25.0, 25.0, 25.0, 25.0], alias="quarterlyWeights"
    )


class PerformanceProfileRecord(_Record):
    """Stored performance profile"""
    name: str
    fte: float
    quarterly_achievements: List[float] = Field(alias="quarterlyAchievements")
    monthly_sales: List[float] = Field(alias="monthlySales")
    yearly_target: float = Field(alias="yearlyTarget")


def _stored_upper_bound(upper_bound: float) -> Optional[float]:
    return None if math.isinf(upper_bound) else upper_bound


def _parse(model, data: Any):
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid {model.__name__}: {e}")
        raise InvalidConfigurationError(str(e), field=model.__name__) from e


def structure_to_config(record: Union[PayoutStructureRecord, Mapping[str, Any]]
                        ) -> CompensationConfig:
    """
    Build a validated CompensationConfig from a stored payout structure.

    Raises:
        InvalidConfigurationError: If the record or the resulting tiers are invalid
    """
    record = _parse(PayoutStructureRecord, record)
    return CompensationConfig(
        name=record.name,
        commission_tiers=[
            TierRule(lower_bound=t.threshold, upper_bound=t.up_to, value=t.percentage)
            for t in record.commission_thresholds
        ],
        quarterly_tiers=[
            TierRule(lower_bound=t.threshold, upper_bound=t.up_to, value=t.bonus)
            for t in record.quarterly_thresholds
        ],
        continuity_threshold=record.continuity_threshold,
        continuity_tiers=[
            TierRule(lower_bound=t.threshold, upper_bound=t.up_to, value=t.bonus)
            for t in record.continuity_thresholds
        ],
        use_rolling_average=record.use_rolling_average,
        previous_months=record.previous_months,
        quarterly_weights=record.quarterly_weights,
    )


def config_to_structure(config: CompensationConfig) -> PayoutStructureRecord:
    return PayoutStructureRecord(
        name=config.name,
        use_rolling_average=config.use_rolling_average,
        previous_months=list(config.previous_months),
        commission_thresholds=[
            CommissionThresholdRecord(
                threshold=t.lower_bound,
                up_to=_stored_upper_bound(t.upper_bound),
                percentage=t.value,
            )
            for t in config.commission_tiers
        ],
        quarterly_thresholds=[
            BonusThresholdRecord(
                threshold=t.lower_bound, up_to=_stored_upper_bound(t.upper_bound), bonus=t.value
            )
            for t in config.quarterly_tiers
        ],
        continuity_threshold=config.continuity_threshold,
        continuity_thresholds=[
            BonusThresholdRecord(
                threshold=t.lower_bound, up_to=_stored_upper_bound(t.upper_bound), bonus=t.value
            )
            for t in config.continuity_tiers
        ],
        quarterly_weights=list(config.quarterly_weights),
    )


def profile_record_to_profile(record: Union[PerformanceProfileRecord, Mapping[str, Any]]
                              ) -> PerformanceProfile:
    record = _parse(PerformanceProfileRecord, record)
    return PerformanceProfile(
        name=record.name,
        fte=record.fte,
        trajectory=PerformanceTrajectory(
            quarterly_achievements=record.quarterly_achievements,
            monthly_sales=record.monthly_sales,
        ),
        yearly_target=record.yearly_target,
    )


def profile_to_record(profile: PerformanceProfile) -> PerformanceProfileRecord:
    return PerformanceProfileRecord(
        name=profile.name,
        fte=profile.fte,
        quarterly_achievements=list(profile.trajectory.quarterly_achievements),
        monthly_sales=list(profile.trajectory.monthly_sales),
        yearly_target=profile.yearly_target,
    )
