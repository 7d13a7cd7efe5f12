"""Monthly commission calculation."""

import logging
from typing import Sequence

from ..models.schemas import COMMISSION_TIER_COUNT, TierRule
from ..utils.validation import (
    ensure_number,
    validate_fte,
    validate_month_index,
    validate_monthly_sales,
    validate_seed_months,
    validate_tier_set,
)
from .tiers import accumulate_tiers

logger = logging.getLogger(__name__)

# Part-time employees at or below this FTE earn no commission. Bonuses
# have no such floor.
COMMISSION_FTE_FLOOR = 0.7

ROLLING_WINDOW = 3


def smoothed_sales_value(sales_value: float, month_index: int,
                         seed_months: Sequence[float],
                         full_year_sales: Sequence[float]) -> float:
    """
    Three-month rolling average ending at ``month_index``.

    January averages with both seed months, February with the second seed
    and January, later months with the two preceding months of the year.
    """
    if month_index == 0:
        window = (sales_value, seed_months[0], seed_months[1])
    elif month_index == 1:
        window = (sales_value, seed_months[1], full_year_sales[0])
    else:
        window = (sales_value, full_year_sales[month_index - 1],
                  full_year_sales[month_index - 2])
    return sum(window) / ROLLING_WINDOW


def compute_commission(sales_value: float, fte: float, use_rolling_average: bool,
                       month_index: int, seed_months: Sequence[float],
                       full_year_sales: Sequence[float],
                       commission_tiers: Sequence[TierRule]) -> float:
    """
    Commission earned for one month.

    Args:
        sales_value: Sales booked in the month
        fte: Full-time equivalent in [0, 1]
        use_rolling_average: Smooth the sales value over three months first
        month_index: 0 for January through 11 for December
        seed_months: The two months preceding January (November, December)
        full_year_sales: All twelve months, the context for smoothing
        commission_tiers: Marginal-rate tiers, rates in percent

    Returns:
        Commission in euros; 0 when ``fte`` is at or below the floor
    """
    sales_value = ensure_number(sales_value, "sales_value")
    fte = validate_fte(fte)
    month_index = validate_month_index(month_index)
    seed_months = validate_seed_months(seed_months)
    full_year_sales = validate_monthly_sales(full_year_sales)
    validate_tier_set(commission_tiers, COMMISSION_TIER_COUNT, "commission_tiers", contiguous=True)

    value = sales_value
    if use_rolling_average:
        value = smoothed_sales_value(sales_value, month_index, seed_months, full_year_sales)

    if fte <= COMMISSION_FTE_FLOOR:
        return 0.0

    return accumulate_tiers(commission_tiers, value) / 100
