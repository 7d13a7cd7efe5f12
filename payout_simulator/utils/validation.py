"""
Validation utilities for the Payout Elasticity Simulator.

Every check either returns the cleaned value or raises
``InvalidConfigurationError``; nothing is silently defaulted.
"""

import math
import logging
from numbers import Real
from typing import Any, Iterable, Sequence, Tuple

from ..exceptions import InvalidConfigurationError

# Set up module logger
logger = logging.getLogger(__name__)

QUARTERS_PER_YEAR = 4
MONTHS_PER_YEAR = 12
SEED_MONTH_COUNT = 2


def _reject(message: str, field: str) -> None:
    logger.error(f"Validation failed for {field}: {message}")
    raise InvalidConfigurationError(message, field=field)


def ensure_number(value: Any, field: str, allow_negative: bool = False,
                  allow_infinite: bool = False) -> float:
    """
    Coerce a numeric input to ``float`` after checking it is a real number.

    Args:
        value: Raw input value
        field: Name used in the error message
        allow_negative: Accept values below zero
        allow_infinite: Accept ``+inf``/``-inf`` (NaN is never accepted)

    Returns:
        The value as a float
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        _reject(f"expected a number, got {type(value).__name__}", field)

    number = float(value)
    if math.isnan(number):
        _reject("NaN is not a valid amount", field)
    if math.isinf(number) and not allow_infinite:
        _reject("value must be finite", field)
    if number < 0 and not allow_negative:
        _reject(f"value must not be negative, got {number}", field)
    return number


def validate_fte(fte: Any) -> float:
    value = ensure_number(fte, "fte")
    if value > 1:
        _reject(f"FTE must be within [0, 1], got {value}", "fte")
    return value


def validate_sequence(values: Any, length: int, field: str) -> Tuple[float, ...]:
    """
    Validate a fixed-length sequence of non-negative numbers.

    Raises:
        InvalidConfigurationError: If the input is not a sequence of exactly
            ``length`` finite, non-negative numbers.
    """
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        _reject(f"expected a sequence of {length} numbers", field)

    items = list(values)
    if len(items) != length:
        _reject(f"expected {length} values, got {len(items)}", field)

    return tuple(
        ensure_number(item, f"{field}[{index}]")
        for index, item in enumerate(items)
    )


def validate_achievements(values: Any) -> Tuple[float, ...]:
    return validate_sequence(values, QUARTERS_PER_YEAR, "quarterly_achievements")


def validate_monthly_sales(values: Any) -> Tuple[float, ...]:
    return validate_sequence(values, MONTHS_PER_YEAR, "monthly_sales")


def validate_seed_months(values: Any) -> Tuple[float, ...]:
    return validate_sequence(values, SEED_MONTH_COUNT, "previous_months")


def validate_month_index(month_index: Any) -> int:
    if isinstance(month_index, bool) or not isinstance(month_index, int):
        _reject("month index must be an integer", "month_index")
    if not 0 <= month_index < MONTHS_PER_YEAR:
        _reject(f"month index must be within 0-11, got {month_index}", "month_index")
    return month_index


def validate_tier_set(tiers: Sequence[Any], expected_count: int, field: str,
                      contiguous: bool) -> None:
    """
    Check the structural invariants of a tier set.

    Tiers are examined in ascending ``lower_bound`` order regardless of the
    order they were declared in. The topmost tier must be unbounded. For
    marginal (commission) tiers every upper bound must equal the next lower
    bound; for step (bonus) tiers the next lower bound may not fall below
    the previous upper bound, a shared boundary point being allowed.

    Args:
        tiers: Objects exposing ``lower_bound`` and ``upper_bound``
        expected_count: Required number of tiers
        field: Name used in error messages
        contiguous: Require gap-free coverage (accumulate mode)
    """
    if len(tiers) != expected_count:
        _reject(f"expected {expected_count} tiers, got {len(tiers)}", field)

    ordered = sorted(tiers, key=lambda tier: tier.lower_bound)

    if not math.isinf(ordered[-1].upper_bound):
        _reject("the topmost tier must have an unbounded upper limit", field)

    for previous, current in zip(ordered, ordered[1:]):
        if contiguous and previous.upper_bound != current.lower_bound:
            _reject(
                f"tiers must be contiguous: {previous.upper_bound} does not meet "
                f"{current.lower_bound}",
                field,
            )
        if current.lower_bound < previous.upper_bound:
            _reject(
                f"tiers overlap: [{previous.lower_bound}, {previous.upper_bound}] "
                f"and [{current.lower_bound}, {current.upper_bound}]",
                field,
            )
