"""
Tiered-threshold evaluation shared by every calculator.

Two modes are supported:

* accumulate: marginal rates, each tier contributing ``value`` times the
  part of the input that falls inside it (commission).
* step: the whole input maps to the flat ``value`` of the single tier that
  contains it (quarterly and continuity bonuses).
"""

import logging
from typing import List, Sequence

from ..models.schemas import TierRule

logger = logging.getLogger(__name__)


def sort_tiers(tiers: Sequence[TierRule]) -> List[TierRule]:
    """Return tiers in ascending ``lower_bound`` order; ties keep declared order."""
    return sorted(tiers, key=lambda tier: tier.lower_bound)


def accumulate_tiers(tiers: Sequence[TierRule], value: float) -> float:
    """
    Sum ``rate * (min(value, upper) - lower)`` over every tier the value
    has strictly passed the lower bound of.

    A value sitting exactly on a lower bound earns nothing from that tier.
    The result is in the same unit as ``value * rate``; commission callers
    divide by 100 because rates are stored as percentages.
    """
    total = 0.0
    for tier in sort_tiers(tiers):
        if value > tier.lower_bound:
            total += (min(value, tier.upper_bound) - tier.lower_bound) * tier.value
    return total


def step_lookup(tiers: Sequence[TierRule], value: float) -> float:
    """
    Return the amount of the first tier with ``lower <= value <= upper``.

    Both bounds are inclusive; when two tiers share a boundary point the
    lower tier wins. Values covered by no tier return 0.
    """
    for tier in sort_tiers(tiers):
        if tier.lower_bound <= value <= tier.upper_bound:
            return tier.value
    return 0.0
