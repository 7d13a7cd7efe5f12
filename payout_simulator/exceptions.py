"""
Exception hierarchy for the Payout Elasticity Simulator engine.

Every error the engine raises is synchronous and rejects the whole
calculation; no partial breakdown is ever returned alongside an error.
"""


class PayoutSimulatorError(Exception):
    """Base class for all engine errors."""


class InvalidConfigurationError(PayoutSimulatorError, ValueError):
    """Raised when a configuration or performance input fails validation.

    Covers malformed tier sets, non-numeric or NaN values, negative amounts,
    wrong sequence lengths and FTE values outside ``[0, 1]``.
    """

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)


class AchievementOutOfRangeError(PayoutSimulatorError, ValueError):
    """Raised when an elasticity point is requested outside 0-200%."""

    def __init__(self, achievement):
        self.achievement = achievement
        super().__init__(
            f"Achievement {achievement!r} is outside the simulated range 0-200"
        )
