"""Risk settings sourced from the ``risk`` configuration section."""

import logging
from typing import Optional

from pydantic import ValidationError

from ..core.risk import RiskSettings
from ..exceptions import InvalidConfigurationError
from .config_manager import ConfigManager

logger = logging.getLogger(__name__)


def load_risk_settings(config_manager: Optional[ConfigManager] = None) -> RiskSettings:
    """
    Build RiskSettings from configuration, keeping built-in defaults for
    anything the ``risk`` section leaves out.
    """
    config_manager = config_manager or ConfigManager()
    overrides = config_manager.get_section("risk")
    try:
        return RiskSettings(**overrides)
    except (TypeError, ValidationError) as e:
        logger.error(f"Invalid risk settings in {config_manager.config_path}: {e}")
        raise InvalidConfigurationError(str(e), field="risk") from e
