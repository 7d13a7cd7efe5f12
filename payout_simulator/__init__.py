"""
Payout Elasticity Simulator: a deterministic engine for variable sales
compensation (commission, quarterly and continuity bonuses) and for how
payout responds to achievement.
"""

from .exceptions import (
    AchievementOutOfRangeError,
    InvalidConfigurationError,
    PayoutSimulatorError,
)
from .models.schemas import (
    CompensationConfig,
    ElasticityPoint,
    GoalFocus,
    PayoutBreakdown,
    PerformanceProfile,
    PerformanceTrajectory,
    PhilosophyMetrics,
    Recommendation,
    RiskAssessment,
    RiskRating,
    TierRule,
)
from .models.records import (
    PayoutStructureRecord,
    PerformanceProfileRecord,
    config_to_structure,
    profile_record_to_profile,
    profile_to_record,
    structure_to_config,
)
from .core.commission import compute_commission
from .core.bonuses import compute_continuity_bonus, compute_quarterly_bonus
from .core.payout import compute_profile_payout, compute_total_payout
from .core.elasticity import (
    elasticity_frame,
    elasticity_insight,
    elasticity_per_range,
    point_at,
    simulate_elasticity,
    simulate_roi,
)
from .core.risk import RiskSettings, generate_risk_assessment, risk_payout_ladder
from .core.philosophy import compute_philosophy_metrics, executive_summary
from .core.kpis import compute_kpis
from .core.recommendations import (
    apply_recommendation,
    apply_recommendations,
    generate_recommendations,
    recommendation_impact,
)
from .core.comparison import compare_elasticity, comparison_frame, run_comparison
from .config.config_manager import (
    ConfigManager,
    available_presets,
    load_preset,
    load_profile_preset,
)
from .config.risk_settings import load_risk_settings

__version__ = "0.1.0"
