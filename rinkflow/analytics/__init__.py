"""
Analytics Module

This module aggregates processor output into team and player analytics.

Components:
    - compute_decision_quality_metrics: Game-state-aware shot selection
    - compute_attack_dna: Play-style fingerprint, flow field and ribbons
    - compute_shot_profile: Shot-location attack profile and season trends
    - compute_behavioral_evolution: Window-over-window behaviour changes
    - build_chemistry_matrix: Pairwise on-ice chemistry and line suggestions
"""

from rinkflow.analytics.decision_quality import (
    AttackStyle,
    AttackStyleBreakdown,
    DecisionComparison,
    DecisionIndicators,
    DecisionQualityMetrics,
    MetricsValidation,
    ShotMetrics,
    classify_attack_style,
    compare_decision_metrics,
    compute_decision_quality_metrics,
    validate_decision_metrics,
)
from rinkflow.analytics.flow_field import (
    AttackRibbon,
    FlowField,
    FlowFieldCell,
    PathPoint,
    compute_flow_field,
    generate_attack_ribbons,
)
from rinkflow.analytics.play_style import (
    AttackDNA,
    PeriodBreakdown,
    PlayStyle,
    PlayStyleFingerprint,
    calculate_fingerprint,
    classify_primary_style,
    compute_attack_dna,
    league_average_fingerprint,
)
from rinkflow.analytics.shot_profile import (
    AttackMetrics,
    AttackProfile,
    AttackProfileStyle,
    GameMetrics,
    InflectionPoint,
    SeasonTrend,
    ShotDensityMap,
    ShotLocation,
    ShotProfileReport,
    ShotZone,
    ShotZoneDistribution,
    TrendWindow,
    build_season_trend,
    calculate_attack_metrics,
    calculate_attack_profile,
    calculate_game_metrics,
    calculate_rolling_averages,
    classify_shot_zone,
    compute_shot_density_map,
    compute_shot_profile,
    compute_zone_distribution,
    detect_inflection_points,
    extract_shot_locations,
)
from rinkflow.analytics.evolution import (
    BehaviorChange,
    BehaviorProfile,
    BehavioralEvolution,
    Confidence,
    PlayerEvolution,
    Significance,
    TeamEvolution,
    Trend,
    WindowMode,
    compare_profiles,
    compute_behavioral_evolution,
    compute_team_evolution,
    players_with_major_changes,
)
from rinkflow.analytics.chemistry import (
    ChemistryMatrix,
    LineChemistry,
    LineRating,
    PlayerPairChemistry,
    build_chemistry_matrix,
    calculate_pair_chemistry,
    evaluate_line_combination,
    find_chemistry_extremes,
    suggest_line_combinations,
)

__all__ = [
    # Decision quality
    "AttackStyle",
    "AttackStyleBreakdown",
    "DecisionComparison",
    "DecisionIndicators",
    "DecisionQualityMetrics",
    "MetricsValidation",
    "ShotMetrics",
    "classify_attack_style",
    "compare_decision_metrics",
    "compute_decision_quality_metrics",
    "validate_decision_metrics",
    # Flow field
    "AttackRibbon",
    "FlowField",
    "FlowFieldCell",
    "PathPoint",
    "compute_flow_field",
    "generate_attack_ribbons",
    # Play style
    "AttackDNA",
    "PeriodBreakdown",
    "PlayStyle",
    "PlayStyleFingerprint",
    "calculate_fingerprint",
    "classify_primary_style",
    "compute_attack_dna",
    "league_average_fingerprint",
    # Shot profile
    "AttackMetrics",
    "AttackProfile",
    "AttackProfileStyle",
    "GameMetrics",
    "InflectionPoint",
    "SeasonTrend",
    "ShotDensityMap",
    "ShotLocation",
    "ShotProfileReport",
    "ShotZone",
    "ShotZoneDistribution",
    "TrendWindow",
    "build_season_trend",
    "calculate_attack_metrics",
    "calculate_attack_profile",
    "calculate_game_metrics",
    "calculate_rolling_averages",
    "classify_shot_zone",
    "compute_shot_density_map",
    "compute_shot_profile",
    "compute_zone_distribution",
    "detect_inflection_points",
    "extract_shot_locations",
    # Evolution
    "BehaviorChange",
    "BehaviorProfile",
    "BehavioralEvolution",
    "Confidence",
    "PlayerEvolution",
    "Significance",
    "TeamEvolution",
    "Trend",
    "WindowMode",
    "compare_profiles",
    "compute_behavioral_evolution",
    "compute_team_evolution",
    "players_with_major_changes",
    # Chemistry
    "ChemistryMatrix",
    "LineChemistry",
    "LineRating",
    "PlayerPairChemistry",
    "build_chemistry_matrix",
    "calculate_pair_chemistry",
    "evaluate_line_combination",
    "find_chemistry_extremes",
    "suggest_line_combinations",
]
