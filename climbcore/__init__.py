"""
Core calculations for the climbing coach.

This package provides pure functions for:
- Grade parsing, conversion and ordering (V-scale, YDS, French)
- Progress toward a goal grade and rule-based training advice
- Training load (volume, intensity, density) and success rate
- Nutrition targets (BMR, TDEE, macros), insights and supplements

Every function is a pure computation over its arguments; callers own the
data and pass snapshots in.
"""

from .validation import ValidationError

# Grades
from .grades import (
    Grade,
    GradeConversion,
    GradeSystem,
    CROSS_SYSTEM_OFFSET,
    parse_grade,
    numeric_to_grade,
    convert_grade,
    get_grade_conversions,
    compare_grades,
    sort_grades,
    get_grade_options,
)

# Records
from .records import (
    ClimbingStyle,
    Significance,
    SessionType,
    SendRecord,
    SessionRecord,
    NutritionLog,
)

# Parameters
from .params import (
    ProgressParams,
    TrainingLoadParams,
    CoachParams,
    load_params,
    save_params,
)

# Training load
from .training_load import (
    TrainingLoad,
    calculate_training_load,
    calculate_success_rate,
)

# Progress
from .progress import (
    ProgressMetrics,
    StylePerformance,
    calculate_progress,
    analyze_style_performance,
    generate_training_recommendations,
)

# Nutrition
from .nutrition import (
    ActivityLevel,
    NutritionGoal,
    SupplementTier,
    NutritionProfile,
    NutritionTargets,
    MacroIntake,
    MacroDistribution,
    WeeklyAverages,
    MealTiming,
    SupplementPriority,
    INFINITE_EFFICIENCY,
    calculate_bmr,
    calculate_tdee,
    calculate_nutrition_targets,
    calculate_macro_distribution,
    calculate_protein_efficiency,
    categorize_protein_efficiency,
    calculate_weekly_averages,
    generate_nutrition_insights,
    calculate_meal_timing,
    calculate_supplement_priorities,
)

__all__ = [
    'ValidationError',
    # Grades
    'Grade',
    'GradeConversion',
    'GradeSystem',
    'CROSS_SYSTEM_OFFSET',
    'parse_grade',
    'numeric_to_grade',
    'convert_grade',
    'get_grade_conversions',
    'compare_grades',
    'sort_grades',
    'get_grade_options',
    # Records
    'ClimbingStyle',
    'Significance',
    'SessionType',
    'SendRecord',
    'SessionRecord',
    'NutritionLog',
    # Parameters
    'ProgressParams',
    'TrainingLoadParams',
    'CoachParams',
    'load_params',
    'save_params',
    # Training load
    'TrainingLoad',
    'calculate_training_load',
    'calculate_success_rate',
    # Progress
    'ProgressMetrics',
    'StylePerformance',
    'calculate_progress',
    'analyze_style_performance',
    'generate_training_recommendations',
    # Nutrition
    'ActivityLevel',
    'NutritionGoal',
    'SupplementTier',
    'NutritionProfile',
    'NutritionTargets',
    'MacroIntake',
    'MacroDistribution',
    'WeeklyAverages',
    'MealTiming',
    'SupplementPriority',
    'INFINITE_EFFICIENCY',
    'calculate_bmr',
    'calculate_tdee',
    'calculate_nutrition_targets',
    'calculate_macro_distribution',
    'calculate_protein_efficiency',
    'categorize_protein_efficiency',
    'calculate_weekly_averages',
    'generate_nutrition_insights',
    'calculate_meal_timing',
    'calculate_supplement_priorities',
]
