"""
Nutrition targets and insights for climbers.

Based on:
- Mifflin, St Jeor et al. (1990): BMR equation
- Standard activity multipliers for TDEE (1.2 - 1.9)
- Goal-specific calorie and protein adjustments used by the coaching app

Inputs are imperial (lb, in) as entered in the profile form; the BMR
equation itself runs on metric values.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple
import math

import numpy as np
from loguru import logger

from .records import NutritionLog
from .validation import (
    ValidationError,
    coerce_enum,
    require_non_negative,
    require_positive,
    round_half_up,
    round_int,
    safe_ratio,
)


LB_TO_KG = 0.453592
IN_TO_CM = 2.54

KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
KCAL_PER_G_FAT = 9

# Returned by calculate_protein_efficiency for zero protein
INFINITE_EFFICIENCY = math.inf


class ActivityLevel(Enum):
    """Weekly activity classification, least to most active."""
    SEDENTARY = "sedentary"        # Little to no exercise
    LIGHT = "light"                # Light exercise 1-3 days per week
    MODERATE = "moderate"          # Moderate exercise 3-5 days per week
    ACTIVE = "active"              # Heavy exercise 6-7 days per week
    VERY_ACTIVE = "very-active"    # Very heavy exercise, training 2x/day


class NutritionGoal(Enum):
    """Body composition goal."""
    MAINTAIN = "maintain"
    CUT = "cut"
    BULK = "bulk"
    RECOMP = "recomp"


class SupplementTier(Enum):
    """Supplement priority tier; higher rank sorts first."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {'high': 3, 'medium': 2, 'low': 1}[self.value]


ACTIVITY_MULTIPLIERS = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
}

# (calorie multiplier, protein multiplier)
GOAL_ADJUSTMENTS = {
    NutritionGoal.MAINTAIN: (1.0, 1.0),
    NutritionGoal.CUT: (0.8, 1.2),
    NutritionGoal.BULK: (1.1, 1.0),
    NutritionGoal.RECOMP: (0.95, 1.1),
}

PROTEIN_PER_LB = {
    NutritionGoal.MAINTAIN: 1.0,
    NutritionGoal.CUT: 1.2,
    NutritionGoal.BULK: 0.8,
    NutritionGoal.RECOMP: 1.1,
}

FAT_CALORIE_SHARE_CUT = 0.25
FAT_CALORIE_SHARE_DEFAULT = 0.30

HYDRATION_ML_PER_LB = 30
HYDRATION_BASE_ML = 500

SEX_OFFSETS = {'male': 5, 'female': -161}

VEGETARIAN = 'vegetarian'


# ═══════════════════════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class NutritionProfile:
    """
    Physical and goal parameters for target calculation.

    Enumerated fields accept their string values ('very-active', 'cut').
    Dietary restrictions are stored lower-cased.
    """
    weight_lb: float
    height_in: float
    age: int
    activity_level: ActivityLevel = ActivityLevel.MODERATE
    goal: NutritionGoal = NutritionGoal.MAINTAIN
    dietary_restrictions: Tuple[str, ...] = ()
    sex: str = 'male'
    target_weight_lb: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, 'weight_lb', require_positive('weight_lb', self.weight_lb))
        object.__setattr__(self, 'height_in', require_positive('height_in', self.height_in))
        require_positive('age', self.age)
        if self.target_weight_lb is not None:
            object.__setattr__(
                self, 'target_weight_lb',
                require_positive('target_weight_lb', self.target_weight_lb)
            )
        object.__setattr__(
            self, 'activity_level',
            coerce_enum(ActivityLevel, self.activity_level, 'activity_level')
        )
        object.__setattr__(self, 'goal', coerce_enum(NutritionGoal, self.goal, 'goal'))
        object.__setattr__(self, 'sex', _validate_sex(self.sex))

        restrictions = self.dietary_restrictions
        if isinstance(restrictions, str):
            restrictions = [restrictions]
        restrictions = list(restrictions)
        for r in restrictions:
            if not isinstance(r, str):
                raise ValidationError(f"dietary_restrictions must be strings, got {r!r}")
        object.__setattr__(
            self, 'dietary_restrictions',
            tuple(r.strip().lower() for r in restrictions)
        )

    @property
    def is_vegetarian(self) -> bool:
        return VEGETARIAN in self.dietary_restrictions


@dataclass(frozen=True)
class NutritionTargets:
    """Daily targets derived from a NutritionProfile."""
    calories: int
    protein_g: int
    carbs_g: int
    fat_g: int
    hydration_ml: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class MacroIntake:
    """Actual (current) daily intake."""
    calories: float
    protein_g: float
    carbs_g: float = 0.0
    fat_g: float = 0.0

    def __post_init__(self):
        for name in ('calories', 'protein_g', 'carbs_g', 'fat_g'):
            object.__setattr__(self, name, require_non_negative(name, getattr(self, name)))


@dataclass(frozen=True)
class MacroDistribution:
    """Share of calories (percent) from each macronutrient."""
    protein: int
    carbs: int
    fat: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class WeeklyAverages:
    """Per-day averages over a set of nutrition logs."""
    calories: int
    protein_g: int
    carbs_g: int
    fat_g: int
    days: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ProteinEfficiencyTier:
    """Display classification of a food's calories per gram of protein."""
    tier: str
    color: str
    label: str


@dataclass(frozen=True)
class MealTiming:
    """Suggested meal times around a climbing session."""
    pre_workout_time: str
    pre_workout_focus: List[str] = field(default_factory=list)
    post_workout_time: str = ''
    post_workout_focus: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SupplementPriority:
    """A recommended supplement with its priority and rationale."""
    supplement: str
    priority: SupplementTier
    reason: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'supplement': self.supplement,
            'priority': self.priority.value,
            'reason': self.reason,
        }


def _validate_sex(sex: Any) -> str:
    if not isinstance(sex, str) or sex.strip().lower() not in SEX_OFFSETS:
        raise ValidationError(f"sex must be 'male' or 'female', got {sex!r}")
    return sex.strip().lower()


# ═══════════════════════════════════════════════════════════════════════════════
# ENERGY EXPENDITURE
# ═══════════════════════════════════════════════════════════════════════════════

def calculate_bmr(
    weight_lb: float,
    height_in: float,
    age: int,
    sex: str = 'male'
) -> int:
    """
    Basal metabolic rate using the Mifflin-St Jeor equation.

    BMR = 10 x kg + 6.25 x cm - 5 x age + (5 male | -161 female)

    Args:
        weight_lb: Body weight in pounds
        height_in: Height in inches
        age: Age in years
        sex: 'male' or 'female'

    Returns:
        BMR in kcal/day, rounded
    """
    weight_kg = require_positive('weight_lb', weight_lb) * LB_TO_KG
    height_cm = require_positive('height_in', height_in) * IN_TO_CM
    age = require_positive('age', age)

    bmr = (10 * weight_kg) + (6.25 * height_cm) - (5 * age)
    bmr += SEX_OFFSETS[_validate_sex(sex)]

    return round_int(bmr)


def calculate_tdee(bmr: float, activity_level: ActivityLevel) -> int:
    """Total daily energy expenditure: BMR x activity multiplier, rounded."""
    level = coerce_enum(ActivityLevel, activity_level, 'activity_level')
    return round_int(require_positive('bmr', bmr) * ACTIVITY_MULTIPLIERS[level])


def calculate_nutrition_targets(profile: NutritionProfile) -> NutritionTargets:
    """
    Daily calorie, macro and hydration targets.

    Steps:
    1. TDEE from BMR and activity level, scaled by the goal's calorie multiplier
    2. Protein: weight x g/lb for the goal x goal protein multiplier
    3. Fat: 25% (cut) or 30% of calories
    4. Carbs: whatever calories remain, never below zero
    5. Hydration: 30 ml per lb + 500 ml

    Args:
        profile: Validated NutritionProfile

    Returns:
        NutritionTargets with integer values
    """
    bmr = calculate_bmr(profile.weight_lb, profile.height_in, profile.age, profile.sex)
    calorie_multiplier, protein_multiplier = GOAL_ADJUSTMENTS[profile.goal]
    calories = round_int(calculate_tdee(bmr, profile.activity_level) * calorie_multiplier)

    protein = round_int(profile.weight_lb * PROTEIN_PER_LB[profile.goal] * protein_multiplier)

    fat_share = FAT_CALORIE_SHARE_CUT if profile.goal == NutritionGoal.CUT else FAT_CALORIE_SHARE_DEFAULT
    fat = round_int(calories * fat_share / KCAL_PER_G_FAT)

    remaining = calories - protein * KCAL_PER_G_PROTEIN - fat * KCAL_PER_G_FAT
    carbs = round_int(remaining / KCAL_PER_G_CARBS)
    if carbs < 0:
        logger.warning(
            f"[NUTRITION] Protein and fat exceed {calories} kcal by {-remaining} kcal; "
            f"carb target set to 0"
        )
        carbs = 0

    hydration = round_int(profile.weight_lb * HYDRATION_ML_PER_LB + HYDRATION_BASE_ML)

    return NutritionTargets(
        calories=calories,
        protein_g=protein,
        carbs_g=carbs,
        fat_g=fat,
        hydration_ml=hydration,
    )


def calculate_macro_distribution(targets: NutritionTargets) -> MacroDistribution:
    """Percent of target calories supplied by each macro (zeros for 0 kcal)."""
    total = targets.calories
    return MacroDistribution(
        protein=round_int(safe_ratio(targets.protein_g * KCAL_PER_G_PROTEIN, total) * 100),
        carbs=round_int(safe_ratio(targets.carbs_g * KCAL_PER_G_CARBS, total) * 100),
        fat=round_int(safe_ratio(targets.fat_g * KCAL_PER_G_FAT, total) * 100),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# FOOD AND INTAKE ANALYSIS
# ═══════════════════════════════════════════════════════════════════════════════

def calculate_protein_efficiency(protein_g: float, calories: float) -> float:
    """
    Calories per gram of protein, to one decimal.

    Lower is better. Foods with no protein return INFINITE_EFFICIENCY.
    """
    protein_g = require_non_negative('protein_g', protein_g)
    if protein_g == 0:
        return INFINITE_EFFICIENCY
    return round_half_up(calories / protein_g, 1)


def categorize_protein_efficiency(efficiency: float) -> ProteinEfficiencyTier:
    """Map calories-per-gram-protein onto a display tier."""
    if efficiency < 5:
        return ProteinEfficiencyTier('excellent', 'green', 'Excellent')
    if efficiency < 6:
        return ProteinEfficiencyTier('very-good', 'blue', 'Very Good')
    if efficiency < 8:
        return ProteinEfficiencyTier('good', 'yellow', 'Good')
    if efficiency < 10:
        return ProteinEfficiencyTier('moderate', 'orange', 'Moderate')
    return ProteinEfficiencyTier('avoid', 'red', 'Avoid When Cutting')


def calculate_weekly_averages(logs: Iterable[NutritionLog]) -> WeeklyAverages:
    """Average daily calories and macros over the given logs."""
    logs = list(logs)
    if not logs:
        return WeeklyAverages(0, 0, 0, 0, 0)

    values = np.array(
        [[log.total_calories, log.protein_g, log.carbs_g, log.fat_g] for log in logs],
        dtype=float
    )
    calories, protein, carbs, fat = values.mean(axis=0)

    return WeeklyAverages(
        calories=round_int(calories),
        protein_g=round_int(protein),
        carbs_g=round_int(carbs),
        fat_g=round_int(fat),
        days=len(logs),
    )


def generate_nutrition_insights(
    current: MacroIntake,
    targets: NutritionTargets,
    profile: NutritionProfile
) -> List[str]:
    """
    Threshold-based feedback comparing intake to targets.

    Ratios against a zero target are treated as on-target (1.0).

    Args:
        current: Actual daily intake
        targets: Output of calculate_nutrition_targets
        profile: The climber's profile

    Returns:
        Insight strings in a fixed order: protein, calories, vegetarian, goal
    """
    insights = []

    protein_ratio = safe_ratio(current.protein_g, targets.protein_g, default=1.0)
    if protein_ratio < 0.8:
        deficit = round_int(targets.protein_g - current.protein_g)
        insights.append(
            f"Protein deficit: Currently {current.protein_g:g}g vs {targets.protein_g}g target (-{deficit}g)"
        )
    elif protein_ratio > 1.3:
        insights.append(f"High protein intake detected. Consider if {current.protein_g:g}g is necessary.")

    calorie_ratio = safe_ratio(current.calories, targets.calories, default=1.0)
    if calorie_ratio < 0.7:
        insights.append(
            f"Calorie intake appears low for your activity level "
            f"({current.calories:g} vs {targets.calories} target)"
        )
    elif calorie_ratio > 1.2 and profile.goal == NutritionGoal.CUT:
        insights.append(
            f"Calorie intake high for weight loss goal ({current.calories:g} vs {targets.calories} target)"
        )

    if profile.is_vegetarian:
        if protein_ratio < 0.9:
            insights.append(
                'Focus on combining incomplete proteins (rice + beans, hummus + pita) '
                'for complete amino acid profiles'
            )
        insights.append('Monitor B12 and iron levels - consider fortified foods or supplements')

    if profile.goal == NutritionGoal.CUT and protein_ratio > 1.0 and calorie_ratio < 0.9:
        insights.append('Good protein prioritization for muscle preservation during weight loss')

    if profile.goal == NutritionGoal.BULK and calorie_ratio < 1.05:
        insights.append('Consider increasing calorie intake for effective muscle gain')

    return insights


def calculate_meal_timing(workout_time: str) -> MealTiming:
    """
    Pre- and post-workout meal times for a session starting at ``workout_time``.

    Args:
        workout_time: 'HH:MM' (24h) or 'HH:MM AM/PM'

    Returns:
        MealTiming with times formatted like '03:30 PM'
    """
    workout = None
    for fmt in ('%H:%M', '%I:%M %p', '%I:%M%p'):
        try:
            workout = datetime.strptime(workout_time.strip().upper(), fmt)
            break
        except (ValueError, AttributeError):
            continue
    if workout is None:
        raise ValidationError(f"workout_time must look like '17:30' or '5:30 PM', got {workout_time!r}")

    pre = workout - timedelta(hours=2.5)
    post = workout + timedelta(minutes=45)

    return MealTiming(
        pre_workout_time=pre.strftime('%I:%M %p'),
        pre_workout_focus=['Complex carbohydrates', 'Moderate protein', 'Low fat', 'Easy to digest'],
        post_workout_time=post.strftime('%I:%M %p'),
        post_workout_focus=['Fast protein (20-25g)', 'Simple carbohydrates', 'Rehydration'],
        recommendations=[
            'Avoid high fat/fiber foods 2 hours before climbing',
            'Hydrate well throughout the day, not just during exercise',
            'Post-workout nutrition window is most important within 60 minutes',
        ],
    )


def calculate_supplement_priorities(
    profile: NutritionProfile,
    current_intake: MacroIntake,
    targets: NutritionTargets
) -> List[SupplementPriority]:
    """
    Supplements worth considering, most important first.

    Rules: protein below 80% of target, vegetarian diet, cutting, and
    very-active training each add entries. Entries within a tier keep the
    order the rules produced them.
    """
    priorities = []

    protein_ratio = safe_ratio(current_intake.protein_g, targets.protein_g, default=1.0)
    if protein_ratio < 0.8:
        priorities.append(SupplementPriority(
            'Protein Powder', SupplementTier.HIGH,
            f"Only getting {round_int(protein_ratio * 100)}% of protein target"
        ))

    if profile.is_vegetarian:
        priorities.append(SupplementPriority(
            'B-Complex (with B12)', SupplementTier.HIGH,
            'Essential for vegetarians due to B12 deficiency risk'
        ))
        priorities.append(SupplementPriority(
            'Iron (with Vitamin C)', SupplementTier.MEDIUM,
            'Plant-based iron is less bioavailable'
        ))

    if profile.goal == NutritionGoal.CUT:
        priorities.append(SupplementPriority(
            'Vitamin D3', SupplementTier.HIGH,
            'Important for maintaining metabolism during calorie restriction'
        ))

    if profile.activity_level == ActivityLevel.VERY_ACTIVE:
        priorities.append(SupplementPriority(
            'Creatine', SupplementTier.HIGH,
            'Significant strength and power benefits for high-volume training'
        ))
        priorities.append(SupplementPriority(
            'Magnesium', SupplementTier.MEDIUM,
            'Important for muscle function and recovery with high training load'
        ))

    return sorted(priorities, key=lambda p: p.priority.rank, reverse=True)
