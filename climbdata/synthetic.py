"""
Synthetic climber histories for demos and tests.

Generates plausible journals with:
- Archetype-specific starting grade, session frequency and session length
- Gradual grade progression with day-to-day noise
- Rest days, missed sessions and occasional outdoor days
- Benchmark sends whenever a climber ticks a new high point
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from climbcore.records import (
    ClimbingStyle,
    NutritionLog,
    SendRecord,
    SessionRecord,
    SessionType,
    Significance,
)


class ClimberArchetype(Enum):
    """Climber experience classification."""
    BEGINNER = "beginner"           # < 1 year, V0-V2
    INTERMEDIATE = "intermediate"   # 1-4 years, V3-V5
    ADVANCED = "advanced"           # 4+ years, V6+


# (start grade range, sessions/week, session minutes range, weekly grade gain)
ARCHETYPE_SETTINGS: Dict[ClimberArchetype, Tuple[Tuple[int, int], int, Tuple[int, int], float]] = {
    ClimberArchetype.BEGINNER: ((0, 2), 2, (60, 90), 0.15),
    ClimberArchetype.INTERMEDIATE: ((3, 5), 3, (90, 120), 0.08),
    ClimberArchetype.ADVANCED: ((6, 8), 4, (100, 150), 0.04),
}

# Probability that a session's style focus is each ClimbingStyle
STYLE_WEIGHTS = {
    ClimbingStyle.SLAB: 0.2,
    ClimbingStyle.VERTICAL: 0.35,
    ClimbingStyle.OVERHANG: 0.35,
    ClimbingStyle.ROOF: 0.1,
}


@dataclass
class ClimberHistory:
    """Generated journal for one synthetic climber."""
    archetype: ClimberArchetype
    start_grade: int
    sessions: List[SessionRecord] = field(default_factory=list)
    sends: List[SendRecord] = field(default_factory=list)

    @property
    def current_grade(self) -> str:
        """Hardest grade sent so far (start grade if nothing was sent)."""
        if not self.sends:
            return f"V{self.start_grade}"
        return max(self.sends, key=lambda s: int(s.grade[1:])).grade


def generate_climber_history(
    archetype: ClimberArchetype = ClimberArchetype.INTERMEDIATE,
    n_weeks: int = 12,
    seed: Optional[int] = None,
    as_of: Optional[date] = None,
    compliance: float = 0.9
) -> ClimberHistory:
    """
    Generate ``n_weeks`` of journal entries ending at ``as_of``.

    Args:
        archetype: Climber profile to simulate
        n_weeks: Weeks of history
        seed: Random seed for reproducibility
        as_of: Last day of the history (defaults to today)
        compliance: Probability a planned session actually happens

    Returns:
        ClimberHistory with sessions (including rest days) and sends
    """
    rng = np.random.default_rng(seed)
    as_of = as_of or date.today()
    start = as_of - timedelta(days=n_weeks * 7 - 1)

    grade_range, per_week, minutes_range, weekly_gain = ARCHETYPE_SETTINGS[archetype]
    start_grade = int(rng.integers(grade_range[0], grade_range[1] + 1))
    history = ClimberHistory(archetype=archetype, start_grade=start_grade)

    styles = list(STYLE_WEIGHTS)
    style_p = np.array(list(STYLE_WEIGHTS.values()))
    high_point = start_grade

    for week in range(n_weeks):
        week_start = start + timedelta(days=week * 7)
        # Spread sessions over the week, the rest are rest days
        climb_days = set(rng.choice(7, size=per_week, replace=False).tolist())
        ability = start_grade + weekly_gain * week

        for offset in range(7):
            day = week_start + timedelta(days=offset)
            if day > as_of:
                break

            if offset not in climb_days or rng.random() > compliance:
                if offset not in climb_days:
                    history.sessions.append(
                        SessionRecord(date=day, duration_minutes=0, session_type=SessionType.REST)
                    )
                continue

            session_type = SessionType.OUTDOOR if rng.random() < 0.15 else SessionType.GYM
            duration = int(rng.integers(minutes_range[0], minutes_range[1] + 1))

            day_ability = ability + rng.normal(0, 0.5)
            n_attempts = int(rng.integers(4, 9))
            attempted = np.clip(
                np.round(day_ability - rng.integers(0, 3, size=n_attempts)), 0, 17
            ).astype(int)
            success_p = np.clip(0.9 - 0.25 * (attempted - day_ability + 2), 0.1, 0.95)
            sent_mask = rng.random(n_attempts) < success_p

            attempted_grades = [f"V{g}" for g in attempted]
            completed_grades = [f"V{g}" for g in attempted[sent_mask]]
            history.sessions.append(SessionRecord(
                date=day,
                duration_minutes=duration,
                grades_attempted=attempted_grades,
                session_type=session_type,
                grades_completed=completed_grades,
            ))

            if sent_mask.any():
                best = int(attempted[sent_mask].max())
                if best > high_point or (best == high_point and rng.random() < 0.2):
                    significance = (
                        Significance.BREAKTHROUGH if best > high_point + 1
                        else Significance.PERSONAL_BEST if best > high_point
                        else Significance.MILESTONE
                    )
                    high_point = max(high_point, best)
                    history.sends.append(SendRecord(
                        grade=f"V{best}",
                        date=day,
                        style=styles[int(rng.choice(len(styles), p=style_p))],
                        significance=significance,
                        name=f"Problem {len(history.sends) + 1}",
                        location='Outdoor crag' if session_type == SessionType.OUTDOOR else 'Gym',
                    ))

    return history


def generate_nutrition_logs(
    n_days: int = 7,
    target_calories: float = 2400,
    target_protein_g: float = 150,
    adherence: float = 0.9,
    seed: Optional[int] = None,
    as_of: Optional[date] = None
) -> List[NutritionLog]:
    """
    Generate daily intake logs scattered around the given targets.

    ``adherence`` scales mean intake relative to target (0.9 = eats 90%).
    """
    rng = np.random.default_rng(seed)
    as_of = as_of or date.today()

    logs = []
    for i in range(n_days):
        day = as_of - timedelta(days=n_days - 1 - i)
        calories = max(0.0, rng.normal(target_calories * adherence, target_calories * 0.08))
        protein = max(0.0, rng.normal(target_protein_g * adherence, target_protein_g * 0.1))
        fat = calories * 0.3 / 9
        carbs = max(0.0, (calories - protein * 4 - fat * 9) / 4)
        logs.append(NutritionLog(
            date=day,
            total_calories=round(calories),
            protein_g=round(protein),
            carbs_g=round(carbs),
            fat_g=round(fat),
            hydration_ml=round(rng.uniform(1500, 3500)),
        ))
    return logs
