"""
Progress toward a goal grade, style breakdown and training advice.

Progress rate is measured from the most recent sends:

    rate = (newest grade - oldest grade) / weeks between them

and the time to the goal is extrapolated linearly from that rate.
Recommendations are deterministic rules over the style breakdown and the
current training load.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np
from loguru import logger

from .grades import (
    Grade,
    GradeSystem,
    YDS_TO_V_SCALE,
    convert_grade,
    parse_grade,
    sort_grades,
)
from .params import ProgressParams
from .records import ClimbingStyle, SendRecord
from .training_load import TrainingLoad
from .validation import round_half_up, round_int, safe_ratio


NO_SENDS_LABEL = 'N/A'

ADVANCED_TARGET_ADVICE = [
    'Focus on power development - campus board and limit bouldering',
    'Core tension work is crucial for V7+ overhangs',
    'Practice reading complex sequences before attempting',
]


@dataclass(frozen=True)
class ProgressMetrics:
    """Progress from the current grade toward a target grade."""
    current_level: int
    target_level: int
    progress_percentage: float
    estimated_days_to_target: int
    weekly_progress_rate: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class StylePerformance:
    """Send statistics for one climbing style."""
    average_grade: float
    count: int
    best_grade: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def to_v_level(grade: Grade) -> int:
    """
    Express a grade as a V-scale level.

    YDS grades outside the conversion table are clamped to the nearest
    end of the table (below 5.10a -> V0, above 5.14d -> V19).
    """
    if grade.system == GradeSystem.V_SCALE:
        return grade.numeric_value

    converted = convert_grade(grade, GradeSystem.V_SCALE)
    if converted is not None:
        return int(converted[1:])

    clamped = 0 if grade.numeric_value < 100 else max(YDS_TO_V_SCALE.values())
    logger.warning(
        f"[PROGRESS] No V-scale equivalent for {grade.display_text}, using V{clamped}"
    )
    return clamped


def calculate_weekly_rate(sends: Iterable[SendRecord], window: int = 10) -> float:
    """
    Grade change per week across the most recent sends.

    Args:
        sends: Dated sends in any order
        window: Number of most recent sends to consider

    Returns:
        Unrounded rate in numeric grade units per week; 0 with fewer than
        two sends or when they share a date
    """
    recent = sorted(sends, key=lambda s: s.date, reverse=True)[:window]
    if len(recent) < 2:
        return 0.0

    newest, oldest = recent[0], recent[-1]
    weeks = (newest.date - oldest.date).days / 7
    grade_diff = parse_grade(newest.grade).numeric_value - parse_grade(oldest.grade).numeric_value

    return safe_ratio(grade_diff, weeks) if weeks > 0 else 0.0


def calculate_progress(
    current_grade: str,
    target_grade: str,
    history: Iterable[SendRecord],
    params: Optional[ProgressParams] = None
) -> ProgressMetrics:
    """
    Calculate progress toward a target grade.

    When the current and target grades use different systems both are
    expressed on the V-scale.

    Args:
        current_grade: Climber's current grade
        target_grade: Goal grade
        history: Dated sends used to estimate the weekly rate
        params: ProgressParams (defaults if None)

    Returns:
        ProgressMetrics with percentage to 0.1, rate to 0.01 and
        days clamped to >= 0
    """
    if params is None:
        params = ProgressParams()

    current = parse_grade(current_grade)
    target = parse_grade(target_grade)
    for label, grade in (('current', current), ('target', target)):
        if not grade.parsed:
            logger.warning(f"[PROGRESS] Could not parse {label} grade {grade.display_text!r}, treating as 0")

    current_level = current.numeric_value
    target_level = target.numeric_value
    if current.system != target.system:
        current_level = to_v_level(current)
        target_level = to_v_level(target)

    if target_level > current_level and target_level > 0:
        progress_percentage = min(current_level / target_level * 100, 100.0)
    else:
        progress_percentage = 100.0

    weekly_rate = calculate_weekly_rate(history, params.history_window)

    grade_gap = target_level - current_level
    if weekly_rate > 0:
        estimated_days = round_int(grade_gap / weekly_rate * 7)
    else:
        estimated_days = params.default_days_to_target

    metrics = ProgressMetrics(
        current_level=current_level,
        target_level=target_level,
        progress_percentage=round_half_up(progress_percentage, 1),
        estimated_days_to_target=max(0, estimated_days),
        weekly_progress_rate=round_half_up(weekly_rate, 2),
    )
    logger.debug(f"[PROGRESS] {current.display_text} -> {target.display_text}: {metrics}")
    return metrics


def analyze_style_performance(
    sends: Iterable[SendRecord],
    params: Optional[ProgressParams] = None
) -> Dict[str, StylePerformance]:
    """
    Summarise sends per climbing style.

    Every style is present in the result; styles without sends report
    count 0, average 0 and best grade 'N/A'. Sends without a style are
    ignored. The best grade is ranked with ``params.cross_system_offset``
    when a style mixes V-scale and YDS sends.
    """
    if params is None:
        params = ProgressParams()

    sends = list(sends)
    analysis = {}

    for style in ClimbingStyle:
        grades = [parse_grade(s.grade) for s in sends if s.style == style]

        if not grades:
            analysis[style.value] = StylePerformance(0, 0, NO_SENDS_LABEL)
            continue

        average = float(np.mean([g.numeric_value for g in grades]))
        best = sort_grades(grades, params.cross_system_offset)[0]

        analysis[style.value] = StylePerformance(
            average_grade=round_half_up(average, 1),
            count=len(grades),
            best_grade=best.display_text,
        )

    return analysis


def generate_training_recommendations(
    target_grade: str,
    style_analysis: Mapping[str, StylePerformance],
    training_load: TrainingLoad,
    params: Optional[ProgressParams] = None
) -> List[str]:
    """
    Rule-based training advice.

    Rules, in output order:
    1. Weakest style trails the strongest by more than ``weak_style_gap``
    2. Load below ``low_load`` or above ``high_load``
    3. Average attempted grade more than ``intensity_gap`` below the target
    4. Target at or above V``advanced_target_v``: fixed power/tension advice

    Args:
        target_grade: Goal grade
        style_analysis: Output of analyze_style_performance
        training_load: Output of calculate_training_load
        params: ProgressParams (defaults if None)

    Returns:
        List of recommendation strings (possibly empty)
    """
    if params is None:
        params = ProgressParams()

    recommendations = []
    target = parse_grade(target_grade)

    ranked = sorted(
        ((style, perf) for style, perf in style_analysis.items() if perf.count > 0),
        key=lambda item: item[1].average_grade
    )
    if ranked:
        weakest, weakest_perf = ranked[0]
        strongest, strongest_perf = ranked[-1]
        gap = strongest_perf.average_grade - weakest_perf.average_grade

        if gap > params.weak_style_gap:
            recommendations.append(
                f"Focus on {weakest} climbing - it's {gap:.1f} grades behind your {strongest}"
            )

    if training_load.load < params.low_load:
        recommendations.append('Consider increasing training frequency or session length')
    elif training_load.load > params.high_load:
        recommendations.append('High training load detected - ensure adequate recovery')

    if training_load.intensity < target.numeric_value - params.intensity_gap:
        recommendations.append('Gradually increase the difficulty of problems you attempt')

    if target.parsed and to_v_level(target) >= params.advanced_target_v:
        recommendations.extend(ADVANCED_TARGET_ADVICE)

    return recommendations
