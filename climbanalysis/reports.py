"""
Plain-text climber report.

Pulls every calculator together into the summary a coach would read:
progress toward the goal grade, training load, style breakdown,
recommendations and (optionally) nutrition targets.
"""

from datetime import date, datetime
from typing import Iterable, List, Optional

from climbcore.nutrition import (
    MacroIntake,
    NutritionProfile,
    calculate_macro_distribution,
    calculate_nutrition_targets,
    calculate_supplement_priorities,
    calculate_weekly_averages,
    generate_nutrition_insights,
)
from climbcore.params import CoachParams
from climbcore.progress import (
    analyze_style_performance,
    calculate_progress,
    generate_training_recommendations,
)
from climbcore.records import NutritionLog, SendRecord, SessionRecord
from climbcore.training_load import calculate_training_load

from .trends import summarize_period, weekly_volume_trend


def _section(title: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n"


def generate_climber_report(
    current_grade: str,
    target_grade: str,
    sessions: Iterable[SessionRecord],
    sends: Iterable[SendRecord],
    profile: Optional[NutritionProfile] = None,
    nutrition_logs: Optional[Iterable[NutritionLog]] = None,
    params: Optional[CoachParams] = None,
    as_of: Optional[date] = None,
    title: str = "Climbing Coach Report"
) -> str:
    """
    Generate a text report from a climber's journal.

    Args:
        current_grade: Climber's current grade
        target_grade: Goal grade
        sessions: Journal sessions
        sends: Benchmark sends
        profile: Nutrition profile (nutrition section skipped if None)
        nutrition_logs: Recent intake logs for insights
        params: CoachParams (defaults if None)
        as_of: Report date (defaults to today)
        title: Report title

    Returns:
        Formatted report string
    """
    if params is None:
        params = CoachParams()
    as_of = as_of or date.today()
    sessions = list(sessions)
    sends = list(sends)
    load_params = params.training_load

    progress = calculate_progress(current_grade, target_grade, sends, params.progress)
    load = calculate_training_load(sessions, load_params.weeks_period, as_of, load_params)
    offset = params.progress.cross_system_offset
    summary = summarize_period(sessions, load_params.success_days_period, as_of, offset)
    styles = analyze_style_performance(sends, params.progress)
    recommendations = generate_training_recommendations(
        target_grade, styles, load, params.progress
    )

    report = f"""
{'=' * 70}
{title}
{'=' * 70}
Generated: {datetime.now().strftime("%Y-%m-%d %H:%M:%S")}
As of:     {as_of.isoformat()}
"""

    report += _section("PROGRESS")
    report += f"Current level:             {progress.current_level:>8d}\n"
    report += f"Target level:              {progress.target_level:>8d}\n"
    report += f"Progress:                  {progress.progress_percentage:>8.1f}%\n"
    report += f"Weekly rate:               {progress.weekly_progress_rate:>8.2f} grades/week\n"
    report += f"Estimated days to target:  {progress.estimated_days_to_target:>8d}\n"

    report += _section(f"TRAINING LOAD (last {load_params.weeks_period} weeks)")
    report += f"Volume:                    {load.volume:>8.0f} min/week\n"
    report += f"Intensity:                 {load.intensity:>8.1f}\n"
    report += f"Density:                   {load.density:>8.1f} sessions/week\n"
    report += f"Load score:                {load.load:>8.0f} / 100\n"

    report += _section(f"LAST {summary.period_days} DAYS")
    report += f"Sessions:                  {summary.sessions_completed:>8d}\n"
    report += f"Rest days logged:          {summary.rest_days:>8d}\n"
    report += f"Average grade:             {summary.average_grade:>8s}\n"
    report += f"Highest grade:             {summary.highest_grade:>8s}\n"
    report += f"Success rate:              {summary.success_rate:>8d}%\n"

    report += _section("WEEKLY VOLUME")
    for point in weekly_volume_trend(sessions, weeks=4, as_of=as_of):
        report += f"{point.label:<20} {point.value:>8.0f} min\n"

    report += _section("STYLE BREAKDOWN")
    report += f"{'Style':<12} {'Sends':>6} {'Average':>8} {'Best':>8}\n"
    report += "-" * 38 + "\n"
    for style, perf in styles.items():
        report += f"{style:<12} {perf.count:>6d} {perf.average_grade:>8.1f} {perf.best_grade:>8s}\n"

    report += _section("RECOMMENDATIONS")
    report += _bullets(recommendations)

    if profile is not None:
        report += _nutrition_section(profile, list(nutrition_logs or []))

    return report


def _bullets(lines: List[str]) -> str:
    if not lines:
        return "  (none)\n"
    return "".join(f"  - {line}\n" for line in lines)


def _nutrition_section(profile: NutritionProfile, logs: List[NutritionLog]) -> str:
    targets = calculate_nutrition_targets(profile)
    split = calculate_macro_distribution(targets)

    text = _section("NUTRITION TARGETS")
    text += f"Calories:                  {targets.calories:>8d} kcal\n"
    text += f"Protein:                   {targets.protein_g:>8d} g ({split.protein}%)\n"
    text += f"Carbs:                     {targets.carbs_g:>8d} g ({split.carbs}%)\n"
    text += f"Fat:                       {targets.fat_g:>8d} g ({split.fat}%)\n"
    text += f"Hydration:                 {targets.hydration_ml:>8d} ml\n"

    if not logs:
        return text

    averages = calculate_weekly_averages(logs)
    intake = MacroIntake(
        calories=averages.calories,
        protein_g=averages.protein_g,
        carbs_g=averages.carbs_g,
        fat_g=averages.fat_g,
    )

    text += _section(f"NUTRITION INSIGHTS ({averages.days} days logged)")
    text += _bullets(generate_nutrition_insights(intake, targets, profile))

    text += _section("SUPPLEMENTS")
    text += _bullets([
        f"[{p.priority.value}] {p.supplement}: {p.reason}"
        for p in calculate_supplement_priorities(profile, intake, targets)
    ])
    return text
