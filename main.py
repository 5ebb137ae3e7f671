#!/usr/bin/env python3
"""
Climbing Coach Calculations - CLI Entry Point

Usage:
    python main.py grade V4 5.11a [--to yds]
    python main.py options {v-scale,yds}
    python main.py progress --current V4 --target V7 --sends sends.json
    python main.py load --sessions sessions.json [--weeks 4] [--as-of 2024-06-01]
    python main.py nutrition --weight 160 --height 70 --age 30 --activity active --goal cut
    python main.py report (--data-dir DIR | --demo) --current V4 --target V6
"""

import argparse
import json
import sys
from datetime import date
from typing import List, Optional

from loguru import logger

from climbcore import (
    CoachParams,
    GradeSystem,
    MacroIntake,
    NutritionProfile,
    ValidationError,
    analyze_style_performance,
    calculate_meal_timing,
    calculate_nutrition_targets,
    calculate_progress,
    calculate_success_rate,
    calculate_supplement_priorities,
    calculate_training_load,
    calculate_weekly_averages,
    convert_grade,
    generate_nutrition_insights,
    generate_training_recommendations,
    get_grade_conversions,
    get_grade_options,
    load_params,
    parse_grade,
)
from climbcore.records import coerce_date
from climbdata import (
    ClimberArchetype,
    ClimbingDataLoader,
    generate_climber_history,
    generate_nutrition_logs,
    load_nutrition_logs,
    load_sends,
    load_sessions,
)
from climbanalysis import generate_climber_report


def _setup_logging(verbose: bool = False) -> None:
    """Send log output to stderr so command output stays clean on stdout."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level="DEBUG" if verbose else "WARNING",
    )


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def _as_of(args) -> date:
    return coerce_date(args.as_of, 'as_of') if args.as_of else date.today()


def run_grade(args, params: CoachParams) -> None:
    """Parse grades and show their conversions."""
    results = []
    for text in args.grades:
        grade = parse_grade(text)
        entry = grade.to_dict()
        entry['parsed'] = grade.parsed
        entry['conversions'] = get_grade_conversions(grade).to_dict()
        if args.to:
            entry['converted'] = convert_grade(grade, args.to)
        results.append(entry)
    _print_json(results)


def run_options(args, params: CoachParams) -> None:
    for option in get_grade_options(args.system):
        print(option['label'])


def run_progress(args, params: CoachParams) -> None:
    """Progress toward a goal grade from a sends file."""
    sends = load_sends(args.sends)
    metrics = calculate_progress(args.current, args.target, sends, params.progress)
    styles = analyze_style_performance(sends, params.progress)

    _print_json({
        'progress': metrics.to_dict(),
        'styles': {style: perf.to_dict() for style, perf in styles.items()},
    })


def run_load(args, params: CoachParams) -> None:
    """Training load, success rate and recommendations from a sessions file."""
    sessions = load_sessions(args.sessions)
    as_of = _as_of(args)
    weeks = args.weeks if args.weeks is not None else params.training_load.weeks_period

    load = calculate_training_load(sessions, weeks, as_of, params.training_load)
    result = {
        'training_load': load.to_dict(),
        'success_rate': calculate_success_rate(
            sessions, params.training_load.success_days_period, as_of
        ),
    }
    if args.target:
        sends = load_sends(args.sends) if args.sends else []
        result['recommendations'] = generate_training_recommendations(
            args.target, analyze_style_performance(sends, params.progress), load, params.progress
        )
    _print_json(result)


def run_nutrition(args, params: CoachParams) -> None:
    """Nutrition targets, plus insights when intake logs are given."""
    profile = NutritionProfile(
        weight_lb=args.weight,
        height_in=args.height,
        age=args.age,
        activity_level=args.activity,
        goal=args.goal,
        dietary_restrictions=tuple(args.restrictions or ()),
        sex=args.sex,
    )
    targets = calculate_nutrition_targets(profile)
    result = {'targets': targets.to_dict()}

    if args.logs:
        averages = calculate_weekly_averages(load_nutrition_logs(args.logs))
        intake = MacroIntake(
            calories=averages.calories,
            protein_g=averages.protein_g,
            carbs_g=averages.carbs_g,
            fat_g=averages.fat_g,
        )
        result['averages'] = averages.to_dict()
        result['insights'] = generate_nutrition_insights(intake, targets, profile)
        result['supplements'] = [
            p.to_dict() for p in calculate_supplement_priorities(profile, intake, targets)
        ]

    if args.workout_time:
        timing = calculate_meal_timing(args.workout_time)
        result['meal_timing'] = {
            'pre_workout': timing.pre_workout_time,
            'post_workout': timing.post_workout_time,
        }

    _print_json(result)


def run_report(args, params: CoachParams) -> None:
    """Full text report from a fixture directory or a synthetic climber."""
    as_of = _as_of(args)
    profile = None
    if args.weight and args.height and args.age:
        profile = NutritionProfile(
            weight_lb=args.weight,
            height_in=args.height,
            age=args.age,
            activity_level=args.activity,
            goal=args.goal,
        )

    if args.demo:
        history = generate_climber_history(
            ClimberArchetype(args.archetype), n_weeks=12, seed=args.seed, as_of=as_of
        )
        sessions, sends = history.sessions, history.sends
        current = args.current or history.current_grade
        logs = generate_nutrition_logs(7, seed=args.seed, as_of=as_of) if profile else []
    else:
        data = ClimbingDataLoader(args.data_dir).load_all()
        sessions, sends, logs = data['sessions'], data['sends'], data['nutrition']
        current = args.current

    if not current:
        raise ValidationError("--current is required unless --demo is used")

    print(generate_climber_report(
        current, args.target, sessions, sends,
        profile=profile, nutrition_logs=logs, params=params, as_of=as_of
    ))


def _add_profile_args(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument('--weight', type=float, required=required, help='Body weight (lb)')
    parser.add_argument('--height', type=float, required=required, help='Height (in)')
    parser.add_argument('--age', type=int, required=required, help='Age (years)')
    parser.add_argument('--activity', default='moderate',
                        help='sedentary, light, moderate, active or very-active')
    parser.add_argument('--goal', default='maintain', help='maintain, cut, bulk or recomp')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Climbing Coach Calculations')
    parser.add_argument('--params', help='JSON parameter file')
    parser.add_argument('--verbose', action='store_true', help='Debug logging on stderr')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Grade command
    grade_parser = subparsers.add_parser('grade', help='Parse and convert grades')
    grade_parser.add_argument('grades', nargs='+', help='Grades such as V4 or 5.11a')
    grade_parser.add_argument('--to', choices=[s.value for s in GradeSystem],
                              help='Target grading system')

    # Options command
    opt_parser = subparsers.add_parser('options', help='List selectable grades')
    opt_parser.add_argument('system', choices=[s.value for s in GradeSystem])

    # Progress command
    prog_parser = subparsers.add_parser('progress', help='Progress toward a goal grade')
    prog_parser.add_argument('--current', required=True, help='Current grade')
    prog_parser.add_argument('--target', required=True, help='Target grade')
    prog_parser.add_argument('--sends', required=True, help='Sends fixture (JSON/CSV)')

    # Load command
    load_parser = subparsers.add_parser('load', help='Training load and success rate')
    load_parser.add_argument('--sessions', required=True, help='Sessions fixture (JSON/CSV)')
    load_parser.add_argument('--weeks', type=int, help='Trailing window in weeks')
    load_parser.add_argument('--as-of', help='End of window (YYYY-MM-DD)')
    load_parser.add_argument('--target', help='Target grade for recommendations')
    load_parser.add_argument('--sends', help='Sends fixture for the style breakdown')

    # Nutrition command
    nut_parser = subparsers.add_parser('nutrition', help='Nutrition targets and insights')
    _add_profile_args(nut_parser, required=True)
    nut_parser.add_argument('--sex', default='male', choices=['male', 'female'])
    nut_parser.add_argument('--restrictions', nargs='*', help='e.g. vegetarian')
    nut_parser.add_argument('--logs', help='Nutrition log fixture (JSON/CSV)')
    nut_parser.add_argument('--workout-time', help='Session start, e.g. 17:30')

    # Report command
    rep_parser = subparsers.add_parser('report', help='Full climber report')
    source = rep_parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--data-dir', help='Directory with sends/sessions/nutrition fixtures')
    source.add_argument('--demo', action='store_true', help='Use a synthetic climber')
    rep_parser.add_argument('--current', help='Current grade')
    rep_parser.add_argument('--target', required=True, help='Target grade')
    rep_parser.add_argument('--as-of', help='Report date (YYYY-MM-DD)')
    rep_parser.add_argument('--archetype', default='intermediate',
                            choices=[a.value for a in ClimberArchetype])
    rep_parser.add_argument('--seed', type=int, default=42, help='Random seed')
    _add_profile_args(rep_parser, required=False)

    return parser


COMMANDS = {
    'grade': run_grade,
    'options': run_options,
    'progress': run_progress,
    'load': run_load,
    'nutrition': run_nutrition,
    'report': run_report,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.command not in COMMANDS:
        parser.print_help()
        return 1

    try:
        params = load_params(args.params) if args.params else CoachParams()
        COMMANDS[args.command](args, params)
    except (ValidationError, FileNotFoundError) as e:
        logger.error(str(e))
        return 2
    return 0


if __name__ == '__main__':
    sys.exit(main())
