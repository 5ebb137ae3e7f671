"""
Tests for fixture loading, synthetic data, trends, reports and the CLI.

Run with: python -m pytest tests/test_pipeline.py -v
"""

import json
from datetime import date, timedelta

import pytest

from climbanalysis import (
    generate_climber_report,
    grade_progression,
    summarize_period,
    weekly_volume_trend,
)
from climbcore import (
    ClimbingStyle,
    NutritionProfile,
    SendRecord,
    SessionRecord,
    SessionType,
    ValidationError,
)
from climbdata import (
    ClimberArchetype,
    ClimbingDataLoader,
    generate_climber_history,
    generate_nutrition_logs,
    load_nutrition_logs,
    load_sends,
    load_sessions,
    read_table,
    sends_to_frame,
)
from main import main


AS_OF = date(2024, 6, 30)   # a Sunday


def write_json(path, records):
    path.write_text(json.dumps(records))
    return path


@pytest.fixture
def fixture_dir(tmp_path):
    """Directory with app-style JSON exports for one climber."""
    write_json(tmp_path / "sends.json", [
        {"grade": "V3", "date": "2024-06-02", "style": "slab", "significance": "milestone",
         "name": "Warm Arete", "location": "Gym"},
        {"grade": "V5", "date": "2024-06-16", "style": "overhang"},
        {"grade": "V6", "date": "2024-06-28T19:00:00Z", "style": "overhang"},
    ])
    write_json(tmp_path / "sessions.json", [
        {"date": "2024-06-24", "duration": 60, "gradesAttempted": ["V3", "V4", "V5"],
         "gradesCompleted": ["V3", "V4"], "sessionType": "gym"},
        {"date": "2024-06-26", "duration": 90, "gradesAttempted": ["V4", "V6"],
         "gradesCompleted": ["V4"], "sessionType": "outdoor"},
        {"date": "2024-06-27", "duration": 0, "sessionType": "rest"},
    ])
    write_json(tmp_path / "nutrition.json", [
        {"date": "2024-06-29", "totalCalories": 2200,
         "macros": {"protein": 120, "carbs": 250, "fat": 70}, "hydration": 2500},
        {"date": "2024-06-30", "totalCalories": 2400,
         "macros": {"protein": 140, "carbs": 270, "fat": 75}},
    ])
    return tmp_path


# =============================================================================
# Loader Tests
# =============================================================================

class TestLoader:
    """Tests for fixture loading."""

    def test_json_sends(self, fixture_dir):
        sends = load_sends(fixture_dir / "sends.json")
        assert len(sends) == 3
        assert sends[0].style == ClimbingStyle.SLAB
        assert sends[0].name == "Warm Arete"
        assert sends[1].significance is None
        assert sends[2].date == date(2024, 6, 28)

    def test_json_sessions_camel_case(self, fixture_dir):
        sessions = load_sessions(fixture_dir / "sessions.json")
        assert sessions[0].duration_minutes == 60
        assert sessions[0].grades_attempted == ("V3", "V4", "V5")
        assert sessions[1].session_type == SessionType.OUTDOOR
        assert sessions[2].session_type == SessionType.REST
        assert sessions[2].grades_attempted == ()

    def test_nested_macros(self, fixture_dir):
        logs = load_nutrition_logs(fixture_dir / "nutrition.json")
        assert logs[0].protein_g == 120
        assert logs[0].hydration_ml == 2500
        assert logs[1].hydration_ml == 0

    def test_csv_sessions(self, tmp_path):
        path = tmp_path / "sessions.csv"
        path.write_text(
            "date,duration_minutes,grades_attempted,session_type,grades_completed\n"
            "2024-06-24,75,V2;V3; V4,training,V2\n"
            "2024-06-25,0,,rest,\n"
        )
        sessions = load_sessions(path)
        assert sessions[0].duration_minutes == 75
        assert sessions[0].grades_attempted == ("V2", "V3", "V4")
        assert sessions[0].grades_completed == ("V2",)
        assert sessions[1].session_type == SessionType.REST

    def test_missing_columns(self, tmp_path):
        path = write_json(tmp_path / "sends.json", [{"grade": "V3"}])
        with pytest.raises(ValidationError):
            load_sends(path)

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "sends.xlsx"
        path.write_text("")
        with pytest.raises(ValidationError):
            read_table(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_table(tmp_path / "nope.json")

    def test_directory_loader(self, fixture_dir):
        data = ClimbingDataLoader(fixture_dir).load_all()
        assert len(data['sends']) == 3
        assert len(data['sessions']) == 3
        assert len(data['nutrition']) == 2

    def test_directory_loader_missing_files(self, tmp_path):
        write_json(tmp_path / "sends.json", [{"grade": "V1", "date": "2024-01-01"}])
        data = ClimbingDataLoader(tmp_path).load_all()
        assert len(data['sends']) == 1
        assert data['sessions'] == []
        assert data['nutrition'] == []

    def test_sends_frame(self):
        df = sends_to_frame([SendRecord("5.11c", AS_OF), SendRecord("v2", AS_OF)])
        assert list(df['grade']) == ["5.11c", "V2"]
        assert list(df['grade_numeric']) == [112, 2]


# =============================================================================
# Synthetic Data Tests
# =============================================================================

class TestSyntheticData:
    """Tests for synthetic climber generation."""

    def test_reproducible(self):
        a = generate_climber_history(seed=7, as_of=AS_OF)
        b = generate_climber_history(seed=7, as_of=AS_OF)
        assert [s.to_dict() for s in a.sessions] == [s.to_dict() for s in b.sessions]
        assert [s.to_dict() for s in a.sends] == [s.to_dict() for s in b.sends]

    @pytest.mark.parametrize("archetype", list(ClimberArchetype))
    def test_history_shape(self, archetype):
        history = generate_climber_history(archetype, n_weeks=8, seed=1, as_of=AS_OF)
        first_day = AS_OF - timedelta(days=8 * 7 - 1)

        assert history.sessions
        assert all(first_day <= s.date <= AS_OF for s in history.sessions)
        assert any(s.session_type == SessionType.REST for s in history.sessions)

        climbing = [s for s in history.sessions if s.session_type != SessionType.REST]
        for s in climbing:
            assert s.duration_minutes > 0
            assert set(s.grades_completed) <= set(s.grades_attempted)

    def test_sends_never_regress(self):
        history = generate_climber_history(ClimberArchetype.BEGINNER, n_weeks=16, seed=3, as_of=AS_OF)
        levels = [int(s.grade[1:]) for s in history.sends]
        assert levels == sorted(levels)
        if history.sends:
            assert history.current_grade == history.sends[-1].grade

    def test_nutrition_logs(self):
        logs = generate_nutrition_logs(7, seed=11, as_of=AS_OF)
        assert len(logs) == 7
        assert logs[-1].date == AS_OF
        assert all(log.total_calories >= 0 for log in logs)


# =============================================================================
# Trend Tests
# =============================================================================

class TestTrends:
    """Tests for weekly trends and period summaries."""

    def sessions(self):
        return [
            SessionRecord("2024-06-17", 45, ["V2"], "gym", ["V2"]),
            SessionRecord("2024-06-24", 60, ["V3", "V4", "V5"], "gym", ["V3", "V4"]),
            SessionRecord("2024-06-26", 90, ["V4", "V6"], "outdoor", ["V4"]),
            SessionRecord("2024-06-27", 0, [], "rest"),
            SessionRecord("2024-05-01", 60, ["V9"], "gym", ["V9"]),
        ]

    def test_weekly_volume(self):
        trend = weekly_volume_trend(self.sessions(), weeks=2, as_of=AS_OF)
        assert [p.date for p in trend] == [date(2024, 6, 10), date(2024, 6, 17), date(2024, 6, 24)]
        assert [p.value for p in trend] == [0.0, 45.0, 150.0]
        assert trend[-1].label == "Week of Jun 24"

    def test_weekly_volume_empty(self):
        trend = weekly_volume_trend([], weeks=4, as_of=AS_OF)
        assert trend
        assert all(p.value == 0 for p in trend)

    def test_grade_progression(self):
        sends = [
            SendRecord("V4", "2024-06-18"),
            SendRecord("V3", "2024-06-24"),
            SendRecord("V5", "2024-06-26"),
        ]
        points = grade_progression(sends)
        assert [(p.date, p.value, p.label) for p in points] == [
            (date(2024, 6, 17), 4.0, "V4"),
            (date(2024, 6, 24), 5.0, "V5"),
        ]
        assert grade_progression([]) == []

    def test_grade_progression_mixed_systems(self):
        sends = [SendRecord("V9", "2024-06-24"), SendRecord("5.10a", "2024-06-25")]
        # V9 + 95 = 104 outranks 5.10a = 100
        [point] = grade_progression(sends)
        assert (point.label, point.value) == ("V9", 9.0)

        [point] = grade_progression(sends, cross_system_offset=0)
        assert point.label == "5.10a"

    def test_summarize_mixed_systems(self):
        sessions = [
            SessionRecord("2024-06-24", 60, ["V9"], "gym", ["V9"]),
            SessionRecord("2024-06-26", 90, ["5.10a"], "outdoor", ["5.10a"]),
        ]
        assert summarize_period(sessions, as_of=AS_OF).highest_grade == "V9"
        assert summarize_period(sessions, as_of=AS_OF, cross_system_offset=0).highest_grade == "5.10a"

    def test_summarize_period(self):
        summary = summarize_period(self.sessions()[1:], days=30, as_of=AS_OF)
        assert summary.sessions_completed == 2
        assert summary.rest_days == 1
        assert summary.average_grade == "V4"
        assert summary.highest_grade == "V4"
        assert summary.success_rate == 60
        assert summary.volume_climbed == 150.0

    def test_summarize_empty(self):
        summary = summarize_period([], as_of=AS_OF)
        assert summary.average_grade == "N/A"
        assert summary.highest_grade == "N/A"
        assert summary.success_rate == 0


# =============================================================================
# Report Tests
# =============================================================================

class TestReport:
    """Tests for the text report."""

    def test_full_report(self, fixture_dir):
        data = ClimbingDataLoader(fixture_dir).load_all()
        profile = NutritionProfile(weight_lb=150, height_in=68, age=30)

        report = generate_climber_report(
            "V5", "V7", data['sessions'], data['sends'],
            profile=profile, nutrition_logs=data['nutrition'], as_of=AS_OF
        )

        for heading in ("PROGRESS", "TRAINING LOAD (last 4 weeks)", "LAST 30 DAYS",
                        "WEEKLY VOLUME", "STYLE BREAKDOWN", "RECOMMENDATIONS",
                        "NUTRITION TARGETS", "NUTRITION INSIGHTS (2 days logged)", "SUPPLEMENTS"):
            assert heading in report
        assert "Core tension work is crucial for V7+ overhangs" in report
        assert "2503 kcal" in report

    def test_report_without_profile(self):
        history = generate_climber_history(seed=5, as_of=AS_OF)
        report = generate_climber_report(
            history.current_grade, "V6", history.sessions, history.sends, as_of=AS_OF
        )
        assert "STYLE BREAKDOWN" in report
        assert "NUTRITION" not in report


# =============================================================================
# CLI Tests
# =============================================================================

class TestCLI:
    """Tests for the command-line entry point."""

    def test_grade(self, capsys):
        assert main(['grade', 'v4', '5.12A', '--to', 'yds']) == 0
        results = json.loads(capsys.readouterr().out)
        assert results[0]['grade'] == 'V4'
        assert results[0]['converted'] == '5.11a'
        assert results[1]['conversions']['v_scale'] == 8

    def test_options(self, capsys):
        assert main(['options', 'v-scale']) == 0
        lines = capsys.readouterr().out.split()
        assert len(lines) == 18

    def test_progress(self, fixture_dir, capsys):
        code = main(['progress', '--current', 'V5', '--target', 'V7',
                     '--sends', str(fixture_dir / 'sends.json')])
        assert code == 0
        result = json.loads(capsys.readouterr().out)
        assert result['progress']['target_level'] == 7
        assert result['styles']['overhang']['count'] == 2

    def test_load(self, fixture_dir, capsys):
        code = main(['load', '--sessions', str(fixture_dir / 'sessions.json'),
                     '--as-of', '2024-06-30', '--target', 'V7',
                     '--sends', str(fixture_dir / 'sends.json')])
        assert code == 0
        result = json.loads(capsys.readouterr().out)
        assert result['training_load']['density'] == 0.5
        assert result['success_rate'] == 60
        assert result['recommendations']

    def test_nutrition(self, fixture_dir, capsys):
        code = main(['nutrition', '--weight', '150', '--height', '68', '--age', '30',
                     '--logs', str(fixture_dir / 'nutrition.json'),
                     '--workout-time', '17:30'])
        assert code == 0
        result = json.loads(capsys.readouterr().out)
        assert result['targets']['calories'] == 2503
        assert result['averages']['days'] == 2
        assert result['meal_timing']['pre_workout'] == '03:00 PM'

    def test_demo_report(self, capsys):
        code = main(['report', '--demo', '--target', 'V6', '--as-of', '2024-06-30',
                     '--weight', '150', '--height', '68', '--age', '30'])
        assert code == 0
        out = capsys.readouterr().out
        assert 'PROGRESS' in out
        assert 'NUTRITION TARGETS' in out

    def test_invalid_input_exit_code(self, capsys):
        code = main(['nutrition', '--weight', '150', '--height', '68', '--age', '30',
                     '--activity', 'extreme'])
        assert code == 2
        assert 'activity_level' in capsys.readouterr().err

    def test_zero_weeks_rejected(self, fixture_dir):
        code = main(['load', '--sessions', str(fixture_dir / 'sessions.json'), '--weeks', '0'])
        assert code == 2

    @pytest.mark.parametrize("content", [
        '{"progress": {',
        '{"training_load": {"weeks_period": "four"}}',
    ])
    def test_bad_params_file(self, tmp_path, capsys, content):
        path = tmp_path / "params.json"
        path.write_text(content)
        assert main(['--params', str(path), 'options', 'yds']) == 2
        assert str(path) in capsys.readouterr().err

    def test_params_offset_reaches_style_breakdown(self, tmp_path, capsys):
        sends = write_json(tmp_path / "sends.json", [
            {"grade": "V5", "date": "2024-06-20", "style": "overhang"},
            {"grade": "5.12b", "date": "2024-06-21", "style": "overhang"},
        ])
        params = write_json(tmp_path / "params.json", {"progress": {"cross_system_offset": 130}})
        code = main(['--params', str(params), 'progress', '--current', 'V5',
                     '--target', 'V7', '--sends', str(sends)])
        assert code == 0
        result = json.loads(capsys.readouterr().out)
        assert result['styles']['overhang']['best_grade'] == 'V5'

    def test_report_requires_current(self, fixture_dir):
        assert main(['report', '--data-dir', str(fixture_dir), '--target', 'V6']) == 2

    def test_no_command(self, capsys):
        assert main([]) == 1
