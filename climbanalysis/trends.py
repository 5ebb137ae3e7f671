"""
Period summaries and weekly trends for the dashboard.

Built on pandas resampling of the session and send records.
"""

from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from climbcore.grades import CROSS_SYSTEM_OFFSET, GradeSystem, parse_grade, sort_grades
from climbcore.records import SendRecord, SessionRecord, SessionType
from climbcore.training_load import calculate_success_rate, filter_recent_sessions
from climbcore.validation import ValidationError, round_half_up, round_int
from climbdata.loader import sends_to_frame, sessions_to_frame


NO_DATA_LABEL = 'N/A'


@dataclass(frozen=True)
class DataPoint:
    """One point of a chart series."""
    date: date
    value: float
    label: str = ''

    def to_dict(self) -> Dict[str, object]:
        return {'date': self.date.isoformat(), 'value': self.value, 'label': self.label}


@dataclass(frozen=True)
class PeriodSummary:
    """Headline numbers for a trailing period."""
    period_days: int
    sessions_completed: int
    average_grade: str
    highest_grade: str
    success_rate: int
    volume_climbed: float    # Minutes
    rest_days: int

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def _week_start(series: pd.Series) -> pd.Series:
    return series.dt.to_period('W').dt.start_time


def weekly_volume_trend(
    sessions: Iterable[SessionRecord],
    weeks: int = 8,
    as_of: Optional[date] = None
) -> List[DataPoint]:
    """
    Climbing minutes per calendar week (Monday start), rest days excluded.

    Weeks without sessions are present with value 0.
    """
    if weeks <= 0:
        raise ValidationError(f"weeks must be positive, got {weeks}")

    as_of = as_of or date.today()
    df = sessions_to_frame(filter_recent_sessions(sessions, weeks * 7, as_of))

    first_week = pd.Timestamp(as_of - timedelta(days=weeks * 7)).to_period('W').start_time
    last_week = pd.Timestamp(as_of).to_period('W').start_time
    index = pd.date_range(first_week, last_week, freq='7D')

    if df.empty:
        totals = pd.Series(0.0, index=index)
    else:
        df['week'] = _week_start(df['date'])
        totals = df.groupby('week')['duration_minutes'].sum().reindex(index, fill_value=0.0)

    return [
        DataPoint(ts.date(), float(value), f"Week of {ts:%b %d}")
        for ts, value in totals.items()
    ]


def grade_progression(
    sends: Iterable[SendRecord],
    cross_system_offset: int = CROSS_SYSTEM_OFFSET
) -> List[DataPoint]:
    """
    Hardest grade sent in each calendar week that had sends.

    Weeks mixing V-scale and YDS sends are ranked with compare_grades.
    Values are numeric grades; labels are the display grade.
    """
    df = sends_to_frame(sends)
    if df.empty:
        return []

    df['week'] = _week_start(df['date'])

    points = []
    for week, group in df.groupby('week'):
        best = sort_grades(group['grade'], cross_system_offset)[0]
        points.append(DataPoint(week.date(), float(best.numeric_value), best.display_text))
    return points


def summarize_period(
    sessions: Iterable[SessionRecord],
    days: int = 30,
    as_of: Optional[date] = None,
    cross_system_offset: int = CROSS_SYSTEM_OFFSET
) -> PeriodSummary:
    """
    Summarise the journal over the trailing ``days``.

    Average grade covers V-scale attempts only, since YDS and V-scale
    numbers cannot be averaged together. Highest grade is ranked with
    ``cross_system_offset``.
    """
    if days <= 0:
        raise ValidationError(f"days must be positive, got {days}")

    sessions = list(sessions)
    window = filter_recent_sessions(sessions, days, as_of, include_rest=True)
    climbing = [s for s in window if s.session_type != SessionType.REST]

    v_attempts = [
        g.numeric_value
        for g in (parse_grade(text) for s in climbing for text in s.grades_attempted)
        if g.parsed and g.system == GradeSystem.V_SCALE
    ]
    average_grade = f"V{round_int(float(np.mean(v_attempts)))}" if v_attempts else NO_DATA_LABEL

    completed = [text for s in climbing for text in s.grades_completed]
    parsed_completed = [g for g in sort_grades(completed, cross_system_offset) if g.parsed]
    highest_grade = parsed_completed[0].display_text if parsed_completed else NO_DATA_LABEL

    return PeriodSummary(
        period_days=days,
        sessions_completed=len(climbing),
        average_grade=average_grade,
        highest_grade=highest_grade,
        success_rate=calculate_success_rate(window, days, as_of),
        volume_climbed=round_half_up(sum(s.duration_minutes for s in climbing), 1),
        rest_days=len(window) - len(climbing),
    )
