"""
Training load: volume, intensity and density over a trailing window.

    volume    = total minutes / weeks
    intensity = mean numeric grade of everything attempted
    density   = sessions / weeks
    load      = mean(volume/300, intensity/10, density/5), each clipped to [0, 1], x 100

Rest days are excluded. Success rate compares completed to attempted
grades over a trailing window of days.
"""

from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

import numpy as np
from loguru import logger

from .grades import parse_grade
from .params import TrainingLoadParams
from .records import SessionRecord, SessionType
from .validation import ValidationError, round_half_up, round_int, safe_ratio


@dataclass(frozen=True)
class TrainingLoad:
    """Aggregated training load for a window."""
    volume: float       # Minutes per week
    intensity: float    # Average attempted numeric grade
    density: float      # Sessions per week
    load: float         # Combined 0-100 score

    @classmethod
    def zero(cls) -> 'TrainingLoad':
        return cls(volume=0, intensity=0.0, density=0.0, load=0)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _window_start(as_of: Optional[date], days: int) -> date:
    as_of = as_of or date.today()
    return as_of - timedelta(days=days)


def filter_recent_sessions(
    sessions: Iterable[SessionRecord],
    days: int,
    as_of: Optional[date] = None,
    include_rest: bool = False
) -> List[SessionRecord]:
    """
    Sessions dated within ``days`` of ``as_of`` (inclusive).

    Args:
        sessions: Session records
        days: Window length in days
        as_of: End of the window (defaults to today)
        include_rest: Keep rest-day entries

    Returns:
        Matching sessions in their original order
    """
    cutoff = _window_start(as_of, days)
    return [
        s for s in sessions
        if s.date >= cutoff and (include_rest or s.session_type != SessionType.REST)
    ]


def calculate_training_load(
    sessions: Iterable[SessionRecord],
    weeks_period: int = 4,
    as_of: Optional[date] = None,
    params: Optional[TrainingLoadParams] = None
) -> TrainingLoad:
    """
    Aggregate sessions in the trailing window into a TrainingLoad.

    Args:
        sessions: Logged sessions
        weeks_period: Window length in weeks
        as_of: End of the window (defaults to today)
        params: Normalisation caps (defaults if None)

    Returns:
        TrainingLoad with volume/load rounded to integers and
        intensity/density to one decimal; all zeros when the window is empty
    """
    if params is None:
        params = TrainingLoadParams()

    if weeks_period <= 0:
        raise ValidationError(f"weeks_period must be positive, got {weeks_period}")

    recent = filter_recent_sessions(sessions, weeks_period * 7, as_of)

    if not recent:
        logger.debug(f"[LOAD] No sessions in the last {weeks_period} weeks")
        return TrainingLoad.zero()

    total_minutes = sum(s.duration_minutes for s in recent)
    volume = total_minutes / weeks_period

    attempted = [parse_grade(g).numeric_value for s in recent for g in s.grades_attempted]
    intensity = float(np.mean(attempted)) if attempted else 0.0

    density = len(recent) / weeks_period

    normalized = np.clip(
        [
            volume / params.volume_cap,
            intensity / params.intensity_cap,
            density / params.density_cap,
        ],
        0.0, 1.0
    )
    load = float(np.mean(normalized)) * 100

    logger.debug(
        f"[LOAD] {len(recent)} sessions over {weeks_period} weeks: "
        f"volume={volume:.1f} intensity={intensity:.2f} density={density:.2f} load={load:.1f}"
    )

    return TrainingLoad(
        volume=round_int(volume),
        intensity=round_half_up(intensity, 1),
        density=round_half_up(density, 1),
        load=round_int(load),
    )


def calculate_success_rate(
    entries: Iterable[SessionRecord],
    days_period: int = 30,
    as_of: Optional[date] = None
) -> int:
    """
    Percentage of attempted grades that were completed in the window.

    Args:
        entries: Journal entries with attempted/completed grades
        days_period: Window length in days
        as_of: End of the window (defaults to today)

    Returns:
        Rounded percentage, 0 when nothing was attempted
    """
    if days_period <= 0:
        raise ValidationError(f"days_period must be positive, got {days_period}")

    recent = filter_recent_sessions(entries, days_period, as_of, include_rest=True)

    attempted = sum(len(e.grades_attempted) for e in recent)
    completed = sum(len(e.grades_completed) for e in recent)

    return round_int(safe_ratio(completed, attempted) * 100)
