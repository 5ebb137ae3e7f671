"""
Input records consumed by the calculators.

Records are immutable snapshots supplied by the caller (journal, benchmark
sends, nutrition logs). Raw strings coming from forms or fixtures are
coerced on construction: dates may be ISO strings, enumerated fields may be
their string values.
"""

from dataclasses import dataclass, asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from .validation import ValidationError, coerce_enum, require_non_negative


class ClimbingStyle(Enum):
    """Wall angle / style of a send."""
    SLAB = "slab"
    VERTICAL = "vertical"
    OVERHANG = "overhang"
    ROOF = "roof"


class Significance(Enum):
    """Why a benchmark send matters to the climber."""
    BREAKTHROUGH = "breakthrough"
    MILESTONE = "milestone"
    PERSONAL_BEST = "personal-best"
    PROJECT_SEND = "project-send"


class SessionType(Enum):
    """Journal session classification."""
    GYM = "gym"
    OUTDOOR = "outdoor"
    TRAINING = "training"
    REST = "rest"


def coerce_date(value: Any, field_name: str = 'date') -> date:
    """
    Convert a date, datetime or ISO-8601 string to a date.

    Timestamps ('2024-03-01T18:30:00Z') are truncated to their calendar day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if hasattr(value, 'to_pydatetime'):
        # pandas Timestamp
        return value.to_pydatetime().date()
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
    raise ValidationError(f"{field_name} must be a date or ISO date string, got {value!r}")


def _string_tuple(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(str(v) for v in values)


@dataclass(frozen=True)
class SendRecord:
    """A dated climbing achievement (journal tick or benchmark send)."""
    grade: str
    date: date
    style: Optional[ClimbingStyle] = None
    significance: Optional[Significance] = None
    name: str = ''
    location: str = ''

    def __post_init__(self):
        object.__setattr__(self, 'date', coerce_date(self.date))
        if self.style is not None:
            object.__setattr__(self, 'style', coerce_enum(ClimbingStyle, self.style, 'style'))
        if self.significance is not None:
            object.__setattr__(
                self, 'significance',
                coerce_enum(Significance, self.significance, 'significance')
            )

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['date'] = self.date.isoformat()
        d['style'] = self.style.value if self.style else None
        d['significance'] = self.significance.value if self.significance else None
        return d


@dataclass(frozen=True)
class SessionRecord:
    """
    A logged training session.

    ``grades_completed`` is optional; it is only read by the success-rate
    calculation.
    """
    date: date
    duration_minutes: float
    grades_attempted: Tuple[str, ...] = ()
    session_type: SessionType = SessionType.GYM
    grades_completed: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'date', coerce_date(self.date))
        object.__setattr__(
            self, 'duration_minutes',
            require_non_negative('duration_minutes', self.duration_minutes)
        )
        object.__setattr__(self, 'grades_attempted', _string_tuple(self.grades_attempted))
        object.__setattr__(self, 'grades_completed', _string_tuple(self.grades_completed))
        object.__setattr__(
            self, 'session_type',
            coerce_enum(SessionType, self.session_type, 'session_type')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date.isoformat(),
            'duration_minutes': self.duration_minutes,
            'grades_attempted': list(self.grades_attempted),
            'session_type': self.session_type.value,
            'grades_completed': list(self.grades_completed),
        }


@dataclass(frozen=True)
class NutritionLog:
    """One day of logged intake."""
    date: date
    total_calories: float
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    hydration_ml: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'date', coerce_date(self.date))
        for name in ('total_calories', 'protein_g', 'carbs_g', 'fat_g', 'hydration_ml'):
            object.__setattr__(self, name, require_non_negative(name, getattr(self, name)))
