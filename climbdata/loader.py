"""
Journal, benchmark-send and nutrition-log fixture loader.

Reads the JSON fixtures exported by the app (arrays of camelCase objects,
nutrition macros nested under "macros") or equivalent CSV files, and turns
them into the immutable records the calculators consume.

CSV list columns (grades attempted/completed) are ';'-separated.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union
import json

import numpy as np
import pandas as pd
from loguru import logger

from climbcore.grades import parse_grade
from climbcore.records import NutritionLog, SendRecord, SessionRecord
from climbcore.validation import ValidationError


# ===============================================================================
# COLUMN MAPPING
# ===============================================================================

COLUMN_ALIASES = {
    'gradesAttempted': 'grades_attempted',
    'gradesCompleted': 'grades_completed',
    'sessionType': 'session_type',
    'duration': 'duration_minutes',
    'durationMinutes': 'duration_minutes',
    'totalCalories': 'total_calories',
    'macros.protein': 'protein_g',
    'macros.carbs': 'carbs_g',
    'macros.fat': 'fat_g',
    'protein': 'protein_g',
    'carbs': 'carbs_g',
    'fat': 'fat_g',
    'hydration': 'hydration_ml',
}

SEND_COLUMNS = ['grade', 'date']
SESSION_COLUMNS = ['date', 'duration_minutes']
NUTRITION_COLUMNS = ['date', 'total_calories']

LIST_SEPARATOR = ';'


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, float):
        return np.isnan(value)
    return False


def _optional(value: Any) -> Optional[Any]:
    return None if _is_missing(value) else value


def _as_list(value: Any) -> List[str]:
    if _is_missing(value):
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(LIST_SEPARATOR) if v.strip()]
    return [str(v) for v in value]


def _require_columns(df: pd.DataFrame, columns: List[str], kind: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValidationError(f"{kind} data is missing columns: {missing}")


# ===============================================================================
# FILE READING
# ===============================================================================

def read_table(path: Union[str, Path]) -> pd.DataFrame:
    """
    Read a JSON or CSV fixture into a DataFrame with snake_case columns.

    Args:
        path: .json (array of objects) or .csv file

    Returns:
        DataFrame, one row per record
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Fixture not found: {path}")

    suffix = path.suffix.lower()
    if suffix == '.json':
        with open(path) as f:
            records = json.load(f)
        if isinstance(records, dict):
            records = [records]
        df = pd.json_normalize(records)
    elif suffix == '.csv':
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    else:
        raise ValidationError(f"Unsupported fixture format: {path.suffix or path.name}")

    df = df.rename(columns=COLUMN_ALIASES)
    logger.debug(f"[DATA] Read {len(df)} rows from {path.name}")
    return df


# ===============================================================================
# FRAME <-> RECORD CONVERSION
# ===============================================================================

def sends_from_frame(df: pd.DataFrame) -> List[SendRecord]:
    """Build SendRecords from a DataFrame with at least grade and date."""
    _require_columns(df, SEND_COLUMNS, 'Send')
    sends = []
    for row in df.to_dict('records'):
        sends.append(SendRecord(
            grade=str(row['grade']),
            date=row['date'],
            style=_optional(row.get('style')),
            significance=_optional(row.get('significance')),
            name=_optional(row.get('name')) or '',
            location=_optional(row.get('location')) or '',
        ))
    return sends


def sessions_from_frame(df: pd.DataFrame) -> List[SessionRecord]:
    """Build SessionRecords from a DataFrame with at least date and duration."""
    _require_columns(df, SESSION_COLUMNS, 'Session')
    sessions = []
    for row in df.to_dict('records'):
        sessions.append(SessionRecord(
            date=row['date'],
            duration_minutes=row['duration_minutes'],
            grades_attempted=_as_list(row.get('grades_attempted')),
            session_type=_optional(row.get('session_type')) or 'gym',
            grades_completed=_as_list(row.get('grades_completed')),
        ))
    return sessions


def nutrition_logs_from_frame(df: pd.DataFrame) -> List[NutritionLog]:
    """Build NutritionLogs; missing macro columns default to zero."""
    _require_columns(df, NUTRITION_COLUMNS, 'Nutrition')
    logs = []
    for row in df.to_dict('records'):
        logs.append(NutritionLog(
            date=row['date'],
            total_calories=row['total_calories'],
            protein_g=_optional(row.get('protein_g')) or 0,
            carbs_g=_optional(row.get('carbs_g')) or 0,
            fat_g=_optional(row.get('fat_g')) or 0,
            hydration_ml=_optional(row.get('hydration_ml')) or 0,
        ))
    return logs


def sends_to_frame(sends: Iterable[SendRecord]) -> pd.DataFrame:
    """One row per send with parsed numeric grade and a Timestamp date column."""
    rows = []
    for s in sends:
        grade = parse_grade(s.grade)
        rows.append({
            'date': pd.Timestamp(s.date),
            'grade': grade.display_text,
            'grade_numeric': grade.numeric_value,
            'grade_type': grade.grade_type,
            'style': s.style.value if s.style else None,
        })
    return pd.DataFrame(rows, columns=['date', 'grade', 'grade_numeric', 'grade_type', 'style'])


def sessions_to_frame(sessions: Iterable[SessionRecord]) -> pd.DataFrame:
    """One row per session with attempt/completion counts."""
    rows = [{
        'date': pd.Timestamp(s.date),
        'duration_minutes': s.duration_minutes,
        'session_type': s.session_type.value,
        'attempted': len(s.grades_attempted),
        'completed': len(s.grades_completed),
    } for s in sessions]
    return pd.DataFrame(
        rows,
        columns=['date', 'duration_minutes', 'session_type', 'attempted', 'completed']
    )


# ===============================================================================
# LOADER
# ===============================================================================

class ClimbingDataLoader:
    """
    Loads a climber's fixtures from a directory.

    Expected files (JSON or CSV, first match wins):
        sends.*, sessions.*, nutrition.*
    """

    FILE_STEMS = {
        'sends': 'sends',
        'sessions': 'sessions',
        'nutrition': 'nutrition',
    }

    def __init__(self, data_dir: Union[str, Path]):
        """
        Initialize the loader.

        Args:
            data_dir: Directory containing the fixture files
        """
        self.data_dir = Path(data_dir)

    def _find(self, kind: str) -> Optional[Path]:
        stem = self.FILE_STEMS[kind]
        for suffix in ('.json', '.csv'):
            candidate = self.data_dir / f"{stem}{suffix}"
            if candidate.exists():
                return candidate
        return None

    def load_sends(self) -> List[SendRecord]:
        path = self._find('sends')
        return load_sends(path) if path else []

    def load_sessions(self) -> List[SessionRecord]:
        path = self._find('sessions')
        return load_sessions(path) if path else []

    def load_nutrition_logs(self) -> List[NutritionLog]:
        path = self._find('nutrition')
        return load_nutrition_logs(path) if path else []

    def load_all(self) -> Dict[str, list]:
        """Load every fixture present; absent files yield empty lists."""
        data = {
            'sends': self.load_sends(),
            'sessions': self.load_sessions(),
            'nutrition': self.load_nutrition_logs(),
        }
        logger.info(
            f"[DATA] Loaded {len(data['sends'])} sends, {len(data['sessions'])} sessions, "
            f"{len(data['nutrition'])} nutrition logs from {self.data_dir}"
        )
        return data


def load_sends(path: Union[str, Path]) -> List[SendRecord]:
    """Load benchmark sends from a JSON or CSV file."""
    return sends_from_frame(read_table(path))


def load_sessions(path: Union[str, Path]) -> List[SessionRecord]:
    """Load journal sessions from a JSON or CSV file."""
    return sessions_from_frame(read_table(path))


def load_nutrition_logs(path: Union[str, Path]) -> List[NutritionLog]:
    """Load daily nutrition logs from a JSON or CSV file."""
    return nutrition_logs_from_frame(read_table(path))
