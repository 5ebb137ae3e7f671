"""
Climbing grade parsing, conversion and ordering.

Two systems are recognised:
- V-scale (bouldering): V0, V1, ... open-ended
- YDS (routes): 5.1 ... 5.9, then 5.10a ... 5.15d

Grades map onto a per-system integer scale. V-scale uses the number after
the V. YDS uses base * 10 + letter offset (a=0, b=1, c=2, d=3), so
5.9 = 90, 5.10a = 100, 5.10d = 103, 5.12b = 121.

Cross-system comparisons use a fixed offset (V-scale + 95 ~ YDS) which is
an ordering heuristic only, not an equivalence.
"""

from dataclasses import dataclass
from enum import Enum
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Union
import re

from .validation import ValidationError, coerce_enum


class GradeSystem(Enum):
    """Grading system of a parsed grade."""
    V_SCALE = "v-scale"
    YDS = "yds"


# V5 ~ 5.12a, so V-scale values get this bonus when ranked against YDS
CROSS_SYSTEM_OFFSET = 95

YDS_LETTERS = 'abcd'

V_SCALE_TO_YDS: Dict[int, str] = {
    0: '5.10a', 1: '5.10b', 2: '5.10c', 3: '5.10d',
    4: '5.11a', 5: '5.11b', 6: '5.11c', 7: '5.11d',
    8: '5.12a', 9: '5.12b', 10: '5.12c', 11: '5.12d',
    12: '5.13a', 13: '5.13b', 14: '5.13c', 15: '5.13d',
    16: '5.14a', 17: '5.14b',
}

YDS_TO_V_SCALE: Dict[str, int] = {
    '5.10a': 0, '5.10b': 1, '5.10c': 2, '5.10d': 3,
    '5.11a': 4, '5.11b': 5, '5.11c': 6, '5.11d': 7,
    '5.12a': 8, '5.12b': 9, '5.12c': 10, '5.12d': 11,
    '5.13a': 12, '5.13b': 13, '5.13c': 14, '5.13d': 15,
    '5.14a': 16, '5.14b': 17, '5.14c': 18, '5.14d': 19,
}

# Simplified Fontainebleau equivalents indexed by V grade
FRENCH_GRADES = [
    '4', '4+', '5', '5+', '6A', '6A+', '6B', '6B+', '6C',
    '6C+', '7A', '7A+', '7B', '7B+', '7C', '7C+', '8A', '8A+',
]

V_SCALE_MAX_OPTION = 17
YDS_MAX_BASE = 15

_V_PATTERN = re.compile(r'^V(\d+)')
_YDS_PATTERN = re.compile(r'^5\.(\d+)([A-D]?)')


@dataclass(frozen=True)
class Grade:
    """
    A parsed climbing grade.

    ``parsed`` is False for the fallback produced from unrecognised text.
    That fallback still reports V-scale with numeric value 0, so callers that
    need to tell it apart from a genuine V0 should check ``parsed``.
    """
    display_text: str
    numeric_value: int
    system: GradeSystem
    parsed: bool = True

    @property
    def grade(self) -> str:
        return self.display_text

    @property
    def grade_numeric(self) -> int:
        return self.numeric_value

    @property
    def grade_type(self) -> str:
        return self.system.value

    def to_dict(self) -> Dict[str, Union[str, int]]:
        """Convert to the display dictionary used by the app."""
        return {
            'grade': self.display_text,
            'grade_numeric': self.numeric_value,
            'grade_type': self.system.value,
        }


@dataclass(frozen=True)
class GradeConversion:
    """A grade expressed in every supported system."""
    v_scale: Optional[int]
    yds: Optional[str]
    french: Optional[str]
    numeric_value: int

    def to_dict(self) -> Dict[str, Optional[Union[str, int]]]:
        return {
            'v_scale': self.v_scale,
            'yds': self.yds,
            'french': self.french,
            'numeric_value': self.numeric_value,
        }


GradeLike = Union[str, Grade]


def parse_grade(grade_input: str) -> Grade:
    """
    Parse a grade string into a Grade.

    Matching is case-insensitive and anchored at the start of the string,
    so trailing qualifiers ('V4+', '5.11a/b') are ignored.

    Args:
        grade_input: Raw grade text, e.g. 'v4', '5.10B'

    Returns:
        Parsed Grade, or the unparsed fallback (V-scale, 0, original text)
    """
    if not isinstance(grade_input, str):
        raise ValidationError(f"Grade must be a string, got {grade_input!r}")

    clean = grade_input.strip().upper()

    v_match = _V_PATTERN.match(clean)
    if v_match:
        v_number = int(v_match.group(1))
        return Grade(f"V{v_number}", v_number, GradeSystem.V_SCALE)

    yds_match = _YDS_PATTERN.match(clean)
    if yds_match:
        base = int(yds_match.group(1))
        letter = yds_match.group(2).lower()

        numeric = base * 10
        if letter:
            numeric += YDS_LETTERS.index(letter)

        return Grade(f"5.{base}{letter}", numeric, GradeSystem.YDS)

    return Grade(grade_input, 0, GradeSystem.V_SCALE, parsed=False)


def _as_grade(grade: GradeLike) -> Grade:
    if isinstance(grade, Grade):
        return grade
    return parse_grade(grade)


def numeric_to_grade(numeric: int, system: Union[GradeSystem, str]) -> str:
    """
    Convert a numeric grade value back to its display string.

    YDS values of 5.10 and above always carry a letter, so 100 -> '5.10a'.

    Args:
        numeric: Numeric grade value
        system: Grading system of the value

    Returns:
        Display string ('V7', '5.11c', '5.8')
    """
    system = coerce_enum(GradeSystem, system, 'system')
    numeric = int(numeric)
    if numeric < 0:
        raise ValidationError(f"Numeric grade must not be negative, got {numeric}")

    if system == GradeSystem.V_SCALE:
        return f"V{numeric}"

    base, letter_index = divmod(numeric, 10)
    if letter_index >= len(YDS_LETTERS):
        raise ValidationError(f"{numeric} is not a valid YDS numeric grade")

    if base >= 10 or letter_index > 0:
        return f"5.{base}{YDS_LETTERS[letter_index]}"
    return f"5.{base}"


def convert_grade(grade: GradeLike, target_system: Union[GradeSystem, str]) -> Optional[str]:
    """
    Convert a grade into another grading system.

    Args:
        grade: Grade string or parsed Grade
        target_system: System to convert into

    Returns:
        Display string in the target system (unchanged text for a same-system
        request, even when unparsed), or None when the lookup tables have no
        equivalent or an unparsed grade is sent to the other system
    """
    target_system = coerce_enum(GradeSystem, target_system, 'target_system')
    parsed = _as_grade(grade)

    if parsed.system == target_system:
        return parsed.display_text

    if not parsed.parsed:
        return None

    if target_system == GradeSystem.YDS:
        return V_SCALE_TO_YDS.get(parsed.numeric_value)

    # '5.10' and '5.10a' share a numeric value; look up the lettered form
    v_grade = YDS_TO_V_SCALE.get(numeric_to_grade(parsed.numeric_value, GradeSystem.YDS))
    return f"V{v_grade}" if v_grade is not None else None


def get_grade_conversions(grade: GradeLike) -> GradeConversion:
    """Express a grade in V-scale, YDS and French where tables allow."""
    parsed = _as_grade(grade)

    if not parsed.parsed:
        return GradeConversion(None, None, None, parsed.numeric_value)

    if parsed.system == GradeSystem.V_SCALE:
        v_scale: Optional[int] = parsed.numeric_value
        yds = convert_grade(parsed, GradeSystem.YDS)
    else:
        yds = parsed.display_text
        v_text = convert_grade(parsed, GradeSystem.V_SCALE)
        v_scale = int(v_text[1:]) if v_text else None

    french = None
    if v_scale is not None and v_scale < len(FRENCH_GRADES):
        french = FRENCH_GRADES[v_scale]

    return GradeConversion(v_scale, yds, french, parsed.numeric_value)


def compare_grades(
    a: GradeLike,
    b: GradeLike,
    cross_system_offset: int = CROSS_SYSTEM_OFFSET
) -> int:
    """
    Comparator that sorts grades hardest first.

    Returns a negative number when ``a`` is harder than ``b``, positive when
    easier and zero when equal. When the systems differ the V-scale grade
    gets ``cross_system_offset`` added before comparing.
    """
    a, b = _as_grade(a), _as_grade(b)

    a_value, b_value = a.numeric_value, b.numeric_value
    if a.system != b.system:
        if a.system == GradeSystem.V_SCALE:
            a_value += cross_system_offset
        if b.system == GradeSystem.V_SCALE:
            b_value += cross_system_offset

    return b_value - a_value


def sort_grades(
    grades: Iterable[GradeLike],
    cross_system_offset: int = CROSS_SYSTEM_OFFSET
) -> List[Grade]:
    """Parse and sort grades, hardest first."""
    parsed = [_as_grade(g) for g in grades]
    return sorted(
        parsed,
        key=cmp_to_key(lambda a, b: compare_grades(a, b, cross_system_offset))
    )


def get_grade_options(system: Union[GradeSystem, str]) -> List[Dict[str, str]]:
    """
    List every selectable grade for a system, easiest first.

    V-scale: V0 through V17. YDS: 5.1 through 5.9, then 5.10a through 5.15d.
    """
    system = coerce_enum(GradeSystem, system, 'system')

    if system == GradeSystem.V_SCALE:
        labels = [f"V{i}" for i in range(V_SCALE_MAX_OPTION + 1)]
    else:
        labels = []
        for base in range(1, YDS_MAX_BASE + 1):
            if base <= 9:
                labels.append(f"5.{base}")
            else:
                labels.extend(f"5.{base}{letter}" for letter in YDS_LETTERS)

    return [{'value': label, 'label': label} for label in labels]
