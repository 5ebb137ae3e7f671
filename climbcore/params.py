"""
Tunable parameters for the progress and training-load calculators.

Defaults reproduce the app's published behaviour. Parameter sets can be
saved to and loaded from JSON so coaches can experiment with thresholds
without touching code.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Tuple, Union
import json

from loguru import logger

from .grades import CROSS_SYSTEM_OFFSET
from .validation import ValidationError


@dataclass
class ProgressParams:
    """
    Parameters for progress estimation and training recommendations.

    Grade gaps are expressed in numeric grade units of the grades involved.
    """

    # ═══════════════════════════════════════════════════════════════════════════
    # PROGRESS RATE
    # ═══════════════════════════════════════════════════════════════════════════

    history_window: int = 10                # Most recent sends used for the rate
    default_days_to_target: int = 365       # Estimate when there is no upward trend
    cross_system_offset: int = CROSS_SYSTEM_OFFSET

    # ═══════════════════════════════════════════════════════════════════════════
    # RECOMMENDATION THRESHOLDS
    # ═══════════════════════════════════════════════════════════════════════════

    weak_style_gap: float = 1.5       # Strongest - weakest style average
    low_load: float = 30.0            # Below this: suggest more training
    high_load: float = 80.0           # Above this: suggest recovery
    intensity_gap: float = 2.0        # Attempted grades this far below target
    advanced_target_v: int = 7        # Targets at/above this V grade get power advice

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'ProgressParams':
        """Create parameters from dictionary."""
        return cls(**d)

    def validate(self) -> Tuple[bool, str]:
        """Validate parameter constraints."""
        issues = []

        if self.history_window < 2:
            issues.append("History window must include at least 2 sends")
        if self.default_days_to_target < 0:
            issues.append("Default days to target must not be negative")
        if self.cross_system_offset < 0:
            issues.append("Cross-system offset must not be negative")
        if not (0 <= self.low_load < self.high_load <= 100):
            issues.append("Load thresholds: 0 <= low < high <= 100")
        if self.weak_style_gap < 0 or self.intensity_gap < 0:
            issues.append("Grade gaps must not be negative")

        if issues:
            return False, "; ".join(issues)
        return True, "Valid"


@dataclass
class TrainingLoadParams:
    """Normalisation caps for the combined training-load score."""

    volume_cap: float = 300.0       # Minutes per week (5 hours)
    intensity_cap: float = 10.0     # Average numeric grade (V10)
    density_cap: float = 5.0        # Sessions per week
    weeks_period: int = 4           # Default trailing window
    success_days_period: int = 30   # Default success-rate window

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'TrainingLoadParams':
        """Create parameters from dictionary."""
        return cls(**d)

    def validate(self) -> Tuple[bool, str]:
        """Validate parameter constraints."""
        issues = []

        if min(self.volume_cap, self.intensity_cap, self.density_cap) <= 0:
            issues.append("Normalisation caps must be positive")
        if self.weeks_period <= 0 or self.success_days_period <= 0:
            issues.append("Windows must be positive")

        if issues:
            return False, "; ".join(issues)
        return True, "Valid"


@dataclass
class CoachParams:
    """All calculator parameters in one file-friendly bundle."""
    progress: ProgressParams = field(default_factory=ProgressParams)
    training_load: TrainingLoadParams = field(default_factory=TrainingLoadParams)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'progress': self.progress.to_dict(),
            'training_load': self.training_load.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'CoachParams':
        unknown = set(d) - {'progress', 'training_load'}
        if unknown:
            raise ValidationError(f"Unknown parameter sections: {sorted(unknown)}")
        try:
            return cls(
                progress=ProgressParams.from_dict(d.get('progress', {})),
                training_load=TrainingLoadParams.from_dict(d.get('training_load', {})),
            )
        except TypeError as e:
            raise ValidationError(f"Invalid parameter file: {e}") from e

    def validate(self) -> Tuple[bool, str]:
        issues = []
        for name, section in (('progress', self.progress), ('training_load', self.training_load)):
            ok, message = section.validate()
            if not ok:
                issues.append(f"{name}: {message}")

        if issues:
            return False, "; ".join(issues)
        return True, "Valid"


def load_params(path: Union[str, Path]) -> CoachParams:
    """
    Load and validate a parameter file.

    Missing sections and fields fall back to defaults.

    Raises:
        ValidationError: If the file is not valid JSON, contains unknown or
            mistyped fields, or fails validation
    """
    path = Path(path)
    with open(path) as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{path}: invalid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise ValidationError(f"{path}: expected a JSON object of parameter sections")
    params = CoachParams.from_dict(raw)

    try:
        ok, message = params.validate()
    except TypeError as e:
        raise ValidationError(f"{path}: invalid parameter type: {e}") from e
    if not ok:
        raise ValidationError(f"{path}: {message}")

    logger.debug(f"[PARAMS] Loaded parameters from {path}")
    return params


def save_params(params: CoachParams, path: Union[str, Path]) -> Path:
    """Write parameters to a JSON file and return its path."""
    path = Path(path)
    with open(path, 'w') as f:
        json.dump(params.to_dict(), f, indent=2)
    return path
