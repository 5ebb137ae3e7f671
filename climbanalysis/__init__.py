"""Trend analysis and report generation."""

from .trends import (
    DataPoint,
    PeriodSummary,
    weekly_volume_trend,
    grade_progression,
    summarize_period,
)
from .reports import generate_climber_report

__all__ = [
    'DataPoint',
    'PeriodSummary',
    'weekly_volume_trend',
    'grade_progression',
    'summarize_period',
    'generate_climber_report',
]
