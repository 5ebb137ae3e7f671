"""Fixture loading and synthetic climber data."""

from .loader import (
    ClimbingDataLoader,
    read_table,
    load_sends,
    load_sessions,
    load_nutrition_logs,
    sends_from_frame,
    sessions_from_frame,
    nutrition_logs_from_frame,
    sends_to_frame,
    sessions_to_frame,
)
from .synthetic import (
    ClimberArchetype,
    ClimberHistory,
    generate_climber_history,
    generate_nutrition_logs,
)

__all__ = [
    # Loaders
    'ClimbingDataLoader',
    'read_table',
    'load_sends',
    'load_sessions',
    'load_nutrition_logs',
    'sends_from_frame',
    'sessions_from_frame',
    'nutrition_logs_from_frame',
    'sends_to_frame',
    'sessions_to_frame',
    # Synthetic data
    'ClimberArchetype',
    'ClimberHistory',
    'generate_climber_history',
    'generate_nutrition_logs',
]
