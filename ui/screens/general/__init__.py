"""Screens not directly part of the workout session loop."""

from .routine_list_screen import RoutineListScreen
from .workout_history_screen import WorkoutHistoryScreen

__all__ = [
    "RoutineListScreen",
    "WorkoutHistoryScreen",
]
