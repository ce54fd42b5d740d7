"""UI screen modules for the workout timer."""

from .session import RoutineDetailScreen
from .general import RoutineListScreen, WorkoutHistoryScreen

__all__ = [
    "RoutineDetailScreen",
    "RoutineListScreen",
    "WorkoutHistoryScreen",
]
