"""Screens used while a routine is open."""

from .routine_detail_screen import RoutineDetailScreen

__all__ = [
    "RoutineDetailScreen",
]
