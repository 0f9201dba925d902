"""
Context Logic module for Tempr.

This package turns raw ambient signals (clock, weather, place, calendar)
into one immutable ContextSnapshot per evaluation cycle.
"""

from tempr.context_logic.context_types import (
    CalendarEvent,
    EventCategory,
    LocationCategory,
    TimeBucket,
    WeatherReading,
    WeatherTag,
)
from tempr.context_logic.snapshot import ContextSnapshot, ContextSnapshotBuilder

__all__ = [
    "CalendarEvent",
    "ContextSnapshot",
    "ContextSnapshotBuilder",
    "EventCategory",
    "LocationCategory",
    "TimeBucket",
    "WeatherReading",
    "WeatherTag",
]
