"""
Context Snapshot for Tempr.

Aggregates point-in-time signals (location category, weather tag,
time-of-day bucket, nearest upcoming calendar event) into one immutable
value per evaluation cycle.

A missing or failed signal is represented by the UNKNOWN member of its
enumeration, never by None. Only upcoming_event is optional.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from tempr.context_logic.context_types import (
    UNKNOWN_WEATHER,
    CalendarEvent,
    LocationCategory,
    TimeBucket,
    WeatherReading,
    WeatherTag,
)
from tempr.context_logic.time_logic import time_bucket_for

logger = logging.getLogger(__name__)

# An event this close outweighs every other signal
IMMINENT_EVENT_MINUTES: int = 60


@dataclass(frozen=True)
class ContextSnapshot:
    """
    Immutable state snapshot of the user's ambient context.
    
    Attributes:
        location_category: Classified place (UNKNOWN when unavailable)
        weather_tag: Classified weather (UNKNOWN when unavailable)
        time_bucket: Time-of-day bucket for captured_at
        upcoming_event: Nearest upcoming event, or None when there is none
        captured_at: Local wall-clock time the snapshot was taken
        weather_description: Free-text weather description ("" if unknown)
        temperature_c: Rounded temperature in Celsius, if known
    """
    location_category: LocationCategory
    weather_tag: WeatherTag
    time_bucket: TimeBucket
    upcoming_event: Optional[CalendarEvent]
    captured_at: datetime
    weather_description: str = ""
    temperature_c: Optional[int] = None

    def has_imminent_event(self) -> bool:
        """True if the upcoming event starts within IMMINENT_EVENT_MINUTES."""
        return (
            self.upcoming_event is not None
            and self.upcoming_event.minutes_until_start <= IMMINENT_EVENT_MINUTES
        )

    def to_dict(self) -> dict:
        event = None
        if self.upcoming_event is not None:
            event = {
                "category": self.upcoming_event.category.value,
                "title": self.upcoming_event.title,
                "minutes_until_start": self.upcoming_event.minutes_until_start,
            }
        return {
            "location_category": self.location_category.value,
            "weather_tag": self.weather_tag.value,
            "time_bucket": self.time_bucket.value,
            "upcoming_event": event,
            "captured_at": self.captured_at.timestamp(),
            "weather_description": self.weather_description,
            "temperature_c": self.temperature_c,
        }


LocationSource = Callable[[], LocationCategory]
WeatherSource = Callable[[], WeatherReading]
CalendarSource = Callable[[datetime], Optional[CalendarEvent]]


class ContextSnapshotBuilder:
    """
    Builds one ContextSnapshot per invocation from caller-supplied sources.
    
    Each source is queried at most once per build and never retried. A
    source that raises degrades its field to UNKNOWN (or no event) instead
    of failing the whole snapshot. Sources that are not configured are
    treated as permanently unavailable.
    """
    
    def __init__(
        self,
        location_source: Optional[LocationSource] = None,
        weather_source: Optional[WeatherSource] = None,
        calendar_source: Optional[CalendarSource] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the builder.
        
        Args:
            location_source: Returns the current LocationCategory
            weather_source: Returns the current WeatherReading
            calendar_source: Returns the nearest CalendarEvent for a given time, or None
            clock: Returns the current local time (injected for tests)
        """
        self._location_source = location_source
        self._weather_source = weather_source
        self._calendar_source = calendar_source
        self._clock = clock
    
    def build(self, now: Optional[datetime] = None) -> ContextSnapshot:
        """
        Gather all signals into an immutable snapshot.
        
        Args:
            now: Capture time (defaults to the builder's clock)
            
        Returns:
            ContextSnapshot with degraded fields for any failed source
        """
        captured_at = now or self._clock()
        location = self._read_location()
        weather = self._read_weather()
        event = self._read_calendar(captured_at)
        
        snapshot = ContextSnapshot(
            location_category=location,
            weather_tag=weather.tag,
            time_bucket=time_bucket_for(captured_at),
            upcoming_event=event,
            captured_at=captured_at,
            weather_description=weather.description,
            temperature_c=weather.temperature_c,
        )
        
        event_desc = f"{event.category.value} in {event.minutes_until_start}min" if event else "none"
        logger.debug(
            f"[CONTEXT] Snapshot: location={location.value}, weather={weather.tag.value}, "
            f"time={snapshot.time_bucket.value}, event={event_desc}"
        )
        return snapshot
    
    def _read_location(self) -> LocationCategory:
        if self._location_source is None:
            return LocationCategory.UNKNOWN
        try:
            return self._location_source() or LocationCategory.UNKNOWN
        except Exception as e:
            logger.warning(f"[CONTEXT] Location source failed, degrading to unknown: {e}")
            return LocationCategory.UNKNOWN
    
    def _read_weather(self) -> WeatherReading:
        if self._weather_source is None:
            return UNKNOWN_WEATHER
        try:
            return self._weather_source() or UNKNOWN_WEATHER
        except Exception as e:
            logger.warning(f"[CONTEXT] Weather source failed, degrading to unknown: {e}")
            return UNKNOWN_WEATHER
    
    def _read_calendar(self, now: datetime) -> Optional[CalendarEvent]:
        if self._calendar_source is None:
            return None
        try:
            return self._calendar_source(now)
        except Exception as e:
            logger.warning(f"[CONTEXT] Calendar source failed, treating as no event: {e}")
            return None
