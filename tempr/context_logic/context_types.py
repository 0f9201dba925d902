"""
Context signal types for Tempr.

Enumerations and small value types shared by the signal classifiers and
the snapshot builder. Every enumeration that describes an optional signal
has an UNKNOWN member; TimeBucket is an exhaustive partition of the day
and needs none.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LocationCategory(str, Enum):
    HOME = "home"
    WORK = "work"
    GYM = "gym"
    LIBRARY = "library"
    AIRPORT = "airport"
    CAFE = "cafe"
    RESTAURANT = "restaurant"
    BAR = "bar"
    PARK = "park"
    TRANSIT = "transit"
    NEW_CITY = "new_city"
    UNKNOWN = "unknown"


class WeatherTag(str, Enum):
    RAIN = "rain"
    DRIZZLE = "drizzle"
    STORM = "storm"
    SNOW = "snow"
    CLEAR = "clear"
    CLOUDY = "cloudy"
    HOT = "hot"
    COLD = "cold"
    WINDY = "windy"
    FOGGY = "foggy"
    UNKNOWN = "unknown"


class TimeBucket(str, Enum):
    EARLY_MORNING = "early_morning"  # 05:00-08:00
    MORNING = "morning"              # 08:00-12:00
    AFTERNOON = "afternoon"          # 12:00-17:00
    EVENING = "evening"              # 17:00-21:00
    LATE_NIGHT = "late_night"        # 21:00-05:00


class EventCategory(str, Enum):
    DATE_NIGHT = "date_night"
    WORKOUT = "workout"
    STUDY = "study"
    FLIGHT = "flight"
    MEETING = "meeting"
    PARTY = "party"
    COMMUTE = "commute"
    SOCIAL = "social"
    RELAXATION = "relaxation"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CalendarEvent:
    """
    The nearest upcoming calendar event.
    
    Attributes:
        category: Inferred event category (UNKNOWN if no keyword matched)
        title: Event title as it appears in the calendar
        minutes_until_start: Whole minutes until the event starts (>= 0)
    """
    category: EventCategory
    title: str
    minutes_until_start: int


@dataclass(frozen=True)
class WeatherReading:
    """Result of one weather lookup."""
    tag: WeatherTag
    description: str = ""
    temperature_c: Optional[int] = None


UNKNOWN_WEATHER = WeatherReading(tag=WeatherTag.UNKNOWN)
