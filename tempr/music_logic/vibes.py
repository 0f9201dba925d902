"""
Vibe Catalog for Tempr.

Static table of named vibe profiles and the lookup tables that map each
context dimension onto them. Adding a vibe means adding table entries,
not branching code.

Inference precedence (most specific / most imminent signal first):
1. Calendar event starting within the hour
2. Location category
3. Weather tag (clear weather contributes no signal)
4. Time-of-day bucket (always mapped, the guaranteed fallback)
"""

from dataclasses import dataclass
from typing import Dict, Optional

from tempr.context_logic.context_types import (
    EventCategory,
    LocationCategory,
    TimeBucket,
    WeatherTag,
)
from tempr.context_logic.snapshot import ContextSnapshot


@dataclass(frozen=True)
class MoodTargets:
    """Target audio-mood coordinates. All but tempo are in [0, 1]; tempo is BPM."""
    energy: float
    valence: float
    danceability: float
    acousticness: float
    tempo: float


@dataclass(frozen=True)
class VibeProfile:
    """
    A named target mood and duration for a listening moment.
    
    Attributes:
        id: Stable key
        label: Short display name
        description: One-line mood description used in prompts
        mood_targets: Target audio-mood coordinates
        target_duration_minutes: Desired queue length in minutes (> 0)
    """
    id: str
    label: str
    description: str
    mood_targets: MoodTargets
    target_duration_minutes: int

    @property
    def target_duration_ms(self) -> int:
        return self.target_duration_minutes * 60_000


def _vibe(id: str, label: str, description: str, energy: float, valence: float,
          danceability: float, acousticness: float, tempo: float, minutes: int) -> VibeProfile:
    return VibeProfile(
        id=id,
        label=label,
        description=description,
        mood_targets=MoodTargets(energy, valence, danceability, acousticness, tempo),
        target_duration_minutes=minutes,
    )


VIBE_PROFILES: Dict[str, VibeProfile] = {
    v.id: v
    for v in (
        _vibe("rainy_chill", "Rainy Day", "Mellow, ambient tracks for a rainy day",
              0.3, 0.35, 0.4, 0.6, 95, 45),
        _vibe("storm_intense", "Storm Mode", "Dark, atmospheric tracks for stormy weather",
              0.5, 0.25, 0.35, 0.3, 105, 40),
        _vibe("snow_cozy", "Snowy & Cozy", "Warm, intimate tracks for a snowy day",
              0.25, 0.45, 0.3, 0.7, 85, 50),
        _vibe("romantic_warm", "Romantic", "Smooth, warm tracks for a date night",
              0.4, 0.55, 0.5, 0.45, 100, 30),
        _vibe("gym_hype", "Gym Hype", "High-energy bangers for a workout",
              0.85, 0.6, 0.7, 0.05, 135, 45),
        _vibe("focus_study", "Focus Mode", "Minimal, ambient tracks for deep focus",
              0.2, 0.35, 0.25, 0.5, 80, 60),
        _vibe("travel_smooth", "Travel Mode", "Smooth, upbeat tracks for traveling",
              0.5, 0.55, 0.55, 0.3, 110, 60),
        _vibe("morning_gentle", "Good Morning", "Gentle, uplifting tracks to start the day",
              0.35, 0.6, 0.45, 0.55, 100, 30),
        _vibe("afternoon_cruise", "Afternoon Cruise", "Easy-going, feel-good tracks for the afternoon",
              0.55, 0.65, 0.6, 0.3, 112, 40),
        _vibe("night_winddown", "Wind Down", "Calm, soothing tracks to wind down the evening",
              0.25, 0.4, 0.35, 0.6, 85, 40),
        _vibe("late_night_deep", "Late Night", "Deep, introspective tracks for the late hours",
              0.2, 0.3, 0.3, 0.45, 78, 45),
        _vibe("party_energy", "Party Time", "High-energy party tracks to get the vibe going",
              0.8, 0.75, 0.8, 0.05, 125, 60),
        _vibe("cafe_acoustic", "Cafe Vibes", "Acoustic, laid-back tracks for a cafe session",
              0.3, 0.5, 0.4, 0.7, 95, 45),
        _vibe("park_sunny", "Sunny Park", "Bright, cheerful tracks for outdoor vibes",
              0.5, 0.7, 0.55, 0.4, 108, 40),
        _vibe("commute_flow", "Commute Flow", "Steady, rhythmic tracks for getting around",
              0.55, 0.5, 0.6, 0.2, 115, 30),
    )
}

CALENDAR_VIBE_MAP: Dict[EventCategory, str] = {
    EventCategory.DATE_NIGHT: "romantic_warm",
    EventCategory.WORKOUT: "gym_hype",
    EventCategory.STUDY: "focus_study",
    EventCategory.FLIGHT: "travel_smooth",
    EventCategory.PARTY: "party_energy",
    EventCategory.SOCIAL: "afternoon_cruise",
    EventCategory.RELAXATION: "night_winddown",
}

LOCATION_VIBE_MAP: Dict[LocationCategory, str] = {
    LocationCategory.GYM: "gym_hype",
    LocationCategory.LIBRARY: "focus_study",
    LocationCategory.AIRPORT: "travel_smooth",
    LocationCategory.CAFE: "cafe_acoustic",
    LocationCategory.BAR: "party_energy",
    LocationCategory.PARK: "park_sunny",
    LocationCategory.TRANSIT: "commute_flow",
    LocationCategory.RESTAURANT: "romantic_warm",
}

# CLEAR is listed for completeness but never consulted (see infer_vibe)
WEATHER_VIBE_MAP: Dict[WeatherTag, str] = {
    WeatherTag.RAIN: "rainy_chill",
    WeatherTag.DRIZZLE: "rainy_chill",
    WeatherTag.STORM: "storm_intense",
    WeatherTag.SNOW: "snow_cozy",
    WeatherTag.CLEAR: "park_sunny",
    WeatherTag.HOT: "afternoon_cruise",
    WeatherTag.COLD: "snow_cozy",
    WeatherTag.FOGGY: "rainy_chill",
}

# Must cover every TimeBucket
TIME_VIBE_MAP: Dict[TimeBucket, str] = {
    TimeBucket.EARLY_MORNING: "morning_gentle",
    TimeBucket.MORNING: "morning_gentle",
    TimeBucket.AFTERNOON: "afternoon_cruise",
    TimeBucket.EVENING: "night_winddown",
    TimeBucket.LATE_NIGHT: "late_night_deep",
}


def get_vibe(vibe_id: str) -> Optional[VibeProfile]:
    """Look up a vibe by id."""
    return VIBE_PROFILES.get(vibe_id)


def infer_vibe(context: ContextSnapshot) -> VibeProfile:
    """
    Resolve the best matching vibe for a context.
    
    Total and pure: each level falls through to the next only if its signal
    is absent/UNKNOWN or has no mapping. Time of day always maps.
    
    Args:
        context: Current context snapshot
        
    Returns:
        VibeProfile from the static catalog
    """
    if context.has_imminent_event():
        vibe_id = CALENDAR_VIBE_MAP.get(context.upcoming_event.category)
        if vibe_id:
            return VIBE_PROFILES[vibe_id]
    
    if context.location_category != LocationCategory.UNKNOWN:
        vibe_id = LOCATION_VIBE_MAP.get(context.location_category)
        if vibe_id:
            return VIBE_PROFILES[vibe_id]
    
    if context.weather_tag not in (WeatherTag.UNKNOWN, WeatherTag.CLEAR):
        vibe_id = WEATHER_VIBE_MAP.get(context.weather_tag)
        if vibe_id:
            return VIBE_PROFILES[vibe_id]
    
    return VIBE_PROFILES[TIME_VIBE_MAP[context.time_bucket]]


def mood_description(vibe: VibeProfile, context: ContextSnapshot) -> str:
    """
    Compose the natural-language mood prompt handed to the candidate sourcer.
    
    Example: "Mellow, ambient tracks for a rainy day Weather: light rain. Time: afternoon."
    """
    parts = [vibe.description]
    
    if context.has_imminent_event():
        event = context.upcoming_event
        parts.append(f'Upcoming event: "{event.title}" in {event.minutes_until_start} minutes.')
    
    if context.weather_tag != WeatherTag.UNKNOWN:
        parts.append(f"Weather: {context.weather_description or context.weather_tag.value}.")
    
    parts.append(f"Time: {context.time_bucket.value.replace('_', ' ')}.")
    return " ".join(parts)

