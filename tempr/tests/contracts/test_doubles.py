"""
Test doubles (fakes, stubs) for Tempr contract tests.

These provide minimal implementations that satisfy collaborator contracts
without real dependencies (network, files, clocks, environment variables).
"""

from datetime import datetime
from typing import Any, List, Optional

from tempr.context_logic.context_types import (
    CalendarEvent,
    EventCategory,
    LocationCategory,
    WeatherTag,
)
from tempr.context_logic.snapshot import ContextSnapshot
from tempr.context_logic.time_logic import time_bucket_for
from tempr.music_logic.candidates import CandidatePools, CandidateSourcer, TasteProfile, Track
from tempr.music_logic.vibes import VibeProfile
from tempr.outputs.notifier import Notifier

# Tuesday morning, well outside the default quiet hours
FIXED_NOW = datetime(2026, 3, 10, 10, 0, 0)


def make_track(track_id: str, artist: str = "artist-a", minutes: float = 3.0) -> Track:
    """Create a Track with a duration given in minutes."""
    return Track(id=track_id, artist_key=artist, duration_ms=int(minutes * 60_000), name=track_id)


def make_context(
    now: datetime = FIXED_NOW,
    location: LocationCategory = LocationCategory.UNKNOWN,
    weather: WeatherTag = WeatherTag.UNKNOWN,
    event: Optional[CalendarEvent] = None,
    weather_description: str = "",
) -> ContextSnapshot:
    """Create a ContextSnapshot with everything unknown unless given."""
    return ContextSnapshot(
        location_category=location,
        weather_tag=weather,
        time_bucket=time_bucket_for(now),
        upcoming_event=event,
        captured_at=now,
        weather_description=weather_description,
    )


def make_event(category: EventCategory, minutes: int = 30, title: str = "Event") -> CalendarEvent:
    return CalendarEvent(category=category, title=title, minutes_until_start=minutes)


class FakeStateStore:
    """In-memory stand-in for JsonStateStore (whole-value get/set)."""
    
    def __init__(self, data: Any = None):
        self.data = data
        self.save_count = 0
        self.fail_on_save = False
    
    def load(self, default: Any = None) -> Any:
        if self.data is None:
            return default
        if default is not None and not isinstance(self.data, type(default)):
            return default
        return self.data
    
    def save(self, data: Any) -> None:
        if self.fail_on_save:
            raise OSError("disk full")
        self.data = data
        self.save_count += 1


class FakeCandidateSourcer(CandidateSourcer):
    """Candidate sourcer returning fixed pools and recording calls."""
    
    def __init__(
        self,
        familiar: Optional[List[Track]] = None,
        discovery: Optional[List[Track]] = None,
        broaden_tracks: Optional[List[Track]] = None,
        error: Optional[Exception] = None,
        reasoning: str = "fake reasoning",
    ):
        self.familiar = familiar or []
        self.discovery = discovery or []
        self.broaden_tracks = broaden_tracks or []
        self.error = error
        self.reasoning = reasoning
        self.calls: List[str] = []
        self.broaden_calls: List[str] = []
    
    def source_candidates(self, mood_description: str, taste: TasteProfile) -> CandidatePools:
        self.calls.append(mood_description)
        if self.error is not None:
            raise self.error
        return CandidatePools(
            familiar=list(self.familiar),
            discovery=list(self.discovery),
            reasoning=self.reasoning,
        )
    
    def broaden(self, vibe: VibeProfile, taste: TasteProfile) -> List[Track]:
        self.broaden_calls.append(vibe.id)
        return list(self.broaden_tracks)


class FakeNotifier(Notifier):
    """Notifier returning a fixed id (or raising) and recording calls."""
    
    def __init__(self, notification_id: Optional[str] = "notif-1", error: Optional[Exception] = None):
        self.notification_id = notification_id
        self.error = error
        self.calls: List[tuple] = []
    
    def notify(self, vibe: VibeProfile, context: ContextSnapshot) -> Optional[str]:
        self.calls.append((vibe.id, context))
        if self.error is not None:
            raise self.error
        return self.notification_id


class FixedContextBuilder:
    """Snapshot builder stand-in that always returns the same snapshot."""
    
    def __init__(self, context: ContextSnapshot):
        self.context = context
        self.build_count = 0
    
    def build(self, now: Optional[datetime] = None) -> ContextSnapshot:
        self.build_count += 1
        return self.context


def plenty_of_tracks(prefix: str, count: int, minutes: float = 4.0) -> List[Track]:
    """Distinct-artist tracks, enough to fill any vibe's target duration."""
    return [make_track(f"{prefix}{i}", artist=f"{prefix}-artist{i}", minutes=minutes) for i in range(count)]
