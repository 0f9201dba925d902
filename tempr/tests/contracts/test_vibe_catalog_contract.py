"""
Contract tests for the vibe catalog and vibe inference.

infer_vibe is total: every context resolves to a catalog vibe, with
precedence calendar (imminent) > location > weather > time of day.
"""

import itertools

import pytest

from tempr.context_logic.context_types import (
    CalendarEvent,
    EventCategory,
    LocationCategory,
    TimeBucket,
    WeatherTag,
)
from tempr.context_logic.snapshot import ContextSnapshot
from tempr.music_logic.vibes import (
    CALENDAR_VIBE_MAP,
    LOCATION_VIBE_MAP,
    TIME_VIBE_MAP,
    VIBE_PROFILES,
    WEATHER_VIBE_MAP,
    get_vibe,
    infer_vibe,
    mood_description,
)
from tempr.tests.contracts.test_doubles import FIXED_NOW, make_context, make_event


def _snapshot(location, weather, bucket, event):
    return ContextSnapshot(
        location_category=location,
        weather_tag=weather,
        time_bucket=bucket,
        upcoming_event=event,
        captured_at=FIXED_NOW,
    )


class TestCatalog:
    
    def test_all_maps_reference_catalog_vibes(self):
        for mapping in (CALENDAR_VIBE_MAP, LOCATION_VIBE_MAP, WEATHER_VIBE_MAP, TIME_VIBE_MAP):
            for vibe_id in mapping.values():
                assert vibe_id in VIBE_PROFILES
    
    def test_time_map_covers_every_bucket(self):
        assert set(TIME_VIBE_MAP) == set(TimeBucket)
    
    def test_profiles_are_well_formed(self):
        for vibe_id, vibe in VIBE_PROFILES.items():
            assert vibe.id == vibe_id
            assert vibe.target_duration_minutes > 0
            assert vibe.target_duration_ms == vibe.target_duration_minutes * 60_000
            for value in (vibe.mood_targets.energy, vibe.mood_targets.valence,
                          vibe.mood_targets.danceability, vibe.mood_targets.acousticness):
                assert 0.0 <= value <= 1.0
            assert vibe.mood_targets.tempo > 0
    
    def test_get_vibe_unknown_id(self):
        assert get_vibe("polka_party") is None
        assert get_vibe("gym_hype").label


class TestInferenceIsTotal:
    
    def test_every_context_resolves(self):
        events = [None] + [
            CalendarEvent(category=c, title="x", minutes_until_start=m)
            for c in EventCategory
            for m in (10, 90)
        ]
        for location, weather, bucket, event in itertools.product(
            LocationCategory, WeatherTag, TimeBucket, events
        ):
            vibe = infer_vibe(_snapshot(location, weather, bucket, event))
            assert vibe.id in VIBE_PROFILES


class TestPrecedence:
    
    def test_imminent_calendar_beats_all(self):
        ctx = make_context(
            location=LocationCategory.GYM,
            weather=WeatherTag.RAIN,
            event=make_event(EventCategory.DATE_NIGHT, minutes=45),
        )
        assert infer_vibe(ctx).id == "romantic_warm"
    
    def test_event_at_threshold_is_imminent(self):
        ctx = make_context(event=make_event(EventCategory.STUDY, minutes=60))
        assert infer_vibe(ctx).id == "focus_study"
    
    def test_event_beyond_threshold_ignored(self):
        ctx = make_context(location=LocationCategory.CAFE, event=make_event(EventCategory.STUDY, minutes=61))
        assert infer_vibe(ctx).id == "cafe_acoustic"
    
    def test_location_beats_weather(self):
        ctx = make_context(location=LocationCategory.AIRPORT, weather=WeatherTag.STORM)
        assert infer_vibe(ctx).id == "travel_smooth"
    
    def test_weather_beats_time(self):
        assert infer_vibe(make_context(weather=WeatherTag.SNOW)).id == "snow_cozy"
    
    def test_time_fallback(self):
        assert infer_vibe(_snapshot(LocationCategory.UNKNOWN, WeatherTag.UNKNOWN, TimeBucket.LATE_NIGHT, None)).id == "late_night_deep"


class TestFallThrough:
    """A present but unmapped signal falls through to the next level."""
    
    @pytest.mark.parametrize("category", [EventCategory.MEETING, EventCategory.COMMUTE, EventCategory.UNKNOWN])
    def test_unmapped_event(self, category):
        ctx = make_context(weather=WeatherTag.STORM, event=make_event(category, minutes=5))
        assert infer_vibe(ctx).id == "storm_intense"
    
    @pytest.mark.parametrize("location", [LocationCategory.HOME, LocationCategory.WORK, LocationCategory.NEW_CITY])
    def test_unmapped_location(self, location):
        assert infer_vibe(make_context(location=location, weather=WeatherTag.RAIN)).id == "rainy_chill"
    
    @pytest.mark.parametrize("weather", [WeatherTag.CLEAR, WeatherTag.CLOUDY, WeatherTag.WINDY])
    def test_weather_without_vibe_uses_time(self, weather):
        ctx = _snapshot(LocationCategory.UNKNOWN, weather, TimeBucket.EVENING, None)
        assert infer_vibe(ctx).id == "night_winddown"


class TestMoodDescription:
    
    def test_weather_and_time(self):
        ctx = make_context(weather=WeatherTag.RAIN, weather_description="light rain")
        text = mood_description(get_vibe("rainy_chill"), ctx)
        assert text.startswith(get_vibe("rainy_chill").description)
        assert "Weather: light rain." in text
        assert text.endswith("Time: morning.")
    
    def test_imminent_event_is_mentioned(self):
        ctx = make_context(event=make_event(EventCategory.WORKOUT, minutes=20, title="Leg day"))
        text = mood_description(get_vibe("gym_hype"), ctx)
        assert 'Upcoming event: "Leg day" in 20 minutes.' in text
    
    def test_unknown_weather_omitted(self):
        text = mood_description(get_vibe("morning_gentle"), make_context())
        assert "Weather" not in text
    
    def test_late_night_bucket_reads_naturally(self):
        ctx = _snapshot(LocationCategory.UNKNOWN, WeatherTag.UNKNOWN, TimeBucket.LATE_NIGHT, None)
        assert mood_description(get_vibe("late_night_deep"), ctx).endswith("Time: late night.")
