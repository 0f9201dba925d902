"""
Contract tests for the context snapshot builder and time logic.

Each source is read at most once per build; a failing source degrades
its field to UNKNOWN (or no event) instead of failing the snapshot.
"""

from datetime import datetime
from unittest.mock import Mock

import pytest

from tempr.context_logic.context_types import (
    CalendarEvent,
    EventCategory,
    LocationCategory,
    TimeBucket,
    WeatherReading,
    WeatherTag,
)
from tempr.context_logic.snapshot import ContextSnapshotBuilder
from tempr.context_logic.time_logic import datetime_from_timestamp, is_quiet_hours, time_bucket_for
from tempr.context_logic.weather import WeatherUnavailable

NOW = datetime(2026, 3, 10, 18, 30)


class TestSnapshotBuilder:
    
    def test_collects_all_signals(self):
        event = CalendarEvent(category=EventCategory.PARTY, title="Birthday party", minutes_until_start=40)
        builder = ContextSnapshotBuilder(
            location_source=lambda: LocationCategory.BAR,
            weather_source=lambda: WeatherReading(WeatherTag.DRIZZLE, "light drizzle", 11),
            calendar_source=lambda now: event,
        )
        snapshot = builder.build(NOW)
        assert snapshot.location_category == LocationCategory.BAR
        assert snapshot.weather_tag == WeatherTag.DRIZZLE
        assert snapshot.weather_description == "light drizzle"
        assert snapshot.temperature_c == 11
        assert snapshot.time_bucket == TimeBucket.EVENING
        assert snapshot.upcoming_event == event
        assert snapshot.captured_at == NOW
        assert snapshot.has_imminent_event()
    
    def test_each_source_read_once(self):
        location = Mock(return_value=LocationCategory.HOME)
        weather = Mock(return_value=WeatherReading(WeatherTag.CLOUDY))
        calendar = Mock(return_value=None)
        ContextSnapshotBuilder(location, weather, calendar).build(NOW)
        location.assert_called_once_with()
        weather.assert_called_once_with()
        calendar.assert_called_once_with(NOW)
    
    def test_failing_sources_degrade(self):
        builder = ContextSnapshotBuilder(
            location_source=Mock(side_effect=PermissionError("location denied")),
            weather_source=Mock(side_effect=WeatherUnavailable("timeout")),
            calendar_source=Mock(side_effect=RuntimeError("calendar down")),
        )
        snapshot = builder.build(NOW)
        assert snapshot.location_category == LocationCategory.UNKNOWN
        assert snapshot.weather_tag == WeatherTag.UNKNOWN
        assert snapshot.upcoming_event is None
        assert snapshot.time_bucket == TimeBucket.EVENING
    
    def test_one_failure_does_not_affect_others(self):
        builder = ContextSnapshotBuilder(
            location_source=Mock(side_effect=RuntimeError("no fix")),
            weather_source=lambda: WeatherReading(WeatherTag.SNOW),
        )
        snapshot = builder.build(NOW)
        assert snapshot.location_category == LocationCategory.UNKNOWN
        assert snapshot.weather_tag == WeatherTag.SNOW
    
    def test_unconfigured_sources_are_unknown(self):
        snapshot = ContextSnapshotBuilder().build(NOW)
        assert snapshot.location_category == LocationCategory.UNKNOWN
        assert snapshot.weather_tag == WeatherTag.UNKNOWN
        assert snapshot.upcoming_event is None
    
    def test_empty_source_result_is_unknown(self):
        snapshot = ContextSnapshotBuilder(location_source=lambda: None, weather_source=lambda: None).build(NOW)
        assert snapshot.location_category == LocationCategory.UNKNOWN
        assert snapshot.weather_tag == WeatherTag.UNKNOWN
    
    def test_clock_used_when_no_time_given(self):
        snapshot = ContextSnapshotBuilder(clock=lambda: NOW).build()
        assert snapshot.captured_at == NOW
    
    def test_to_dict(self):
        snapshot = ContextSnapshotBuilder(location_source=lambda: LocationCategory.GYM).build(NOW)
        data = snapshot.to_dict()
        assert data["location_category"] == "gym"
        assert data["time_bucket"] == "evening"
        assert data["upcoming_event"] is None


class TestTimeBuckets:
    
    @pytest.mark.parametrize("hour,bucket", [
        (0, TimeBucket.LATE_NIGHT),
        (4, TimeBucket.LATE_NIGHT),
        (5, TimeBucket.EARLY_MORNING),
        (7, TimeBucket.EARLY_MORNING),
        (8, TimeBucket.MORNING),
        (11, TimeBucket.MORNING),
        (12, TimeBucket.AFTERNOON),
        (16, TimeBucket.AFTERNOON),
        (17, TimeBucket.EVENING),
        (20, TimeBucket.EVENING),
        (21, TimeBucket.LATE_NIGHT),
        (23, TimeBucket.LATE_NIGHT),
    ])
    def test_boundaries(self, hour, bucket):
        assert time_bucket_for(datetime(2026, 3, 10, hour, 59)) == bucket


class TestQuietHours:
    
    @pytest.mark.parametrize("hour,quiet", [(22, False), (23, True), (0, True), (6, True), (7, False), (12, False)])
    def test_window_spanning_midnight(self, hour, quiet):
        assert is_quiet_hours(23, 7, datetime(2026, 3, 10, hour, 0)) is quiet
    
    @pytest.mark.parametrize("hour,quiet", [(12, False), (13, True), (14, True), (15, False)])
    def test_daytime_window(self, hour, quiet):
        assert is_quiet_hours(13, 15, datetime(2026, 3, 10, hour, 0)) is quiet
    
    def test_equal_bounds_disable_window(self):
        assert not any(is_quiet_hours(9, 9, datetime(2026, 3, 10, h, 0)) for h in range(24))


class TestTimestampDecoding:
    
    def test_round_trip_local_time(self):
        assert datetime_from_timestamp(NOW.timestamp()) == NOW
    
    def test_accepts_numeric_strings(self):
        assert datetime_from_timestamp(str(NOW.timestamp())) == NOW
    
    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), 1e300, "soon"])
    def test_unrepresentable_values_raise_value_error(self, value):
        with pytest.raises(ValueError):
            datetime_from_timestamp(value)
