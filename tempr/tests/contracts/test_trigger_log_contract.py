"""
Contract tests for the trigger log, trigger sources and prompt settings.

The trigger log is an immutable value: append / prune / mark_dismissed
return new logs. Persistence reads a damaged log as empty.
"""

import json
from datetime import datetime, timedelta

import pytest

from tempr.state.json_store import JsonStateStore
from tempr.state.trigger_log_store import TriggerLogStore
from tempr.trigger_logic.trigger_model import (
    LOG_RETENTION,
    PromptSettings,
    SuppressionReason,
    TriggerCategory,
    TriggerLog,
    TriggerLogEntry,
    TriggerSource,
)

NOW = datetime(2026, 3, 10, 10, 0)
RAIN = TriggerSource(TriggerCategory.WEATHER, "rain")
GYM = TriggerSource(TriggerCategory.LOCATION, "gym")


class TestTriggerSource:
    
    def test_renders_category_and_value(self):
        assert str(RAIN) == "weather:rain"
    
    def test_parse_round_trip(self):
        assert TriggerSource.parse("calendar:date_night") == TriggerSource(TriggerCategory.CALENDAR, "date_night")
    
    @pytest.mark.parametrize("text", ["rain", "mood:happy", ""])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            TriggerSource.parse(text)
    
    def test_category_disabled_reason(self):
        assert SuppressionReason.category_disabled(TriggerCategory.TIME) == SuppressionReason.TIME_PROMPTS_DISABLED


class TestTriggerLogImmutability:
    
    def test_append_returns_new_log(self):
        log = TriggerLog()
        appended = log.append(TriggerLogEntry("rainy_chill", RAIN, NOW))
        assert len(log) == 0
        assert len(appended) == 1
    
    def test_append_prunes_stale_entries(self):
        old = TriggerLogEntry("gym_hype", GYM, NOW - LOG_RETENTION - timedelta(hours=1))
        recent = TriggerLogEntry("gym_hype", GYM, NOW - timedelta(days=2))
        log = TriggerLog((old, recent)).append(TriggerLogEntry("rainy_chill", RAIN, NOW))
        assert [e.fired_at for e in log] == [recent.fired_at, NOW]
    
    def test_entry_exactly_at_retention_is_pruned(self):
        log = TriggerLog((TriggerLogEntry("gym_hype", GYM, NOW - LOG_RETENTION),))
        assert len(log.pruned(NOW)) == 0


class TestMarkDismissed:
    
    def test_marks_most_recent_matching_entry(self):
        first = TriggerLogEntry("rainy_chill", RAIN, NOW - timedelta(hours=5))
        other = TriggerLogEntry("gym_hype", GYM, NOW - timedelta(hours=4))
        latest = TriggerLogEntry("rainy_chill", RAIN, NOW - timedelta(hours=1))
        log = TriggerLog((first, other, latest)).mark_dismissed(RAIN)
        assert [e.dismissed for e in log] == [False, False, True]
    
    def test_skips_already_dismissed(self):
        first = TriggerLogEntry("rainy_chill", RAIN, NOW - timedelta(hours=5))
        latest = TriggerLogEntry("rainy_chill", RAIN, NOW - timedelta(hours=1), dismissed=True)
        log = TriggerLog((first, latest)).mark_dismissed(RAIN)
        assert [e.dismissed for e in log] == [True, True]
    
    def test_no_match_returns_same_log(self):
        log = TriggerLog((TriggerLogEntry("gym_hype", GYM, NOW),))
        assert log.mark_dismissed(RAIN) is log


class TestTriggerLogPersistence:
    
    def test_save_and_load(self, tmp_path):
        store = TriggerLogStore(JsonStateStore(str(tmp_path / "trigger_log.json")))
        log = TriggerLog((
            TriggerLogEntry("rainy_chill", RAIN, NOW - timedelta(hours=2), dismissed=True),
            TriggerLogEntry("gym_hype", GYM, NOW),
        ))
        store.save(log)
        assert store.load() == log
    
    def test_stored_sources_are_strings(self, tmp_path):
        path = tmp_path / "trigger_log.json"
        TriggerLogStore(JsonStateStore(str(path))).save(TriggerLog((TriggerLogEntry("rainy_chill", RAIN, NOW),)))
        data = json.loads(path.read_text())
        assert data[0]["trigger_source"] == "weather:rain"
    
    def test_load_prunes_when_now_given(self, tmp_path):
        store = TriggerLogStore(JsonStateStore(str(tmp_path / "trigger_log.json")))
        store.save(TriggerLog((TriggerLogEntry("gym_hype", GYM, NOW - timedelta(days=8)),)))
        assert len(store.load()) == 1
        assert len(store.load(NOW)) == 0
    
    def test_missing_file_reads_empty(self, tmp_path):
        store = TriggerLogStore(JsonStateStore(str(tmp_path / "absent.json")))
        assert len(store.load(NOW)) == 0
    
    @pytest.mark.parametrize("content", [
        "{not json",
        '{"a": 1}',
        '[{"vibe_id": "x", "trigger_source": "bogus", "fired_at": 0}]',
    ])
    def test_damaged_file_reads_empty(self, tmp_path, content):
        path = tmp_path / "trigger_log.json"
        path.write_text(content)
        assert len(TriggerLogStore(JsonStateStore(str(path))).load(NOW)) == 0


class TestPromptSettings:
    
    def test_defaults(self):
        settings = PromptSettings()
        assert (settings.quiet_hours_start, settings.quiet_hours_end, settings.max_prompts_per_day) == (23, 7, 3)
        assert all(settings.is_category_enabled(c) for c in TriggerCategory)
    
    @pytest.mark.parametrize("kwargs", [
        {"quiet_hours_start": 24},
        {"quiet_hours_end": -1},
        {"max_prompts_per_day": 0},
        {"quiet_hours_start": "23"},
    ])
    def test_invalid_values_raise(self, kwargs):
        with pytest.raises(ValueError):
            PromptSettings(**kwargs)
    
    def test_from_dict_merges_over_defaults(self):
        settings = PromptSettings.from_dict({"weather_prompts": False, "theme": "dark"})
        assert settings.weather_prompts is False
        assert settings.max_prompts_per_day == 3


class TestTriggerLogEntryDecoding:
    """A bad stored entry is dropped on its own; the rest of the log survives."""
    
    def _write(self, tmp_path, text):
        path = tmp_path / "trigger_log.json"
        path.write_text(text)
        return TriggerLogStore(JsonStateStore(str(path)))
    
    def test_malformed_entry_keeps_valid_entries(self, tmp_path):
        good = TriggerLogEntry("rainy_chill", RAIN, NOW - timedelta(minutes=30)).to_dict()
        bad = dict(good, trigger_source="nocolon")
        store = self._write(tmp_path, json.dumps([good, bad]))
        assert [e.trigger_source for e in store.load(NOW)] == [RAIN]
    
    @pytest.mark.parametrize("fired_at", ["Infinity", "-Infinity", "NaN", "1e300"])
    def test_unrepresentable_timestamp_dropped(self, tmp_path, fired_at):
        good = json.dumps(TriggerLogEntry("gym_hype", GYM, NOW).to_dict())
        text = f'[{good}, {{"vibe_id": "rainy_chill", "trigger_source": "weather:rain", "fired_at": {fired_at}}}]'
        store = self._write(tmp_path, text)
        assert [e.vibe_id for e in store.load(NOW)] == ["gym_hype"]
    
    def test_from_dict_rejects_infinite_timestamp(self):
        with pytest.raises(ValueError):
            TriggerLogEntry.from_dict({"vibe_id": "x", "trigger_source": "weather:rain", "fired_at": float("inf")})
