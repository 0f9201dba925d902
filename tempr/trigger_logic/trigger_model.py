"""
Trigger Model for Tempr.

Value types for trigger evaluation: the tagged trigger source, the
rolling trigger log, per-user prompt settings and the decision itself.

The trigger log is the only cross-cycle mutable state in the engine. It
is modelled as an immutable value: every change returns a new log, and
persistence happens outside (see tempr.state.trigger_log_store).
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from tempr.context_logic.time_logic import datetime_from_timestamp
from tempr.music_logic.vibes import VibeProfile

LOG_RETENTION = timedelta(days=7)


class TriggerCategory(str, Enum):
    CALENDAR = "calendar"
    LOCATION = "location"
    WEATHER = "weather"
    TIME = "time"


@dataclass(frozen=True)
class TriggerSource:
    """
    Why a prompt cycle considered firing: a category plus the signal value.
    
    Rendered as "category:value" (e.g. "weather:rain") only for logging and
    persistence; comparisons use the structured fields.
    """
    category: TriggerCategory
    value: str

    def __str__(self) -> str:
        return f"{self.category.value}:{self.value}"

    @classmethod
    def parse(cls, text: str) -> "TriggerSource":
        """
        Parse the "category:value" form.
        
        Raises:
            ValueError: If the text has no separator or an unknown category
        """
        category, sep, value = text.partition(":")
        if not sep:
            raise ValueError(f"Invalid trigger source: {text!r} (expected 'category:value')")
        return cls(TriggerCategory(category), value)


class SuppressionReason(str, Enum):
    """Closed set of reasons a prompt cycle did not deliver a prompt."""
    QUIET_HOURS = "quiet_hours"
    CALENDAR_PROMPTS_DISABLED = "calendar_prompts_disabled"
    LOCATION_PROMPTS_DISABLED = "location_prompts_disabled"
    WEATHER_PROMPTS_DISABLED = "weather_prompts_disabled"
    TIME_PROMPTS_DISABLED = "time_prompts_disabled"
    COOLDOWN_SAME_TRIGGER = "cooldown_same_trigger"
    DAILY_LIMIT_REACHED = "daily_limit_reached"
    RECENTLY_DISMISSED = "recently_dismissed"
    INSUFFICIENT_CONTEXT_FOR_TIME_ONLY = "insufficient_context_for_time_only"
    # Raised by the orchestrator, never by the evaluator
    GENERATION_ERROR = "generation_error"
    USER_CURRENTLY_PLAYING = "user_currently_playing"
    CYCLE_IN_PROGRESS = "cycle_in_progress"

    @classmethod
    def category_disabled(cls, category: TriggerCategory) -> "SuppressionReason":
        return cls(f"{category.value}_prompts_disabled")


FIRE_REASON = "trigger_conditions_met"


@dataclass(frozen=True)
class TriggerLogEntry:
    """
    One fired prompt.
    
    Attributes:
        vibe_id: Vibe the prompt was fired for
        trigger_source: Why it fired
        fired_at: When it fired (local time)
        dismissed: Set later when the user dismisses the prompt
    """
    vibe_id: str
    trigger_source: TriggerSource
    fired_at: datetime
    dismissed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vibe_id": self.vibe_id,
            "trigger_source": str(self.trigger_source),
            "fired_at": self.fired_at.timestamp(),
            "dismissed": self.dismissed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TriggerLogEntry":
        return cls(
            vibe_id=str(data["vibe_id"]),
            trigger_source=TriggerSource.parse(str(data["trigger_source"])),
            fired_at=datetime_from_timestamp(data["fired_at"]),
            dismissed=bool(data.get("dismissed", False)),
        )


@dataclass(frozen=True)
class TriggerLog:
    """
    Append-only log of fired prompts, capped to a rolling 7-day window.
    
    Immutable: append() and mark_dismissed() return new logs.
    """
    entries: Tuple[TriggerLogEntry, ...] = ()

    def __iter__(self) -> Iterator[TriggerLogEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def pruned(self, now: datetime) -> "TriggerLog":
        """Drop entries older than the retention window."""
        cutoff = now - LOG_RETENTION
        return TriggerLog(tuple(e for e in self.entries if e.fired_at > cutoff))

    def append(self, entry: TriggerLogEntry, now: Optional[datetime] = None) -> "TriggerLog":
        """Return a new log with the entry appended and stale entries pruned."""
        pruned = self.pruned(now or entry.fired_at)
        return TriggerLog(pruned.entries + (entry,))

    def mark_dismissed(self, trigger_source: TriggerSource) -> "TriggerLog":
        """
        Flag the most recent un-dismissed entry for trigger_source as dismissed.
        
        Returns the log unchanged if there is no such entry.
        """
        entries = list(self.entries)
        for idx in range(len(entries) - 1, -1, -1):
            entry = entries[idx]
            if entry.trigger_source == trigger_source and not entry.dismissed:
                entries[idx] = replace(entry, dismissed=True)
                return TriggerLog(tuple(entries))
        return self

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.entries]


@dataclass(frozen=True)
class PromptSettings:
    """
    Per-user prompt configuration.
    
    Changed only by explicit user action; read-only to the engine.
    """
    weather_prompts: bool = True
    calendar_prompts: bool = True
    location_prompts: bool = True
    time_of_day_prompts: bool = True
    quiet_hours_start: int = 23
    quiet_hours_end: int = 7
    max_prompts_per_day: int = 3

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Validate settings values.
        
        Raises:
            ValueError: If an hour is outside 0-23 or the daily cap is below 1
        """
        for name in ("quiet_hours_start", "quiet_hours_end"):
            hour = getattr(self, name)
            if not isinstance(hour, int) or not 0 <= hour <= 23:
                raise ValueError(f"Invalid {name}: {hour!r} (must be an hour 0-23)")
        if not isinstance(self.max_prompts_per_day, int) or self.max_prompts_per_day < 1:
            raise ValueError(f"Invalid max_prompts_per_day: {self.max_prompts_per_day!r} (must be >= 1)")

    def is_category_enabled(self, category: TriggerCategory) -> bool:
        return {
            TriggerCategory.WEATHER: self.weather_prompts,
            TriggerCategory.CALENDAR: self.calendar_prompts,
            TriggerCategory.LOCATION: self.location_prompts,
            TriggerCategory.TIME: self.time_of_day_prompts,
        }[category]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weather_prompts": self.weather_prompts,
            "calendar_prompts": self.calendar_prompts,
            "location_prompts": self.location_prompts,
            "time_of_day_prompts": self.time_of_day_prompts,
            "quiet_hours_start": self.quiet_hours_start,
            "quiet_hours_end": self.quiet_hours_end,
            "max_prompts_per_day": self.max_prompts_per_day,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PromptSettings":
        """Build settings from stored values merged over the defaults (unknown keys ignored)."""
        merged = cls().to_dict()
        merged.update({k: v for k, v in data.items() if k in merged})
        return cls(**merged)


@dataclass(frozen=True)
class TriggerDecision:
    """
    Outcome of one trigger evaluation.
    
    Attributes:
        should_fire: True if a prompt is warranted
        vibe: Resolved vibe (only set when firing)
        trigger_source: Derived trigger source (None when suppressed before derivation)
        reason: FIRE_REASON or a SuppressionReason value
    """
    should_fire: bool
    vibe: Optional[VibeProfile]
    trigger_source: Optional[TriggerSource]
    reason: str

    @classmethod
    def suppress(cls, reason: SuppressionReason, trigger_source: Optional[TriggerSource] = None) -> "TriggerDecision":
        return cls(should_fire=False, vibe=None, trigger_source=trigger_source, reason=reason.value)

    @classmethod
    def fire(cls, vibe: VibeProfile, trigger_source: TriggerSource) -> "TriggerDecision":
        return cls(should_fire=True, vibe=vibe, trigger_source=trigger_source, reason=FIRE_REASON)
