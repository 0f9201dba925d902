"""
Time-of-day logic for Tempr.

Time bucketing, quiet-hours checks and timestamp decoding. All work on
local wall-clock time.
"""

import math
from datetime import datetime

from tempr.context_logic.context_types import TimeBucket


def time_bucket_for(when: datetime) -> TimeBucket:
    """
    Map a local time onto its time-of-day bucket.
    
    The buckets partition the whole day, so every hour has exactly one.
    """
    h = when.hour
    if 5 <= h < 8:
        return TimeBucket.EARLY_MORNING
    if 8 <= h < 12:
        return TimeBucket.MORNING
    if 12 <= h < 17:
        return TimeBucket.AFTERNOON
    if 17 <= h < 21:
        return TimeBucket.EVENING
    return TimeBucket.LATE_NIGHT


def is_quiet_hours(start_hour: int, end_hour: int, when: datetime) -> bool:
    """
    Check whether a time falls inside the quiet window [start_hour, end_hour).
    
    When start_hour > end_hour the window spans midnight (e.g. 23 -> 7).
    Equal start and end means no quiet window at all.
    
    Args:
        start_hour: First quiet hour (0-23)
        end_hour: First hour after the quiet window (0-23)
        when: Local time to check
        
    Returns:
        True if prompts should be held back at this time
    """
    h = when.hour
    if start_hour > end_hour:
        return h >= start_hour or h < end_hour
    return start_hour <= h < end_hour


def datetime_from_timestamp(value) -> datetime:
    """
    Decode a stored Unix timestamp into local time.
    
    Raises:
        ValueError: If the value is not a finite number the platform can represent
    """
    seconds = float(value)
    if not math.isfinite(seconds):
        raise ValueError(f"Invalid timestamp: {value!r}")
    try:
        return datetime.fromtimestamp(seconds)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Timestamp out of range: {value!r}") from e
