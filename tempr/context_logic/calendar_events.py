"""
Calendar signal for Tempr.

Infers an event category from its title and picks the nearest upcoming
event inside a lookahead window.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from tempr.context_logic.context_types import CalendarEvent, EventCategory
from tempr.context_logic.time_logic import datetime_from_timestamp

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD_MINUTES: int = 120

# Checked in order, substring match on the lower-cased title
EVENT_KEYWORDS: List[Tuple[str, EventCategory]] = [
    ("date", EventCategory.DATE_NIGHT),
    ("dinner", EventCategory.DATE_NIGHT),
    ("romantic", EventCategory.DATE_NIGHT),
    ("anniversary", EventCategory.DATE_NIGHT),
    ("gym", EventCategory.WORKOUT),
    ("workout", EventCategory.WORKOUT),
    ("exercise", EventCategory.WORKOUT),
    ("run", EventCategory.WORKOUT),
    ("yoga", EventCategory.WORKOUT),
    ("crossfit", EventCategory.WORKOUT),
    ("training", EventCategory.WORKOUT),
    ("study", EventCategory.STUDY),
    ("exam", EventCategory.STUDY),
    ("homework", EventCategory.STUDY),
    ("library", EventCategory.STUDY),
    ("revision", EventCategory.STUDY),
    ("flight", EventCategory.FLIGHT),
    ("airport", EventCategory.FLIGHT),
    ("travel", EventCategory.FLIGHT),
    ("boarding", EventCategory.FLIGHT),
    ("meeting", EventCategory.MEETING),
    ("standup", EventCategory.MEETING),
    ("sync", EventCategory.MEETING),
    ("review", EventCategory.MEETING),
    ("1:1", EventCategory.MEETING),
    ("party", EventCategory.PARTY),
    ("birthday", EventCategory.PARTY),
    ("celebration", EventCategory.PARTY),
    ("hangout", EventCategory.SOCIAL),
    ("drinks", EventCategory.SOCIAL),
    ("brunch", EventCategory.SOCIAL),
    ("lunch", EventCategory.SOCIAL),
    ("coffee", EventCategory.SOCIAL),
    ("commute", EventCategory.COMMUTE),
    ("spa", EventCategory.RELAXATION),
    ("massage", EventCategory.RELAXATION),
    ("meditation", EventCategory.RELAXATION),
]


@dataclass(frozen=True)
class CalendarEntry:
    """A raw calendar entry as read from the user's calendar."""
    title: str
    starts_at: datetime


def event_category_for(title: str) -> EventCategory:
    """Infer an event category from its title (UNKNOWN when no keyword matches)."""
    lower = (title or "").lower()
    for keyword, category in EVENT_KEYWORDS:
        if keyword in lower:
            return category
    return EventCategory.UNKNOWN


def nearest_event(
    entries: Iterable[CalendarEntry],
    now: datetime,
    window_minutes: int = DEFAULT_LOOKAHEAD_MINUTES,
) -> Optional[CalendarEvent]:
    """
    Pick the earliest entry starting within [now, now + window_minutes].
    
    Args:
        entries: Calendar entries in any order
        now: Current local time
        window_minutes: Lookahead window
        
    Returns:
        CalendarEvent for the nearest entry, or None if none fall in the window
    """
    end = now + timedelta(minutes=window_minutes)
    upcoming = sorted(
        (e for e in entries if now <= e.starts_at <= end),
        key=lambda e: e.starts_at,
    )
    if not upcoming:
        return None
    
    nxt = upcoming[0]
    minutes = round((nxt.starts_at - now).total_seconds() / 60)
    return CalendarEvent(
        category=event_category_for(nxt.title),
        title=nxt.title,
        minutes_until_start=max(0, minutes),
    )


def entries_from_dicts(items: Iterable[dict]) -> List[CalendarEntry]:
    """
    Parse calendar entries from JSON-style dicts.
    
    Each item needs "title" and "starts_at" (ISO 8601 string or Unix
    timestamp). Malformed items are skipped with a warning.
    """
    entries: List[CalendarEntry] = []
    for item in items:
        try:
            raw = item["starts_at"]
            if isinstance(raw, (int, float)):
                starts_at = datetime_from_timestamp(raw)
            else:
                starts_at = datetime.fromisoformat(str(raw))
            entries.append(CalendarEntry(title=str(item.get("title", "")), starts_at=starts_at))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"[CALENDAR] Skipping malformed entry {item!r}: {e}")
    return entries
