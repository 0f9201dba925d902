"""
Trigger Evaluator for Tempr.

Decides fire / suppress for one evaluation cycle. The rules are checked
in a fixed order and the first matching rule suppresses:

1. Quiet hours
2. Trigger category disabled in settings
3. Cooldown: same trigger source fired within 3 hours
4. Daily cap reached
5. Same trigger source dismissed within 24 hours
6. Time-of-day trigger with no corroborating signal at all
7. Otherwise fire, with the inferred vibe

Evaluation is a pure function of (context, settings, log, now): it never
writes the log. Appending the fired entry is the caller's job.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from tempr.context_logic.context_types import LocationCategory, WeatherTag
from tempr.context_logic.snapshot import ContextSnapshot
from tempr.context_logic.time_logic import is_quiet_hours
from tempr.music_logic.vibes import infer_vibe
from tempr.trigger_logic.trigger_model import (
    PromptSettings,
    SuppressionReason,
    TriggerCategory,
    TriggerDecision,
    TriggerLog,
    TriggerSource,
)

logger = logging.getLogger(__name__)

COOLDOWN = timedelta(hours=3)
DISMISSAL_WINDOW = timedelta(hours=24)


def determine_trigger_source(context: ContextSnapshot) -> TriggerSource:
    """
    Derive the trigger source from a context.
    
    Same precedence as vibe inference (calendar > location > weather > time),
    but a level is chosen whenever its signal is present, whether or not
    the vibe catalog maps its value.
    """
    if context.has_imminent_event():
        return TriggerSource(TriggerCategory.CALENDAR, context.upcoming_event.category.value)
    if context.location_category != LocationCategory.UNKNOWN:
        return TriggerSource(TriggerCategory.LOCATION, context.location_category.value)
    if context.weather_tag not in (WeatherTag.UNKNOWN, WeatherTag.CLEAR):
        return TriggerSource(TriggerCategory.WEATHER, context.weather_tag.value)
    return TriggerSource(TriggerCategory.TIME, context.time_bucket.value)


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def evaluate_trigger(
    context: ContextSnapshot,
    settings: PromptSettings,
    log: TriggerLog,
    now: Optional[datetime] = None,
) -> TriggerDecision:
    """
    Evaluate whether to fire a prompt.
    
    Args:
        context: Current context snapshot
        settings: User prompt settings
        log: Trigger log of past fires
        now: Evaluation time (defaults to context.captured_at)
        
    Returns:
        TriggerDecision with fire/suppress and reason
    """
    now = now or context.captured_at
    
    if is_quiet_hours(settings.quiet_hours_start, settings.quiet_hours_end, now):
        logger.debug(f"[TRIGGER] Suppressed: quiet hours ({now:%H:%M})")
        return TriggerDecision.suppress(SuppressionReason.QUIET_HOURS)
    
    source = determine_trigger_source(context)
    
    if not settings.is_category_enabled(source.category):
        logger.debug(f"[TRIGGER] Suppressed: {source.category.value} prompts disabled")
        return TriggerDecision.suppress(SuppressionReason.category_disabled(source.category), source)
    
    if any(e.trigger_source == source and now - e.fired_at < COOLDOWN for e in log):
        logger.debug(f"[TRIGGER] Suppressed: {source} fired within cooldown")
        return TriggerDecision.suppress(SuppressionReason.COOLDOWN_SAME_TRIGGER, source)
    
    day_start = _start_of_day(now)
    fired_today = sum(1 for e in log if e.fired_at >= day_start)
    if fired_today >= settings.max_prompts_per_day:
        logger.debug(f"[TRIGGER] Suppressed: {fired_today}/{settings.max_prompts_per_day} prompts today")
        return TriggerDecision.suppress(SuppressionReason.DAILY_LIMIT_REACHED, source)
    
    if any(
        e.trigger_source == source and e.dismissed and now - e.fired_at < DISMISSAL_WINDOW
        for e in log
    ):
        logger.debug(f"[TRIGGER] Suppressed: {source} dismissed recently")
        return TriggerDecision.suppress(SuppressionReason.RECENTLY_DISMISSED, source)
    
    # TODO: overlaps with quiet hours in practice; revisit once there is usage data on time-only prompts
    if (
        source.category == TriggerCategory.TIME
        and context.weather_tag == WeatherTag.UNKNOWN
        and context.location_category == LocationCategory.UNKNOWN
        and context.upcoming_event is None
    ):
        logger.debug("[TRIGGER] Suppressed: time of day is the only signal")
        return TriggerDecision.suppress(SuppressionReason.INSUFFICIENT_CONTEXT_FOR_TIME_ONLY, source)
    
    vibe = infer_vibe(context)
    logger.info(f"[TRIGGER] Fire: source={source}, vibe={vibe.id}")
    return TriggerDecision.fire(vibe, source)
