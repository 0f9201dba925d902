"""
Trigger Logic module for Tempr.

This package decides whether a prompt is warranted right now, from the
context snapshot, the user's prompt settings and the trigger log.
"""

from tempr.trigger_logic.trigger_model import (
    PromptSettings,
    SuppressionReason,
    TriggerCategory,
    TriggerDecision,
    TriggerLog,
    TriggerLogEntry,
    TriggerSource,
)
from tempr.trigger_logic.trigger_evaluator import determine_trigger_source, evaluate_trigger

__all__ = [
    "PromptSettings",
    "SuppressionReason",
    "TriggerCategory",
    "TriggerDecision",
    "TriggerLog",
    "TriggerLogEntry",
    "TriggerSource",
    "determine_trigger_source",
    "evaluate_trigger",
]
