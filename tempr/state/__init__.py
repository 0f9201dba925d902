"""
State module for Tempr.

Whole-value JSON persistence for the trigger log, prompt settings and
queue feedback. Each store reads the full value and writes the full
value; there is no partial-update protocol.
"""

from tempr.state.json_store import JsonStateStore
from tempr.state.trigger_log_store import TriggerLogStore
from tempr.state.settings_store import SettingsStore
from tempr.state.feedback_store import FeedbackAction, FeedbackStore, QueueFeedback

__all__ = [
    "JsonStateStore",
    "TriggerLogStore",
    "SettingsStore",
    "FeedbackAction",
    "FeedbackStore",
    "QueueFeedback",
]
