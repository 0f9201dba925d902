"""
Outputs module for Tempr.

This package contains notifiers that hand a prompted queue off to the
user. Delivery is fire-and-forget.
"""

from .notifier import Notifier, NullNotifier, WebhookNotifier, notification_copy

__all__ = [
    "Notifier",
    "NullNotifier",
    "WebhookNotifier",
    "notification_copy",
]
