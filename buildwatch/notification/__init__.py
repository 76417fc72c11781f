from buildwatch.notification.notification_manager import (
    BuildNotifier,
    EventListener,
    EventNotifier,
)
from buildwatch.notification.webhook_notifier import WebhookNotifier

__all__ = [
    "BuildNotifier",
    "EventListener",
    "EventNotifier",
    "WebhookNotifier",
]
