"""Notification dispatcher factory.

Provides get_dispatcher() / set_dispatcher() to swap implementations.
Defaults to the in-memory dispatcher.
"""

from sales.integrations.notifications.fake_adapter import InMemoryNotificationDispatcher
from sales.integrations.notifications.port import NotificationDispatcher

_current_dispatcher: NotificationDispatcher | None = None


def get_dispatcher() -> NotificationDispatcher:
    global _current_dispatcher
    if _current_dispatcher is None:
        _current_dispatcher = InMemoryNotificationDispatcher()
    return _current_dispatcher


def set_dispatcher(dispatcher: NotificationDispatcher) -> None:
    """Override the active dispatcher (useful for tests)."""
    global _current_dispatcher
    _current_dispatcher = dispatcher


def reset_dispatcher() -> None:
    global _current_dispatcher
    _current_dispatcher = None
