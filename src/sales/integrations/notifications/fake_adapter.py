"""In-memory notification dispatcher for development and testing.

Keeps every queued notification in a list instead of delivering it. Can be
told to fail so callers can be checked for tolerating a broken channel.
"""

from sales.integrations.notifications.port import NotificationDispatcher, QueuedNotification


class NotificationDeliveryError(Exception):
    """The dispatcher could not accept a notification."""


class InMemoryNotificationDispatcher(NotificationDispatcher):
    def __init__(self) -> None:
        self.should_fail: bool = False
        self.failure_reason: str = "Notification channel unavailable"
        self.queued: list[QueuedNotification] = []

    def configure(self, should_fail: bool, failure_reason: str = "Notification channel unavailable") -> None:
        self.should_fail = should_fail
        self.failure_reason = failure_reason

    def enqueue(self, kind: str, snapshot: dict) -> QueuedNotification:
        if self.should_fail:
            raise NotificationDeliveryError(self.failure_reason)

        notification = QueuedNotification(kind=kind, order_number=snapshot["order_number"], snapshot=snapshot)
        self.queued.append(notification)
        return notification

    def kinds_for(self, order_number: str) -> list[str]:
        return [n.kind for n in self.queued if n.order_number == order_number]
