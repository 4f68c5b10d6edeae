"""Notification dispatch port.

Placement hands a snapshot of the committed order to a dispatcher; delivery
(email, admin inbox) is the adapter's concern and runs outside the order
transaction.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class NotificationKind(Enum):
    ORDER_CONFIRMATION = "order_confirmation"
    ADMIN_NEW_ORDER = "admin_new_order"
    ORDER_AWAITING_APPROVAL = "order_awaiting_approval"


@dataclass(frozen=True)
class QueuedNotification:
    """A notification accepted by a dispatcher."""

    kind: str
    order_number: str
    snapshot: dict
    queued_at: datetime = field(default_factory=datetime.now)


class NotificationDispatcher(ABC):
    """Abstract notification dispatcher interface."""

    @abstractmethod
    def enqueue(self, kind: str, snapshot: dict) -> QueuedNotification:
        """Queue a notification about an order for delivery."""
        ...
