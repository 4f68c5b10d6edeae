"""Post-commit reactions to ``OrderPlaced``.

These run after the order transaction has committed. A failure here is logged
and never reaches the caller: the order stands whether or not a notification
was queued or a cached listing was dropped.
"""

import json

import structlog
from protean.utils.mixins import handle

from sales.domain import sales
from sales.integrations import cache
from sales.integrations.notifications import get_dispatcher
from sales.integrations.notifications.port import NotificationKind
from sales.order.events import OrderPlaced
from sales.order.order import ApprovalStatus, Order

logger = structlog.get_logger(__name__)


def order_snapshot(event: OrderPlaced) -> dict:
    return {
        "order_id": str(event.order_id),
        "order_number": event.order_number,
        "email": event.email,
        "account_id": str(event.account_id) if event.account_id else None,
        "payment_type": event.payment_type,
        "payment_status": event.payment_status,
        "approval_status": event.approval_status,
        "subtotal": str(event.subtotal),
        "tax_amount": str(event.tax_amount),
        "total_amount": str(event.total_amount),
        "items": json.loads(event.items) if isinstance(event.items, str) else event.items,
        "due_date": event.due_date.isoformat() if event.due_date else None,
        "placed_at": event.placed_at.isoformat() if event.placed_at else None,
    }


@sales.event_handler(part_of=Order)
class OrderPlacedSideEffects:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        snapshot = order_snapshot(event)

        kinds = [NotificationKind.ORDER_CONFIRMATION, NotificationKind.ADMIN_NEW_ORDER]
        if event.approval_status == ApprovalStatus.PENDING.value:
            kinds.append(NotificationKind.ORDER_AWAITING_APPROVAL)

        for kind in kinds:
            try:
                get_dispatcher().enqueue(kind.value, snapshot)
            except Exception as exc:
                logger.error(
                    "order.notification_failed",
                    order_number=event.order_number,
                    kind=kind.value,
                    error=str(exc),
                )

        try:
            cache.invalidate("order_listing")
        except Exception as exc:
            logger.error("order.listing_invalidation_failed", order_number=event.order_number, error=str(exc))
