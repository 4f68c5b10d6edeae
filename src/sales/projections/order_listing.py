"""Order listing: recent orders as a cached read model.

Pages are built from the order store on a miss and kept in the ``default``
cache for ``ORDER_LISTING_TTL`` seconds. A successful placement drops every
cached page so new orders appear on the next read.
"""

import json

import structlog
from protean.fields import String, Text
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.order.order import Order

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_SIZE = 25


@sales.projection(cache="default")
class OrderListing:
    page_key = String(identifier=True, max_length=100)
    orders = Text(required=True)  # JSON array of order summaries


def _page_key(limit: int, offset: int, account_id=None) -> str:
    return f"{account_id or 'all'}-{limit}-{offset}"


def summarize(order: Order) -> dict:
    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "email": str(order.email),
        "account_id": str(order.account_id) if order.account_id else None,
        "payment_type": order.payment_type,
        "payment_status": order.payment_status,
        "order_status": order.order_status,
        "approval_status": order.approval_status,
        "item_count": sum(item.quantity for item in order.items),
        "total_amount": str(order.total_amount),
        "placed_at": order.placed_at.isoformat() if order.placed_at else None,
    }


def list_orders(limit: int = DEFAULT_PAGE_SIZE, offset: int = 0, account_id=None) -> list[dict]:
    cache = current_domain.cache_for(OrderListing)
    key = _page_key(limit, offset, account_id)

    cached = cache.get(f"order_listing:::{key}")
    if cached is not None:
        return json.loads(cached.orders)

    orders = current_domain.repository_for(Order).recent(limit=limit, offset=offset, account_id=account_id)
    summaries = [summarize(order) for order in orders]
    cache.add(
        OrderListing(page_key=key, orders=json.dumps(summaries)),
        ttl=getattr(current_domain, "ORDER_LISTING_TTL", None),
    )
    logger.debug("order_listing.cache_filled", page_key=key, count=len(summaries))
    return summaries
