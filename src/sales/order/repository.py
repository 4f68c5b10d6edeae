"""Order lookups by human-readable order number."""

from protean.exceptions import ObjectNotFoundError

from sales.domain import sales
from sales.order.order import Order


@sales.repository(part_of=Order)
class OrderRepository:
    def order_number_taken(self, order_number: str) -> bool:
        return bool(self._dao.query.filter(order_number=order_number).all().items)

    def get_by_number(self, order_number: str) -> Order:
        results = self._dao.query.filter(order_number=order_number).all().items
        if not results:
            raise ObjectNotFoundError(f"Order `{order_number}` does not exist")
        return results[0]

    def recent(self, limit: int = 25, offset: int = 0, account_id=None) -> list[Order]:
        """Most recently placed orders first, optionally for one wholesale account."""
        query = self._dao.query
        if account_id:
            query = query.filter(account_id=str(account_id))
        return query.order_by("-placed_at").offset(offset).limit(limit).all().items
