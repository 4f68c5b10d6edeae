"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Decimal, Identifier, Integer, String, Text

from sales.domain import sales


@sales.event(part_of="Order")
class OrderPlaced:
    """An order was committed together with its stock reservations and credit draw."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    email = String(required=True)
    user_id = Identifier()
    account_id = Identifier()
    payment_type = String(required=True)
    payment_status = String(required=True)
    approval_status = String(required=True)
    subtotal = Decimal(required=True)
    tax_amount = Decimal(required=True)
    total_amount = Decimal(required=True)
    item_count = Integer(required=True)
    items = Text(required=True)  # JSON array of line items
    due_date = DateTime()
    placed_at = DateTime(required=True)
