"""Order aggregate with LineItem entity, ShippingAddress and TimelineEntry value objects."""

import decimal
import json
from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Decimal,
    HasMany,
    Identifier,
    Integer,
    List,
    String,
    Text,
    ValueObject,
)

from sales.domain import sales
from sales.shared.email import EmailAddress

ZERO = decimal.Decimal("0")


class PaymentType(Enum):
    COD = "cod"
    ONLINE = "online"
    CREDIT = "credit"
    INVOICE = "invoice"


# Payment types settled against a wholesale credit line
CREDIT_PAYMENT_TYPES = (PaymentType.CREDIT.value, PaymentType.INVOICE.value)


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ApprovalStatus(Enum):
    NOT_REQUIRED = "not_required"
    PENDING = "pending"
    APPROVED = "approved"


@sales.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured as it was at placement."""

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@sales.value_object(part_of="Order")
class TimelineEntry:
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)
    recorded_at = DateTime(required=True)


@sales.entity(part_of="Order")
class LineItem:
    """A product line with the name and unit price captured at placement."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Decimal(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20)

    @property
    def line_total(self) -> decimal.Decimal:
        return self.unit_price * self.quantity


@sales.aggregate
class Order:
    """A placed order.

    Totals are consistent by construction: ``subtotal`` is the sum of the line
    totals and ``total_amount`` is ``subtotal + tax_amount``. The status timeline
    is append-only and ordered by time.
    """

    order_number = String(required=True, max_length=20, unique=True)
    user_id = Identifier()
    account_id = Identifier()
    pricing_tier = String(max_length=20)
    items = HasMany(LineItem)
    shipping_address = ValueObject(ShippingAddress)
    email = ValueObject(EmailAddress, required=True)
    phone = String(max_length=30)
    subtotal = Decimal(required=True, min_value=0)
    tax_amount = Decimal(min_value=0, default=ZERO)
    total_amount = Decimal(required=True, min_value=0)
    payment_type = String(required=True, choices=PaymentType)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    approval_status = String(choices=ApprovalStatus, default=ApprovalStatus.NOT_REQUIRED.value)
    timeline = List(content_type=ValueObject(TimelineEntry))
    due_date = DateTime()
    purchase_order_number = String(max_length=100)
    notes = Text()
    placed_at = DateTime(default=datetime.now)

    @invariant.post
    def must_have_line_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order must have at least one line item"]})

    @invariant.post
    def subtotal_matches_line_items(self):
        expected = sum((item.line_total for item in self.items or []), ZERO)
        if self.subtotal != expected:
            raise ValidationError(
                {"subtotal": [f"Subtotal {self.subtotal} does not match line items total {expected}"]}
            )

    @invariant.post
    def total_is_subtotal_plus_tax(self):
        if self.total_amount != self.subtotal + (self.tax_amount or ZERO):
            raise ValidationError({"total_amount": ["Total amount must equal subtotal plus tax"]})

    @invariant.post
    def timeline_is_chronological(self):
        entries = self.timeline or []
        for earlier, later in zip(entries, entries[1:]):
            if later.recorded_at < earlier.recorded_at:
                raise ValidationError({"timeline": ["Timeline entries must be in chronological order"]})

    @classmethod
    def place(
        cls,
        order_number,
        email,
        items,
        payment_type,
        timeline_note,
        shipping_address=None,
        tax_amount=ZERO,
        payment_status=None,
        approval_status=None,
        account_id=None,
        pricing_tier=None,
        due_date=None,
        user_id=None,
        phone=None,
        purchase_order_number=None,
        notes=None,
        placed_at=None,
    ):
        """Create the order in its initial state and raise ``OrderPlaced``.

        ``items`` are dicts with ``product_id``, ``name``, ``unit_price``,
        ``quantity`` and optional ``size``.
        """
        from sales.order.events import OrderPlaced

        placed_at = placed_at or datetime.now()
        line_items = [LineItem(**item) for item in items]
        subtotal = sum((item.line_total for item in line_items), ZERO)

        order = cls(
            order_number=order_number,
            user_id=user_id,
            account_id=account_id,
            pricing_tier=pricing_tier,
            items=line_items,
            shipping_address=ShippingAddress(**shipping_address) if shipping_address else None,
            email=EmailAddress(address=email),
            phone=phone,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total_amount=subtotal + tax_amount,
            payment_type=payment_type,
            payment_status=payment_status or PaymentStatus.PENDING.value,
            order_status=OrderStatus.PENDING.value,
            approval_status=approval_status or ApprovalStatus.NOT_REQUIRED.value,
            timeline=[
                TimelineEntry(status=OrderStatus.PENDING.value, note=timeline_note, recorded_at=placed_at),
            ],
            due_date=due_date,
            purchase_order_number=purchase_order_number,
            notes=notes,
            placed_at=placed_at,
        )

        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                email=email,
                user_id=user_id,
                account_id=account_id,
                payment_type=payment_type,
                payment_status=order.payment_status,
                approval_status=order.approval_status,
                subtotal=order.subtotal,
                tax_amount=order.tax_amount,
                total_amount=order.total_amount,
                item_count=sum(item.quantity for item in line_items),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "name": item.name,
                            "unit_price": str(item.unit_price),
                            "quantity": item.quantity,
                            "size": item.size,
                        }
                        for item in line_items
                    ]
                ),
                due_date=due_date,
                placed_at=placed_at,
            )
        )
        return order

    @property
    def is_wholesale(self) -> bool:
        return self.account_id is not None

    def record_timeline(self, status, note=None, at=None):
        """Append a status entry. Entries can only be added, never rewritten or reordered."""
        at = at or datetime.now()
        entries = list(self.timeline or [])
        if entries and at < entries[-1].recorded_at:
            raise ValidationError({"timeline": ["Timeline entries must be in chronological order"]})

        self.timeline = entries + [TimelineEntry(status=status, note=note, recorded_at=at)]
