"""Pydantic request/response schemas for the Sales API.

These are external contracts, separate from the internal Protean commands.
Business rules (positive quantities, known payment types, address fields) are
checked by the domain so every rejection carries the same error shape.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    first_name: str
    last_name: str
    address: str
    city: str
    state: str | None = None
    zip_code: str
    country: str


class OrderLineSchema(BaseModel):
    product_id: str
    quantity: int
    size: str | None = None
    name: str | None = None
    price: Decimal | None = None


class PriceBracketSchema(BaseModel):
    min_quantity: int
    max_quantity: int | None = None
    price: Decimal | None = None
    discount_percent: Decimal | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    items: list[OrderLineSchema]
    email: str
    total_amount: Decimal
    payment_type: str
    payment_status: str | None = None
    shipping_address: ShippingAddressSchema | None = None
    phone: str | None = None
    account_id: str | None = None
    user_id: str | None = None
    requires_approval: bool = False
    purchase_order_number: str | None = None
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 50, "size": "M"}],
                    "email": "buyer@example.com",
                    "total_amount": "77000.00",
                    "payment_type": "credit",
                    "account_id": "acct-001",
                    "shipping_address": {
                        "first_name": "Ada",
                        "last_name": "Lovelace",
                        "address": "12 Analytical Row",
                        "city": "London",
                        "zip_code": "N1 9GU",
                        "country": "UK",
                    },
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Catalog Request Schemas
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    name: str
    sku: str | None = None
    price: Decimal = Field(ge=0)
    stock: int = 0
    moq: int = 1
    bulk_pricing_enabled: bool = False
    tier_prices: dict[str, Decimal] | None = None
    price_brackets: list[PriceBracketSchema] | None = None
    size_stock: dict[str, int] | None = None


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)
    size: str | None = None


# ---------------------------------------------------------------------------
# Wholesale Account Request Schemas
# ---------------------------------------------------------------------------
class RegisterWholesaleAccountRequest(BaseModel):
    company_name: str
    user_id: str | None = None
    business_type: str | None = None
    contact_email: str | None = None
    credit_limit: Decimal = Decimal("0")
    pricing_tier: str | None = None
    payment_terms: str | None = None
    requires_approval: bool = False
    approval_limit: Decimal = Decimal("0")


class SuspendAccountRequest(BaseModel):
    reason: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderNumberResponse(BaseModel):
    order_number: str


class ProductIdResponse(BaseModel):
    product_id: str


class AccountIdResponse(BaseModel):
    account_id: str


class StatusResponse(BaseModel):
    status: str = "ok"


class PricePreviewResponse(BaseModel):
    product_id: str
    name: str
    standard_price: Decimal
    tier_price: Decimal | None = None
    pricing_tier: str | None = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    applied_bracket: dict | None = None
    quantity_pricing: list[dict] = []
    moq: int
    bulk_pricing_enabled: bool


class OrderListResponse(BaseModel):
    orders: list[dict]
    limit: int
    offset: int
