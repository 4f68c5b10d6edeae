"""FastAPI routes for the Sales domain: orders, price previews, products and wholesale accounts."""

import json

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from sales.accounts.management import (
    ActivateWholesaleAccount,
    DeactivateWholesaleAccount,
    RegisterWholesaleAccount,
    SuspendWholesaleAccount,
)
from sales.api.schemas import (
    AccountIdResponse,
    OrderListResponse,
    OrderNumberResponse,
    PlaceOrderRequest,
    PricePreviewResponse,
    ProductIdResponse,
    RegisterProductRequest,
    RegisterWholesaleAccountRequest,
    RestockRequest,
    StatusResponse,
    SuspendAccountRequest,
)
from sales.catalog.registration import RegisterProduct, RestockProduct
from sales.order.order import Order
from sales.order.placement import place_order
from sales.pricing.preview import quote
from sales.projections.order_listing import DEFAULT_PAGE_SIZE, list_orders, summarize


def _as_json(value) -> str | None:
    if value is None:
        return None
    return json.dumps(value, default=str)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderNumberResponse)
async def create_order(body: PlaceOrderRequest) -> OrderNumberResponse:
    order_number = place_order(
        items=[line.model_dump(exclude_none=True) for line in body.items],
        email=body.email,
        total_amount=body.total_amount,
        payment_type=body.payment_type,
        shipping_address=body.shipping_address.model_dump(exclude_none=True) if body.shipping_address else None,
        account_id=body.account_id,
        payment_status=body.payment_status,
        phone=body.phone,
        user_id=body.user_id,
        requires_approval=body.requires_approval,
        purchase_order_number=body.purchase_order_number,
        notes=body.notes,
    )
    return OrderNumberResponse(order_number=order_number)


@order_router.get("", response_model=OrderListResponse)
async def get_orders(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
    offset: int = Query(0, ge=0),
    account_id: str | None = None,
) -> OrderListResponse:
    orders = list_orders(limit=limit, offset=offset, account_id=account_id)
    return OrderListResponse(orders=orders, limit=limit, offset=offset)


@order_router.get("/{order_number}")
async def get_order(order_number: str) -> dict:
    order = current_domain.repository_for(Order).get_by_number(order_number)
    detail = summarize(order)
    detail.update(
        {
            "subtotal": str(order.subtotal),
            "tax_amount": str(order.tax_amount),
            "pricing_tier": order.pricing_tier,
            "due_date": order.due_date.isoformat() if order.due_date else None,
            "purchase_order_number": order.purchase_order_number,
            "notes": order.notes,
            "items": [
                {
                    "product_id": str(item.product_id),
                    "name": item.name,
                    "unit_price": str(item.unit_price),
                    "quantity": item.quantity,
                    "size": item.size,
                    "line_total": str(item.line_total),
                }
                for item in order.items
            ],
            "timeline": [
                {"status": entry.status, "note": entry.note, "recorded_at": entry.recorded_at.isoformat()}
                for entry in order.timeline or []
            ],
        }
    )
    return detail


# ---------------------------------------------------------------------------
# Pricing Router
# ---------------------------------------------------------------------------
pricing_router = APIRouter(prefix="/pricing", tags=["pricing"])


@pricing_router.get("/{product_id}", response_model=PricePreviewResponse)
async def preview_price(
    product_id: str,
    account_id: str | None = None,
    quantity: int = Query(1),
) -> PricePreviewResponse:
    return PricePreviewResponse(**quote(product_id, account_id=account_id, quantity=quantity))


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def register_product(body: RegisterProductRequest) -> ProductIdResponse:
    command = RegisterProduct(
        name=body.name,
        sku=body.sku,
        price=body.price,
        stock=body.stock,
        moq=body.moq,
        bulk_pricing_enabled=body.bulk_pricing_enabled,
        tier_prices=_as_json(body.tier_prices),
        price_brackets=_as_json(
            [bracket.model_dump(exclude_none=True) for bracket in body.price_brackets]
            if body.price_brackets
            else None
        ),
        size_stock=_as_json(body.size_stock),
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=product_id)


@product_router.put("/{product_id}/restock", response_model=StatusResponse)
async def restock_product(product_id: str, body: RestockRequest) -> StatusResponse:
    command = RestockProduct(product_id=product_id, quantity=body.quantity, size=body.size)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Wholesale Account Router
# ---------------------------------------------------------------------------
account_router = APIRouter(prefix="/wholesale-accounts", tags=["wholesale-accounts"])


@account_router.post("", status_code=201, response_model=AccountIdResponse)
async def register_account(body: RegisterWholesaleAccountRequest) -> AccountIdResponse:
    command = RegisterWholesaleAccount(**body.model_dump(exclude_none=True))
    account_id = current_domain.process(command, asynchronous=False)
    return AccountIdResponse(account_id=account_id)


@account_router.put("/{account_id}/activate", response_model=StatusResponse)
async def activate_account(account_id: str) -> StatusResponse:
    current_domain.process(ActivateWholesaleAccount(account_id=account_id), asynchronous=False)
    return StatusResponse()


@account_router.put("/{account_id}/suspend", response_model=StatusResponse)
async def suspend_account(account_id: str, body: SuspendAccountRequest) -> StatusResponse:
    current_domain.process(SuspendWholesaleAccount(account_id=account_id, reason=body.reason), asynchronous=False)
    return StatusResponse()


@account_router.put("/{account_id}/deactivate", response_model=StatusResponse)
async def deactivate_account(account_id: str) -> StatusResponse:
    current_domain.process(DeactivateWholesaleAccount(account_id=account_id), asynchronous=False)
    return StatusResponse()
