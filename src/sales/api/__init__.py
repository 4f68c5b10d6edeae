"""Sales domain API package."""

from sales.api.errors import register_sales_exception_handlers
from sales.api.routes import account_router, order_router, pricing_router, product_router

__all__ = [
    "order_router",
    "pricing_router",
    "product_router",
    "account_router",
    "register_sales_exception_handlers",
]
