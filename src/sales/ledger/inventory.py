"""Inventory ledger: stock lookups and reservations inside the caller's Unit of Work."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from sales.catalog.product import Product
from sales.errors import ProductNotFound

logger = structlog.get_logger(__name__)


def load_product(product_id, name=None) -> Product:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise ProductNotFound(product_id, name=name) from None


def reserve_stock(product: Product, quantity: int, size=None) -> Product:
    """Decrement stock for one line item and stage the product for commit.

    Raises ``InsufficientStock`` (per-size or aggregate) without touching
    either counter.
    """
    stock_before = product.stock
    product.reserve(quantity, size=size)
    current_domain.repository_for(Product).add(product)

    logger.debug(
        "inventory.reserved",
        product_id=str(product.id),
        size=size,
        quantity=quantity,
        stock_before=stock_before,
        stock_after=product.stock,
    )
    if product.size_stock_drift:
        logger.warning(
            "inventory.size_stock_drift",
            product_id=str(product.id),
            size_stock_total=sum(product.size_stock.values()),
            stock=product.stock,
        )
    return product
