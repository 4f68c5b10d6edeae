"""Catalog seeding for checkout: register products and restock them."""

import json

from protean import handle
from protean.fields import Boolean, Decimal, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from sales.catalog.product import Product
from sales.domain import sales


@sales.command(part_of="Product")
class RegisterProduct:
    """Make a product available to checkout with its pricing configuration."""

    name = String(required=True, max_length=255)
    sku = String(max_length=64)
    price = Decimal(required=True, min_value=0)
    stock = Integer(default=0, min_value=0)
    moq = Integer(default=1, min_value=1)
    bulk_pricing_enabled = Boolean(default=False)
    tier_prices = Text()  # JSON object: {tier: price}
    price_brackets = Text()  # JSON array of bracket objects
    size_stock = Text()  # JSON object: {size: quantity}


@sales.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20)


@sales.command_handler(part_of=Product)
class CatalogHandler:
    @handle(RegisterProduct)
    def register_product(self, command: RegisterProduct) -> str:
        product = Product.create(
            name=command.name,
            sku=command.sku,
            price=command.price,
            stock=command.stock,
            moq=command.moq,
            bulk_pricing_enabled=command.bulk_pricing_enabled,
            tier_prices=json.loads(command.tier_prices) if command.tier_prices else None,
            price_brackets=json.loads(command.price_brackets) if command.price_brackets else None,
            size_stock=json.loads(command.size_stock) if command.size_stock else None,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command: RestockProduct) -> None:
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.restock(command.quantity, size=command.size)
        repo.add(product)
