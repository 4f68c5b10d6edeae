"""Price preview for a product, optionally as seen by a wholesale account."""

from sales.ledger.credit import load_account
from sales.ledger.inventory import load_product
from sales.pricing.resolver import pricing_info


def quote(product_id, account_id=None, quantity: int = 1) -> dict:
    product = load_product(product_id)

    account = None
    if account_id:
        account = load_account(account_id)
        account.ensure_usable()

    return pricing_info(product, account, quantity)
