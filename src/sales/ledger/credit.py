"""Credit ledger: wholesale account lookups and credit draws inside the caller's Unit of Work."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from sales.accounts.account import WholesaleAccount
from sales.errors import AccountNotFound

logger = structlog.get_logger(__name__)


def load_account(account_id) -> WholesaleAccount:
    try:
        return current_domain.repository_for(WholesaleAccount).get(account_id)
    except ObjectNotFoundError:
        raise AccountNotFound(account_id) from None


def charge_credit(account: WholesaleAccount, amount) -> WholesaleAccount:
    """Draw ``amount`` on the account's credit line and stage the account for commit."""
    used_before = account.credit_used
    account.charge_credit(amount)
    current_domain.repository_for(WholesaleAccount).add(account)

    logger.debug(
        "credit.charged",
        account_id=str(account.id),
        amount=str(amount),
        credit_used_before=str(used_before),
        credit_used_after=str(account.credit_used),
    )
    return account
