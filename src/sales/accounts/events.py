"""Domain events for the WholesaleAccount aggregate."""

from protean.fields import DateTime, Decimal, Identifier, String

from sales.domain import sales


@sales.event(part_of="WholesaleAccount")
class WholesaleAccountRegistered:
    """A business applied for a wholesale account; it waits for activation."""

    __version__ = 1

    account_id = Identifier(required=True)
    company_name = String(required=True)
    pricing_tier = String(required=True)
    credit_limit = Decimal()
    registered_at = DateTime(required=True)


@sales.event(part_of="WholesaleAccount")
class WholesaleAccountActivated:
    """An administrator approved the account; it can now place wholesale orders."""

    __version__ = 1

    account_id = Identifier(required=True)
    activated_at = DateTime(required=True)


@sales.event(part_of="WholesaleAccount")
class WholesaleAccountSuspended:
    __version__ = 1

    account_id = Identifier(required=True)
    reason = String(required=True)
    suspended_at = DateTime(required=True)


@sales.event(part_of="WholesaleAccount")
class WholesaleAccountDeactivated:
    __version__ = 1

    account_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)
