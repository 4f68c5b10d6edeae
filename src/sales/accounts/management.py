"""Wholesale account lifecycle: registration and administrator decisions."""

from protean import handle
from protean.fields import Boolean, Decimal, Identifier, String
from protean.utils.globals import current_domain

from sales.accounts.account import BusinessType, PaymentTerms, WholesaleAccount
from sales.domain import sales
from sales.shared.tiers import PricingTier


@sales.command(part_of="WholesaleAccount")
class RegisterWholesaleAccount:
    """Apply for a wholesale account. New accounts start out pending."""

    company_name = String(required=True, max_length=255)
    user_id = Identifier()
    business_type = String(choices=BusinessType, default=BusinessType.BUSINESS_CUSTOMER.value)
    contact_email = String(max_length=254)
    credit_limit = Decimal(min_value=0, default=0)
    pricing_tier = String(choices=PricingTier, default=PricingTier.STANDARD.value)
    payment_terms = String(choices=PaymentTerms, default=PaymentTerms.NET30.value)
    requires_approval = Boolean(default=False)
    approval_limit = Decimal(min_value=0, default=0)


@sales.command(part_of="WholesaleAccount")
class ActivateWholesaleAccount:
    account_id = Identifier(required=True)


@sales.command(part_of="WholesaleAccount")
class SuspendWholesaleAccount:
    account_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@sales.command(part_of="WholesaleAccount")
class DeactivateWholesaleAccount:
    account_id = Identifier(required=True)


@sales.command_handler(part_of=WholesaleAccount)
class WholesaleAccountHandler:
    @handle(RegisterWholesaleAccount)
    def register(self, command: RegisterWholesaleAccount) -> str:
        account = WholesaleAccount.register(
            company_name=command.company_name,
            user_id=command.user_id,
            business_type=command.business_type,
            contact_email=command.contact_email,
            credit_limit=command.credit_limit,
            pricing_tier=command.pricing_tier,
            payment_terms=command.payment_terms,
            requires_approval=command.requires_approval,
            approval_limit=command.approval_limit,
        )
        current_domain.repository_for(WholesaleAccount).add(account)
        return str(account.id)

    @handle(ActivateWholesaleAccount)
    def activate(self, command: ActivateWholesaleAccount) -> None:
        repo = current_domain.repository_for(WholesaleAccount)
        account = repo.get(command.account_id)
        account.activate()
        repo.add(account)

    @handle(SuspendWholesaleAccount)
    def suspend(self, command: SuspendWholesaleAccount) -> None:
        repo = current_domain.repository_for(WholesaleAccount)
        account = repo.get(command.account_id)
        account.suspend(command.reason)
        repo.add(account)

    @handle(DeactivateWholesaleAccount)
    def deactivate(self, command: DeactivateWholesaleAccount) -> None:
        repo = current_domain.repository_for(WholesaleAccount)
        account = repo.get(command.account_id)
        account.deactivate()
        repo.add(account)
