"""WholesaleAccount aggregate: a business buyer with a pricing tier and a credit line."""

import decimal
from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Decimal, Identifier, String, ValueObject

from sales.domain import sales
from sales.errors import InactiveAccount, InsufficientCredit
from sales.shared.email import EmailAddress
from sales.shared.tiers import PricingTier

ZERO = decimal.Decimal("0")


class AccountStatus(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"


class BusinessType(Enum):
    RETAILER = "retailer"
    WHOLESALER = "wholesaler"
    BUSINESS_CUSTOMER = "business_customer"


class PaymentTerms(Enum):
    NET15 = "net15"
    NET30 = "net30"
    NET45 = "net45"
    NET60 = "net60"
    COD = "cod"
    PREPAID = "prepaid"


# Net-days per payment term; cash and prepaid terms carry no due date
_NET_DAYS = {
    PaymentTerms.NET15.value: 15,
    PaymentTerms.NET30.value: 30,
    PaymentTerms.NET45.value: 45,
    PaymentTerms.NET60.value: 60,
}


@sales.aggregate
class WholesaleAccount:
    """A business buyer approved for wholesale pricing.

    ``credit_used`` only ever grows inside order placement; repayment and
    write-off happen elsewhere. A ``credit_limit`` of zero means the account
    has no credit cap.
    """

    user_id = Identifier()
    company_name = String(required=True, max_length=255)
    business_type = String(choices=BusinessType, default=BusinessType.BUSINESS_CUSTOMER.value)
    contact_email = ValueObject(EmailAddress)
    credit_limit = Decimal(min_value=0, default=ZERO)
    credit_used = Decimal(min_value=0, default=ZERO)
    pricing_tier = String(choices=PricingTier, default=PricingTier.STANDARD.value)
    payment_terms = String(choices=PaymentTerms, default=PaymentTerms.NET30.value)
    status = String(choices=AccountStatus, default=AccountStatus.PENDING.value)
    requires_approval = Boolean(default=False)
    approval_limit = Decimal(min_value=0, default=ZERO)
    suspension_reason = String(max_length=500)
    registered_at = DateTime(default=datetime.now)
    activated_at = DateTime()

    @invariant.post
    def credit_used_within_limit(self):
        limit = self.credit_limit or ZERO
        if limit > 0 and (self.credit_used or ZERO) > limit:
            raise ValidationError({"credit_used": ["Credit used cannot exceed the credit limit"]})

    @classmethod
    def register(
        cls,
        company_name,
        user_id=None,
        business_type=None,
        contact_email=None,
        credit_limit=ZERO,
        pricing_tier=None,
        payment_terms=None,
        requires_approval=False,
        approval_limit=ZERO,
    ):
        from sales.accounts.events import WholesaleAccountRegistered

        account = cls(
            company_name=company_name,
            user_id=user_id,
            business_type=business_type or BusinessType.BUSINESS_CUSTOMER.value,
            contact_email=EmailAddress(address=contact_email) if contact_email else None,
            credit_limit=decimal.Decimal(str(credit_limit)),
            pricing_tier=pricing_tier or PricingTier.STANDARD.value,
            payment_terms=payment_terms or PaymentTerms.NET30.value,
            requires_approval=requires_approval,
            approval_limit=decimal.Decimal(str(approval_limit)),
        )
        account.raise_(
            WholesaleAccountRegistered(
                account_id=account.id,
                company_name=account.company_name,
                pricing_tier=account.pricing_tier,
                credit_limit=account.credit_limit,
                registered_at=account.registered_at,
            )
        )
        return account

    @property
    def available_credit(self) -> decimal.Decimal:
        return max(ZERO, (self.credit_limit or ZERO) - (self.credit_used or ZERO))

    @property
    def net_days(self) -> int | None:
        return _NET_DAYS.get(self.payment_terms)

    @property
    def is_usable(self) -> bool:
        return self.status == AccountStatus.ACTIVE.value

    def ensure_usable(self):
        if not self.is_usable:
            raise InactiveAccount(self.id, self.status)

    def requires_order_approval(self, amount) -> bool:
        """Orders above the approval limit need sign-off when the account asks for it."""
        if not self.requires_approval:
            return False
        return amount > (self.approval_limit or ZERO)

    def charge_credit(self, amount):
        """Draw ``amount`` against the credit line.

        Fails with ``InsufficientCredit`` when a cap is set and the amount is
        above what is left; an amount exactly equal to the available credit
        passes.
        """
        self.ensure_usable()

        amount = decimal.Decimal(str(amount))
        if amount < 0:
            raise ValidationError({"amount": ["Credit charge cannot be negative"]})

        if (self.credit_limit or ZERO) > 0 and amount > self.available_credit:
            raise InsufficientCredit(available=self.available_credit, required=amount)

        self.credit_used = (self.credit_used or ZERO) + amount

    def activate(self):
        from sales.accounts.events import WholesaleAccountActivated

        if self.status not in (AccountStatus.PENDING.value, AccountStatus.SUSPENDED.value):
            raise ValidationError({"status": [f"Cannot activate an account in {self.status} status"]})

        self.status = AccountStatus.ACTIVE.value
        self.suspension_reason = None
        self.activated_at = datetime.now()
        self.raise_(WholesaleAccountActivated(account_id=self.id, activated_at=self.activated_at))

    def suspend(self, reason):
        from sales.accounts.events import WholesaleAccountSuspended

        if self.status != AccountStatus.ACTIVE.value:
            raise ValidationError({"status": ["Only active accounts can be suspended"]})

        self.status = AccountStatus.SUSPENDED.value
        self.suspension_reason = reason
        self.raise_(WholesaleAccountSuspended(account_id=self.id, reason=reason, suspended_at=datetime.now()))

    def deactivate(self):
        from sales.accounts.events import WholesaleAccountDeactivated

        if self.status == AccountStatus.INACTIVE.value:
            raise ValidationError({"status": ["Account is already inactive"]})

        self.status = AccountStatus.INACTIVE.value
        self.raise_(WholesaleAccountDeactivated(account_id=self.id, deactivated_at=datetime.now()))
