"""Error taxonomy for order placement.

Every error is a Protean exception, so aborting the Unit of Work and mapping
to HTTP status codes both follow Protean's own handling:

    OrderValidationError   -> ValidationError         (400, client fault)
    ProductNotFound        -> ObjectNotFoundError     (404)
    AccountNotFound        -> ObjectNotFoundError     (404)
    InactiveAccount        -> InvalidStateError       (409)
    InsufficientStock      -> BusinessRuleViolation   (422, shortfall reported)
    MOQViolation           -> BusinessRuleViolation   (422, shortfall reported)
    InsufficientCredit     -> BusinessRuleViolation   (422, shortfall reported)
    IdentifierCollision    -> RetryableError          (503, retry later)
    TransactionConflict    -> RetryableError          (503, retry later)
"""

from decimal import Decimal

from protean.exceptions import (
    InvalidOperationError,
    InvalidStateError,
    ObjectNotFoundError,
    ProteanException,
    ValidationError,
)


class OrderValidationError(ValidationError):
    """Malformed or missing order fields. Raised before any transaction starts."""


class ProductNotFound(ObjectNotFoundError):
    def __init__(self, product_id, name=None):
        self.product_id = str(product_id)
        label = name or self.product_id
        super().__init__(f"Product not found: {label}")


class AccountNotFound(ObjectNotFoundError):
    def __init__(self, account_id):
        self.account_id = str(account_id)
        super().__init__(f"Wholesale account not found: {self.account_id}")


class InactiveAccount(InvalidStateError):
    def __init__(self, account_id, status):
        self.account_id = str(account_id)
        self.status = status
        super().__init__("Invalid or inactive business account")


class BusinessRuleViolation(InvalidOperationError):
    """A genuine business constraint failed; the message is safe to show verbatim."""

    code = "business_rule_violation"

    def __init__(self, message, shortfall):
        self.message = message
        self.shortfall = shortfall
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "shortfall": str(self.shortfall)}


class InsufficientStock(BusinessRuleViolation):
    code = "insufficient_stock"

    def __init__(self, product_name: str, requested: int, available: int, size: str | None = None):
        self.product_name = product_name
        self.requested = requested
        self.available = available
        self.size = size
        where = f"{product_name} in size {size}" if size else product_name
        super().__init__(
            f"Insufficient stock for {where}: {available} available, {requested} requested",
            shortfall=requested - available,
        )


class MOQViolation(BusinessRuleViolation):
    code = "moq_violation"

    def __init__(self, product_name: str, moq: int, requested: int):
        self.product_name = product_name
        self.moq = moq
        self.requested = requested
        super().__init__(
            f"Minimum order quantity for {product_name} is {moq} units",
            shortfall=moq - requested,
        )


class InsufficientCredit(BusinessRuleViolation):
    code = "insufficient_credit"

    def __init__(self, available: Decimal, required: Decimal):
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient credit. Available: {available:.2f}, Required: {required:.2f}",
            shortfall=required - available,
        )


class RetryableError(ProteanException):
    """Transient failure; the caller may retry the same request."""

    retry_after_seconds = 1


class IdentifierCollision(RetryableError):
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Could not generate a unique order number after {attempts} attempts")


class TransactionConflict(RetryableError):
    def __init__(self, reason: str = "Concurrent update conflict"):
        super().__init__(f"Order could not be placed: {reason}")
