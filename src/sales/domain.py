"""Sales bounded context: wholesale pricing and order placement.

Owns the product pricing and stock counters, wholesale credit accounts, and
the atomic order placement workflow that ties them together.
"""

import structlog
from protean.domain import Domain

sales = Domain(name="sales")

logger = structlog.get_logger(__name__)
