"""Human-readable order numbers: ``SS`` + 8 clock digits + 3-digit suffix.

``OrderNumberSequence`` never repeats a value within a process: the
``(millisecond, suffix)`` pair it emits is strictly increasing, even across
threads. The suffix starts at a random point each millisecond; when it runs
past 999 the millisecond component borrows the next tick.

Uniqueness across processes is guarded by the store. ``generate_order_number``
probes the order store for each candidate with a bounded number of attempts,
and the unique constraint on ``Order.order_number`` remains the final word at
insert time.
"""

import random
import threading
import time
from collections.abc import Callable

import structlog
from protean.utils.globals import current_domain

from sales.errors import IdentifierCollision

logger = structlog.get_logger(__name__)

ORDER_NUMBER_PREFIX = "SS"
DEFAULT_MAX_ATTEMPTS = 5

_CLOCK_DIGITS = 8
_SUFFIX_SPAN = 1000


def _millis() -> int:
    return time.time_ns() // 1_000_000


class OrderNumberSequence:
    def __init__(
        self,
        prefix: str = ORDER_NUMBER_PREFIX,
        clock: Callable[[], int] = _millis,
        rng: random.Random | None = None,
    ) -> None:
        self.prefix = prefix
        self._clock = clock
        self._rng = rng or random.SystemRandom()
        self._lock = threading.Lock()
        self._last_tick = -1
        self._suffix = 0

    def next(self) -> str:
        with self._lock:
            tick = self._clock()
            if tick > self._last_tick:
                self._last_tick = tick
                self._suffix = self._rng.randrange(_SUFFIX_SPAN)
            else:
                self._suffix += 1
                if self._suffix >= _SUFFIX_SPAN:
                    self._last_tick += 1
                    self._suffix = self._rng.randrange(_SUFFIX_SPAN)
            tick, suffix = self._last_tick, self._suffix

        return f"{self.prefix}{tick % 10**_CLOCK_DIGITS:0{_CLOCK_DIGITS}d}{suffix:03d}"


_sequence = OrderNumberSequence()


def next_order_number() -> str:
    return _sequence.next()


def max_attempts() -> int:
    return int(getattr(current_domain, "ORDER_NUMBER_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS))


def generate_order_number(
    is_taken: Callable[[str], bool] | None = None,
    attempts: int | None = None,
    candidates: Callable[[], str] = next_order_number,
) -> str:
    """Return an order number not yet present in the order store.

    Must run inside the placement Unit of Work so the probe sees the same
    snapshot as the insert. Raises ``IdentifierCollision`` once ``attempts``
    candidates have all been taken.
    """
    if is_taken is None:
        from sales.order.order import Order

        is_taken = current_domain.repository_for(Order).order_number_taken

    attempts = attempts or max_attempts()
    for attempt in range(1, attempts + 1):
        candidate = candidates()
        if not is_taken(candidate):
            return candidate
        logger.warning("order_number.collision", candidate=candidate, attempt=attempt, max_attempts=attempts)

    raise IdentifierCollision(attempts)
