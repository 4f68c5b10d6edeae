"""Tests for order number generation."""

import re
from concurrent.futures import ThreadPoolExecutor

import pytest
from sales.errors import IdentifierCollision
from sales.order.identifiers import OrderNumberSequence, generate_order_number

ORDER_NUMBER = re.compile(r"^SS\d{11}$")


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def randrange(self, stop):
        return self.value


class TestOrderNumberSequence:
    def test_format(self):
        number = OrderNumberSequence().next()
        assert ORDER_NUMBER.match(number)
        assert len(number) <= 20

    def test_same_millisecond_never_repeats(self):
        sequence = OrderNumberSequence(clock=lambda: 1_700_000_000_000, rng=FixedRandom(10))
        numbers = [sequence.next() for _ in range(50)]

        assert len(set(numbers)) == 50
        assert numbers == sorted(numbers)

    def test_suffix_overflow_borrows_the_next_tick(self):
        sequence = OrderNumberSequence(clock=lambda: 1000, rng=FixedRandom(998))

        assert [sequence.next() for _ in range(4)] == [
            "SS00001000998",
            "SS00001000999",
            "SS00001001998",
            "SS00001001999",
        ]

    def test_clock_going_backwards_does_not_reuse_numbers(self):
        ticks = iter([5000, 4000, 4000])
        sequence = OrderNumberSequence(clock=lambda: next(ticks), rng=FixedRandom(0))

        numbers = [sequence.next() for _ in range(3)]
        assert numbers == ["SS00005000000", "SS00005000001", "SS00005000002"]

    def test_unique_across_threads(self):
        sequence = OrderNumberSequence()

        def draw(_):
            return [sequence.next() for _ in range(500)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            batches = list(pool.map(draw, range(8)))

        numbers = [number for batch in batches for number in batch]
        assert len(numbers) == 4000
        assert len(set(numbers)) == 4000


class TestGenerateOrderNumber:
    def test_skips_numbers_already_taken(self):
        candidates = iter(["SS00000000001", "SS00000000002", "SS00000000003"])
        taken = {"SS00000000001", "SS00000000002"}

        number = generate_order_number(is_taken=taken.__contains__, attempts=5, candidates=lambda: next(candidates))
        assert number == "SS00000000003"

    def test_gives_up_after_the_attempt_limit(self):
        calls = []

        def candidates():
            calls.append(1)
            return "SS00000000001"

        with pytest.raises(IdentifierCollision) as exc:
            generate_order_number(is_taken=lambda _: True, attempts=3, candidates=candidates)

        assert len(calls) == 3
        assert exc.value.attempts == 3

    def test_attempt_limit_comes_from_domain_config(self):
        calls = []

        def candidates():
            calls.append(1)
            return "SS00000000001"

        with pytest.raises(IdentifierCollision):
            generate_order_number(is_taken=lambda _: True, candidates=candidates)

        assert len(calls) == 5
