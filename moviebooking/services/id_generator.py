"""
Random transaction ids and booking references.

Downstream consumers rely on the digit counts: transaction ids are six
digits, booking references seven. The two ranges do not overlap, so a
booking reference can never equal its transaction id.
"""

import random
from typing import Optional

TRANSACTION_ID_RANGE = (100_000, 999_999)
BOOKING_REFERENCE_RANGE = (1_000_000, 9_999_998)


class BookingIdGenerator:
    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.SystemRandom()

    def transaction_id(self) -> int:
        return self._rng.randint(*TRANSACTION_ID_RANGE)

    def booking_reference(self) -> int:
        return self._rng.randint(*BOOKING_REFERENCE_RANGE)


_default_generator: Optional[BookingIdGenerator] = None


def get_id_generator() -> BookingIdGenerator:
    global _default_generator
    if _default_generator is None:
        _default_generator = BookingIdGenerator()
    return _default_generator
