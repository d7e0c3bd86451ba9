"""
Seat conflict resolution.

Availability is never stored: the reserved set for a show is whatever seat
labels appear on tickets of its non-cancelled bookings. Callers that act on
the answer (book_seats) must hold the show lock from the read until commit.
"""

from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.services import ledger


def normalize_seat_label(label: Optional[str]) -> Optional[str]:
    """Trim and upper-case a seat code; blank input gives None."""
    if label is None:
        return None
    normalized = label.strip().upper()
    return normalized or None


def normalize_seats(labels: Iterable[Optional[str]]) -> list[str]:
    """Normalise seat codes, dropping blanks and keeping request order."""
    normalized = (normalize_seat_label(label) for label in labels)
    return [label for label in normalized if label]


def find_duplicates(seats: list[str]) -> list[str]:
    seen: set[str] = set()
    duplicates: set[str] = set()
    for seat in seats:
        if seat in seen:
            duplicates.add(seat)
        seen.add(seat)
    return sorted(duplicates)


async def reserved_seats(db: AsyncSession, show_id: int) -> set[str]:
    labels = await ledger.reserved_seat_labels(db, show_id)
    return set(normalize_seats(labels))


async def find_unavailable(db: AsyncSession, show_id: int, requested: Iterable[str]) -> list[str]:
    """Requested seats that are already reserved, sorted for stable messages."""
    taken = await reserved_seats(db, show_id)
    return sorted(taken.intersection(requested))
