"""
Customer-facing booking history.

Each booking is joined with its show and, through the show, its movie,
screen and theatre. Catalog records can disappear independently of the
ledger; a missing one leaves its fields empty instead of failing the whole
listing.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.core.exceptions import NotFound
from moviebooking.core.logging import get_logger
from moviebooking.models.booking import Booking
from moviebooking.models.catalog import Movie, Screen, Show, Theatre
from moviebooking.schemas.report import TicketView
from moviebooking.services import catalog_service, ledger

logger = get_logger(__name__)


class _CatalogCache:
    """Per-call memo so a customer with many bookings for one show hits the catalog once."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._records: dict[tuple[str, int], object] = {}

    async def _lookup(self, kind: str, record_id: Optional[int], fetch):
        if record_id is None:
            return None
        key = (kind, record_id)
        if key not in self._records:
            self._records[key] = await fetch(self.db, record_id)
        return self._records[key]

    async def show(self, show_id: Optional[int]) -> Optional[Show]:
        return await self._lookup("show", show_id, catalog_service.get_show)

    async def movie(self, movie_id: Optional[int]) -> Optional[Movie]:
        return await self._lookup("movie", movie_id, catalog_service.get_movie)

    async def screen(self, screen_id: Optional[int]) -> Optional[Screen]:
        return await self._lookup("screen", screen_id, catalog_service.get_screen)

    async def theatre(self, theatre_id: Optional[int]) -> Optional[Theatre]:
        return await self._lookup("theatre", theatre_id, catalog_service.get_theatre)


def _usable_id(value: Optional[int]) -> Optional[int]:
    return value if value is not None and value > 0 else None


async def _resolve_theatre(
    catalog: _CatalogCache, show: Show, screen: Optional[Screen]
) -> tuple[Optional[int], Optional[Theatre]]:
    """The show's theatre, else the screen's theatre when the show's id is unusable."""
    candidates = [_usable_id(show.theatre_id)]
    if screen is not None:
        candidates.append(_usable_id(screen.theatre_id))

    for theatre_id in candidates:
        theatre = await catalog.theatre(theatre_id)
        if theatre is not None:
            return theatre.id, theatre

    fallback_id = next((c for c in candidates if c is not None), None)
    return fallback_id, None


async def _build_view(catalog: _CatalogCache, booking: Booking) -> TicketView:
    ticket = booking.ticket
    fields = dict(
        booking_id=booking.id,
        booking_date=booking.booking_date,
        transaction_id=booking.transaction_id,
        transaction_mode=booking.transaction_mode,
        transaction_status=booking.transaction_status,
        payment_reference=booking.payment_reference,
        total_cost=booking.total_cost,
        show_id=booking.show_id,
    )
    if ticket is not None:
        fields.update(
            ticket_id=ticket.id,
            booking_reference=ticket.booking_ref,
            seat_numbers=ticket.seat_numbers,
            seat_count=ticket.no_of_seats,
        )

    show = await catalog.show(booking.show_id)
    if show is None:
        logger.info("ticket_view_show_missing", booking_id=booking.id, show_id=booking.show_id)
        return TicketView(**fields)

    fields.update(
        show_name=show.name,
        show_start_time=show.start_time,
        show_end_time=show.end_time,
        movie_id=show.movie_id,
        screen_id=_usable_id(show.screen_id),
    )

    movie = await catalog.movie(show.movie_id)
    if movie is not None:
        fields.update(
            movie_name=movie.name,
            movie_genre=movie.genre,
            language=movie.language,
            movie_image_url=movie.image_url,
        )

    screen = await catalog.screen(_usable_id(show.screen_id))
    if screen is not None:
        fields.update(screen_name=screen.name)

    theatre_id, theatre = await _resolve_theatre(catalog, show, screen)
    fields.update(theatre_id=theatre_id)
    if theatre is not None:
        fields.update(theatre_name=theatre.name, theatre_city=theatre.city)

    return TicketView(**fields)


def _history_order(view: TicketView) -> tuple:
    # Show start, then booking date, both with missing values last; id breaks ties
    return (
        view.show_start_time is None,
        view.show_start_time or datetime.min,
        view.booking_date is None,
        view.booking_date or date.min,
        view.booking_id,
    )


async def find_bookings_for_customer(db: AsyncSession, customer_id: int) -> list[TicketView]:
    if not await catalog_service.customer_exists(db, customer_id):
        raise NotFound("customer", customer_id)

    bookings = await ledger.find_bookings_by_customer(db, customer_id)
    catalog = _CatalogCache(db)
    views = [await _build_view(catalog, booking) for booking in bookings]
    views.sort(key=_history_order)

    logger.info("customer_bookings_listed", customer_id=customer_id, count=len(views))
    return views
