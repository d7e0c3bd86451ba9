"""
Reservation ledger: the only code that reads and writes booking, ticket and
ticket-seat rows.

Every write goes through save_booking(), which keeps each seat row's
`active` flag and show id in step with the owning booking. The partial
unique index on ticket_seats relies on that to reject a double sale.
"""

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.models.booking import Booking, Ticket, TicketSeat, STATUS_CANCELLED
from moviebooking.models.catalog import Movie, Show
from moviebooking.schemas.report import MovieBookingSummary

# Same rule as models.booking.is_cancelled: trimmed, any case
_not_cancelled = func.upper(func.trim(Booking.transaction_status)) != STATUS_CANCELLED


def sync_seat_activity(booking: Booking) -> None:
    """Mirror the booking's status and show onto its seat rows."""
    if booking.ticket is None:
        return
    active = not booking.is_cancelled
    for seat in booking.ticket.seats:
        seat.active = active
        seat.show_id = booking.show_id


async def save_booking(db: AsyncSession, booking: Booking) -> Booking:
    db.add(booking)
    sync_seat_activity(booking)
    await db.flush()
    return booking


async def find_booking_by_id(db: AsyncSession, booking_id: int) -> Booking | None:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def find_all_bookings(db: AsyncSession) -> list[Booking]:
    result = await db.execute(select(Booking).order_by(Booking.id))
    return list(result.scalars().all())


async def find_bookings(
    db: AsyncSession,
    movie_id: int | None = None,
    booking_date: date | None = None,
    show_id: int | None = None,
) -> list[Booking]:
    """Bookings matching every filter given; no filter returns all of them."""
    query = select(Booking)
    if movie_id is not None:
        query = query.join(Show, Show.id == Booking.show_id).where(Show.movie_id == movie_id)
    if booking_date is not None:
        query = query.where(Booking.booking_date == booking_date)
    if show_id is not None:
        query = query.where(Booking.show_id == show_id)
    result = await db.execute(query.order_by(Booking.id))
    return list(result.scalars().all())


async def find_bookings_by_show(db: AsyncSession, show_id: int) -> list[Booking]:
    return await find_bookings(db, show_id=show_id)


async def find_bookings_by_movie(db: AsyncSession, movie_id: int) -> list[Booking]:
    return await find_bookings(db, movie_id=movie_id)


async def find_bookings_by_date(db: AsyncSession, booking_date: date) -> list[Booking]:
    return await find_bookings(db, booking_date=booking_date)


async def find_bookings_by_customer(db: AsyncSession, customer_id: int) -> list[Booking]:
    result = await db.execute(
        select(Booking).where(Booking.customer_id == customer_id).order_by(Booking.id)
    )
    return list(result.scalars().all())


async def reserved_seat_labels(db: AsyncSession, show_id: int) -> list[str]:
    """Raw seat labels on every ticket of a non-cancelled booking for the show."""
    result = await db.execute(
        select(TicketSeat.seat_label)
        .join(Booking, Booking.ticket_id == TicketSeat.ticket_id)
        .where(Booking.show_id == show_id, _not_cancelled)
    )
    return list(result.scalars().all())


async def aggregate_by_movie(db: AsyncSession) -> list[MovieBookingSummary]:
    result = await db.execute(
        select(
            Movie.id,
            Movie.name,
            func.count(Booking.id),
            func.coalesce(func.sum(Ticket.no_of_seats), 0),
            func.coalesce(func.sum(Booking.total_cost), 0.0),
        )
        .select_from(Booking)
        .join(Show, Show.id == Booking.show_id)
        .join(Movie, Movie.id == Show.movie_id)
        .join(Ticket, Ticket.id == Booking.ticket_id)
        .where(_not_cancelled)
        .group_by(Movie.id, Movie.name)
        .order_by(Movie.name.asc(), Movie.id.asc())
    )
    return [
        MovieBookingSummary(
            movie_id=movie_id,
            movie_name=movie_name,
            total_bookings=bookings,
            total_seats=seats,
            total_revenue=float(revenue),
        )
        for movie_id, movie_name, bookings, seats, revenue in result.all()
    ]


async def sum_cost_for_booking(db: AsyncSession, booking_id: int) -> float:
    result = await db.execute(
        select(func.sum(Booking.total_cost)).where(Booking.id == booking_id)
    )
    total = result.scalar_one_or_none()
    return float(total) if total is not None else 0.0
