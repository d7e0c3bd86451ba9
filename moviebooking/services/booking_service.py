"""
Booking service with conflict-free seat reservation.

CONCURRENCY STRATEGY: Per-show lock + unique index backstop
===========================================================

Problem:
  Two customers pick seat A1 for the same show at the same moment.
  Both read the reserved seats, neither sees A1, both insert a ticket.
  Result: A1 sold twice.

Solution:
  1. Validate the request without touching the ledger (seats, customer, show).
  2. Take the show lock (see lock_factory) so check-then-write runs one
     booking at a time per show.
  3. Read the reserved seats for the show and reject any overlap (Conflict).
  4. Insert booking + ticket + seat rows and commit while still holding
     the lock.

  The partial unique index on ticket_seats(show_id, seat_label) WHERE active
  is the final safety net. If two writers ever pass step 3 together (for
  example Redis failed open across processes) the second commit fails with
  IntegrityError, which is reported as InvalidRequest.

  Booking and ticket are written in one transaction; nothing is visible
  until commit and a failure rolls both back.
"""

import time
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.core.config import get_settings
from moviebooking.core.exceptions import BookingError, Conflict, InvalidRequest, NotFound
from moviebooking.core.logging import get_logger
from moviebooking.core.metrics import booking_cancellations, booking_latency, record_booking_attempt
from moviebooking.models.booking import Booking, Ticket, TicketSeat, STATUS_CANCELLED, STATUS_CONFIRMED
from moviebooking.schemas.booking import BookingCreate, BookingReplace
from moviebooking.schemas.report import MovieBookingSummary
from moviebooking.services import catalog_service, ledger, seat_resolver
from moviebooking.services.id_generator import BookingIdGenerator, get_id_generator
from moviebooking.services.interfaces.show_lock import ShowLock
from moviebooking.services.lock_factory import get_show_lock

logger = get_logger(__name__)
settings = get_settings()

NO_SEATS_SELECTED = "at least one seat must be selected"
DUPLICATE_SEATS = "duplicate seats selected"
NON_POSITIVE_COST = "total cost must be positive"
STORE_REJECTED = "unable to create booking: seats were taken concurrently"

_OUTCOMES = {InvalidRequest: "invalid", NotFound: "not_found", Conflict: "conflict"}


def _validated_seats(labels) -> list[str]:
    if not labels:
        raise InvalidRequest(NO_SEATS_SELECTED)
    seats = seat_resolver.normalize_seats(labels)
    if not seats:
        raise InvalidRequest(NO_SEATS_SELECTED)
    if seat_resolver.find_duplicates(seats):
        raise InvalidRequest(DUPLICATE_SEATS)
    return seats


def _payment_mode(requested: str | None, intent_id: str | None) -> str:
    if requested and requested.strip():
        return requested.strip().upper()
    if intent_id:
        return settings.INTENT_PAYMENT_MODE
    return settings.DEFAULT_PAYMENT_MODE


def _seat_rows(show_id: int, seats: list[str]) -> list[TicketSeat]:
    return [
        TicketSeat(show_id=show_id, seat_label=label, position=position, active=True)
        for position, label in enumerate(seats)
    ]


async def book_seats(
    db: AsyncSession,
    request: BookingCreate | None,
    *,
    show_lock: ShowLock | None = None,
    id_generator: BookingIdGenerator | None = None,
) -> Booking:
    """
    Create a CONFIRMED booking and its ticket for the requested seats.

    Checks run in a fixed order and each has its own failure:
    seats present, seats unique, customer exists, show exists,
    seats free, cost positive.
    """
    started = time.perf_counter()
    try:
        booking = await _book_seats(
            db,
            request,
            show_lock or get_show_lock(),
            id_generator or get_id_generator(),
        )
    except BookingError as e:
        record_booking_attempt(_OUTCOMES.get(type(e), "error"))
        raise
    except Exception:
        record_booking_attempt("error")
        raise
    finally:
        booking_latency.observe(time.perf_counter() - started)

    record_booking_attempt("success")
    return booking


async def _book_seats(
    db: AsyncSession,
    request: BookingCreate | None,
    show_lock: ShowLock,
    ids: BookingIdGenerator,
) -> Booking:
    if request is None:
        raise InvalidRequest(NO_SEATS_SELECTED)
    seats = _validated_seats(request.seat_numbers)

    customer = await catalog_service.get_customer(db, request.customer_id)
    if customer is None:
        raise NotFound("customer", request.customer_id)

    show = await catalog_service.get_show(db, request.show_id)
    if show is None:
        raise NotFound("show", request.show_id)

    async with show_lock.hold(show.id):
        unavailable = await seat_resolver.find_unavailable(db, show.id, seats)
        if unavailable:
            logger.warning(
                "booking_rejected",
                reason="seats_unavailable",
                show_id=show.id,
                customer_id=customer.id,
                seats=unavailable,
            )
            raise Conflict(f"seats unavailable: {unavailable}", seats=unavailable)

        if request.total_cost is None or request.total_cost <= 0:
            raise InvalidRequest(NON_POSITIVE_COST)

        intent_id = (request.payment_intent_id or "").strip() or None
        ticket = Ticket(
            no_of_seats=len(seats),
            booking_ref=ids.booking_reference(),
            ticket_status=True,
            seats=_seat_rows(show.id, seats),
        )
        booking = Booking(
            show_id=show.id,
            customer_id=customer.id,
            booking_date=request.booking_date or date.today(),
            transaction_id=ids.transaction_id(),
            payment_reference=intent_id,
            transaction_mode=_payment_mode(request.payment_mode, intent_id),
            transaction_status=STATUS_CONFIRMED,
            total_cost=request.total_cost,
            ticket=ticket,
        )

        try:
            await ledger.save_booking(db, booking)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(
                "booking_conflict_at_commit",
                show_id=show.id,
                customer_id=customer.id,
                seats=seats,
                error=str(e.orig),
            )
            raise InvalidRequest(STORE_REJECTED) from e

    logger.info(
        "booking_created",
        booking_id=booking.id,
        customer_id=customer.id,
        show_id=show.id,
        seats=seats,
        transaction_id=booking.transaction_id,
    )
    return booking


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    booking = await ledger.find_booking_by_id(db, booking_id)
    if booking is None:
        raise NotFound("booking", booking_id)
    return booking


async def update_booking(
    db: AsyncSession,
    booking_id: int,
    data: BookingReplace,
    *,
    show_lock: ShowLock | None = None,
) -> Booking:
    """
    Replace every field of an existing booking and its ticket.

    This is PUT semantics: omitted intent is not inferred, so a caller can
    overwrite the transaction id, status or cost. Seats, status and payment
    mode are trimmed and upper-cased as on create. The new seats must still
    be free on the target show; a collision is caught by the ticket_seats
    unique index and reported as InvalidRequest.
    """
    booking = await get_booking(db, booking_id)
    seats = _validated_seats(data.ticket.seat_numbers)
    if data.total_cost <= 0:
        raise InvalidRequest(NON_POSITIVE_COST)
    if not await catalog_service.customer_exists(db, data.customer_id):
        raise NotFound("customer", data.customer_id)
    if await catalog_service.get_show(db, data.show_id) is None:
        raise NotFound("show", data.show_id)

    lock = show_lock or get_show_lock()
    async with lock.hold(data.show_id):
        ticket = booking.ticket
        # Retire the current seat rows first so the unique index never sees
        # the old and the replacement rows active together.
        for seat in ticket.seats:
            seat.active = False
        try:
            await db.flush()

            booking.show_id = data.show_id
            booking.customer_id = data.customer_id
            booking.booking_date = data.booking_date
            booking.transaction_id = data.transaction_id
            booking.payment_reference = data.payment_reference
            booking.transaction_mode = data.transaction_mode.strip().upper()
            booking.transaction_status = data.transaction_status.strip().upper()
            booking.total_cost = data.total_cost
            ticket.booking_ref = data.ticket.booking_ref
            ticket.ticket_status = data.ticket.ticket_status
            ticket.no_of_seats = len(seats)
            ticket.seats = _seat_rows(data.show_id, seats)

            await ledger.save_booking(db, booking)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning("booking_update_rejected", booking_id=booking_id, error=str(e.orig))
            raise InvalidRequest(STORE_REJECTED) from e

    logger.info(
        "booking_updated",
        booking_id=booking.id,
        show_id=booking.show_id,
        status=booking.transaction_status,
        seats=seats,
    )
    return booking


async def cancel_booking(db: AsyncSession, booking_id: int) -> Booking:
    """
    Move a booking to CANCELLED and release its seats.

    The ticket is kept; its seat rows go inactive in the same transaction,
    so the seats are free for the next booking as soon as this returns.
    Cancelling twice leaves the booking cancelled.
    """
    booking = await get_booking(db, booking_id)
    already_cancelled = booking.is_cancelled

    booking.transaction_status = STATUS_CANCELLED
    await ledger.save_booking(db, booking)
    await db.commit()

    if not already_cancelled:
        booking_cancellations.inc()
    logger.info(
        "booking_cancelled",
        booking_id=booking.id,
        show_id=booking.show_id,
        seats_released=booking.ticket.seat_numbers if booking.ticket else [],
        already_cancelled=already_cancelled,
    )
    return booking


async def list_bookings(
    db: AsyncSession,
    movie_id: int | None = None,
    booking_date: date | None = None,
    show_id: int | None = None,
) -> list[Booking]:
    """All bookings, or those for a movie, a booking date or a show."""
    return await ledger.find_bookings(db, movie_id=movie_id, booking_date=booking_date, show_id=show_id)


async def total_cost(db: AsyncSession, booking_id: int) -> float:
    """Summed cost of the matching booking; 0.0 when there is none."""
    return await ledger.sum_cost_for_booking(db, booking_id)


async def summarize_by_movie(db: AsyncSession) -> list[MovieBookingSummary]:
    return await ledger.aggregate_by_movie(db)


async def reserved_seats(db: AsyncSession, show_id: int) -> list[str]:
    """Seats currently held by non-cancelled bookings for a known show."""
    if await catalog_service.get_show(db, show_id) is None:
        raise NotFound("show", show_id)
    return sorted(await seat_resolver.reserved_seats(db, show_id))
