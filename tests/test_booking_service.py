"""
Service-level tests for the booking orchestrator: validation order,
conflict detection, cancellation, replacement and aggregate queries.
"""

import random
from datetime import date

import pytest
from sqlalchemy import update

from moviebooking.core.exceptions import Conflict, InvalidRequest, NotFound
from moviebooking.models import Booking
from moviebooking.schemas.booking import BookingCreate, BookingReplace, TicketReplace
from moviebooking.services import booking_service, seat_resolver
from moviebooking.services.id_generator import BookingIdGenerator


def make_request(catalog, seats, total_cost=500.0, **overrides) -> BookingCreate:
    data = {
        "customer_id": catalog["customer_id"],
        "show_id": catalog["show_id"],
        "seat_numbers": seats,
        "total_cost": total_cost,
    }
    data.update(overrides)
    return BookingCreate(**data)


@pytest.mark.asyncio
async def test_book_seats_end_to_end(db_session, catalog, show_lock):
    """Show 2, customer 1, seats A1+A2 for 500.0 gives a confirmed two-seat booking."""
    booking = await booking_service.book_seats(
        db_session, make_request(catalog, ["A1", "A2"]), show_lock=show_lock
    )

    assert booking.id is not None
    assert booking.transaction_status == "CONFIRMED"
    assert booking.ticket.no_of_seats == 2
    assert booking.ticket.seat_numbers == ["A1", "A2"]
    assert booking.ticket.ticket_status is True
    assert booking.show_id == 2
    assert booking.customer_id == 1
    assert await booking_service.total_cost(db_session, booking.id) == 500.0


@pytest.mark.asyncio
async def test_book_seats_normalizes_labels(db_session, catalog, show_lock):
    booking = await booking_service.book_seats(
        db_session, make_request(catalog, ["  b7 ", "", "   ", "c1"]), show_lock=show_lock
    )
    assert booking.ticket.seat_numbers == ["B7", "C1"]
    assert booking.ticket.no_of_seats == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("seats", [[], ["", "  "], [None]])
async def test_book_seats_requires_a_seat(db_session, catalog, show_lock, seats):
    with pytest.raises(InvalidRequest, match="at least one seat"):
        await booking_service.book_seats(db_session, make_request(catalog, seats), show_lock=show_lock)


@pytest.mark.asyncio
async def test_book_seats_rejects_missing_request(db_session, show_lock):
    with pytest.raises(InvalidRequest, match="at least one seat"):
        await booking_service.book_seats(db_session, None, show_lock=show_lock)


@pytest.mark.asyncio
async def test_book_seats_rejects_duplicates_after_normalization(db_session, catalog, show_lock):
    with pytest.raises(InvalidRequest, match="duplicate"):
        await booking_service.book_seats(db_session, make_request(catalog, ["A1", "a1"]), show_lock=show_lock)


@pytest.mark.asyncio
async def test_duplicate_check_runs_before_customer_lookup(db_session, catalog, show_lock):
    request = make_request(catalog, ["A1", " a1"], customer_id=999)
    with pytest.raises(InvalidRequest, match="duplicate"):
        await booking_service.book_seats(db_session, request, show_lock=show_lock)


@pytest.mark.asyncio
async def test_book_seats_unknown_customer(db_session, catalog, show_lock):
    with pytest.raises(NotFound) as exc_info:
        await booking_service.book_seats(
            db_session, make_request(catalog, ["A1"], customer_id=42), show_lock=show_lock
        )
    assert exc_info.value.entity == "customer"
    assert exc_info.value.message == "customer not found with ID: 42"


@pytest.mark.asyncio
async def test_book_seats_unknown_show(db_session, catalog, show_lock):
    with pytest.raises(NotFound) as exc_info:
        await booking_service.book_seats(
            db_session, make_request(catalog, ["A1"], show_id=404), show_lock=show_lock
        )
    assert exc_info.value.entity == "show"


@pytest.mark.asyncio
async def test_book_seats_conflict_lists_only_taken_seats(db_session, catalog, show_lock):
    await booking_service.book_seats(db_session, make_request(catalog, ["A2", "A5"]), show_lock=show_lock)

    with pytest.raises(Conflict) as exc_info:
        await booking_service.book_seats(db_session, make_request(catalog, ["A1", "a2"]), show_lock=show_lock)

    assert exc_info.value.seats == ["A2"]
    assert exc_info.value.message == "seats unavailable: ['A2']"


@pytest.mark.asyncio
async def test_conflict_seats_are_sorted(db_session, catalog, show_lock):
    await booking_service.book_seats(db_session, make_request(catalog, ["C3", "B1", "A9"]), show_lock=show_lock)

    with pytest.raises(Conflict) as exc_info:
        await booking_service.book_seats(
            db_session, make_request(catalog, ["C3", "A9", "D1", "B1"]), show_lock=show_lock
        )
    assert exc_info.value.seats == ["A9", "B1", "C3"]


@pytest.mark.asyncio
async def test_same_seat_on_another_show_is_free(db_session, catalog, show_lock):
    await booking_service.book_seats(db_session, make_request(catalog, ["A1"]), show_lock=show_lock)
    other = await booking_service.book_seats(
        db_session, make_request(catalog, ["A1"], show_id=catalog["late_show_id"]), show_lock=show_lock
    )
    assert other.ticket.seat_numbers == ["A1"]


@pytest.mark.asyncio
@pytest.mark.parametrize("cost", [0, -10.0])
async def test_book_seats_requires_positive_cost(db_session, catalog, show_lock, cost):
    with pytest.raises(InvalidRequest, match="total cost must be positive"):
        await booking_service.book_seats(db_session, make_request(catalog, ["A1"], total_cost=cost), show_lock=show_lock)


@pytest.mark.asyncio
async def test_conflict_is_reported_before_cost(db_session, catalog, show_lock):
    await booking_service.book_seats(db_session, make_request(catalog, ["A1"]), show_lock=show_lock)
    with pytest.raises(Conflict):
        await booking_service.book_seats(db_session, make_request(catalog, ["A1"], total_cost=0), show_lock=show_lock)


@pytest.mark.asyncio
async def test_payment_defaults(db_session, catalog, show_lock):
    plain = await booking_service.book_seats(db_session, make_request(catalog, ["A1"]), show_lock=show_lock)
    assert plain.transaction_mode == "ONLINE"
    assert plain.payment_reference is None
    assert plain.booking_date == date.today()

    with_intent = await booking_service.book_seats(
        db_session, make_request(catalog, ["A2"], payment_intent_id="pi_123"), show_lock=show_lock
    )
    assert with_intent.transaction_mode == "CARD"
    assert with_intent.payment_reference == "pi_123"

    explicit = await booking_service.book_seats(
        db_session,
        make_request(catalog, ["A3"], payment_mode="upi", payment_intent_id="pi_456",
                     booking_date=date(2026, 10, 1)),
        show_lock=show_lock,
    )
    assert explicit.transaction_mode == "UPI"
    assert explicit.payment_reference == "pi_456"
    assert explicit.booking_date == date(2026, 10, 1)


@pytest.mark.asyncio
async def test_generated_ids_use_injected_random_source(db_session, catalog, show_lock):
    expected = BookingIdGenerator(random.Random(7))
    expected_ref = expected.booking_reference()
    expected_txn = expected.transaction_id()

    booking = await booking_service.book_seats(
        db_session,
        make_request(catalog, ["A1"]),
        show_lock=show_lock,
        id_generator=BookingIdGenerator(random.Random(7)),
    )

    assert booking.ticket.booking_ref == expected_ref
    assert booking.transaction_id == expected_txn
    assert 100_000 <= booking.transaction_id <= 999_999
    assert 1_000_000 <= booking.ticket.booking_ref <= 9_999_998


@pytest.mark.asyncio
async def test_cancel_releases_seats(db_session, catalog, show_lock):
    booking = await booking_service.book_seats(db_session, make_request(catalog, ["A1", "A2"]), show_lock=show_lock)
    assert await seat_resolver.reserved_seats(db_session, catalog["show_id"]) == {"A1", "A2"}

    cancelled = await booking_service.cancel_booking(db_session, booking.id)

    assert cancelled.transaction_status == "CANCELLED"
    assert cancelled.ticket.seat_numbers == ["A1", "A2"]
    assert await seat_resolver.reserved_seats(db_session, catalog["show_id"]) == set()

    rebooked = await booking_service.book_seats(
        db_session, make_request(catalog, ["A2", "A1"], customer_id=catalog["other_customer_id"]),
        show_lock=show_lock,
    )
    assert rebooked.transaction_status == "CONFIRMED"


@pytest.mark.asyncio
async def test_cancel_twice_stays_cancelled(db_session, catalog, show_lock):
    booking = await booking_service.book_seats(db_session, make_request(catalog, ["A1"]), show_lock=show_lock)
    await booking_service.cancel_booking(db_session, booking.id)
    again = await booking_service.cancel_booking(db_session, booking.id)
    assert again.transaction_status == "CANCELLED"


@pytest.mark.asyncio
async def test_cancel_unknown_booking(db_session, catalog):
    with pytest.raises(NotFound, match="booking not found with ID: 77"):
        await booking_service.cancel_booking(db_session, 77)


def replacement(booking, **overrides) -> BookingReplace:
    data = {
        "show_id": booking.show_id,
        "customer_id": booking.customer_id,
        "booking_date": booking.booking_date,
        "transaction_id": booking.transaction_id,
        "payment_reference": booking.payment_reference,
        "transaction_mode": booking.transaction_mode,
        "transaction_status": booking.transaction_status,
        "total_cost": booking.total_cost,
        "ticket": TicketReplace(
            seat_numbers=booking.ticket.seat_numbers,
            booking_ref=booking.ticket.booking_ref,
            ticket_status=booking.ticket.ticket_status,
        ),
    }
    data.update(overrides)
    return BookingReplace(**data)


@pytest.mark.asyncio
async def test_update_replaces_every_field(db_session, catalog, show_lock):
    booking = await booking_service.book_seats(db_session, make_request(catalog, ["A1", "A2"]), show_lock=show_lock)
    data = replacement(
        booking,
        transaction_id=123456,
        transaction_mode="CASH",
        total_cost=750.0,
        booking_date=date(2026, 12, 24),
        ticket=TicketReplace(seat_numbers=["a2", "b4", "A1"], booking_ref=7654321, ticket_status=True),
    )

    updated = await booking_service.update_booking(db_session, booking.id, data, show_lock=show_lock)

    assert updated.id == booking.id
    assert updated.transaction_id == 123456
    assert updated.transaction_mode == "CASH"
    assert updated.total_cost == 750.0
    assert updated.booking_date == date(2026, 12, 24)
    assert updated.ticket.seat_numbers == ["A2", "B4", "A1"]
    assert updated.ticket.no_of_seats == 3
    assert updated.ticket.booking_ref == 7654321
    assert await seat_resolver.reserved_seats(db_session, catalog["show_id"]) == {"A1", "A2", "B4"}


@pytest.mark.asyncio
async def test_update_can_overwrite_status(db_session, catalog, show_lock):
    """Full replace lets a caller cancel, or un-cancel, through an update."""
    booking = await booking_service.book_seats(db_session, make_request(catalog, ["A1"]), show_lock=show_lock)

    await booking_service.update_booking(
        db_session, booking.id, replacement(booking, transaction_status="cancelled"), show_lock=show_lock
    )
    assert await seat_resolver.reserved_seats(db_session, catalog["show_id"]) == set()

    await booking_service.update_booking(
        db_session, booking.id, replacement(booking, transaction_status="CONFIRMED"), show_lock=show_lock
    )
    assert await seat_resolver.reserved_seats(db_session, catalog["show_id"]) == {"A1"}


@pytest.mark.asyncio
async def test_update_onto_taken_seat_is_rejected(db_session, catalog, show_lock):
    await booking_service.book_seats(db_session, make_request(catalog, ["A1"]), show_lock=show_lock)
    second = await booking_service.book_seats(db_session, make_request(catalog, ["A2"]), show_lock=show_lock)
    second_id = second.id
    data = replacement(
        second, ticket=TicketReplace(seat_numbers=["A1"], booking_ref=second.ticket.booking_ref, ticket_status=True)
    )

    with pytest.raises(InvalidRequest):
        await booking_service.update_booking(db_session, second_id, data, show_lock=show_lock)

    db_session.expire_all()
    assert await seat_resolver.reserved_seats(db_session, catalog["show_id"]) == {"A1", "A2"}


@pytest.mark.asyncio
async def test_update_unknown_booking(db_session, catalog, show_lock):
    booking = await booking_service.book_seats(db_session, make_request(catalog, ["A1"]), show_lock=show_lock)
    with pytest.raises(NotFound):
        await booking_service.update_booking(db_session, booking.id + 100, replacement(booking), show_lock=show_lock)


@pytest.mark.asyncio
async def test_update_with_padded_cancelled_status_releases_seats(db_session, catalog, show_lock):
    booking = await booking_service.book_seats(
        db_session, make_request(catalog, ["A1"], total_cost=100.0), show_lock=show_lock
    )

    updated = await booking_service.update_booking(
        db_session, booking.id, replacement(booking, transaction_status=" cancelled "), show_lock=show_lock
    )

    assert updated.transaction_status == "CANCELLED"
    assert updated.is_cancelled
    assert await seat_resolver.reserved_seats(db_session, catalog["show_id"]) == set()
    assert await booking_service.summarize_by_movie(db_session) == []


@pytest.mark.asyncio
async def test_padded_status_rows_are_treated_as_cancelled(db_session, catalog, show_lock):
    """Rows written with stray whitespace around CANCELLED still free their seats."""
    booking = await booking_service.book_seats(
        db_session, make_request(catalog, ["A1"], total_cost=100.0), show_lock=show_lock
    )
    await db_session.execute(
        update(Booking).where(Booking.id == booking.id).values(transaction_status=" Cancelled ")
    )
    await db_session.commit()

    assert await seat_resolver.reserved_seats(db_session, catalog["show_id"]) == set()
    assert await booking_service.summarize_by_movie(db_session) == []


@pytest.mark.asyncio
async def test_update_upper_cases_payment_mode(db_session, catalog, show_lock):
    booking = await booking_service.book_seats(db_session, make_request(catalog, ["A1"]), show_lock=show_lock)

    updated = await booking_service.update_booking(
        db_session, booking.id, replacement(booking, transaction_mode=" upi "), show_lock=show_lock
    )

    assert updated.transaction_mode == "UPI"


@pytest.mark.asyncio
async def test_total_cost_of_unknown_booking_is_zero(db_session, catalog):
    assert await booking_service.total_cost(db_session, 12345) == 0.0


@pytest.mark.asyncio
async def test_list_bookings_filters(db_session, catalog, show_lock):
    first = await booking_service.book_seats(
        db_session, make_request(catalog, ["A1"], booking_date=date(2026, 10, 1)), show_lock=show_lock
    )
    second = await booking_service.book_seats(
        db_session,
        make_request(catalog, ["A1"], show_id=catalog["morning_show_id"], booking_date=date(2026, 10, 2)),
        show_lock=show_lock,
    )
    third = await booking_service.book_seats(
        db_session,
        make_request(catalog, ["B1"], show_id=catalog["late_show_id"], booking_date=date(2026, 10, 1)),
        show_lock=show_lock,
    )

    everything = await booking_service.list_bookings(db_session)
    assert [b.id for b in everything] == [first.id, second.id, third.id]

    by_movie = await booking_service.list_bookings(db_session, movie_id=catalog["movie_id"])
    assert {b.id for b in by_movie} == {first.id, third.id}

    by_date = await booking_service.list_bookings(db_session, booking_date=date(2026, 10, 1))
    assert {b.id for b in by_date} == {first.id, third.id}

    by_show = await booking_service.list_bookings(db_session, show_id=catalog["morning_show_id"])
    assert [b.id for b in by_show] == [second.id]

    assert await booking_service.list_bookings(db_session, movie_id=999) == []


@pytest.mark.asyncio
async def test_summarize_by_movie_excludes_cancelled(db_session, catalog, show_lock):
    await booking_service.book_seats(db_session, make_request(catalog, ["A1", "A2"], total_cost=400.0), show_lock=show_lock)
    await booking_service.book_seats(
        db_session, make_request(catalog, ["A1"], show_id=catalog["late_show_id"], total_cost=250.0),
        show_lock=show_lock,
    )
    cancelled = await booking_service.book_seats(
        db_session, make_request(catalog, ["C1", "C2", "C3"], total_cost=900.0), show_lock=show_lock
    )
    only_cancelled_movie = await booking_service.book_seats(
        db_session, make_request(catalog, ["D1"], show_id=catalog["morning_show_id"], total_cost=100.0),
        show_lock=show_lock,
    )
    await booking_service.cancel_booking(db_session, cancelled.id)
    await booking_service.cancel_booking(db_session, only_cancelled_movie.id)

    summaries = await booking_service.summarize_by_movie(db_session)

    assert len(summaries) == 1
    summary = summaries[0]
    assert summary.movie_id == catalog["movie_id"]
    assert summary.movie_name == "Inception"
    assert summary.total_bookings == 2
    assert summary.total_seats == 3
    assert summary.total_revenue == 650.0


@pytest.mark.asyncio
async def test_summaries_sorted_by_movie_name(db_session, catalog, show_lock):
    await booking_service.book_seats(db_session, make_request(catalog, ["A1"]), show_lock=show_lock)
    await booking_service.book_seats(
        db_session, make_request(catalog, ["A1"], show_id=catalog["morning_show_id"]), show_lock=show_lock
    )

    summaries = await booking_service.summarize_by_movie(db_session)

    assert [s.movie_name for s in summaries] == ["Arrival", "Inception"]


@pytest.mark.asyncio
async def test_reads_are_repeatable(db_session, catalog, show_lock):
    await booking_service.book_seats(db_session, make_request(catalog, ["A1", "A2"]), show_lock=show_lock)

    first_list = [b.id for b in await booking_service.list_bookings(db_session)]
    second_list = [b.id for b in await booking_service.list_bookings(db_session)]
    assert first_list == second_list

    assert await booking_service.summarize_by_movie(db_session) == await booking_service.summarize_by_movie(db_session)


@pytest.mark.asyncio
async def test_reserved_seats_for_unknown_show(db_session, catalog):
    with pytest.raises(NotFound):
        await booking_service.reserved_seats(db_session, 404)
