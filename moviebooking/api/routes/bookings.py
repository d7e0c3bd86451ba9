"""
Booking endpoints: create, replace, cancel, listings and reports.
"""

from datetime import date

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.db.session import get_db
from moviebooking.schemas.booking import (
    BookingCreate,
    BookingReplace,
    BookingResponse,
    TotalCostResponse,
)
from moviebooking.schemas.report import MovieBookingSummary, TicketView
from moviebooking.services import booking_service, reporting_service

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    db: AsyncSession = Depends(get_db),
):
    """
    Reserve seats for a show.

    Returns 400 for an empty, blank or duplicate seat selection or a
    non-positive cost, 404 for an unknown customer or show, and 409 when
    any seat is already taken.
    """
    return await booking_service.book_seats(db, booking_data)


@router.get("/", response_model=list[BookingResponse])
async def list_all_bookings(db: AsyncSession = Depends(get_db)):
    return await booking_service.list_bookings(db)


@router.get("/summary/movies", response_model=list[MovieBookingSummary])
async def summarize_bookings_by_movie(db: AsyncSession = Depends(get_db)):
    """Bookings, seats and revenue per movie, cancelled bookings excluded."""
    return await booking_service.summarize_by_movie(db)


@router.get(
    "/customer/{customer_id}",
    response_model=list[TicketView],
    response_model_exclude_none=True,
)
async def list_customer_bookings(customer_id: int, db: AsyncSession = Depends(get_db)):
    """Booking history for a customer, earliest show first."""
    return await reporting_service.find_bookings_for_customer(db, customer_id)


@router.get("/movie/{movie_id}", response_model=list[BookingResponse])
async def list_bookings_by_movie(movie_id: int, db: AsyncSession = Depends(get_db)):
    return await booking_service.list_bookings(db, movie_id=movie_id)


@router.get("/date/{booking_date}", response_model=list[BookingResponse])
async def list_bookings_by_date(booking_date: date, db: AsyncSession = Depends(get_db)):
    return await booking_service.list_bookings(db, booking_date=booking_date)


@router.get("/show/{show_id}", response_model=list[BookingResponse])
async def list_bookings_by_show(show_id: int, db: AsyncSession = Depends(get_db)):
    return await booking_service.list_bookings(db, show_id=show_id)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(booking_id: int, db: AsyncSession = Depends(get_db)):
    return await booking_service.get_booking(db, booking_id)


@router.get("/{booking_id}/cost", response_model=TotalCostResponse)
async def get_total_cost(booking_id: int, db: AsyncSession = Depends(get_db)):
    """Total cost for a booking; 0.0 when the id matches nothing."""
    total = await booking_service.total_cost(db, booking_id)
    return TotalCostResponse(booking_id=booking_id, total_cost=total)


@router.put("/{booking_id}", response_model=BookingResponse)
async def replace_booking(
    booking_id: int,
    booking_data: BookingReplace,
    db: AsyncSession = Depends(get_db),
):
    """
    Replace a booking wholesale.

    Every field is overwritten, including transaction id, status and cost;
    send the complete representation.
    """
    return await booking_service.update_booking(db, booking_id, booking_data)


@router.delete("/{booking_id}", response_model=BookingResponse)
async def cancel_booking_endpoint(booking_id: int, db: AsyncSession = Depends(get_db)):
    """Cancel a booking and release its seats back to the show."""
    return await booking_service.cancel_booking(db, booking_id)
