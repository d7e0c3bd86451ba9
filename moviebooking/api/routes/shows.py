"""
Show seat availability.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.db.session import get_db
from moviebooking.schemas.booking import ReservedSeatsResponse
from moviebooking.services import booking_service

router = APIRouter(prefix="/shows", tags=["Shows"])


@router.get("/{show_id}/reserved-seats", response_model=ReservedSeatsResponse)
async def get_reserved_seats(show_id: int, db: AsyncSession = Depends(get_db)):
    """Seats held by non-cancelled bookings. Not cached: must reflect the ledger."""
    seats = await booking_service.reserved_seats(db, show_id)
    return ReservedSeatsResponse(show_id=show_id, seats=seats)
