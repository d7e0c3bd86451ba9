"""
Read-only projections built by the reporting service.
"""

from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel


class MovieBookingSummary(BaseModel):
    movie_id: int
    movie_name: str
    total_bookings: int
    total_seats: int
    total_revenue: float


class TicketView(BaseModel):
    """One booking joined with its ticket, show, movie, theatre and screen.

    Fields that could not be resolved are left as None and dropped from
    the JSON response.
    """

    booking_id: int
    ticket_id: Optional[int] = None
    booking_date: Optional[date] = None
    booking_reference: Optional[int] = None
    transaction_id: Optional[int] = None
    transaction_mode: Optional[str] = None
    transaction_status: Optional[str] = None
    payment_reference: Optional[str] = None
    total_cost: float
    seat_numbers: list[str] = []
    seat_count: int = 0

    show_id: Optional[int] = None
    show_name: Optional[str] = None
    show_start_time: Optional[datetime] = None
    show_end_time: Optional[datetime] = None

    movie_id: Optional[int] = None
    movie_name: Optional[str] = None
    movie_genre: Optional[str] = None
    language: Optional[str] = None
    movie_image_url: Optional[str] = None

    theatre_id: Optional[int] = None
    theatre_name: Optional[str] = None
    theatre_city: Optional[str] = None

    screen_id: Optional[int] = None
    screen_name: Optional[str] = None
