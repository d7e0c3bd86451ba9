from moviebooking.schemas.booking import (
    BookingCreate, BookingResponse, BookingReplace, TicketReplace, TicketResponse,
    TotalCostResponse, ReservedSeatsResponse,
)
from moviebooking.schemas.report import MovieBookingSummary, TicketView

__all__ = [
    "BookingCreate", "BookingResponse", "BookingReplace", "TicketReplace", "TicketResponse",
    "TotalCostResponse", "ReservedSeatsResponse",
    "MovieBookingSummary", "TicketView",
]
