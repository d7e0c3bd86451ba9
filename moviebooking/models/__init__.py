from moviebooking.models.catalog import Movie, Theatre, Screen, Show
from moviebooking.models.customer import Customer
from moviebooking.models.booking import Booking, Ticket, TicketSeat

__all__ = [
    "Movie", "Theatre", "Screen", "Show",
    "Customer",
    "Booking", "Ticket", "TicketSeat",
]
