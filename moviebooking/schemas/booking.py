"""
Pydantic schemas for booking-related request/response validation.

Seat normalisation and cost checks live in the booking service so that each
failure maps to its own domain error; the schemas only enforce shape.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from moviebooking.models.booking import BOOKING_STATUSES


class BookingCreate(BaseModel):
    customer_id: int
    show_id: int
    seat_numbers: list[Optional[str]] = Field(default_factory=list)
    total_cost: float
    booking_date: Optional[date] = None
    payment_mode: Optional[str] = None
    payment_intent_id: Optional[str] = Field(None, max_length=64)


class TicketResponse(BaseModel):
    id: int
    seat_numbers: list[str]
    no_of_seats: int
    booking_ref: int
    ticket_status: bool

    model_config = {"from_attributes": True}


class BookingResponse(BaseModel):
    id: int
    show_id: int
    customer_id: int
    booking_date: date
    transaction_id: int
    payment_reference: Optional[str]
    transaction_mode: str
    transaction_status: str
    total_cost: float
    ticket: TicketResponse

    model_config = {"from_attributes": True}


class TicketReplace(BaseModel):
    seat_numbers: list[Optional[str]]
    booking_ref: int
    ticket_status: bool


class BookingReplace(BaseModel):
    """Full representation of a booking for PUT; every field is replaced."""

    show_id: int
    customer_id: int
    booking_date: date
    transaction_id: int
    payment_reference: Optional[str] = Field(None, max_length=64)
    transaction_mode: str = Field(..., min_length=1, max_length=50)
    transaction_status: str
    total_cost: float
    ticket: TicketReplace

    @field_validator("transaction_status")
    @classmethod
    def known_status(cls, value: str) -> str:
        if value.strip().upper() not in BOOKING_STATUSES:
            raise ValueError(f"transaction_status must be one of {', '.join(BOOKING_STATUSES)}")
        return value


class TotalCostResponse(BaseModel):
    booking_id: int
    total_cost: float


class ReservedSeatsResponse(BaseModel):
    show_id: int
    seats: list[str]
