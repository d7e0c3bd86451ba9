"""
Reservation ledger: bookings, their tickets and the seats on each ticket.

Key design decisions:
- A Booking owns exactly one Ticket (unique ticket_id, cascade on the
  relationship); a Ticket is never created on its own.
- Cancelling flips transaction_status; rows are never deleted.
- Seat availability is derived from the bookings that are not CANCELLED.
  ticket_seats carries a copy of the show id plus an `active` flag kept in
  step with the owning booking's status, so the partial unique index on
  (show_id, seat_label) WHERE active rejects a double sale at commit time.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import relationship

from moviebooking.db.base import Base, TimestampMixin

STATUS_CONFIRMED = "CONFIRMED"
STATUS_CANCELLED = "CANCELLED"
BOOKING_STATUSES = (STATUS_CONFIRMED, STATUS_CANCELLED)

ACTIVE_SEAT_INDEX = "uq_ticket_seats_show_seat_active"


def is_cancelled(status: str | None) -> bool:
    return (status or "").strip().upper() == STATUS_CANCELLED


class Booking(Base, TimestampMixin):
    __tablename__ = "ticket_bookings"

    id = Column(Integer, primary_key=True, index=True)
    show_id = Column(Integer, nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id"), nullable=False, unique=True)
    booking_date = Column(Date, nullable=False, index=True)
    transaction_id = Column(Integer, nullable=False)
    payment_reference = Column(String(64), nullable=True)
    transaction_mode = Column(String(50), nullable=False)
    transaction_status = Column(String(20), nullable=False, default=STATUS_CONFIRMED)
    total_cost = Column(Float, nullable=False)

    ticket = relationship(
        "Ticket",
        cascade="all, delete-orphan",
        single_parent=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("total_cost > 0", name="check_booking_total_cost_positive"),
    )

    @property
    def is_cancelled(self) -> bool:
        return is_cancelled(self.transaction_status)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, show={self.show_id}, customer={self.customer_id}, "
            f"status={self.transaction_status})>"
        )


class Ticket(Base, TimestampMixin):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    no_of_seats = Column(Integer, nullable=False)
    booking_ref = Column(Integer, nullable=False)
    ticket_status = Column(Boolean, nullable=False, default=True)

    seats = relationship(
        "TicketSeat",
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="TicketSeat.position",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("no_of_seats > 0", name="check_ticket_seat_count_positive"),
    )

    @property
    def seat_numbers(self) -> list[str]:
        return [seat.seat_label for seat in self.seats]

    def __repr__(self) -> str:
        return f"<Ticket(id={self.id}, seats={self.seat_numbers}, ref={self.booking_ref})>"


class TicketSeat(Base):
    __tablename__ = "ticket_seats"

    id = Column(Integer, primary_key=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    show_id = Column(Integer, nullable=False)
    seat_label = Column(String(20), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)

    ticket = relationship("Ticket", back_populates="seats")

    __table_args__ = (
        # One live sale per seat per show
        Index(
            ACTIVE_SEAT_INDEX,
            "show_id",
            "seat_label",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active"),
        ),
        Index("ix_ticket_seats_show_active", "show_id", "active"),
    )

    def __repr__(self) -> str:
        return f"<TicketSeat(show={self.show_id}, seat={self.seat_label}, active={self.active})>"
