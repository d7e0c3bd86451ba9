"""Initial schema: catalog, customers and the reservation ledger.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Catalog tables (read-only for the booking engine)
    op.create_table(
        "movies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("genre", sa.String(100), nullable=True),
        sa.Column("language", sa.String(100), nullable=True),
        sa.Column("duration", sa.String(50), nullable=True),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_movies_id", "movies", ["id"])

    op.create_table(
        "theatres",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_theatres_id", "theatres", ["id"])

    op.create_table(
        "screens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("theatre_id", sa.Integer(), sa.ForeignKey("theatres.id"), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("rows", sa.Integer(), nullable=True),
        sa.Column("columns", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_screens_id", "screens", ["id"])
    op.create_index("ix_screens_theatre_id", "screens", ["theatre_id"])

    op.create_table(
        "shows",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("start_time", sa.DateTime(), nullable=True),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("screen_id", sa.Integer(), nullable=True),
        sa.Column("theatre_id", sa.Integer(), nullable=True),
        sa.Column("movie_id", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_shows_id", "shows", ["id"])
    op.create_index("ix_shows_movie_id", "shows", ["movie_id"])
    op.create_index("ix_shows_start_time", "shows", ["start_time"])

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("mobile_number", sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_customers_id", "customers", ["id"])
    op.create_index("ix_customers_email", "customers", ["email"], unique=True)

    # Reservation ledger
    op.create_table(
        "tickets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("no_of_seats", sa.Integer(), nullable=False),
        sa.Column("booking_ref", sa.Integer(), nullable=False),
        sa.Column("ticket_status", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("no_of_seats > 0", name="check_ticket_seat_count_positive"),
    )
    op.create_index("ix_tickets_id", "tickets", ["id"])

    op.create_table(
        "ticket_bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("show_id", sa.Integer(), nullable=False),
        sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("ticket_id", sa.Integer(), sa.ForeignKey("tickets.id"), nullable=False),
        sa.Column("booking_date", sa.Date(), nullable=False),
        sa.Column("transaction_id", sa.Integer(), nullable=False),
        sa.Column("payment_reference", sa.String(64), nullable=True),
        sa.Column("transaction_mode", sa.String(50), nullable=False),
        sa.Column("transaction_status", sa.String(20), nullable=False),
        sa.Column("total_cost", sa.Float(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("ticket_id", name="uq_ticket_bookings_ticket_id"),
        sa.CheckConstraint("total_cost > 0", name="check_booking_total_cost_positive"),
    )
    op.create_index("ix_ticket_bookings_id", "ticket_bookings", ["id"])
    op.create_index("ix_ticket_bookings_show_id", "ticket_bookings", ["show_id"])
    op.create_index("ix_ticket_bookings_customer_id", "ticket_bookings", ["customer_id"])
    op.create_index("ix_ticket_bookings_booking_date", "ticket_bookings", ["booking_date"])

    op.create_table(
        "ticket_seats",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ticket_id", sa.Integer(), sa.ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("show_id", sa.Integer(), nullable=False),
        sa.Column("seat_label", sa.String(20), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_ticket_seats_ticket_id", "ticket_seats", ["ticket_id"])
    op.create_index("ix_ticket_seats_show_active", "ticket_seats", ["show_id", "active"])
    # PARTIAL UNIQUE INDEX: the storage-level guard against selling a seat twice.
    # Only rows of non-cancelled bookings are active, so a cancelled booking
    # frees its seats without deleting history.
    op.create_index(
        "uq_ticket_seats_show_seat_active",
        "ticket_seats",
        ["show_id", "seat_label"],
        unique=True,
        postgresql_where=sa.text("active"),
    )


def downgrade() -> None:
    op.drop_table("ticket_seats")
    op.drop_table("ticket_bookings")
    op.drop_table("tickets")
    op.drop_table("customers")
    op.drop_table("shows")
    op.drop_table("screens")
    op.drop_table("theatres")
    op.drop_table("movies")
