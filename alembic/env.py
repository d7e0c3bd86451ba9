"""
Alembic environment for the booking schema.

Migrations run over the synchronous driver (DATABASE_URL_SYNC); the app
itself uses the asyncpg URL. Offline mode renders SQL for review.
"""

from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

from moviebooking.db.base import Base
from moviebooking.models import (  # noqa: F401 - registers tables on Base.metadata
    Movie, Theatre, Screen, Show, Customer, Booking, Ticket, TicketSeat,
)
from moviebooking.core.config import get_settings

config = context.config
settings = get_settings()

# alembic.ini carries no URL
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL_SYNC)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Render the schema as SQL without a database."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a short-lived sync connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
