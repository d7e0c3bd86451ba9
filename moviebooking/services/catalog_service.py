"""
Read adapters over the catalog (shows, movies, screens, theatres) and the
customer directory.

Absence is reported as None, never as an exception; callers decide whether
a missing record is an error.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from moviebooking.models.catalog import Movie, Screen, Show, Theatre
from moviebooking.models.customer import Customer


async def _get(db: AsyncSession, model, record_id: Optional[int]):
    if record_id is None:
        return None
    return await db.get(model, record_id)


async def get_show(db: AsyncSession, show_id: Optional[int]) -> Optional[Show]:
    return await _get(db, Show, show_id)


async def get_movie(db: AsyncSession, movie_id: Optional[int]) -> Optional[Movie]:
    return await _get(db, Movie, movie_id)


async def get_screen(db: AsyncSession, screen_id: Optional[int]) -> Optional[Screen]:
    return await _get(db, Screen, screen_id)


async def get_theatre(db: AsyncSession, theatre_id: Optional[int]) -> Optional[Theatre]:
    return await _get(db, Theatre, theatre_id)


async def get_customer(db: AsyncSession, customer_id: Optional[int]) -> Optional[Customer]:
    return await _get(db, Customer, customer_id)


async def customer_exists(db: AsyncSession, customer_id: Optional[int]) -> bool:
    if customer_id is None:
        return False
    result = await db.execute(select(Customer.id).where(Customer.id == customer_id))
    return result.scalar_one_or_none() is not None
