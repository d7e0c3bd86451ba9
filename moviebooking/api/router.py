"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from moviebooking.api.routes import bookings, shows

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(bookings.router)
api_router.include_router(shows.router)
