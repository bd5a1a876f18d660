"""Seat services."""

from app.services.seats.service import SeatService

__all__ = [
    "SeatService",
]
