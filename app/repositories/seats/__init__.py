"""Seat table repository."""

from app.repositories.seats.allocation import SeatRepository

__all__ = [
    "SeatRepository",
]
