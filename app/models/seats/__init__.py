"""Seat apportionment models."""

from app.models.seats.allocation import SEATS_COMMUNITY_SCHEMA, SEATS_MUNICIPAL_SCHEMA, SeatAllocation
from app.models.seats.entities import SeatDistribution

__all__ = [
    "SeatAllocation",
    "SeatDistribution",
    "SEATS_MUNICIPAL_SCHEMA",
    "SEATS_COMMUNITY_SCHEMA",
]
