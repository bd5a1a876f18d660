"""Base classes shared by all domain models."""

from dataclasses import asdict, dataclass
from typing import Any, Generic, NamedTuple, TypeVar

from pydantic import BaseModel

from sheets_client.ranges import RowRef

M = TypeVar("M", bound=BaseModel)


@dataclass
class BaseEntity:
    """Base class for computed (non-persisted) entities."""

    def to_dict(self) -> dict[str, Any]:
        """Convert entity to dictionary."""
        return asdict(self)


class Stored(NamedTuple, Generic[M]):
    """A decoded row together with the handle it was read from."""

    ref: RowRef
    item: M
