"""
Entity records for the job board.

Entities are frozen snapshots. Identity (``id``) is assigned by the store
on save; ``id == 0`` marks a record that has not been persisted yet.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Candidate:
    """Job seeker profile."""

    id: int = 0
    name: str = ""
    description: str = ""
    creation_date: datetime = field(default_factory=datetime.now)
    city_id: int = 0  # soft reference to City.id

    preserved_fields = ("id", "creation_date")

    @property
    def is_new(self) -> bool:
        return self.id == 0


@dataclass(frozen=True)
class Vacancy:
    """Open position published on the board."""

    id: int = 0
    title: str = ""
    description: str = ""
    creation_date: datetime = field(default_factory=datetime.now)
    visible: bool = False
    city_id: int = 0

    preserved_fields = ("id", "creation_date")

    @property
    def is_new(self) -> bool:
        return self.id == 0


@dataclass(frozen=True)
class City:
    id: int = 0
    name: str = ""

    preserved_fields = ("id",)

    @property
    def is_new(self) -> bool:
        return self.id == 0


@dataclass(frozen=True)
class User:
    """Registered account. ``email`` is the natural unique key."""

    id: int = 0
    email: str = ""
    name: str = ""
    password: str = ""

    preserved_fields = ("id",)

    @property
    def is_new(self) -> bool:
        return self.id == 0


def preserved_values(entity) -> dict:
    """Return the fields an update must carry over from the stored value."""
    return {name: getattr(entity, name) for name in entity.preserved_fields}
