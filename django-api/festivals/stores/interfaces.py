"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import date

from festivals.domain import (
    Festival,
    FestivalId,
    FestivalState,
    Performance,
    PerformanceId,
    PerformanceState,
    Role,
    User,
    UserId,
)


class StoreError(Exception):
    """Raised when the persistence layer fails to apply a write."""


@dataclass(frozen=True)
class FestivalQuery:
    """Filter for festival listings. Text filters match all words in order."""

    state: FestivalState | None = None
    organizer: UserId | None = None
    name: str | None = None
    description: str | None = None
    venue: str | None = None
    start_date_from: date | None = None
    start_date_to: date | None = None


@dataclass(frozen=True)
class PerformanceQuery:
    """Filter for performance listings."""

    festival_id: FestivalId | None = None
    state: PerformanceState | None = None
    name: str | None = None
    genre: str | None = None
    artists: tuple[UserId, ...] = ()
    member: UserId | None = None
    stage_manager: UserId | None = None


class UserDirectory(ABC):
    """Interface for the identity directory."""

    @abstractmethod
    def get_user(self, user_id: UserId) -> User | None:
        """Return a user by ID, or None if not found."""
        ...

    @abstractmethod
    def add_role(self, user_id: UserId, role: Role) -> User:
        """Grant a role to an existing user and return the updated user."""
        ...


class FestivalStore(ABC):
    """Interface for festival persistence operations."""

    @abstractmethod
    def get(self, festival_id: FestivalId) -> Festival | None:
        """Return a festival by ID, or None if not found."""
        ...

    @abstractmethod
    def save(self, festival: Festival) -> Festival:
        """Insert or replace a festival."""
        ...

    @abstractmethod
    def delete(self, festival_id: FestivalId) -> None:
        """Remove a festival."""
        ...

    @abstractmethod
    def name_taken(self, name: str, exclude: FestivalId | None = None) -> bool:
        """Check if another festival already uses `name`."""
        ...

    @abstractmethod
    def search(self, query: FestivalQuery) -> list[Festival]:
        """Return matching festivals ordered by start date, then name."""
        ...


class PerformanceStore(ABC):
    """Interface for performance persistence operations."""

    @abstractmethod
    def get(self, performance_id: PerformanceId) -> Performance | None:
        """Return a performance by ID, or None if not found."""
        ...

    @abstractmethod
    def save(self, performance: Performance) -> Performance:
        """Insert or replace a performance."""
        ...

    @abstractmethod
    def delete(self, performance_id: PerformanceId) -> None:
        """Remove a performance."""
        ...

    @abstractmethod
    def name_taken(
        self,
        festival_id: FestivalId,
        name: str,
        exclude: PerformanceId | None = None,
    ) -> bool:
        """Check if another performance of the festival already uses `name`."""
        ...

    @abstractmethod
    def search(self, query: PerformanceQuery) -> list[Performance]:
        """Return matching performances ordered by genre, then name."""
        ...


class UnitOfWork(ABC):
    """Groups store writes so they are applied all together or not at all."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Open an atomic block. Nested blocks roll back independently."""
        ...
