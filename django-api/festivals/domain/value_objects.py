"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class FestivalId:
    """Unique identifier for a Festival."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class PerformanceId:
    """Unique identifier for a Performance."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UserId:
    """Unique identifier for a User held by the identity directory."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


class Role(Enum):
    """Closed set of role tags a user may hold."""

    ARTIST = "ARTIST"
    ORGANIZER = "ORGANIZER"
    VISITOR = "VISITOR"
    STAFF = "STAFF"

    @classmethod
    def parse_all(cls, values) -> frozenset["Role"]:
        """Parse raw role tags, raising ValueError on any unknown tag."""
        return frozenset(cls(value) for value in values)


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Duration:
    """Positive length of a performance in minutes."""

    minutes: int

    def __post_init__(self) -> None:
        if self.minutes <= 0:
            raise ValueError("Duration must be a positive number of minutes")


@dataclass(frozen=True)
class Score:
    """Review score between 1 and 10 inclusive."""

    value: int

    def __post_init__(self) -> None:
        if not 1 <= self.value <= 10:
            raise ValueError("Score must be between 1 and 10")


@dataclass(frozen=True)
class VenueLayout:
    """Stages and vendor areas of a festival venue."""

    stages: tuple[str, ...] = ()
    vendor_areas: tuple[str, ...] = ()

    @property
    def is_complete(self) -> bool:
        return bool(self.stages) and bool(self.vendor_areas)


@dataclass(frozen=True)
class Budget:
    """Festival budget; every figure must be positive before announcement."""

    tracking: Decimal = Decimal("0")
    costs: Decimal = Decimal("0")
    logistics: Decimal = Decimal("0")
    expected_revenue: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        for name in ("tracking", "costs", "logistics", "expected_revenue"):
            if getattr(self, name) < 0:
                raise ValueError(f"Budget {name} cannot be negative")

    @property
    def is_complete(self) -> bool:
        return all(
            amount > 0
            for amount in (self.tracking, self.costs, self.logistics, self.expected_revenue)
        )


@dataclass(frozen=True)
class VendorManagement:
    """Food stalls and merchandise booths booked for a festival."""

    food_stalls: tuple[str, ...] = ()
    merchandise_booths: tuple[str, ...] = ()

    @property
    def is_complete(self) -> bool:
        return bool(self.food_stalls) and bool(self.merchandise_booths)


@dataclass(frozen=True)
class TechnicalRequirements:
    """Equipment and stage needs declared by a performance."""

    equipment: tuple[str, ...] = ()
    stage_setup: str = ""
    sound_lighting: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.equipment) and bool(self.stage_setup) and bool(self.sound_lighting)


@dataclass(frozen=True)
class MerchandiseItem:
    """A merchandise item an act intends to sell."""

    name: str
    description: str
    type: str
    price: Money
