"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in festivals/models.py (persistence layer).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from festivals.domain.value_objects import (
    Budget,
    Duration,
    FestivalId,
    MerchandiseItem,
    PerformanceId,
    Role,
    Score,
    TechnicalRequirements,
    UserId,
    VendorManagement,
    VenueLayout,
)


class FestivalState(Enum):
    """Administrative phases of a festival, in order."""

    CREATED = "CREATED"
    SUBMISSION = "SUBMISSION"
    ASSIGNMENT = "ASSIGNMENT"
    REVIEW = "REVIEW"
    SCHEDULING = "SCHEDULING"
    FINAL_SUBMISSION = "FINAL_SUBMISSION"
    DECISION = "DECISION"
    ANNOUNCED = "ANNOUNCED"


class PerformanceState(Enum):
    """States of a performance submission."""

    CREATED = "CREATED"
    SUBMITTED = "SUBMITTED"
    REVIEWED = "REVIEWED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    SCHEDULED = "SCHEDULED"
    ACCEPTED = "ACCEPTED"


@dataclass(frozen=True)
class User:
    """Domain representation of a directory user."""

    id: UserId
    username: str
    full_name: str
    roles: frozenset[Role]


@dataclass(frozen=True)
class Caller:
    """Authenticated identity attached to a request."""

    user_id: UserId
    roles: frozenset[Role]

    # DRF permission classes read this off request.user
    is_authenticated = True

    def has_any(self, roles: frozenset[Role]) -> bool:
        return bool(self.roles & roles)


@dataclass(frozen=True)
class Festival:
    """Domain representation of a Festival."""

    id: FestivalId
    name: str
    description: str
    dates: tuple[date, ...]
    venue: str
    organizers: tuple[UserId, ...]
    created_at: datetime
    staff: tuple[UserId, ...] = ()
    venue_layout: VenueLayout | None = None
    budget: Budget | None = None
    vendor_management: VendorManagement | None = None
    state: FestivalState = FestivalState.CREATED

    @property
    def start_date(self) -> date | None:
        return min(self.dates) if self.dates else None


@dataclass(frozen=True)
class Performance:
    """Domain representation of a Performance."""

    id: PerformanceId
    festival_id: FestivalId
    created_by: UserId
    name: str
    description: str
    genre: str
    duration: Duration
    band_members: tuple[UserId, ...]
    artists: tuple[UserId, ...]
    created_at: datetime
    technical_requirements: TechnicalRequirements | None = None
    setlist: tuple[str, ...] = ()
    merchandise_items: tuple[MerchandiseItem, ...] = ()
    preferred_rehearsal_times: tuple[str, ...] = ()
    preferred_performance_slots: tuple[str, ...] = ()
    stage_manager: UserId | None = None
    reviewer_comments: str | None = None
    score: Score | None = None
    rejection_reason: str | None = None
    time_slot: str | None = None
    rehearsal_time: str | None = None
    state: PerformanceState = PerformanceState.CREATED

    def involves(self, user_id: UserId) -> bool:
        """Whether the user created this performance or plays in it."""
        return (
            user_id == self.created_by
            or user_id in self.artists
            or user_id in self.band_members
        )


@dataclass(frozen=True)
class FestivalChanges:
    """Partial update of a festival. None leaves a field unchanged."""

    name: str | None = None
    description: str | None = None
    dates: tuple[date, ...] | None = None
    venue: str | None = None
    venue_layout: VenueLayout | None = None
    budget: Budget | None = None
    vendor_management: VendorManagement | None = None
    organizers: tuple[str, ...] | None = None
    staff: tuple[str, ...] | None = None


@dataclass(frozen=True)
class PerformanceChanges:
    """Partial update of a performance. None leaves a field unchanged."""

    name: str | None = None
    description: str | None = None
    genre: str | None = None
    duration: Duration | None = None
    band_members: tuple[str, ...] | None = None
    artists: tuple[str, ...] | None = None
    technical_requirements: TechnicalRequirements | None = None
    setlist: tuple[str, ...] | None = None
    merchandise_items: tuple[MerchandiseItem, ...] | None = None
    preferred_rehearsal_times: tuple[str, ...] | None = None
    preferred_performance_slots: tuple[str, ...] | None = None


@dataclass(frozen=True)
class DecisionOutcome:
    """Result of closing a festival's decision phase."""

    festival: Festival
    accepted: tuple[Performance, ...] = ()


@dataclass(frozen=True)
class FestivalOverview:
    """A festival together with the performances submitted to it."""

    festival: Festival
    performances: tuple[Performance, ...] = field(default_factory=tuple)
