from festivals.domain.models import (
    Caller,
    DecisionOutcome,
    Festival,
    FestivalChanges,
    FestivalOverview,
    FestivalState,
    Performance,
    PerformanceChanges,
    PerformanceState,
    User,
)
from festivals.domain.value_objects import (
    Budget,
    Duration,
    FestivalId,
    MerchandiseItem,
    Money,
    PerformanceId,
    Role,
    Score,
    TechnicalRequirements,
    UserId,
    VendorManagement,
    VenueLayout,
)

__all__ = [
    "Caller",
    "DecisionOutcome",
    "Festival",
    "FestivalChanges",
    "FestivalOverview",
    "FestivalState",
    "Performance",
    "PerformanceChanges",
    "PerformanceState",
    "User",
    "Budget",
    "Duration",
    "FestivalId",
    "MerchandiseItem",
    "Money",
    "PerformanceId",
    "Role",
    "Score",
    "TechnicalRequirements",
    "UserId",
    "VendorManagement",
    "VenueLayout",
]
