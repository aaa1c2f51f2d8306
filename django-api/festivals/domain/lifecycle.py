"""Festival and performance lifecycle rules.

Pure functions over domain models: no persistence and no side effects.
Festivals move strictly forward through FESTIVAL_ORDER, one phase at a time.
Performances are gated by their own state here and by the parent festival's
phase in the coordinator.
"""

from festivals.domain.errors import StateGuardError
from festivals.domain.models import Festival, FestivalState, Performance, PerformanceState

FESTIVAL_ORDER: tuple[FestivalState, ...] = (
    FestivalState.CREATED,
    FestivalState.SUBMISSION,
    FestivalState.ASSIGNMENT,
    FestivalState.REVIEW,
    FestivalState.SCHEDULING,
    FestivalState.FINAL_SUBMISSION,
    FestivalState.DECISION,
    FestivalState.ANNOUNCED,
)

# Performance states from which each operation may start. The festival phase
# does most of the gating; these sets stop re-entry into an operation's own
# target state. Approval may overturn a rejection made during scheduling.
EDIT_LOCKED = frozenset(
    {PerformanceState.REVIEWED, PerformanceState.APPROVED, PerformanceState.SCHEDULED}
)
WITHDRAWABLE = frozenset({PerformanceState.CREATED})
SUBMITTABLE = frozenset({PerformanceState.CREATED, PerformanceState.SUBMITTED})
REVIEWABLE = frozenset(PerformanceState) - {PerformanceState.REVIEWED, PerformanceState.REJECTED}
APPROVABLE = frozenset(PerformanceState) - {PerformanceState.APPROVED}
REJECTABLE = frozenset(PerformanceState) - {PerformanceState.REJECTED}
FINAL_SUBMITTABLE = frozenset(PerformanceState) - {PerformanceState.SCHEDULED, PerformanceState.REJECTED}
ACCEPTABLE = frozenset(PerformanceState) - {PerformanceState.ACCEPTED, PerformanceState.REJECTED}

REQUIRED_PERFORMANCE_FIELDS = (
    "name",
    "description",
    "genre",
    "duration",
    "band_members",
    "artists",
)
OPTIONAL_PERFORMANCE_FIELDS = (
    "technical_requirements",
    "setlist",
    "merchandise_items",
    "preferred_rehearsal_times",
    "preferred_performance_slots",
)


def next_festival_state(state: FestivalState) -> FestivalState | None:
    """Return the phase that follows `state`, or None once announced."""
    position = FESTIVAL_ORDER.index(state)
    if position + 1 == len(FESTIVAL_ORDER):
        return None
    return FESTIVAL_ORDER[position + 1]


def require_festival_state(festival: Festival, required: FestivalState) -> None:
    """Raise StateGuardError unless the festival is exactly in `required`."""
    if festival.state is not required:
        raise StateGuardError("Festival", required.value, festival.state.value)


def require_performance_state(
    performance: Performance,
    allowed: frozenset[PerformanceState],
) -> None:
    """Raise StateGuardError unless the performance is in one of `allowed`."""
    if performance.state not in allowed:
        required = " or ".join(sorted(state.value for state in allowed))
        raise StateGuardError("Performance", required, performance.state.value)


def _is_empty(value) -> bool:
    if value is None:
        return True
    if hasattr(value, "is_complete"):
        return not value.is_complete
    if isinstance(value, (str, tuple, list)):
        return len(value) == 0
    return False


def missing_required_fields(performance: Performance) -> list[str]:
    return [name for name in REQUIRED_PERFORMANCE_FIELDS if _is_empty(getattr(performance, name))]


def missing_submission_fields(performance: Performance) -> list[str]:
    """Required and optional fields that must be filled before submission."""
    missing = missing_required_fields(performance)
    missing.extend(
        name for name in OPTIONAL_PERFORMANCE_FIELDS if _is_empty(getattr(performance, name))
    )
    return missing


def missing_announcement_fields(festival: Festival) -> list[str]:
    """Planning sections still incomplete before a festival can be announced."""
    missing = []
    if festival.venue_layout is None or not festival.venue_layout.is_complete:
        missing.append("venue_layout")
    if festival.budget is None or not festival.budget.is_complete:
        missing.append("budget")
    if festival.vendor_management is None or not festival.vendor_management.is_complete:
        missing.append("vendor_management")
    return missing
