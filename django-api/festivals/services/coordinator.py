"""Cross-entity coordination between festivals and their performances.

Services:
- Resolve a performance together with its parent festival
- Check the festival phase before any performance-level guard runs
- Apply decision-making to a festival and all its scheduled performances
  as one atomic unit
"""

import logging
from dataclasses import replace

from festivals.domain import (
    Caller,
    DecisionOutcome,
    Festival,
    FestivalId,
    FestivalState,
    Performance,
    PerformanceId,
    PerformanceState,
)
from festivals.domain.errors import (
    BulkTransitionError,
    FestivalNotFoundError,
    InvalidIdentifierError,
    NoScheduledPerformancesError,
    PerformanceNotFoundError,
)
from festivals.domain.lifecycle import require_festival_state
from festivals.stores.interfaces import (
    FestivalStore,
    PerformanceQuery,
    PerformanceStore,
    StoreError,
    UnitOfWork,
)

logger = logging.getLogger(__name__)


def log_transition(entity: str, entity_id, old, new, caller: Caller) -> None:
    logger.info(
        "%s state transition: id=%s, from=%s, to=%s, actor=%s",
        entity,
        entity_id,
        old.value,
        new.value,
        caller.user_id,
    )


def parse_festival_id(festival_id: str | FestivalId) -> FestivalId:
    if isinstance(festival_id, FestivalId):
        return festival_id
    try:
        return FestivalId.from_string(festival_id)
    except ValueError:
        raise InvalidIdentifierError("festival")


def parse_performance_id(performance_id: str | PerformanceId) -> PerformanceId:
    if isinstance(performance_id, PerformanceId):
        return performance_id
    try:
        return PerformanceId.from_string(performance_id)
    except ValueError:
        raise InvalidIdentifierError("performance")


class LifecycleCoordinator:
    """Keeps festival and performance phases aligned."""

    def __init__(
        self,
        festivals: FestivalStore,
        performances: PerformanceStore,
        unit_of_work: UnitOfWork,
    ) -> None:
        self._festivals = festivals
        self._performances = performances
        self._uow = unit_of_work

    def load_festival(self, festival_id: str | FestivalId) -> Festival:
        """Return a festival by ID.

        Raises:
            InvalidIdentifierError: If the festival_id is not a valid UUID.
            FestivalNotFoundError: If the festival does not exist.
        """
        parsed = parse_festival_id(festival_id)
        festival = self._festivals.get(parsed)
        if festival is None:
            raise FestivalNotFoundError(str(festival_id))
        return festival

    def load_performance(self, performance_id: str | PerformanceId) -> Performance:
        """Return a performance by ID.

        Raises:
            InvalidIdentifierError: If the performance_id is not a valid UUID.
            PerformanceNotFoundError: If the performance does not exist.
        """
        parsed = parse_performance_id(performance_id)
        performance = self._performances.get(parsed)
        if performance is None:
            raise PerformanceNotFoundError(str(performance_id))
        return performance

    def festival_in_phase(
        self,
        festival_id: str | FestivalId,
        required: FestivalState,
    ) -> Festival:
        festival = self.load_festival(festival_id)
        require_festival_state(festival, required)
        return festival

    def performance_in_phase(
        self,
        festival_id: str | FestivalId,
        performance_id: str | PerformanceId,
        required: FestivalState | None = None,
    ) -> tuple[Festival, Performance]:
        """Load a festival and one of its performances.

        The festival phase is checked before the performance is looked at.
        A performance belonging to another festival is reported as not found.
        """
        festival = self.load_festival(festival_id)
        if required is not None:
            require_festival_state(festival, required)
        performance = self.load_performance(performance_id)
        if performance.festival_id != festival.id:
            raise PerformanceNotFoundError(str(performance_id))
        return festival, performance

    def parent_in_phase(
        self,
        performance: Performance,
        required: FestivalState | None = None,
    ) -> Festival:
        """Load the festival a performance belongs to and check its phase."""
        festival = self._festivals.get(performance.festival_id)
        if festival is None:
            raise FestivalNotFoundError(str(performance.festival_id))
        if required is not None:
            require_festival_state(festival, required)
        return festival

    def performances_of(
        self,
        festival_id: FestivalId,
        state: PerformanceState | None = None,
    ) -> list[Performance]:
        return self._performances.search(PerformanceQuery(festival_id=festival_id, state=state))

    def make_decisions(self, festival_id: str | FestivalId, caller: Caller) -> DecisionOutcome:
        """Move the festival to DECISION and accept every scheduled performance.

        Performances are updated first, each in its own savepoint, and the
        festival only afterwards; any failure rolls the whole operation back.

        Raises:
            StateGuardError: If the festival is not in FINAL_SUBMISSION.
            NoScheduledPerformancesError: If no performance is SCHEDULED.
            BulkTransitionError: If any performance could not be updated.
        """
        with self._uow.atomic():
            festival = self.festival_in_phase(festival_id, FestivalState.FINAL_SUBMISSION)
            scheduled = self.performances_of(festival.id, PerformanceState.SCHEDULED)
            if not scheduled:
                raise NoScheduledPerformancesError(str(festival.id))

            accepted: list[Performance] = []
            failed: list[str] = []
            for performance in scheduled:
                try:
                    with self._uow.atomic():
                        accepted.append(
                            self._performances.save(
                                replace(performance, state=PerformanceState.ACCEPTED)
                            )
                        )
                except StoreError:
                    logger.exception(
                        "Failed to accept performance %s during decision-making", performance.id
                    )
                    failed.append(str(performance.id))

            if failed:
                raise BulkTransitionError(
                    succeeded=[str(performance.id) for performance in accepted],
                    failed=failed,
                )
            decided = self._festivals.save(replace(festival, state=FestivalState.DECISION))

        for performance in accepted:
            log_transition(
                "Performance",
                performance.id,
                PerformanceState.SCHEDULED,
                PerformanceState.ACCEPTED,
                caller,
            )
        log_transition("Festival", decided.id, festival.state, decided.state, caller)
        return DecisionOutcome(festival=decided, accepted=tuple(accepted))
