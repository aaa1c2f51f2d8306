"""Festival service - festival lifecycle business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or raise domain errors
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Iterable
from uuid import uuid4

from festivals.domain import (
    Budget,
    Caller,
    DecisionOutcome,
    Festival,
    FestivalChanges,
    FestivalId,
    FestivalOverview,
    FestivalState,
    Role,
    VendorManagement,
    VenueLayout,
)
from festivals.domain.errors import (
    DuplicateFestivalNameError,
    StateGuardError,
    ValidationError,
)
from festivals.domain.lifecycle import (
    missing_announcement_fields,
    next_festival_state,
    require_festival_state,
)
from festivals.services.access_policy import AccessPolicy
from festivals.services.coordinator import LifecycleCoordinator, log_transition
from festivals.services.identity_service import IdentityService
from festivals.stores.interfaces import FestivalQuery, FestivalStore, PerformanceStore, UnitOfWork

logger = logging.getLogger(__name__)


class FestivalService:
    """Service for festival lifecycle operations.

    Every write requires the organizer guard of the access policy and runs as
    one atomic read-modify-write through the unit of work.
    """

    def __init__(
        self,
        festivals: FestivalStore,
        performances: PerformanceStore,
        identity: IdentityService,
        access: AccessPolicy,
        coordinator: LifecycleCoordinator,
        unit_of_work: UnitOfWork,
    ) -> None:
        self._festivals = festivals
        self._performances = performances
        self._identity = identity
        self._access = access
        self._coordinator = coordinator
        self._uow = unit_of_work

    # Reads

    def get(self, festival_id: str) -> Festival:
        """Return a festival by ID.

        Raises:
            InvalidIdentifierError: If the festival_id is not a valid UUID.
            FestivalNotFoundError: If the festival does not exist.
        """
        return self._coordinator.load_festival(festival_id)

    def search_announced(self, query: FestivalQuery | None = None) -> list[Festival]:
        """Return announced festivals matching the visitor's filters."""
        return self._festivals.search(replace(query or FestivalQuery(), state=FestivalState.ANNOUNCED))

    def list_responsible(self, caller: Caller) -> list[FestivalOverview]:
        """Return festivals the caller organizes, each with its performances."""
        self._access.require_organizer(caller, "view their festivals")
        return [
            FestivalOverview(
                festival=festival,
                performances=tuple(self._coordinator.performances_of(festival.id)),
            )
            for festival in self._festivals.search(FestivalQuery(organizer=caller.user_id))
        ]

    # Writes

    def create(
        self,
        caller: Caller,
        *,
        name: str,
        description: str,
        dates: Iterable[date],
        venue: str,
        organizers: Iterable[str],
        staff: Iterable[str] = (),
        venue_layout: VenueLayout | None = None,
        budget: Budget | None = None,
        vendor_management: VendorManagement | None = None,
    ) -> Festival:
        """Create a festival in CREATED state.

        Raises:
            AuthorizationError: If the caller is not an organizer.
            ValidationError: If an obligatory field is empty.
            DuplicateFestivalNameError: If the name is already used.
            InvalidReferenceError: If any organizer or staff reference is invalid.
        """
        self._access.require_organizer(caller, "create festivals")
        dates = tuple(dates)
        organizers = tuple(organizers)
        missing = [
            field_name
            for field_name, value in (
                ("name", name),
                ("description", description),
                ("dates", dates),
                ("venue", venue),
                ("organizers", organizers),
            )
            if not value
        ]
        if missing:
            raise ValidationError(
                "All obligatory fields must be provided: name, description, dates, "
                "venue, and at least one organizer",
                fields=missing,
            )

        with self._uow.atomic():
            if self._festivals.name_taken(name):
                raise DuplicateFestivalNameError(name)
            organizer_ids = self._identity.validate_references(organizers, Role.ORGANIZER, "organizers")
            staff_ids = self._identity.validate_references(staff, Role.STAFF, "staff")
            festival = self._festivals.save(
                Festival(
                    id=FestivalId(value=uuid4()),
                    name=name,
                    description=description,
                    dates=dates,
                    venue=venue,
                    organizers=organizer_ids,
                    staff=staff_ids,
                    venue_layout=venue_layout,
                    budget=budget,
                    vendor_management=vendor_management,
                    created_at=datetime.now(timezone.utc),
                )
            )
        logger.info("Created festival %s (%s) by %s", festival.name, festival.id, caller.user_id)
        return festival

    def update(self, caller: Caller, festival_id: str, changes: FestivalChanges) -> Festival:
        """Apply a partial update to a festival that is not yet announced.

        While the festival is in ASSIGNMENT, the venue layout, budget and vendor
        management must already be complete before any further update is taken.

        Raises:
            StateGuardError: If the festival is ANNOUNCED.
            ValidationError: If the ASSIGNMENT completeness rule fails or a
                replacement value is empty.
            DuplicateFestivalNameError: If renaming onto an existing name.
            InvalidReferenceError: If replacement organizers or staff are invalid.
        """
        self._access.require_organizer(caller, "update festivals")
        blank = [
            field_name
            for field_name in ("name", "description", "venue", "dates", "organizers")
            if getattr(changes, field_name) is not None and not getattr(changes, field_name)
        ]
        if blank:
            raise ValidationError("Updated fields cannot be empty", fields=blank)

        with self._uow.atomic():
            festival = self._coordinator.load_festival(festival_id)
            if festival.state is FestivalState.ANNOUNCED:
                raise StateGuardError(
                    "Festival", "a state before ANNOUNCED", festival.state.value
                )
            if festival.state is FestivalState.ASSIGNMENT:
                missing = missing_announcement_fields(festival)
                if missing:
                    raise ValidationError(
                        "Venue layout, budget, and vendor management must be completed "
                        "before the festival reaches the ANNOUNCED state",
                        fields=missing,
                    )
            if changes.name is not None and self._festivals.name_taken(changes.name, exclude=festival.id):
                raise DuplicateFestivalNameError(changes.name)

            updates = {
                field_name: getattr(changes, field_name)
                for field_name in (
                    "name",
                    "description",
                    "dates",
                    "venue",
                    "venue_layout",
                    "budget",
                    "vendor_management",
                )
                if getattr(changes, field_name) is not None
            }
            if changes.organizers is not None:
                updates["organizers"] = self._identity.validate_references(
                    changes.organizers, Role.ORGANIZER, "organizers"
                )
            if changes.staff is not None:
                updates["staff"] = self._identity.validate_references(
                    changes.staff, Role.STAFF, "staff"
                )
            updated = self._festivals.save(replace(festival, **updates))
        logger.info("Updated festival %s fields %s", updated.id, sorted(updates))
        return updated

    def delete(self, caller: Caller, festival_id: str) -> None:
        """Delete a festival still in CREATED state, with its draft performances."""
        self._access.require_organizer(caller, "delete festivals")
        with self._uow.atomic():
            festival = self._coordinator.festival_in_phase(festival_id, FestivalState.CREATED)
            for performance in self._coordinator.performances_of(festival.id):
                self._performances.delete(performance.id)
            self._festivals.delete(festival.id)
        logger.info("Deleted festival %s by %s", festival.id, caller.user_id)

    def add_organizers(self, caller: Caller, festival_id: str, organizers: Iterable[str]) -> Festival:
        """Add organizers to the roster; already-present ones are skipped."""
        self._access.require_organizer(caller, "add organizers")
        return self._extend_roster(festival_id, tuple(organizers), Role.ORGANIZER, "organizers")

    def add_staff(self, caller: Caller, festival_id: str, staff: Iterable[str]) -> Festival:
        """Add staff members to the roster; already-present ones are skipped."""
        self._access.require_organizer(caller, "add staff")
        return self._extend_roster(festival_id, tuple(staff), Role.STAFF, "staff")

    def _extend_roster(
        self,
        festival_id: str,
        references: tuple[str, ...],
        role: Role,
        roster: str,
    ) -> Festival:
        if not references:
            raise ValidationError(
                f"Please provide at least one user ID to add as {roster}", fields=[roster]
            )
        with self._uow.atomic():
            festival = self._coordinator.load_festival(festival_id)
            current: tuple = getattr(festival, roster)
            present = {str(user_id) for user_id in current}
            new_ids = self._identity.validate_references(
                [reference for reference in references if str(reference) not in present],
                role,
                roster,
            )
            additions = tuple(user_id for user_id in new_ids if user_id not in current)
            if not additions:
                return festival
            updated = self._festivals.save(replace(festival, **{roster: current + additions}))
        logger.info("Added %d %s to festival %s", len(additions), roster, updated.id)
        return updated

    # Phase transitions

    def start_submission(self, caller: Caller, festival_id: str) -> Festival:
        return self._advance(caller, festival_id, FestivalState.CREATED, "start submissions")

    def start_assignment(self, caller: Caller, festival_id: str) -> Festival:
        return self._advance(caller, festival_id, FestivalState.SUBMISSION, "start stage manager assignment")

    def start_review(self, caller: Caller, festival_id: str) -> Festival:
        return self._advance(caller, festival_id, FestivalState.ASSIGNMENT, "start the review")

    def start_scheduling(self, caller: Caller, festival_id: str) -> Festival:
        return self._advance(caller, festival_id, FestivalState.REVIEW, "start scheduling")

    def start_final_submission(self, caller: Caller, festival_id: str) -> Festival:
        return self._advance(caller, festival_id, FestivalState.SCHEDULING, "start final submission")

    def make_decisions(self, caller: Caller, festival_id: str) -> DecisionOutcome:
        """Enter DECISION, accepting every SCHEDULED performance of the festival."""
        self._access.require_organizer(caller, "make decisions")
        return self._coordinator.make_decisions(festival_id, caller)

    def announce(self, caller: Caller, festival_id: str) -> Festival:
        """Announce a festival whose planning sections are all complete.

        Raises:
            StateGuardError: If the festival is not in DECISION.
            ValidationError: Listing each incomplete section.
        """
        self._access.require_organizer(caller, "announce festivals")
        with self._uow.atomic():
            festival = self._coordinator.festival_in_phase(festival_id, FestivalState.DECISION)
            missing = missing_announcement_fields(festival)
            if missing:
                raise ValidationError(
                    "Announcement cannot proceed. The following fields are missing or incomplete",
                    fields=missing,
                )
            announced = self._festivals.save(replace(festival, state=FestivalState.ANNOUNCED))
        log_transition("Festival", announced.id, festival.state, announced.state, caller)
        return announced

    def _advance(
        self,
        caller: Caller,
        festival_id: str,
        required: FestivalState,
        action: str,
    ) -> Festival:
        self._access.require_organizer(caller, action)
        with self._uow.atomic():
            festival = self._coordinator.load_festival(festival_id)
            require_festival_state(festival, required)
            advanced = self._festivals.save(replace(festival, state=next_festival_state(required)))
        log_transition("Festival", advanced.id, festival.state, advanced.state, caller)
        return advanced
