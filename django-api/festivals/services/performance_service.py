"""Performance service - performance lifecycle business logic lives here.

Every state-changing operation is gated twice: by the parent festival's
phase (checked first, through the coordinator) and by the performance's
own state.
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable
from uuid import uuid4

from festivals.domain import (
    Caller,
    Duration,
    FestivalState,
    MerchandiseItem,
    Performance,
    PerformanceChanges,
    PerformanceId,
    PerformanceState,
    Role,
    Score,
    TechnicalRequirements,
    User,
)
from festivals.domain.errors import (
    AlreadyBandMemberError,
    AuthorizationError,
    DuplicatePerformanceNameError,
    StageManagerAlreadyAssignedError,
    StateGuardError,
    ValidationError,
)
from festivals.domain.lifecycle import (
    ACCEPTABLE,
    APPROVABLE,
    EDIT_LOCKED,
    FINAL_SUBMITTABLE,
    REJECTABLE,
    REVIEWABLE,
    SUBMITTABLE,
    WITHDRAWABLE,
    missing_required_fields,
    missing_submission_fields,
    require_performance_state,
)
from festivals.services.access_policy import AccessPolicy
from festivals.services.coordinator import LifecycleCoordinator, log_transition
from festivals.services.identity_service import IdentityService
from festivals.stores.interfaces import PerformanceQuery, PerformanceStore, UnitOfWork

logger = logging.getLogger(__name__)

# Festival phases in which new performances are still taken.
OPEN_FOR_ENTRIES = (FestivalState.CREATED, FestivalState.SUBMISSION)
EDITABLE = frozenset(PerformanceState) - EDIT_LOCKED


def _duration(minutes: int | Duration) -> Duration:
    if isinstance(minutes, Duration):
        return minutes
    try:
        return Duration(minutes=int(minutes))
    except (TypeError, ValueError):
        raise ValidationError("Duration must be a positive number of minutes", fields=["duration"])


def _require_text(value: str | None, field_name: str, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(message, fields=[field_name])
    return value


class PerformanceService:
    """Service for performance lifecycle operations."""

    def __init__(
        self,
        performances: PerformanceStore,
        identity: IdentityService,
        access: AccessPolicy,
        coordinator: LifecycleCoordinator,
        unit_of_work: UnitOfWork,
    ) -> None:
        self._performances = performances
        self._identity = identity
        self._access = access
        self._coordinator = coordinator
        self._uow = unit_of_work

    # Reads

    def get(self, performance_id: str) -> Performance:
        """Return a performance by ID.

        Raises:
            InvalidIdentifierError: If the performance_id is not a valid UUID.
            PerformanceNotFoundError: If the performance does not exist.
        """
        return self._coordinator.load_performance(performance_id)

    def search_scheduled(self, query: PerformanceQuery | None = None) -> list[Performance]:
        """Return scheduled performances matching the visitor's filters."""
        return self._performances.search(
            replace(query or PerformanceQuery(), state=PerformanceState.SCHEDULED)
        )

    def list_for_artist(self, caller: Caller) -> list[Performance]:
        """Return performances listing the caller as artist or band member."""
        self._access.require_artist(caller, "view their performances")
        return self._performances.search(PerformanceQuery(member=caller.user_id))

    def list_managed(self, caller: Caller) -> list[Performance]:
        """Return performances the caller is stage manager of."""
        self._access.require_staff(caller, "view managed performances")
        return self._performances.search(PerformanceQuery(stage_manager=caller.user_id))

    # Artist operations

    def create(
        self,
        caller: Caller,
        festival_id: str,
        *,
        name: str,
        description: str,
        genre: str,
        duration: int | Duration,
        band_members: Iterable[str],
        artists: Iterable[str],
        technical_requirements: TechnicalRequirements | None = None,
        setlist: Iterable[str] = (),
        merchandise_items: Iterable[MerchandiseItem] = (),
        preferred_rehearsal_times: Iterable[str] = (),
        preferred_performance_slots: Iterable[str] = (),
    ) -> Performance:
        """Create a performance for a festival still taking entries.

        Raises:
            AuthorizationError: If the caller is not an artist.
            ValidationError: If a required field is empty.
            FestivalNotFoundError: If the festival does not exist.
            StateGuardError: If the festival no longer takes entries.
            DuplicatePerformanceNameError: If the name is taken in this festival.
            InvalidReferenceError: If band members or artists are invalid.
        """
        self._access.require_artist(caller, "create performances")
        band_members = tuple(band_members)
        artists = tuple(artists)
        missing = [
            field_name
            for field_name, value in (
                ("name", name),
                ("description", description),
                ("genre", genre),
                ("duration", duration),
                ("band_members", band_members),
                ("artists", artists),
            )
            if not value
        ]
        if missing:
            raise ValidationError(
                "Name, description, genre, duration, band members, and artists are required",
                fields=missing,
            )
        duration = _duration(duration)

        with self._uow.atomic():
            festival = self._coordinator.load_festival(festival_id)
            if festival.state not in OPEN_FOR_ENTRIES:
                raise StateGuardError(
                    "Festival",
                    " or ".join(state.value for state in OPEN_FOR_ENTRIES),
                    festival.state.value,
                )
            if self._performances.name_taken(festival.id, name):
                raise DuplicatePerformanceNameError(name)
            band_member_ids = self._identity.validate_references(
                band_members, Role.ARTIST, "band members"
            )
            artist_ids = self._identity.validate_references(artists, Role.ARTIST, "artists")
            performance = self._performances.save(
                Performance(
                    id=PerformanceId(value=uuid4()),
                    festival_id=festival.id,
                    created_by=caller.user_id,
                    name=name,
                    description=description,
                    genre=genre,
                    duration=duration,
                    band_members=band_member_ids,
                    artists=artist_ids,
                    technical_requirements=technical_requirements,
                    setlist=tuple(setlist),
                    merchandise_items=tuple(merchandise_items),
                    preferred_rehearsal_times=tuple(preferred_rehearsal_times),
                    preferred_performance_slots=tuple(preferred_performance_slots),
                    created_at=datetime.now(timezone.utc),
                )
            )
        logger.info(
            "Created performance %s (%s) for festival %s", performance.name, performance.id, festival.id
        )
        return performance

    def update(self, caller: Caller, performance_id: str, changes: PerformanceChanges) -> Performance:
        """Apply a partial update while the performance is not locked for review.

        Raises:
            StateGuardError: If the performance is REVIEWED, APPROVED or SCHEDULED.
            DuplicatePerformanceNameError: If renaming onto a name in use.
            InvalidReferenceError: If replacement band members or artists are invalid.
        """
        self._access.require_artist(caller, "update performances")
        blank = [
            field_name
            for field_name in ("name", "description", "genre", "band_members", "artists")
            if getattr(changes, field_name) is not None and not getattr(changes, field_name)
        ]
        if blank:
            raise ValidationError("Updated fields cannot be empty", fields=blank)

        with self._uow.atomic():
            performance = self._coordinator.load_performance(performance_id)
            self._require_involved(caller, performance, "update")
            require_performance_state(performance, EDITABLE)
            if changes.name is not None and self._performances.name_taken(
                performance.festival_id, changes.name, exclude=performance.id
            ):
                raise DuplicatePerformanceNameError(changes.name)

            updates = {
                field_name: getattr(changes, field_name)
                for field_name in (
                    "name",
                    "description",
                    "genre",
                    "duration",
                    "technical_requirements",
                    "setlist",
                    "merchandise_items",
                    "preferred_rehearsal_times",
                    "preferred_performance_slots",
                )
                if getattr(changes, field_name) is not None
            }
            if changes.band_members is not None:
                updates["band_members"] = self._identity.validate_references(
                    changes.band_members, Role.ARTIST, "band members"
                )
            if changes.artists is not None:
                updates["artists"] = self._identity.validate_references(
                    changes.artists, Role.ARTIST, "artists"
                )
            updated = self._performances.save(replace(performance, **updates))
        logger.info("Updated performance %s fields %s", updated.id, sorted(updates))
        return updated

    def add_band_member(
        self,
        caller: Caller,
        festival_id: str,
        performance_id: str,
        user_id: str,
    ) -> tuple[Performance, User]:
        """Add a user to the band, granting them the ARTIST role if missing.

        Raises:
            UserNotFoundError: If the user does not exist.
            AlreadyBandMemberError: If the user is already in the band.
        """
        self._access.require_artist(caller, "add band members")
        _require_text(user_id, "user_id", "User ID must be provided")
        with self._uow.atomic():
            _, performance = self._coordinator.performance_in_phase(festival_id, performance_id)
            self._require_involved(caller, performance, "add band members to")
            user = self._identity.get_user(user_id)
            if user.id in performance.band_members:
                raise AlreadyBandMemberError(str(user.id))
            updated = self._performances.save(
                replace(performance, band_members=performance.band_members + (user.id,))
            )
            user = self._identity.grant_role(user, Role.ARTIST)
        logger.info("Added band member %s to performance %s", user.id, updated.id)
        return updated, user

    def submit(self, caller: Caller, performance_id: str) -> Performance:
        """Submit a complete performance while the festival takes submissions.

        Raises:
            StateGuardError: If the festival is not in SUBMISSION.
            ValidationError: Listing every required or optional field still empty.
        """
        self._access.require_artist(caller, "submit performances")
        with self._uow.atomic():
            performance = self._coordinator.load_performance(performance_id)
            self._coordinator.parent_in_phase(performance, FestivalState.SUBMISSION)
            self._require_involved(caller, performance, "submit")
            require_performance_state(performance, SUBMITTABLE)
            missing_required = missing_required_fields(performance)
            missing = missing_submission_fields(performance)
            if missing:
                message = (
                    "Performance submission failed. The following required fields are missing"
                    if missing_required
                    else "Performance submission failed. The following optional fields "
                    "must be completed before submission"
                )
                raise ValidationError(message, fields=missing)
            return self._transition(caller, performance, PerformanceState.SUBMITTED)

    def withdraw(self, caller: Caller, performance_id: str) -> None:
        """Delete a performance that has not been submitted yet."""
        self._access.require_artist(caller, "withdraw performances")
        with self._uow.atomic():
            performance = self._coordinator.load_performance(performance_id)
            self._require_involved(caller, performance, "withdraw")
            require_performance_state(performance, WITHDRAWABLE)
            self._performances.delete(performance.id)
        logger.info("Withdrew performance %s by %s", performance.id, caller.user_id)

    def submit_final(
        self,
        caller: Caller,
        festival_id: str,
        performance_id: str,
        *,
        setlist: Iterable[str],
        time_slot: str,
        rehearsal_time: str,
    ) -> Performance:
        """Record the final setlist and slots, scheduling the performance."""
        self._access.require_artist(caller, "submit final performance details")
        setlist = tuple(setlist)
        if not setlist or not time_slot or not rehearsal_time:
            missing = [
                field_name
                for field_name, value in (
                    ("setlist", setlist),
                    ("time_slot", time_slot),
                    ("rehearsal_time", rehearsal_time),
                )
                if not value
            ]
            raise ValidationError("Setlist, time slot, and rehearsal time are required", fields=missing)
        with self._uow.atomic():
            _, performance = self._coordinator.performance_in_phase(
                festival_id, performance_id, FestivalState.FINAL_SUBMISSION
            )
            self._require_involved(caller, performance, "submit final details for")
            require_performance_state(performance, FINAL_SUBMITTABLE)
            return self._transition(
                caller,
                performance,
                PerformanceState.SCHEDULED,
                setlist=setlist,
                time_slot=time_slot,
                rehearsal_time=rehearsal_time,
            )

    # Organizer and staff operations

    def assign_stage_manager(
        self,
        caller: Caller,
        festival_id: str,
        performance_id: str,
        staff_id: str,
    ) -> Performance:
        """Bind a staff member as the performance's only stage manager.

        Raises:
            StateGuardError: If the festival is not in ASSIGNMENT.
            InvalidReferenceError: If the user does not hold the STAFF role.
            StageManagerAlreadyAssignedError: If one is already assigned.
        """
        self._access.require_organizer(caller, "assign stage managers")
        _require_text(staff_id, "staff_id", "Staff ID is required to assign as stage manager")
        with self._uow.atomic():
            _, performance = self._coordinator.performance_in_phase(
                festival_id, performance_id, FestivalState.ASSIGNMENT
            )
            (stage_manager,) = self._identity.validate_references(
                [staff_id], Role.STAFF, "stage managers"
            )
            if performance.stage_manager is not None:
                raise StageManagerAlreadyAssignedError(str(performance.id))
            updated = self._performances.save(replace(performance, stage_manager=stage_manager))
        logger.info("Assigned stage manager %s to performance %s", stage_manager, updated.id)
        return updated

    def review(self, caller: Caller, performance_id: str, *, score: int, comments: str) -> Performance:
        """Record the assigned stage manager's review.

        Raises:
            ValidationError: If the score is outside 1..10 or comments are empty.
            StateGuardError: If the festival is not in REVIEW or the
                performance was already reviewed or rejected.
            AuthorizationError: If the caller is not the assigned stage manager.
        """
        self._access.require_staff(caller, "review performances")
        try:
            parsed_score = Score(value=int(score))
        except (TypeError, ValueError):
            raise ValidationError("Score must be a number between 1 and 10", fields=["score"])
        _require_text(comments, "comments", "Comments are required")

        with self._uow.atomic():
            performance = self._coordinator.load_performance(performance_id)
            self._coordinator.parent_in_phase(performance, FestivalState.REVIEW)
            if performance.stage_manager != caller.user_id:
                raise AuthorizationError(
                    "Only the assigned stage manager can review this performance"
                )
            require_performance_state(performance, REVIEWABLE)
            return self._transition(
                caller,
                performance,
                PerformanceState.REVIEWED,
                score=parsed_score,
                reviewer_comments=comments,
            )

    def approve(self, caller: Caller, festival_id: str, performance_id: str) -> Performance:
        self._access.require_organizer(caller, "approve performances")
        with self._uow.atomic():
            _, performance = self._coordinator.performance_in_phase(
                festival_id, performance_id, FestivalState.SCHEDULING
            )
            require_performance_state(performance, APPROVABLE)
            return self._transition(caller, performance, PerformanceState.APPROVED)

    def reject(self, caller: Caller, festival_id: str, performance_id: str, reason: str) -> Performance:
        """Reject a performance while the festival is being scheduled."""
        return self._reject(
            caller, festival_id, performance_id, reason, FestivalState.SCHEDULING, REJECTABLE
        )

    def manual_reject(
        self,
        caller: Caller,
        festival_id: str,
        performance_id: str,
        reason: str,
    ) -> Performance:
        """Reject a performance at decision time, including accepted ones."""
        return self._reject(
            caller, festival_id, performance_id, reason, FestivalState.DECISION, REJECTABLE
        )

    def accept(self, caller: Caller, festival_id: str, performance_id: str) -> Performance:
        """Accept a single performance during the decision phase.

        The festival's performance list is derived from the festival reference,
        so the accepted performance shows up there without a second write.
        """
        self._access.require_organizer(caller, "accept performances")
        with self._uow.atomic():
            _, performance = self._coordinator.performance_in_phase(
                festival_id, performance_id, FestivalState.DECISION
            )
            require_performance_state(performance, ACCEPTABLE)
            return self._transition(caller, performance, PerformanceState.ACCEPTED)

    def _reject(
        self,
        caller: Caller,
        festival_id: str,
        performance_id: str,
        reason: str,
        phase: FestivalState,
        allowed: frozenset[PerformanceState],
    ) -> Performance:
        self._access.require_organizer(caller, "reject performances")
        _require_text(reason, "rejection_reason", "Rejection reason is required")
        with self._uow.atomic():
            _, performance = self._coordinator.performance_in_phase(festival_id, performance_id, phase)
            require_performance_state(performance, allowed)
            return self._transition(
                caller, performance, PerformanceState.REJECTED, rejection_reason=reason
            )

    def _transition(
        self,
        caller: Caller,
        performance: Performance,
        target: PerformanceState,
        **fields,
    ) -> Performance:
        updated = self._performances.save(replace(performance, state=target, **fields))
        log_transition("Performance", updated.id, performance.state, target, caller)
        return updated

    def _require_involved(self, caller: Caller, performance: Performance, action: str) -> None:
        if not performance.involves(caller.user_id):
            raise AuthorizationError(f"Only the performance's own artists may {action} it")
