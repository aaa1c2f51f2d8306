"""Pytest configuration and shared fixtures."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from festivals.domain import (
    Budget,
    Caller,
    FestivalState,
    MerchandiseItem,
    Money,
    Role,
    TechnicalRequirements,
    User,
    UserId,
    VendorManagement,
    VenueLayout,
)
from festivals.services.access_policy import AccessPolicy
from festivals.services.coordinator import LifecycleCoordinator
from festivals.services.festival_service import FestivalService
from festivals.services.identity_service import IdentityService
from festivals.services.performance_service import PerformanceService
from festivals.stores.memory_store import (
    InMemoryFestivalStore,
    InMemoryPerformanceStore,
    InMemoryUnitOfWork,
    InMemoryUserDirectory,
)

ADVANCE = {
    FestivalState.CREATED: "start_submission",
    FestivalState.SUBMISSION: "start_assignment",
    FestivalState.ASSIGNMENT: "start_review",
    FestivalState.REVIEW: "start_scheduling",
    FestivalState.SCHEDULING: "start_final_submission",
}


def caller_for(user: User) -> Caller:
    return Caller(user_id=user.id, roles=user.roles)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


# Stores and services


@pytest.fixture
def directory() -> InMemoryUserDirectory:
    return InMemoryUserDirectory()


@pytest.fixture
def festival_store() -> InMemoryFestivalStore:
    return InMemoryFestivalStore()


@pytest.fixture
def performance_store() -> InMemoryPerformanceStore:
    return InMemoryPerformanceStore()


@pytest.fixture
def unit_of_work(directory, festival_store, performance_store) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(directory, festival_store, performance_store)


@pytest.fixture
def access() -> AccessPolicy:
    return AccessPolicy()


@pytest.fixture
def identity(directory) -> IdentityService:
    return IdentityService(directory)


@pytest.fixture
def coordinator(festival_store, performance_store, unit_of_work) -> LifecycleCoordinator:
    return LifecycleCoordinator(festival_store, performance_store, unit_of_work)


@pytest.fixture
def festival_service(
    festival_store, performance_store, identity, access, coordinator, unit_of_work
) -> FestivalService:
    return FestivalService(
        festival_store, performance_store, identity, access, coordinator, unit_of_work
    )


@pytest.fixture
def performance_service(
    performance_store, identity, access, coordinator, unit_of_work
) -> PerformanceService:
    return PerformanceService(performance_store, identity, access, coordinator, unit_of_work)


# Users


@pytest.fixture
def make_user(directory):
    def _make_user(username: str, *roles: Role) -> User:
        return directory.add(
            User(
                id=UserId(value=uuid.uuid4()),
                username=username,
                full_name=username.title(),
                roles=frozenset(roles),
            )
        )

    return _make_user


@pytest.fixture
def organizer(make_user) -> User:
    return make_user("olivia", Role.ORGANIZER)


@pytest.fixture
def artist(make_user) -> User:
    return make_user("arlo", Role.ARTIST)


@pytest.fixture
def bandmate(make_user) -> User:
    return make_user("bea", Role.ARTIST)


@pytest.fixture
def staff(make_user) -> User:
    return make_user("sam", Role.STAFF)


@pytest.fixture
def visitor(make_user) -> User:
    return make_user("vic", Role.VISITOR)


# Planning data


@pytest.fixture
def planning() -> dict:
    return {
        "venue_layout": VenueLayout(stages=("Main",), vendor_areas=("North lawn",)),
        "budget": Budget(
            tracking=Decimal("1000"),
            costs=Decimal("50000"),
            logistics=Decimal("8000"),
            expected_revenue=Decimal("90000"),
        ),
        "vendor_management": VendorManagement(
            food_stalls=("Tacos",), merchandise_booths=("Shirts",)
        ),
    }


@pytest.fixture
def submission_details() -> dict:
    """Optional performance fields needed before submission."""
    return {
        "technical_requirements": TechnicalRequirements(
            equipment=("Drum kit",), stage_setup="Riser", sound_lighting="Warm wash"
        ),
        "setlist": ("Opener", "Closer"),
        "merchandise_items": (
            MerchandiseItem(
                name="Tour shirt",
                description="Black cotton",
                type="apparel",
                price=Money(amount=Decimal("25")),
            ),
        ),
        "preferred_rehearsal_times": ("2025-07-01T10:00",),
        "preferred_performance_slots": ("2025-07-02T20:00",),
    }


# Builders


@pytest.fixture
def create_festival(festival_service, organizer, planning):
    def _create_festival(name: str = "Summer Sound", **overrides):
        fields = {
            "name": name,
            "description": "Three days of live music",
            "dates": (date(2025, 7, 1), date(2025, 7, 3)),
            "venue": "Riverside Park",
            "organizers": (str(organizer.id),),
            **planning,
        }
        fields.update(overrides)
        return festival_service.create(caller_for(organizer), **fields)

    return _create_festival


@pytest.fixture
def advance(festival_service, organizer):
    """Move a festival forward through the plain phase transitions."""

    def _advance(festival, target: FestivalState):
        while festival.state is not target:
            transition = getattr(festival_service, ADVANCE[festival.state])
            festival = transition(caller_for(organizer), str(festival.id))
        return festival

    return _advance


@pytest.fixture
def create_performance(performance_service, artist, bandmate, submission_details):
    def _create_performance(festival, name: str = "The Lanterns", complete: bool = True, **overrides):
        fields = {
            "name": name,
            "description": "Indie folk quartet",
            "genre": "Folk",
            "duration": 45,
            "band_members": (str(bandmate.id),),
            "artists": (str(artist.id),),
        }
        if complete:
            fields.update(submission_details)
        fields.update(overrides)
        return performance_service.create(caller_for(artist), str(festival.id), **fields)

    return _create_performance


@pytest.fixture
def schedule_performance(
    festival_service,
    performance_service,
    advance,
    create_festival,
    create_performance,
    organizer,
    artist,
    staff,
):
    """Drive a festival to FINAL_SUBMISSION with the given performances SCHEDULED."""

    def _schedule(names=("The Lanterns",), festival=None):
        organizer_caller = caller_for(organizer)
        festival = festival or create_festival(staff=(str(staff.id),))
        festival = advance(festival, FestivalState.SUBMISSION)
        performances = [create_performance(festival, name=name) for name in names]
        for performance in performances:
            performance_service.submit(caller_for(artist), str(performance.id))
        festival = advance(festival, FestivalState.ASSIGNMENT)
        for performance in performances:
            performance_service.assign_stage_manager(
                organizer_caller, str(festival.id), str(performance.id), str(staff.id)
            )
        festival = advance(festival, FestivalState.REVIEW)
        for performance in performances:
            performance_service.review(
                caller_for(staff), str(performance.id), score=8, comments="Tight set"
            )
        festival = advance(festival, FestivalState.SCHEDULING)
        for performance in performances:
            performance_service.approve(organizer_caller, str(festival.id), str(performance.id))
        festival = advance(festival, FestivalState.FINAL_SUBMISSION)
        scheduled = [
            performance_service.submit_final(
                caller_for(artist),
                str(festival.id),
                str(performance.id),
                setlist=("Opener", "Encore"),
                time_slot="2025-07-02T20:00",
                rehearsal_time="2025-07-02T14:00",
            )
            for performance in performances
        ]
        return festival, scheduled

    return _schedule
