"""Django ORM implementation of the stores.

Rows read inside an atomic block are locked with SELECT ... FOR UPDATE so
each lifecycle operation is a single read-modify-write on the database.
"""

from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal

from django.db import DatabaseError, models, transaction

from festivals import models as orm
from festivals.domain import (
    Budget,
    Duration,
    Festival,
    FestivalId,
    FestivalState,
    MerchandiseItem,
    Money,
    Performance,
    PerformanceId,
    PerformanceState,
    Role,
    Score,
    TechnicalRequirements,
    User,
    UserId,
    VendorManagement,
    VenueLayout,
)
from festivals.stores.interfaces import (
    FestivalQuery,
    FestivalStore,
    PerformanceQuery,
    PerformanceStore,
    StoreError,
    UnitOfWork,
    UserDirectory,
)
from festivals.stores.memory_store import performance_matches, words_pattern


def _locked(queryset: models.QuerySet) -> models.QuerySet:
    if transaction.get_connection().in_atomic_block:
        return queryset.select_for_update()
    return queryset


def _user_ids(values) -> tuple[UserId, ...]:
    return tuple(UserId.from_string(value) for value in values)


def _ids_to_json(ids) -> list[str]:
    return [str(user_id) for user_id in ids]


def _to_user(row: orm.UserAccount) -> User:
    return User(
        id=UserId(value=row.id),
        username=row.username,
        full_name=row.full_name,
        roles=Role.parse_all(row.roles),
    )


def _to_festival(row: orm.Festival) -> Festival:
    layout = row.venue_layout
    budget = row.budget
    vendors = row.vendor_management
    return Festival(
        id=FestivalId(value=row.id),
        name=row.name,
        description=row.description,
        dates=tuple(date.fromisoformat(value) for value in row.dates),
        venue=row.venue,
        organizers=_user_ids(row.organizers),
        staff=_user_ids(row.staff),
        venue_layout=(
            VenueLayout(
                stages=tuple(layout.get("stages", ())),
                vendor_areas=tuple(layout.get("vendor_areas", ())),
            )
            if layout is not None
            else None
        ),
        budget=(
            Budget(**{key: Decimal(value) for key, value in budget.items()})
            if budget is not None
            else None
        ),
        vendor_management=(
            VendorManagement(
                food_stalls=tuple(vendors.get("food_stalls", ())),
                merchandise_booths=tuple(vendors.get("merchandise_booths", ())),
            )
            if vendors is not None
            else None
        ),
        state=FestivalState(row.state),
        created_at=row.created_at,
    )


def _festival_fields(festival: Festival) -> dict:
    layout = festival.venue_layout
    budget = festival.budget
    vendors = festival.vendor_management
    return {
        "name": festival.name,
        "description": festival.description,
        "dates": [value.isoformat() for value in festival.dates],
        "start_date": festival.start_date,
        "venue": festival.venue,
        "organizers": _ids_to_json(festival.organizers),
        "staff": _ids_to_json(festival.staff),
        "venue_layout": (
            {"stages": list(layout.stages), "vendor_areas": list(layout.vendor_areas)}
            if layout is not None
            else None
        ),
        "budget": (
            {
                "tracking": str(budget.tracking),
                "costs": str(budget.costs),
                "logistics": str(budget.logistics),
                "expected_revenue": str(budget.expected_revenue),
            }
            if budget is not None
            else None
        ),
        "vendor_management": (
            {
                "food_stalls": list(vendors.food_stalls),
                "merchandise_booths": list(vendors.merchandise_booths),
            }
            if vendors is not None
            else None
        ),
        "state": festival.state.value,
        "created_at": festival.created_at,
    }


def _to_performance(row: orm.Performance) -> Performance:
    technical = row.technical_requirements
    return Performance(
        id=PerformanceId(value=row.id),
        festival_id=FestivalId(value=row.festival_id),
        created_by=UserId(value=row.created_by),
        name=row.name,
        description=row.description,
        genre=row.genre,
        duration=Duration(minutes=row.duration),
        band_members=_user_ids(row.band_members),
        artists=_user_ids(row.artists),
        technical_requirements=(
            TechnicalRequirements(
                equipment=tuple(technical.get("equipment", ())),
                stage_setup=technical.get("stage_setup", ""),
                sound_lighting=technical.get("sound_lighting", ""),
            )
            if technical is not None
            else None
        ),
        setlist=tuple(row.setlist),
        merchandise_items=tuple(
            MerchandiseItem(
                name=item["name"],
                description=item["description"],
                type=item["type"],
                price=Money(amount=Decimal(item["price"])),
            )
            for item in row.merchandise_items
        ),
        preferred_rehearsal_times=tuple(row.preferred_rehearsal_times),
        preferred_performance_slots=tuple(row.preferred_performance_slots),
        stage_manager=UserId(value=row.stage_manager) if row.stage_manager else None,
        reviewer_comments=row.reviewer_comments,
        score=Score(value=row.score) if row.score is not None else None,
        rejection_reason=row.rejection_reason,
        time_slot=row.time_slot,
        rehearsal_time=row.rehearsal_time,
        state=PerformanceState(row.state),
        created_at=row.created_at,
    )


def _performance_fields(performance: Performance) -> dict:
    technical = performance.technical_requirements
    return {
        "festival_id": performance.festival_id.value,
        "created_by": performance.created_by.value,
        "name": performance.name,
        "description": performance.description,
        "genre": performance.genre,
        "duration": performance.duration.minutes,
        "band_members": _ids_to_json(performance.band_members),
        "artists": _ids_to_json(performance.artists),
        "technical_requirements": (
            {
                "equipment": list(technical.equipment),
                "stage_setup": technical.stage_setup,
                "sound_lighting": technical.sound_lighting,
            }
            if technical is not None
            else None
        ),
        "setlist": list(performance.setlist),
        "merchandise_items": [
            {
                "name": item.name,
                "description": item.description,
                "type": item.type,
                "price": str(item.price),
            }
            for item in performance.merchandise_items
        ],
        "preferred_rehearsal_times": list(performance.preferred_rehearsal_times),
        "preferred_performance_slots": list(performance.preferred_performance_slots),
        "stage_manager": performance.stage_manager.value if performance.stage_manager else None,
        "reviewer_comments": performance.reviewer_comments,
        "score": performance.score.value if performance.score else None,
        "rejection_reason": performance.rejection_reason,
        "time_slot": performance.time_slot,
        "rehearsal_time": performance.rehearsal_time,
        "state": performance.state.value,
        "created_at": performance.created_at,
    }


class DjangoUserDirectory(UserDirectory):
    """Identity directory backed by the UserAccount table."""

    def get_user(self, user_id: UserId) -> User | None:
        row = orm.UserAccount.objects.filter(id=user_id.value).first()
        return _to_user(row) if row else None

    def add_role(self, user_id: UserId, role: Role) -> User:
        try:
            with transaction.atomic():
                row = _locked(orm.UserAccount.objects.filter(id=user_id.value)).get()
                if role.value not in row.roles:
                    row.roles = [*row.roles, role.value]
                    row.save(update_fields=["roles"])
        except DatabaseError as exc:
            raise StoreError(f"Failed to update roles of user {user_id}") from exc
        return _to_user(row)


class DjangoFestivalStore(FestivalStore):
    """Festival store using Django ORM."""

    def get(self, festival_id: FestivalId) -> Festival | None:
        row = _locked(orm.Festival.objects.filter(id=festival_id.value)).first()
        return _to_festival(row) if row else None

    def save(self, festival: Festival) -> Festival:
        try:
            row, _ = orm.Festival.objects.update_or_create(
                id=festival.id.value,
                defaults=_festival_fields(festival),
            )
        except DatabaseError as exc:
            raise StoreError(f"Failed to save festival {festival.id}") from exc
        return _to_festival(row)

    def delete(self, festival_id: FestivalId) -> None:
        try:
            orm.Festival.objects.filter(id=festival_id.value).delete()
        except DatabaseError as exc:
            raise StoreError(f"Failed to delete festival {festival_id}") from exc

    def name_taken(self, name: str, exclude: FestivalId | None = None) -> bool:
        queryset = orm.Festival.objects.filter(name=name)
        if exclude is not None:
            queryset = queryset.exclude(id=exclude.value)
        return queryset.exists()

    def search(self, query: FestivalQuery) -> list[Festival]:
        queryset = orm.Festival.objects.all()
        if query.state is not None:
            queryset = queryset.filter(state=query.state.value)
        for field_name, text in (
            ("name", query.name),
            ("description", query.description),
            ("venue", query.venue),
        ):
            if text:
                queryset = queryset.filter(
                    **{f"{field_name}__iregex": words_pattern(text).pattern}
                )
        if query.start_date_from is not None:
            queryset = queryset.filter(start_date__gte=query.start_date_from)
        if query.start_date_to is not None:
            queryset = queryset.filter(start_date__lte=query.start_date_to)
        queryset = queryset.order_by(models.F("start_date").asc(nulls_last=True), "name")
        festivals = [_to_festival(row) for row in queryset]
        # JSON list containment is not portable across backends
        if query.organizer is not None:
            festivals = [f for f in festivals if query.organizer in f.organizers]
        return festivals


class DjangoPerformanceStore(PerformanceStore):
    """Performance store using Django ORM."""

    def get(self, performance_id: PerformanceId) -> Performance | None:
        row = _locked(orm.Performance.objects.filter(id=performance_id.value)).first()
        return _to_performance(row) if row else None

    def save(self, performance: Performance) -> Performance:
        try:
            row, _ = orm.Performance.objects.update_or_create(
                id=performance.id.value,
                defaults=_performance_fields(performance),
            )
        except DatabaseError as exc:
            raise StoreError(f"Failed to save performance {performance.id}") from exc
        return _to_performance(row)

    def delete(self, performance_id: PerformanceId) -> None:
        try:
            orm.Performance.objects.filter(id=performance_id.value).delete()
        except DatabaseError as exc:
            raise StoreError(f"Failed to delete performance {performance_id}") from exc

    def name_taken(
        self,
        festival_id: FestivalId,
        name: str,
        exclude: PerformanceId | None = None,
    ) -> bool:
        queryset = orm.Performance.objects.filter(festival_id=festival_id.value, name=name)
        if exclude is not None:
            queryset = queryset.exclude(id=exclude.value)
        return queryset.exists()

    def search(self, query: PerformanceQuery) -> list[Performance]:
        queryset = orm.Performance.objects.all()
        if query.festival_id is not None:
            queryset = queryset.filter(festival_id=query.festival_id.value)
        if query.state is not None:
            queryset = queryset.filter(state=query.state.value)
        if query.genre:
            queryset = queryset.filter(genre__icontains=query.genre)
        if query.stage_manager is not None:
            queryset = queryset.filter(stage_manager=query.stage_manager.value)
        for word in (query.name or "").split():
            queryset = queryset.filter(name__icontains=word)
        performances = [_to_performance(row) for row in queryset.order_by("genre", "name")]
        return [p for p in performances if performance_matches(p, query)]


class DjangoUnitOfWork(UnitOfWork):
    """Database transaction; nested blocks become savepoints."""

    def atomic(self) -> AbstractContextManager[None]:
        return transaction.atomic()
