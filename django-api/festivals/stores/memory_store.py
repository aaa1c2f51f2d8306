"""In-memory store implementations.

Used by the service tests and by anything that needs the lifecycle engine
without a database.
"""

import re
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterator

from festivals.domain import (
    Festival,
    FestivalId,
    Performance,
    PerformanceId,
    Role,
    User,
    UserId,
)
from festivals.stores.interfaces import (
    FestivalQuery,
    FestivalStore,
    PerformanceQuery,
    PerformanceStore,
    UnitOfWork,
    UserDirectory,
)


def words_pattern(text: str) -> re.Pattern:
    """Case-insensitive pattern matching every word of `text` in order."""
    return re.compile(".*".join(re.escape(word) for word in text.split()), re.IGNORECASE)


class InMemoryUserDirectory(UserDirectory):
    """Dictionary-backed identity directory."""

    def __init__(self) -> None:
        self.users: dict[UserId, User] = {}

    def add(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def get_user(self, user_id: UserId) -> User | None:
        return self.users.get(user_id)

    def add_role(self, user_id: UserId, role: Role) -> User:
        user = replace(self.users[user_id], roles=self.users[user_id].roles | {role})
        self.users[user_id] = user
        return user


class InMemoryFestivalStore(FestivalStore):
    """Dictionary-backed festival store."""

    def __init__(self) -> None:
        self.records: dict[FestivalId, Festival] = {}

    def get(self, festival_id: FestivalId) -> Festival | None:
        return self.records.get(festival_id)

    def save(self, festival: Festival) -> Festival:
        self.records[festival.id] = festival
        return festival

    def delete(self, festival_id: FestivalId) -> None:
        self.records.pop(festival_id, None)

    def name_taken(self, name: str, exclude: FestivalId | None = None) -> bool:
        return any(
            festival.name == name and festival.id != exclude
            for festival in self.records.values()
        )

    def search(self, query: FestivalQuery) -> list[Festival]:
        results = [festival for festival in self.records.values() if _festival_matches(festival, query)]
        # festivals without dates sort last
        return sorted(
            results,
            key=lambda festival: (festival.start_date is None, festival.start_date, festival.name),
        )


def _festival_matches(festival: Festival, query: FestivalQuery) -> bool:
    if query.state is not None and festival.state is not query.state:
        return False
    if query.organizer is not None and query.organizer not in festival.organizers:
        return False
    for text, value in (
        (query.name, festival.name),
        (query.description, festival.description),
        (query.venue, festival.venue),
    ):
        if text and not words_pattern(text).search(value):
            return False
    start = festival.start_date
    if query.start_date_from is not None and (start is None or start < query.start_date_from):
        return False
    if query.start_date_to is not None and (start is None or start > query.start_date_to):
        return False
    return True


class InMemoryPerformanceStore(PerformanceStore):
    """Dictionary-backed performance store."""

    def __init__(self) -> None:
        self.records: dict[PerformanceId, Performance] = {}

    def get(self, performance_id: PerformanceId) -> Performance | None:
        return self.records.get(performance_id)

    def save(self, performance: Performance) -> Performance:
        self.records[performance.id] = performance
        return performance

    def delete(self, performance_id: PerformanceId) -> None:
        self.records.pop(performance_id, None)

    def name_taken(
        self,
        festival_id: FestivalId,
        name: str,
        exclude: PerformanceId | None = None,
    ) -> bool:
        return any(
            performance.festival_id == festival_id
            and performance.name == name
            and performance.id != exclude
            for performance in self.records.values()
        )

    def search(self, query: PerformanceQuery) -> list[Performance]:
        results = [
            performance
            for performance in self.records.values()
            if performance_matches(performance, query)
        ]
        return sorted(results, key=lambda performance: (performance.genre, performance.name))


def performance_matches(performance: Performance, query: PerformanceQuery) -> bool:
    """Apply a PerformanceQuery to one record.

    Shared with the Django store for the filters on list-valued fields.
    """
    if query.festival_id is not None and performance.festival_id != query.festival_id:
        return False
    if query.state is not None and performance.state is not query.state:
        return False
    if query.name and not all(
        word.lower() in performance.name.lower() for word in query.name.split()
    ):
        return False
    if query.genre and query.genre.lower() not in performance.genre.lower():
        return False
    if query.artists and not set(query.artists) <= set(performance.artists):
        return False
    if query.member is not None and not (
        query.member in performance.artists or query.member in performance.band_members
    ):
        return False
    if query.stage_manager is not None and performance.stage_manager != query.stage_manager:
        return False
    return True


class InMemoryUnitOfWork(UnitOfWork):
    """Snapshots the stores on entry and restores them if the block raises."""

    def __init__(
        self,
        users: InMemoryUserDirectory,
        festivals: InMemoryFestivalStore,
        performances: InMemoryPerformanceStore,
    ) -> None:
        self._users = users
        self._festivals = festivals
        self._performances = performances

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = (
            dict(self._users.users),
            dict(self._festivals.records),
            dict(self._performances.records),
        )
        try:
            yield
        except BaseException:
            self._users.users, self._festivals.records, self._performances.records = snapshot
            raise
