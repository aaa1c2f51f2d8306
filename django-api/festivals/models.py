"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models

from festivals.domain import FestivalState, PerformanceState


def _choices(enum) -> list[tuple[str, str]]:
    return [(member.value, member.value) for member in enum]


class UserAccount(models.Model):
    """Persistence model for directory users. Credentials live elsewhere."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    username = models.CharField(max_length=150, unique=True)
    full_name = models.CharField(max_length=255)
    roles = models.JSONField(default=list)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["username"]

    def __str__(self) -> str:
        return self.username


class Festival(models.Model):
    """Persistence model for festivals."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField()
    dates = models.JSONField(default=list)
    start_date = models.DateField(null=True, blank=True)
    venue = models.CharField(max_length=255)
    organizers = models.JSONField(default=list)
    staff = models.JSONField(default=list)
    venue_layout = models.JSONField(null=True, blank=True)
    budget = models.JSONField(null=True, blank=True)
    vendor_management = models.JSONField(null=True, blank=True)
    state = models.CharField(
        max_length=32,
        choices=_choices(FestivalState),
        default=FestivalState.CREATED.value,
    )
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_date", "name"]
        indexes = [
            models.Index(fields=["state", "start_date"]),
        ]

    def __str__(self) -> str:
        return self.name


class Performance(models.Model):
    """Persistence model for performances.

    The festival foreign key is the only link between the two tables; a
    festival's performance list is always queried, never stored.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    festival = models.ForeignKey(Festival, on_delete=models.CASCADE, related_name="performances")
    created_by = models.UUIDField()
    name = models.CharField(max_length=255)
    description = models.TextField()
    genre = models.CharField(max_length=100)
    duration = models.PositiveIntegerField()
    band_members = models.JSONField(default=list)
    artists = models.JSONField(default=list)
    technical_requirements = models.JSONField(null=True, blank=True)
    setlist = models.JSONField(default=list)
    merchandise_items = models.JSONField(default=list)
    preferred_rehearsal_times = models.JSONField(default=list)
    preferred_performance_slots = models.JSONField(default=list)
    stage_manager = models.UUIDField(null=True, blank=True)
    reviewer_comments = models.TextField(null=True, blank=True)
    score = models.PositiveSmallIntegerField(null=True, blank=True)
    rejection_reason = models.TextField(null=True, blank=True)
    time_slot = models.CharField(max_length=100, null=True, blank=True)
    rehearsal_time = models.CharField(max_length=100, null=True, blank=True)
    state = models.CharField(
        max_length=32,
        choices=_choices(PerformanceState),
        default=PerformanceState.CREATED.value,
    )
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["genre", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["festival", "name"], name="unique_performance_name_per_festival"
            ),
        ]
        indexes = [
            models.Index(fields=["festival", "state"]),
            models.Index(fields=["stage_manager"]),
        ]

    def __str__(self) -> str:
        return f"{self.festival.name} - {self.name}"
