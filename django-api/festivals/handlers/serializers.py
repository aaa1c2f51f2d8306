"""Serializers for request parsing and for rendering domain models.

Input serializers only check the shape of the payload; every field is
optional here so that presence and lifecycle rules are reported by the
services as domain errors. Output serializers read the frozen domain
dataclasses directly.
"""

from decimal import Decimal

from rest_framework import serializers

from festivals.domain import (
    Budget,
    Duration,
    FestivalChanges,
    MerchandiseItem,
    Money,
    PerformanceChanges,
    TechnicalRequirements,
    UserId,
    VendorManagement,
    VenueLayout,
)
from festivals.stores.interfaces import FestivalQuery, PerformanceQuery


def _string_list(**kwargs) -> serializers.ListField:
    return serializers.ListField(child=serializers.CharField(), required=False, **kwargs)


def _amount(**kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, **kwargs)


# Nested sections


class VenueLayoutSerializer(serializers.Serializer):
    stages = _string_list(default=list)
    vendor_areas = _string_list(default=list)

    @staticmethod
    def to_domain(data: dict) -> VenueLayout:
        return VenueLayout(
            stages=tuple(data.get("stages", ())),
            vendor_areas=tuple(data.get("vendor_areas", ())),
        )


class BudgetSerializer(serializers.Serializer):
    tracking = _amount(required=False, default=Decimal("0"))
    costs = _amount(required=False, default=Decimal("0"))
    logistics = _amount(required=False, default=Decimal("0"))
    expected_revenue = _amount(required=False, default=Decimal("0"))

    @staticmethod
    def to_domain(data: dict) -> Budget:
        return Budget(**data)


class VendorManagementSerializer(serializers.Serializer):
    food_stalls = _string_list(default=list)
    merchandise_booths = _string_list(default=list)

    @staticmethod
    def to_domain(data: dict) -> VendorManagement:
        return VendorManagement(
            food_stalls=tuple(data.get("food_stalls", ())),
            merchandise_booths=tuple(data.get("merchandise_booths", ())),
        )


class TechnicalRequirementsSerializer(serializers.Serializer):
    equipment = _string_list(default=list)
    stage_setup = serializers.CharField(required=False, allow_blank=True, default="")
    sound_lighting = serializers.CharField(required=False, allow_blank=True, default="")

    @staticmethod
    def to_domain(data: dict) -> TechnicalRequirements:
        return TechnicalRequirements(
            equipment=tuple(data.get("equipment", ())),
            stage_setup=data.get("stage_setup", ""),
            sound_lighting=data.get("sound_lighting", ""),
        )


class MerchandiseItemSerializer(serializers.Serializer):
    name = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    type = serializers.CharField()
    price = _amount()

    @staticmethod
    def to_domain(data: dict) -> MerchandiseItem:
        return MerchandiseItem(
            name=data.get("name", ""),
            description=data.get("description", ""),
            type=data.get("type", ""),
            price=Money(amount=data.get("price", Decimal("0"))),
        )

    def to_representation(self, instance: MerchandiseItem) -> dict:
        return {
            "name": instance.name,
            "description": instance.description,
            "type": instance.type,
            "price": str(instance.price),
        }


# Festival input


class FestivalInputSerializer(serializers.Serializer):
    """Payload of festival create and update."""

    name = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    dates = serializers.ListField(child=serializers.DateField(), required=False)
    venue = serializers.CharField(required=False, allow_blank=True)
    organizers = _string_list()
    staff = _string_list()
    venue_layout = VenueLayoutSerializer(required=False)
    budget = BudgetSerializer(required=False)
    vendor_management = VendorManagementSerializer(required=False)

    def to_fields(self) -> dict:
        """Validated data with nested sections converted to domain values."""
        data = dict(self.validated_data)
        for key in ("dates", "organizers", "staff"):
            if key in data:
                data[key] = tuple(data[key])
        if "venue_layout" in data:
            data["venue_layout"] = VenueLayoutSerializer.to_domain(data["venue_layout"])
        if "budget" in data:
            data["budget"] = BudgetSerializer.to_domain(data["budget"])
        if "vendor_management" in data:
            data["vendor_management"] = VendorManagementSerializer.to_domain(
                data["vendor_management"]
            )
        return data

    def to_changes(self) -> FestivalChanges:
        return FestivalChanges(**self.to_fields())


class RosterSerializer(serializers.Serializer):
    user_ids = _string_list(default=list)


class FestivalSearchSerializer(serializers.Serializer):
    """Query parameters of the public festival search."""

    name = serializers.CharField(required=False)
    description = serializers.CharField(required=False)
    venue = serializers.CharField(required=False)
    start_date_from = serializers.DateField(required=False)
    start_date_to = serializers.DateField(required=False)

    def to_query(self) -> FestivalQuery:
        return FestivalQuery(**self.validated_data)


# Performance input


class PerformanceInputSerializer(serializers.Serializer):
    """Payload of performance create and update."""

    name = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    genre = serializers.CharField(required=False, allow_blank=True)
    duration = serializers.IntegerField(required=False, min_value=1)
    band_members = _string_list()
    artists = _string_list()
    technical_requirements = TechnicalRequirementsSerializer(required=False)
    setlist = _string_list()
    merchandise_items = MerchandiseItemSerializer(many=True, required=False)
    preferred_rehearsal_times = _string_list()
    preferred_performance_slots = _string_list()

    def to_fields(self) -> dict:
        data = dict(self.validated_data)
        for key in (
            "band_members",
            "artists",
            "setlist",
            "preferred_rehearsal_times",
            "preferred_performance_slots",
        ):
            if key in data:
                data[key] = tuple(data[key])
        if "technical_requirements" in data:
            data["technical_requirements"] = TechnicalRequirementsSerializer.to_domain(
                data["technical_requirements"]
            )
        if "merchandise_items" in data:
            data["merchandise_items"] = tuple(
                MerchandiseItemSerializer.to_domain(item) for item in data["merchandise_items"]
            )
        return data

    def to_changes(self) -> PerformanceChanges:
        data = self.to_fields()
        if "duration" in data:
            data["duration"] = Duration(minutes=data["duration"])
        return PerformanceChanges(**data)


class BandMemberSerializer(serializers.Serializer):
    user_id = serializers.CharField(required=False, allow_blank=True, default="")


class StageManagerSerializer(serializers.Serializer):
    staff_id = serializers.CharField(required=False, allow_blank=True, default="")


class ReviewSerializer(serializers.Serializer):
    score = serializers.IntegerField(required=False, allow_null=True, default=None)
    comments = serializers.CharField(required=False, allow_blank=True, default="")


class RejectionSerializer(serializers.Serializer):
    rejection_reason = serializers.CharField(required=False, allow_blank=True, default="")


class FinalSubmissionSerializer(serializers.Serializer):
    setlist = _string_list(default=list)
    time_slot = serializers.CharField(required=False, allow_blank=True, default="")
    rehearsal_time = serializers.CharField(required=False, allow_blank=True, default="")


class PerformanceSearchSerializer(serializers.Serializer):
    """Query parameters of the public performance search.

    `artists` is a comma separated list of user IDs; every one must perform.
    """

    name = serializers.CharField(required=False)
    genre = serializers.CharField(required=False)
    artists = serializers.CharField(required=False)

    def validate_artists(self, value: str) -> tuple[UserId, ...]:
        try:
            return tuple(
                UserId.from_string(item.strip()) for item in value.split(",") if item.strip()
            )
        except ValueError:
            raise serializers.ValidationError("Artists must be a comma separated list of user IDs")

    def to_query(self) -> PerformanceQuery:
        return PerformanceQuery(**self.validated_data)


# Output


class UserSerializer(serializers.Serializer):
    id = serializers.CharField()
    username = serializers.CharField()
    full_name = serializers.CharField()
    roles = serializers.SerializerMethodField()

    def get_roles(self, user) -> list[str]:
        return sorted(role.value for role in user.roles)


class FestivalSerializer(serializers.Serializer):
    """Serializer for the Festival domain model."""

    id = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    dates = serializers.ListField(child=serializers.DateField())
    venue = serializers.CharField()
    organizers = serializers.ListField(child=serializers.CharField())
    staff = serializers.ListField(child=serializers.CharField())
    venue_layout = VenueLayoutSerializer(allow_null=True)
    budget = BudgetSerializer(allow_null=True)
    vendor_management = VendorManagementSerializer(allow_null=True)
    state = serializers.CharField(source="state.value")
    created_at = serializers.DateTimeField()


class PerformanceSerializer(serializers.Serializer):
    """Serializer for the Performance domain model."""

    id = serializers.CharField()
    festival_id = serializers.CharField()
    created_by = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    genre = serializers.CharField()
    duration = serializers.IntegerField(source="duration.minutes")
    band_members = serializers.ListField(child=serializers.CharField())
    artists = serializers.ListField(child=serializers.CharField())
    technical_requirements = TechnicalRequirementsSerializer(allow_null=True)
    setlist = serializers.ListField(child=serializers.CharField())
    merchandise_items = MerchandiseItemSerializer(many=True)
    preferred_rehearsal_times = serializers.ListField(child=serializers.CharField())
    preferred_performance_slots = serializers.ListField(child=serializers.CharField())
    stage_manager = serializers.CharField(allow_null=True)
    reviewer_comments = serializers.CharField(allow_null=True)
    score = serializers.SerializerMethodField()
    rejection_reason = serializers.CharField(allow_null=True)
    time_slot = serializers.CharField(allow_null=True)
    rehearsal_time = serializers.CharField(allow_null=True)
    state = serializers.CharField(source="state.value")
    created_at = serializers.DateTimeField()

    def get_score(self, performance) -> int | None:
        return performance.score.value if performance.score else None


class FestivalOverviewSerializer(serializers.Serializer):
    def to_representation(self, instance) -> dict:
        data = FestivalSerializer(instance.festival).data
        data["performances"] = PerformanceSerializer(instance.performances, many=True).data
        return data


class DecisionOutcomeSerializer(serializers.Serializer):
    festival = FestivalSerializer()
    accepted = PerformanceSerializer(many=True)
