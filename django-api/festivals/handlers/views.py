"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Leave domain error mapping to festivals.handlers.errors
- Never contain business logic
"""

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from festivals.domain.errors import ValidationError
from festivals.handlers.dependencies import build_services
from festivals.handlers.serializers import (
    BandMemberSerializer,
    DecisionOutcomeSerializer,
    FestivalInputSerializer,
    FestivalOverviewSerializer,
    FestivalSearchSerializer,
    FestivalSerializer,
    FinalSubmissionSerializer,
    PerformanceInputSerializer,
    PerformanceSearchSerializer,
    PerformanceSerializer,
    RejectionSerializer,
    ReviewSerializer,
    RosterSerializer,
    StageManagerSerializer,
    UserSerializer,
)


def _parse(serializer_class, data, **kwargs):
    serializer = serializer_class(data=data, **kwargs)
    serializer.is_valid(raise_exception=True)
    return serializer


# Festivals


class FestivalSearchView(APIView):
    """Handler for GET /api/festivals/search (public)"""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        query = _parse(FestivalSearchSerializer, request.query_params).to_query()
        festivals = build_services().festivals.search_announced(query)
        return Response(FestivalSerializer(festivals, many=True).data)


class FestivalListView(APIView):
    """Handler for GET/POST /api/festivals"""

    def get(self, request: Request) -> Response:
        overviews = build_services().festivals.list_responsible(request.user)
        return Response(FestivalOverviewSerializer(overviews, many=True).data)

    def post(self, request: Request) -> Response:
        fields = _parse(FestivalInputSerializer, request.data).to_fields()
        festival = build_services().festivals.create(
            request.user,
            name=fields.get("name", ""),
            description=fields.get("description", ""),
            dates=fields.get("dates", ()),
            venue=fields.get("venue", ""),
            organizers=fields.get("organizers", ()),
            staff=fields.get("staff", ()),
            venue_layout=fields.get("venue_layout"),
            budget=fields.get("budget"),
            vendor_management=fields.get("vendor_management"),
        )
        return Response(FestivalSerializer(festival).data, status=status.HTTP_201_CREATED)


class FestivalDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/festivals/{festival_id}"""

    def get(self, request: Request, festival_id: str) -> Response:
        festival = build_services().festivals.get(festival_id)
        return Response(FestivalSerializer(festival).data)

    def patch(self, request: Request, festival_id: str) -> Response:
        changes = _parse(FestivalInputSerializer, request.data, partial=True).to_changes()
        festival = build_services().festivals.update(request.user, festival_id, changes)
        return Response(FestivalSerializer(festival).data)

    def delete(self, request: Request, festival_id: str) -> Response:
        build_services().festivals.delete(request.user, festival_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class FestivalRosterView(APIView):
    """Handler for POST /api/festivals/{festival_id}/{organizers|staff}"""

    roster = ""

    def post(self, request: Request, festival_id: str) -> Response:
        user_ids = _parse(RosterSerializer, request.data).validated_data["user_ids"]
        service = build_services().festivals
        if self.roster == "organizers":
            festival = service.add_organizers(request.user, festival_id, user_ids)
        else:
            festival = service.add_staff(request.user, festival_id, user_ids)
        return Response(FestivalSerializer(festival).data)


class FestivalTransitionView(APIView):
    """Handler for POST /api/festivals/{festival_id}/transitions/{action}"""

    ACTIONS = {
        "start-submission": "start_submission",
        "start-assignment": "start_assignment",
        "start-review": "start_review",
        "start-scheduling": "start_scheduling",
        "start-final-submission": "start_final_submission",
        "make-decisions": "make_decisions",
        "announce": "announce",
    }

    def post(self, request: Request, festival_id: str, action: str) -> Response:
        if action not in self.ACTIONS:
            raise ValidationError(f"Unknown festival transition '{action}'", fields=["action"])
        service = build_services().festivals
        result = getattr(service, self.ACTIONS[action])(request.user, festival_id)
        if action == "make-decisions":
            return Response(DecisionOutcomeSerializer(result).data)
        return Response(FestivalSerializer(result).data)


# Performances


class PerformanceSearchView(APIView):
    """Handler for GET /api/performances/search (public)"""

    permission_classes = [AllowAny]

    def get(self, request: Request) -> Response:
        query = _parse(PerformanceSearchSerializer, request.query_params).to_query()
        performances = build_services().performances.search_scheduled(query)
        return Response(PerformanceSerializer(performances, many=True).data)


class MyPerformancesView(APIView):
    """Handler for GET /api/performances/mine"""

    def get(self, request: Request) -> Response:
        performances = build_services().performances.list_for_artist(request.user)
        return Response(PerformanceSerializer(performances, many=True).data)


class ManagedPerformancesView(APIView):
    """Handler for GET /api/performances/managed"""

    def get(self, request: Request) -> Response:
        performances = build_services().performances.list_managed(request.user)
        return Response(PerformanceSerializer(performances, many=True).data)


class FestivalPerformanceListView(APIView):
    """Handler for POST /api/festivals/{festival_id}/performances"""

    def post(self, request: Request, festival_id: str) -> Response:
        fields = _parse(PerformanceInputSerializer, request.data).to_fields()
        performance = build_services().performances.create(
            request.user,
            festival_id,
            name=fields.pop("name", ""),
            description=fields.pop("description", ""),
            genre=fields.pop("genre", ""),
            duration=fields.pop("duration", None),
            band_members=fields.pop("band_members", ()),
            artists=fields.pop("artists", ()),
            **fields,
        )
        return Response(PerformanceSerializer(performance).data, status=status.HTTP_201_CREATED)


class PerformanceDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/performances/{performance_id}"""

    def get(self, request: Request, performance_id: str) -> Response:
        performance = build_services().performances.get(performance_id)
        return Response(PerformanceSerializer(performance).data)

    def patch(self, request: Request, performance_id: str) -> Response:
        changes = _parse(PerformanceInputSerializer, request.data, partial=True).to_changes()
        performance = build_services().performances.update(request.user, performance_id, changes)
        return Response(PerformanceSerializer(performance).data)

    def delete(self, request: Request, performance_id: str) -> Response:
        build_services().performances.withdraw(request.user, performance_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PerformanceSubmitView(APIView):
    """Handler for POST /api/performances/{performance_id}/submit"""

    def post(self, request: Request, performance_id: str) -> Response:
        performance = build_services().performances.submit(request.user, performance_id)
        return Response(PerformanceSerializer(performance).data)


class PerformanceReviewView(APIView):
    """Handler for POST /api/performances/{performance_id}/review"""

    def post(self, request: Request, performance_id: str) -> Response:
        data = _parse(ReviewSerializer, request.data).validated_data
        performance = build_services().performances.review(
            request.user, performance_id, score=data["score"], comments=data["comments"]
        )
        return Response(PerformanceSerializer(performance).data)


class PerformanceActionView(APIView):
    """Handler for POST /api/festivals/{festival_id}/performances/{performance_id}/{action}

    Actions that address a performance through its festival.
    """

    def post(self, request: Request, festival_id: str, performance_id: str, action: str) -> Response:
        service = build_services().performances
        caller = request.user

        if action == "band-members":
            user_id = _parse(BandMemberSerializer, request.data).validated_data["user_id"]
            performance, user = service.add_band_member(caller, festival_id, performance_id, user_id)
            return Response(
                {
                    "performance": PerformanceSerializer(performance).data,
                    "user": UserSerializer(user).data,
                }
            )
        if action == "stage-manager":
            staff_id = _parse(StageManagerSerializer, request.data).validated_data["staff_id"]
            performance = service.assign_stage_manager(caller, festival_id, performance_id, staff_id)
        elif action == "approve":
            performance = service.approve(caller, festival_id, performance_id)
        elif action in ("reject", "manual-reject"):
            reason = _parse(RejectionSerializer, request.data).validated_data["rejection_reason"]
            reject = service.reject if action == "reject" else service.manual_reject
            performance = reject(caller, festival_id, performance_id, reason)
        elif action == "final-submission":
            data = _parse(FinalSubmissionSerializer, request.data).validated_data
            performance = service.submit_final(
                caller,
                festival_id,
                performance_id,
                setlist=data["setlist"],
                time_slot=data["time_slot"],
                rehearsal_time=data["rehearsal_time"],
            )
        elif action == "accept":
            performance = service.accept(caller, festival_id, performance_id)
        else:
            raise ValidationError(f"Unknown performance action '{action}'", fields=["action"])
        return Response(PerformanceSerializer(performance).data)
