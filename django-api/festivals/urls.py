from django.urls import path

from festivals.handlers import (
    FestivalDetailView,
    FestivalListView,
    FestivalPerformanceListView,
    FestivalRosterView,
    FestivalSearchView,
    FestivalTransitionView,
    ManagedPerformancesView,
    MyPerformancesView,
    PerformanceActionView,
    PerformanceDetailView,
    PerformanceReviewView,
    PerformanceSearchView,
    PerformanceSubmitView,
)

urlpatterns = [
    path("festivals", FestivalListView.as_view(), name="festival-list"),
    path("festivals/search", FestivalSearchView.as_view(), name="festival-search"),
    path("festivals/<str:festival_id>", FestivalDetailView.as_view(), name="festival-detail"),
    path(
        "festivals/<str:festival_id>/organizers",
        FestivalRosterView.as_view(roster="organizers"),
        name="festival-organizers",
    ),
    path(
        "festivals/<str:festival_id>/staff",
        FestivalRosterView.as_view(roster="staff"),
        name="festival-staff",
    ),
    path(
        "festivals/<str:festival_id>/transitions/<str:action>",
        FestivalTransitionView.as_view(),
        name="festival-transition",
    ),
    path(
        "festivals/<str:festival_id>/performances",
        FestivalPerformanceListView.as_view(),
        name="festival-performances",
    ),
    path(
        "festivals/<str:festival_id>/performances/<str:performance_id>/<str:action>",
        PerformanceActionView.as_view(),
        name="performance-action",
    ),
    path("performances/search", PerformanceSearchView.as_view(), name="performance-search"),
    path("performances/mine", MyPerformancesView.as_view(), name="performance-mine"),
    path("performances/managed", ManagedPerformancesView.as_view(), name="performance-managed"),
    path(
        "performances/<str:performance_id>",
        PerformanceDetailView.as_view(),
        name="performance-detail",
    ),
    path(
        "performances/<str:performance_id>/submit",
        PerformanceSubmitView.as_view(),
        name="performance-submit",
    ),
    path(
        "performances/<str:performance_id>/review",
        PerformanceReviewView.as_view(),
        name="performance-review",
    ),
]
