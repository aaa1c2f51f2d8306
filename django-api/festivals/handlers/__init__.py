from festivals.handlers.views import (
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

__all__ = [
    "FestivalDetailView",
    "FestivalListView",
    "FestivalPerformanceListView",
    "FestivalRosterView",
    "FestivalSearchView",
    "FestivalTransitionView",
    "ManagedPerformancesView",
    "MyPerformancesView",
    "PerformanceActionView",
    "PerformanceDetailView",
    "PerformanceReviewView",
    "PerformanceSearchView",
    "PerformanceSubmitView",
]
