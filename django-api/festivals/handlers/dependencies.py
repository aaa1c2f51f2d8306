"""Service wiring for the HTTP layer."""

from dataclasses import dataclass

from django.conf import settings

from festivals.services.access_policy import AccessMode, AccessPolicy
from festivals.services.coordinator import LifecycleCoordinator
from festivals.services.festival_service import FestivalService
from festivals.services.identity_service import IdentityService
from festivals.services.performance_service import PerformanceService
from festivals.stores.django_store import (
    DjangoFestivalStore,
    DjangoPerformanceStore,
    DjangoUnitOfWork,
    DjangoUserDirectory,
)


@dataclass(frozen=True)
class Services:
    festivals: FestivalService
    performances: PerformanceService


def build_services() -> Services:
    """Build the services on top of the Django ORM stores."""
    festivals = DjangoFestivalStore()
    performances = DjangoPerformanceStore()
    unit_of_work = DjangoUnitOfWork()
    identity = IdentityService(DjangoUserDirectory())
    access = AccessPolicy(AccessMode(settings.FESTIVALS["ACCESS_MODE"]))
    coordinator = LifecycleCoordinator(festivals, performances, unit_of_work)
    return Services(
        festivals=FestivalService(festivals, performances, identity, access, coordinator, unit_of_work),
        performances=PerformanceService(performances, identity, access, coordinator, unit_of_work),
    )
