"""Caller identification.

The authenticating gateway in front of the API forwards the verified user ID
in the X-Caller-Id header. Roles are resolved from the user directory on
every request so role grants take effect immediately.
"""

import logging

from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication
from rest_framework.request import Request

from festivals.domain import Caller, UserId
from festivals.stores.django_store import DjangoUserDirectory

logger = logging.getLogger(__name__)

CALLER_HEADER = "HTTP_X_CALLER_ID"


class CallerAuthentication(BaseAuthentication):
    """Resolve the X-Caller-Id header to a Caller."""

    def authenticate(self, request: Request) -> tuple[Caller, None] | None:
        raw = request.META.get(CALLER_HEADER)
        if not raw:
            return None
        try:
            user_id = UserId.from_string(raw)
        except ValueError:
            raise exceptions.AuthenticationFailed("Malformed caller ID")
        user = DjangoUserDirectory().get_user(user_id)
        if user is None:
            logger.warning("Rejected request from unknown caller %s", raw)
            raise exceptions.AuthenticationFailed("Unknown caller")
        return Caller(user_id=user.id, roles=user.roles), None

    def authenticate_header(self, request: Request) -> str:
        return "X-Caller-Id"
