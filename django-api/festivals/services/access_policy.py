"""Access policy: which roles may call which operations.

Every guard goes through `require_roles` with an explicit accepted set.
In STRICT mode each named guard accepts only its own role. BROAD mode
reproduces the legacy behaviour where the organizer, artist and staff
guards all accepted any of those three roles.
"""

import logging
from enum import Enum

from festivals.domain import Caller, Role
from festivals.domain.errors import AuthorizationError

logger = logging.getLogger(__name__)

PANEL_ROLES = frozenset({Role.ARTIST, Role.ORGANIZER, Role.STAFF})


class AccessMode(Enum):
    STRICT = "strict"
    BROAD = "broad"


class AccessPolicy:
    """Role checks for lifecycle operations."""

    def __init__(self, mode: AccessMode = AccessMode.STRICT) -> None:
        self.mode = mode

    def accepted_roles(self, role: Role) -> frozenset[Role]:
        if self.mode is AccessMode.BROAD:
            return PANEL_ROLES
        return frozenset({role})

    def require_roles(self, caller: Caller, accepted: frozenset[Role], action: str) -> None:
        """Raise AuthorizationError unless the caller holds one of `accepted`."""
        if not caller.has_any(accepted):
            names = " or ".join(sorted(role.value for role in accepted))
            logger.warning(
                "Denied %s to user %s: requires %s, has %s",
                action,
                caller.user_id,
                names,
                sorted(role.value for role in caller.roles),
            )
            raise AuthorizationError(f"Only {names} may {action}")

    def require_organizer(self, caller: Caller, action: str) -> None:
        self.require_roles(caller, self.accepted_roles(Role.ORGANIZER), action)

    def require_artist(self, caller: Caller, action: str) -> None:
        self.require_roles(caller, self.accepted_roles(Role.ARTIST), action)

    def require_staff(self, caller: Caller, action: str) -> None:
        self.require_roles(caller, self.accepted_roles(Role.STAFF), action)
