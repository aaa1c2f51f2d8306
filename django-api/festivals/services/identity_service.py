"""Identity and role directory service.

Resolves user references to role sets and validates that every user named
on a festival or performance holds the role that position requires.
"""

import logging
from typing import Iterable

from festivals.domain import Role, User, UserId
from festivals.domain.errors import InvalidReferenceError, UserNotFoundError
from festivals.stores.interfaces import UserDirectory

logger = logging.getLogger(__name__)


class IdentityService:
    """Service for user lookups and reference validation."""

    def __init__(self, directory: UserDirectory) -> None:
        self._directory = directory

    def get_user(self, user_id: str | UserId) -> User:
        """Return a user by ID.

        Raises:
            UserNotFoundError: If the ID is malformed or does not resolve.
        """
        try:
            parsed = user_id if isinstance(user_id, UserId) else UserId.from_string(user_id)
        except ValueError:
            raise UserNotFoundError(str(user_id))
        user = self._directory.get_user(parsed)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    def roles_for(self, user_id: UserId) -> frozenset[Role] | None:
        """Return the user's roles, or None if the user is unknown."""
        user = self._directory.get_user(user_id)
        return user.roles if user else None

    def validate_references(
        self,
        references: Iterable[str],
        role: Role,
        label: str,
    ) -> tuple[UserId, ...]:
        """Resolve references that must all hold `role`.

        Duplicates are collapsed, keeping first-seen order.

        Raises:
            InvalidReferenceError: Listing every reference that is malformed,
                unknown, or lacks the role.
        """
        resolved: list[UserId] = []
        invalid: list[str] = []
        for reference in references:
            try:
                user_id = UserId.from_string(reference)
            except ValueError:
                invalid.append(str(reference))
                continue
            roles = self.roles_for(user_id)
            if roles is None or role not in roles:
                invalid.append(str(reference))
            elif user_id not in resolved:
                resolved.append(user_id)
        if invalid:
            logger.warning(
                "Rejected %s references lacking role %s: %s",
                label,
                role.value,
                ", ".join(invalid),
            )
            raise InvalidReferenceError(label, role.value, invalid)
        return tuple(resolved)

    def grant_role(self, user: User, role: Role) -> User:
        """Add `role` to the user if missing and return the current record."""
        if role in user.roles:
            return user
        updated = self._directory.add_role(user.id, role)
        logger.info("Granted role %s to user %s", role.value, user.id)
        return updated
