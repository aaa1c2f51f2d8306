"""Domain error codes for the festivals module."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_ID = "INVALID_ID"
    INVALID_REFERENCE = "INVALID_REFERENCE"
    STATE_GUARD = "STATE_GUARD"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    FESTIVAL_NOT_FOUND = "FESTIVAL_NOT_FOUND"
    PERFORMANCE_NOT_FOUND = "PERFORMANCE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    NO_SCHEDULED_PERFORMANCES = "NO_SCHEDULED_PERFORMANCES"
    DUPLICATE_NAME = "DUPLICATE_NAME"
    ALREADY_ASSIGNED = "ALREADY_ASSIGNED"
    ALREADY_MEMBER = "ALREADY_MEMBER"
    BULK_TRANSITION_FAILED = "BULK_TRANSITION_FAILED"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code, user-safe message and offending items."""

    code: ErrorCode
    message: str
    details: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when required data is missing or malformed."""

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_FAILED,
            message=message,
            details=tuple(fields),
        )


class InvalidIdentifierError(DomainError):
    """Raised when a festival or performance ID is malformed."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )


class InvalidReferenceError(DomainError):
    """Raised when referenced users do not exist or lack the required role.

    Every offending reference is listed, not just the first one found.
    """

    def __init__(self, label: str, role_name: str, references: Iterable[str]) -> None:
        references = tuple(references)
        super().__init__(
            code=ErrorCode.INVALID_REFERENCE,
            message=(
                f"The following {label} are invalid or do not have the "
                f"{role_name} role: {', '.join(references)}"
            ),
            details=references,
        )
        self.label = label


class StateGuardError(DomainError):
    """Raised when an operation is attempted from the wrong state."""

    def __init__(self, entity: str, required: str, current: str) -> None:
        super().__init__(
            code=ErrorCode.STATE_GUARD,
            message=f"{entity} must be in {required} state (currently {current})",
            details=(required,),
        )
        self.required = required
        self.current = current


class AuthorizationError(DomainError):
    """Raised when the caller may not perform an operation."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.NOT_AUTHORIZED, message=message)


class NotFoundError(DomainError):
    """Base class for unresolvable identifiers."""


class FestivalNotFoundError(NotFoundError):
    """Raised when a festival is not found."""

    def __init__(self, festival_id: str) -> None:
        super().__init__(
            code=ErrorCode.FESTIVAL_NOT_FOUND,
            message="Festival not found",
        )
        self.festival_id = festival_id


class PerformanceNotFoundError(NotFoundError):
    """Raised when a performance is not found."""

    def __init__(self, performance_id: str) -> None:
        super().__init__(
            code=ErrorCode.PERFORMANCE_NOT_FOUND,
            message="Performance not found",
        )
        self.performance_id = performance_id


class UserNotFoundError(NotFoundError):
    """Raised when a user cannot be resolved by the identity directory."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.USER_NOT_FOUND,
            message="User not found",
            details=(user_id,),
        )
        self.user_id = user_id


class NoScheduledPerformancesError(NotFoundError):
    """Raised when decision-making finds nothing to decide on."""

    def __init__(self, festival_id: str) -> None:
        super().__init__(
            code=ErrorCode.NO_SCHEDULED_PERFORMANCES,
            message="No performances found in SCHEDULED state",
        )
        self.festival_id = festival_id


class ConflictError(DomainError):
    """Base class for uniqueness violations."""


class DuplicateFestivalNameError(ConflictError):
    """Raised when a festival name is already taken."""

    def __init__(self, name: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_NAME,
            message="Festival name must be unique",
            details=(name,),
        )


class DuplicatePerformanceNameError(ConflictError):
    """Raised when a performance name is already taken within its festival."""

    def __init__(self, name: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_NAME,
            message="Performance name must be unique within the festival",
            details=(name,),
        )


class StageManagerAlreadyAssignedError(ConflictError):
    """Raised when a performance already has its stage manager."""

    def __init__(self, performance_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_ASSIGNED,
            message="This performance already has a stage manager assigned",
        )
        self.performance_id = performance_id


class AlreadyBandMemberError(ConflictError):
    """Raised when a user is already a band member of the performance."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_MEMBER,
            message="User is already a band member for this performance",
            details=(user_id,),
        )


class BulkTransitionError(DomainError):
    """Raised when a bulk transition could not be applied to every record.

    Nothing is persisted; `succeeded` lists the records that were updated
    before the failure was detected and rolled back.
    """

    def __init__(self, succeeded: Iterable[str], failed: Iterable[str]) -> None:
        succeeded = tuple(succeeded)
        failed = tuple(failed)
        super().__init__(
            code=ErrorCode.BULK_TRANSITION_FAILED,
            message=(
                f"Bulk transition failed for {len(failed)} record(s); "
                f"{len(succeeded)} update(s) were rolled back"
            ),
            details=failed,
        )
        self.succeeded = succeeded
        self.failed = failed
