"""Domain error codes for the events module."""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Coarse error categories; handlers map these to transport status codes."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    AUTHORIZATION = "AUTHORIZATION"
    CONFLICT = "CONFLICT"
    INTERNAL = "INTERNAL"


class ErrorCode(Enum):
    """Domain error codes."""

    INVALID_ID = "INVALID_ID"
    MISSING_FIELD = "MISSING_FIELD"
    EMPTY_TITLE = "EMPTY_TITLE"
    INVALID_INTERVAL = "INVALID_INTERVAL"
    PAST_INTERVAL = "PAST_INTERVAL"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    EVENT_LOCKED = "EVENT_LOCKED"
    SWAP_ALREADY_PROCESSED = "SWAP_ALREADY_PROCESSED"
    SELF_SWAP = "SELF_SWAP"
    INVALID_ACCEPT = "INVALID_ACCEPT"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    SWAP_NOT_FOUND = "SWAP_NOT_FOUND"
    NOT_EVENT_OWNER = "NOT_EVENT_OWNER"
    NOT_SWAP_RESPONDER = "NOT_SWAP_RESPONDER"
    EVENT_OVERLAP = "EVENT_OVERLAP"
    DUPLICATE_SWAP = "DUPLICATE_SWAP"
    STORAGE_FAILURE = "STORAGE_FAILURE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    kind = ErrorKind.INTERNAL

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Malformed or missing input, or an operation illegal in the current state."""

    kind = ErrorKind.VALIDATION


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class AuthorizationError(DomainError):
    """The caller is not the owner or participant of the resource."""

    kind = ErrorKind.AUTHORIZATION


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT


class InternalError(DomainError):
    kind = ErrorKind.INTERNAL


class InvalidIdError(ValidationError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, name: str = "id") -> None:
        super().__init__(code=ErrorCode.INVALID_ID, message=f"Invalid {name} format")


class MissingFieldError(ValidationError):
    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.MISSING_FIELD, message=message)


class EmptyTitleError(ValidationError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.EMPTY_TITLE, message="Title must not be empty")


class InvalidIntervalError(ValidationError):
    """Raised when a start time is not strictly before the end time."""

    def __init__(self, message: str = "Start time must be before end time") -> None:
        super().__init__(code=ErrorCode.INVALID_INTERVAL, message=message)


class PastIntervalError(ValidationError):
    def __init__(self, message: str = "Cannot schedule an event in the past") -> None:
        super().__init__(code=ErrorCode.PAST_INTERVAL, message=message)


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not an edge of the state machine."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TRANSITION, message=message)


class EventLockedError(ValidationError):
    """Raised when an event is held by an outstanding swap negotiation."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.EVENT_LOCKED,
            message="Event is locked by a pending swap",
        )


class SwapAlreadyProcessedError(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.SWAP_ALREADY_PROCESSED,
            message="This swap has already been processed",
        )


class SelfSwapError(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.SELF_SWAP,
            message="Cannot request a swap with your own event",
        )


class InvalidAcceptError(ValidationError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ACCEPT,
            message="Acceptance status must be true or false",
        )


class EventNotFoundError(NotFoundError):
    """Raised when an event is not found."""

    def __init__(self, message: str = "Event not found") -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message=message)


class SwapNotFoundError(NotFoundError):
    """Raised when a swap is not found."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.SWAP_NOT_FOUND, message="Swap not found")


class NotEventOwnerError(AuthorizationError):
    def __init__(self, message: str = "You are not the owner of this event") -> None:
        super().__init__(code=ErrorCode.NOT_EVENT_OWNER, message=message)


class NotSwapResponderError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_SWAP_RESPONDER,
            message="You are not authorized to respond to this swap",
        )


class OverlapConflictError(ConflictError):
    """Raised when an interval overlaps another event of the same owner."""

    def __init__(self, title: str, interval: str, prefix: str = "") -> None:
        message = f"Event overlaps with another event: {title} ({interval})"
        if prefix:
            message = f"{prefix}: {message}"
        super().__init__(code=ErrorCode.EVENT_OVERLAP, message=message)


class DuplicateSwapError(ConflictError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_SWAP,
            message="A swap request for these events already exists",
        )


class StorageError(InternalError):
    """Raised when the persistence layer fails; the transaction has been rolled back."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.STORAGE_FAILURE,
            message="Something went wrong while saving changes",
        )
