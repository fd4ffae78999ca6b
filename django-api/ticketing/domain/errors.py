"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INSUFFICIENT_INVENTORY = "INSUFFICIENT_INVENTORY"
    INVALID_CART_LINE = "INVALID_CART_LINE"
    CREDENTIAL_COLLISION = "CREDENTIAL_COLLISION"
    ALREADY_USED = "ALREADY_USED"
    EXPIRED = "EXPIRED"
    NOT_REDEEMABLE = "NOT_REDEEMABLE"
    TICKET_BUSY = "TICKET_BUSY"
    NOT_OWNER = "NOT_OWNER"
    INVALID_TRANSFER = "INVALID_TRANSFER"
    INVALID_PLATFORM = "INVALID_PLATFORM"
    INVALID_TICKET_ID = "INVALID_TICKET_ID"
    INVALID_USER_ID = "INVALID_USER_ID"
    CHECKOUT_IN_PROGRESS = "CHECKOUT_IN_PROGRESS"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class TicketTypeNotFoundError(DomainError):
    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_FOUND,
            message="Ticket type not found",
        )
        self.ticket_type_id = ticket_type_id


class TicketNotFoundError(DomainError):
    """Raised for an unknown ticket id or credential."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_FOUND,
            message="Ticket not found",
        )


class UserNotFoundError(DomainError):
    def __init__(self, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.USER_NOT_FOUND,
            message="User not found",
        )
        self.user_id = user_id


class InsufficientInventoryError(DomainError):
    """Raised when a reservation asks for more than is left.

    Terminal for the cart line: the buyer has to lower the quantity or pick
    another ticket type.
    """

    def __init__(self, ticket_type_id: str, requested: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_INVENTORY,
            message="Not enough tickets of this type remain for the requested quantity",
        )
        self.ticket_type_id = ticket_type_id
        self.requested = requested


class InvalidCartLineError(DomainError):
    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_CART_LINE, message=reason)


class CredentialCollisionError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CREDENTIAL_COLLISION,
            message="Could not allocate a unique ticket code",
        )


class TicketAlreadyUsedError(DomainError):
    """Raised when a ticket has already been scanned at the entrance."""

    def __init__(self, validated_at: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_USED,
            message="Ticket has already been used",
        )
        self.validated_at = validated_at


class TicketExpiredError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.EXPIRED, message="Ticket has expired")


class TicketNotRedeemableError(DomainError):
    """Raised for actions on a cancelled ticket."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_REDEEMABLE,
            message="Ticket has been cancelled",
        )


class TicketBusyError(DomainError):
    """Raised when concurrent changes kept a ticket from settling in time."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TICKET_BUSY,
            message="Ticket is being updated by another request, try again",
        )


class NotOwnerError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_OWNER,
            message="You do not own this ticket",
        )


class InvalidTransferError(DomainError):
    def __init__(self, reason: str) -> None:
        super().__init__(code=ErrorCode.INVALID_TRANSFER, message=reason)


class InvalidPlatformError(DomainError):
    def __init__(self, platform: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_PLATFORM,
            message="Wallet platform must be 'ios' or 'android'",
        )
        self.platform = platform


class InvalidTicketIdError(DomainError):
    """Raised when a ticket ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TICKET_ID,
            message="Invalid ticket ID format",
        )


class InvalidUserIdError(DomainError):
    """Raised when a user ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_USER_ID,
            message="Invalid user ID",
        )


class CheckoutInProgressError(DomainError):
    """Raised when a checkout key is reused before its first call has finished."""

    def __init__(self, idempotency_key: str) -> None:
        super().__init__(
            code=ErrorCode.CHECKOUT_IN_PROGRESS,
            message="A checkout with this key is still in progress",
        )
        self.idempotency_key = idempotency_key
