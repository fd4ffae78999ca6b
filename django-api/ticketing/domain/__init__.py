from ticketing.domain.models import (
    CartLine,
    CheckoutReceipt,
    CheckoutResult,
    Event,
    LineFailure,
    Redemption,
    RedemptionResult,
    Reservation,
    Ticket,
    TicketState,
    TicketType,
    User,
    WalletPass,
)
from ticketing.domain.value_objects import (
    Capacity,
    Credential,
    EventId,
    Money,
    TicketId,
    TicketTypeId,
    UserId,
)

__all__ = [
    "CartLine",
    "CheckoutReceipt",
    "CheckoutResult",
    "Event",
    "LineFailure",
    "Redemption",
    "RedemptionResult",
    "Reservation",
    "Ticket",
    "TicketState",
    "TicketType",
    "User",
    "WalletPass",
    "EventId",
    "TicketTypeId",
    "TicketId",
    "UserId",
    "Money",
    "Capacity",
    "Credential",
]
