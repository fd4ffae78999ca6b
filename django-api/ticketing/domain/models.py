"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ticketing.domain.value_objects import (
    Capacity,
    Credential,
    EventId,
    Money,
    TicketId,
    TicketTypeId,
    UserId,
)


class TicketState(Enum):
    """Lifecycle state of an issued ticket. Used and Cancelled are terminal."""

    VALID = "valid"
    USED = "used"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    venue_name: str
    venue_address: str
    starts_at: datetime
    ends_at: datetime | None
    promoter_id: UserId


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType and its inventory counters."""

    id: TicketTypeId
    event_id: EventId
    name: str
    price: Money
    capacity: Capacity
    remaining: Capacity
    max_per_purchaser: int


@dataclass(frozen=True)
class User:
    """The parts of a user account the ticketing core displays."""

    id: UserId
    name: str
    email: str


@dataclass(frozen=True)
class Ticket:
    """Domain representation of an issued Ticket."""

    id: TicketId
    event_id: EventId
    ticket_type_id: TicketTypeId
    user_id: UserId
    quantity: int
    price: Money
    credential: Credential
    purchase_date: datetime
    valid_until: datetime
    is_used: bool = False
    validated_at: datetime | None = None
    validated_by: str | None = None
    cancelled_at: datetime | None = None
    added_to_calendar: bool = False
    reminder_set: bool = False

    @property
    def state(self) -> TicketState:
        if self.cancelled_at is not None:
            return TicketState.CANCELLED
        if self.is_used:
            return TicketState.USED
        return TicketState.VALID

    def is_expired(self, now: datetime) -> bool:
        return now > self.valid_until

    @property
    def total(self) -> Money:
        return self.price.times(self.quantity)


@dataclass(frozen=True)
class Redemption:
    """Append-only audit record of a successful validation."""

    ticket_id: TicketId
    redeemed_at: datetime
    validator_id: str


@dataclass(frozen=True)
class Reservation:
    """Inventory decremented for one cart line."""

    ticket_type_id: TicketTypeId
    quantity: int


@dataclass(frozen=True)
class CartLine:
    """One buyer-selected {ticket type, quantity} pair prior to checkout."""

    event_id: EventId
    ticket_type_id: TicketTypeId
    quantity: int
    unit_price: Money | None = None


@dataclass(frozen=True)
class LineFailure:
    """A cart line that could not be fulfilled, keyed by its original index."""

    line_index: int
    code: str
    message: str


@dataclass(frozen=True)
class CheckoutResult:
    issued: tuple[Ticket, ...] = ()
    failed: tuple[LineFailure, ...] = ()
    replayed: bool = False


@dataclass(frozen=True)
class CheckoutReceipt:
    """Recorded outcome of an idempotent checkout call."""

    id: int
    user_id: UserId
    idempotency_key: str
    failures: tuple[LineFailure, ...]
    ticket_ids: tuple[TicketId, ...]
    completed_at: datetime | None = None

    @property
    def completed(self) -> bool:
        return self.completed_at is not None


@dataclass(frozen=True)
class RedemptionResult:
    """What the entrance scanner displays after a successful validation."""

    ticket: Ticket
    buyer: User | None
    event: Event | None


@dataclass(frozen=True)
class WalletPass:
    platform: str
    url: str
