"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from ticketing.domain import (
    CheckoutReceipt,
    Credential,
    Event,
    EventId,
    LineFailure,
    Redemption,
    Reservation,
    Ticket,
    TicketId,
    TicketType,
    TicketTypeId,
    User,
    UserId,
)


class InventoryLedger(ABC):
    """Remaining capacity per ticket type."""

    @abstractmethod
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        """Return a ticket type with its current counters, or None if not found."""
        ...

    @abstractmethod
    def reserve(self, ticket_type_id: TicketTypeId, quantity: int) -> Reservation:
        """Check ``remaining >= quantity`` and decrement in one indivisible step.

        Raises:
            InsufficientInventoryError: If fewer than ``quantity`` remain.
            TicketTypeNotFoundError: If the ticket type does not exist.
        """
        ...

    @abstractmethod
    def release(self, ticket_type_id: TicketTypeId, quantity: int) -> None:
        """Give ``quantity`` back, never exceeding the total capacity."""
        ...


class TicketStore(ABC):
    """Durable issued tickets, their audit trail and checkout receipts."""

    @abstractmethod
    def insert(self, ticket: Ticket) -> Ticket:
        """Persist a new ticket.

        Raises:
            CredentialCollisionError: If the credential is already taken.
        """
        ...

    @abstractmethod
    def get(self, ticket_id: TicketId) -> Ticket | None:
        ...

    @abstractmethod
    def get_by_credential(self, credential: Credential) -> Ticket | None:
        """Exact, indexed lookup by redemption credential."""
        ...

    @abstractmethod
    def list_for_user(self, user_id: UserId) -> list[Ticket]:
        """Return a user's tickets, newest purchase first."""
        ...

    @abstractmethod
    def redeem(
        self, credential: Credential, validator_id: str, now: datetime
    ) -> Ticket | None:
        """Atomically move a valid, unexpired ticket to used.

        Appends a Redemption on success. Returns None when no ticket matched
        the condition; the caller decides why.
        """
        ...

    @abstractmethod
    def cancel(self, ticket_id: TicketId, owner_id: UserId, now: datetime) -> Ticket | None:
        """Atomically cancel a valid ticket held by ``owner_id``, or return None."""
        ...

    @abstractmethod
    def reassign(
        self, ticket_id: TicketId, from_user_id: UserId, to_user_id: UserId
    ) -> Ticket | None:
        """Atomically change the owner of a valid ticket, or return None."""
        ...

    @abstractmethod
    def set_flags(
        self,
        ticket_id: TicketId,
        *,
        added_to_calendar: bool | None = None,
        reminder_set: bool | None = None,
    ) -> bool:
        """Update presentation flags. Returns False if the ticket does not exist."""
        ...

    @abstractmethod
    def list_redemptions(self, ticket_id: TicketId) -> list[Redemption]:
        ...

    @abstractmethod
    def open_receipt(self, user_id: UserId, idempotency_key: str) -> tuple[CheckoutReceipt, bool]:
        """Get or create the receipt for a key. Returns (receipt, created).

        The receipt stays incomplete until ``close_receipt``.
        """
        ...

    @abstractmethod
    def close_receipt(
        self,
        receipt_id: int,
        ticket_ids: list[TicketId],
        failures: list[LineFailure],
        completed_at: datetime,
    ) -> None:
        """Record the outcome and mark the receipt complete."""
        ...

    @abstractmethod
    def get_tickets(self, ticket_ids: list[TicketId]) -> list[Ticket]:
        ...


class Directory(ABC):
    """Read access to events and users owned by the CRUD side of the system."""

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        ...

    @abstractmethod
    def get_user(self, user_id: UserId) -> User | None:
        ...
