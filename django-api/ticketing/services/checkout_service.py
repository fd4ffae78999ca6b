"""Checkout - turns a cart into issued tickets.

Each cart line is its own transaction: reserve inventory, then insert the
ticket with a fresh credential. A failing line rolls back only itself, so a
cart can come back partly fulfilled. Failures keep the index of the line
they came from.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from uuid import uuid4

from django.db import transaction
from django.utils import timezone

from ticketing.conf import TicketingConfig, get_config
from ticketing.domain import (
    CartLine,
    CheckoutResult,
    Credential,
    Event,
    EventId,
    LineFailure,
    Ticket,
    TicketId,
    TicketType,
    TicketTypeId,
    UserId,
)
from ticketing.domain.errors import (
    CheckoutInProgressError,
    CredentialCollisionError,
    DomainError,
    InvalidCartLineError,
    UserNotFoundError,
)
from ticketing.services.credentials import CredentialGenerator
from ticketing.services.notifier import Notifier, notify_after_commit
from ticketing.stores.interfaces import Directory, InventoryLedger, TicketStore

logger = logging.getLogger(__name__)


class CheckoutService:
    """Service for converting carts into tickets."""

    def __init__(
        self,
        ledger: InventoryLedger,
        tickets: TicketStore,
        directory: Directory,
        notifier: Notifier,
        credentials: CredentialGenerator | None = None,
        config: TicketingConfig | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._ledger = ledger
        self._tickets = tickets
        self._directory = directory
        self._notifier = notifier
        self._config = config or get_config()
        self._credentials = credentials or CredentialGenerator(self._config)
        self._clock = clock

    def checkout(
        self,
        user_id: UserId,
        lines: Sequence[CartLine],
        idempotency_key: str | None = None,
    ) -> CheckoutResult:
        """Issue tickets for each cart line, in order.

        With an idempotency key, a repeated call returns the recorded result
        of the first call instead of issuing again.

        Raises:
            UserNotFoundError: If the buyer does not exist.
            CheckoutInProgressError: If the key belongs to a call that has not
                finished.
        """
        if self._directory.get_user(user_id) is None:
            raise UserNotFoundError(str(user_id))

        receipt_id = None
        if idempotency_key:
            receipt, created = self._tickets.open_receipt(user_id, idempotency_key)
            if not created:
                if not receipt.completed:
                    logger.warning(
                        "Checkout %r for user %s is still in progress", idempotency_key, user_id
                    )
                    raise CheckoutInProgressError(idempotency_key)
                logger.info("Replaying checkout %r for user %s", idempotency_key, user_id)
                return CheckoutResult(
                    issued=tuple(self._tickets.get_tickets(list(receipt.ticket_ids))),
                    failed=receipt.failures,
                    replayed=True,
                )
            receipt_id = receipt.id

        issued: list[Ticket] = []
        failed: list[LineFailure] = []
        try:
            for index, line in enumerate(lines):
                try:
                    ticket, event = self._issue_line(user_id, line)
                except DomainError as exc:
                    logger.info("Checkout line %d for user %s failed: %s", index, user_id, exc)
                    failed.append(
                        LineFailure(line_index=index, code=exc.code.value, message=exc.message)
                    )
                    continue
                issued.append(ticket)
                self._announce_sale(ticket, event)
        finally:
            # Lines that committed before an unexpected error stay on the receipt.
            if receipt_id is not None:
                self._tickets.close_receipt(
                    receipt_id, [ticket.id for ticket in issued], failed, self._clock()
                )

        logger.info(
            "Checkout for user %s issued %d ticket(s), %d line(s) failed",
            user_id,
            len(issued),
            len(failed),
        )
        return CheckoutResult(issued=tuple(issued), failed=tuple(failed))

    def _issue_line(self, user_id: UserId, line: CartLine) -> tuple[Ticket, Event]:
        now = self._clock()
        event, ticket_type = self._resolve(line, now)
        unit_price = ticket_type.price
        if line.unit_price is not None and self._config.accept_client_prices:
            unit_price = line.unit_price
        valid_until = event.ends_at or now + self._config.default_validity

        ticket_id = TicketId(uuid4())

        def draft(credential: Credential) -> Ticket:
            return Ticket(
                id=ticket_id,
                event_id=event.id,
                ticket_type_id=ticket_type.id,
                user_id=user_id,
                quantity=line.quantity,
                price=unit_price,
                credential=credential,
                purchase_date=now,
                valid_until=valid_until,
            )

        with transaction.atomic():
            self._ledger.reserve(ticket_type.id, line.quantity)
            ticket = self._insert_with_fresh_credential(ticket_id, event.id, ticket_type.id, draft)
        return ticket, event

    def _resolve(self, line: CartLine, now: datetime) -> tuple[Event, TicketType]:
        if line.quantity <= 0:
            raise InvalidCartLineError("Quantity must be at least 1")
        event = self._directory.get_event(line.event_id)
        if event is None:
            raise InvalidCartLineError("Unknown event")
        ticket_type = self._ledger.get_ticket_type(line.ticket_type_id)
        if ticket_type is None or ticket_type.event_id != event.id:
            raise InvalidCartLineError("Unknown ticket type for this event")
        if line.quantity > ticket_type.max_per_purchaser:
            raise InvalidCartLineError(
                f"At most {ticket_type.max_per_purchaser} ticket(s) of this type per purchase"
            )
        if event.ends_at is not None and event.ends_at < now:
            raise InvalidCartLineError("Event has already ended")
        return event, ticket_type

    def _insert_with_fresh_credential(
        self,
        ticket_id: TicketId,
        event_id: EventId,
        ticket_type_id: TicketTypeId,
        draft: Callable[[Credential], Ticket],
    ) -> Ticket:
        attempts = self._config.credential_max_attempts
        for attempt in range(1, attempts + 1):
            credential = self._credentials.generate(ticket_id, event_id, ticket_type_id)
            try:
                return self._tickets.insert(draft(credential))
            except CredentialCollisionError:
                logger.warning(
                    "Credential collision for ticket %s (attempt %d of %d)",
                    ticket_id,
                    attempt,
                    attempts,
                )
        raise CredentialCollisionError()

    def _announce_sale(self, ticket: Ticket, event: Event) -> None:
        amount = ticket.total.rounded()
        notify_after_commit(
            self._notifier,
            event.promoter_id,
            "ticket_sold",
            "New ticket sold!",
            f'{ticket.quantity} ticket(s) sold for "{event.title}" - €{amount}',
            {
                "event_id": str(event.id),
                "event_title": event.title,
                "ticket_id": str(ticket.id),
                "quantity": ticket.quantity,
                "amount": str(amount),
            },
        )
