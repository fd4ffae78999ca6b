"""Ticket lifecycle after issuance: cancellation, transfer and owner-side flags.

Only a Valid ticket may change owner or be cancelled. Both changes are
conditional updates guarded by owner and state, so they cannot interleave
with a redemption of the same ticket.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from ticketing.conf import TicketingConfig, get_config
from ticketing.domain import Money, Ticket, TicketId, TicketState, UserId
from ticketing.domain.errors import (
    DomainError,
    InvalidTransferError,
    NotOwnerError,
    TicketAlreadyUsedError,
    TicketBusyError,
    TicketNotFoundError,
    TicketNotRedeemableError,
    UserNotFoundError,
)
from ticketing.stores.interfaces import Directory, InventoryLedger, TicketStore

logger = logging.getLogger(__name__)


def refund_amount(ticket: Ticket, fee_rate: Decimal) -> Money:
    """Unit price times quantity, minus the cancellation fee, in whole cents."""
    return ticket.total.times(Decimal(1) - fee_rate).rounded()


class TicketLifecycleService:
    """Service for cancelling, transferring and flagging tickets."""

    def __init__(
        self,
        ledger: InventoryLedger,
        tickets: TicketStore,
        directory: Directory,
        config: TicketingConfig | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._ledger = ledger
        self._tickets = tickets
        self._directory = directory
        self._config = config or get_config()
        self._clock = clock

    def get(self, ticket_id: TicketId) -> Ticket:
        ticket = self._tickets.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError()
        return ticket

    def list_for_user(self, user_id: UserId) -> list[Ticket]:
        return self._tickets.list_for_user(user_id)

    def cancel(self, ticket_id: TicketId, requester_id: UserId) -> Money:
        """Void a ticket and return its refund.

        The ticket's quantity goes back to the inventory in the same
        transaction as the state change.

        Raises:
            TicketNotFoundError: If the ticket does not exist.
            NotOwnerError: If the requester does not own the ticket.
            TicketAlreadyUsedError: If the ticket was redeemed.
            TicketNotRedeemableError: If the ticket is already cancelled.
            TicketBusyError: If another request changed the ticket mid-cancel.
        """
        with transaction.atomic():
            ticket = self._tickets.cancel(ticket_id, requester_id, self._clock())
            if ticket is None:
                raise self._conflict(ticket_id, requester_id)
            self._ledger.release(ticket.ticket_type_id, ticket.quantity)

        refund = refund_amount(ticket, self._config.cancellation_fee_rate)
        logger.info(
            "Ticket %s cancelled by user %s, refund %s", ticket_id, requester_id, refund
        )
        return refund

    def transfer(self, ticket_id: TicketId, from_user_id: UserId, to_user_id: UserId) -> Ticket:
        """Hand a ticket to another user, keeping credential, price and validity.

        Raises:
            TicketNotFoundError: If the ticket does not exist.
            UserNotFoundError: If the recipient does not exist.
            InvalidTransferError: If the recipient already owns the ticket.
            NotOwnerError: If ``from_user_id`` does not own the ticket.
            TicketAlreadyUsedError: If the ticket was redeemed.
            TicketNotRedeemableError: If the ticket is cancelled.
            TicketBusyError: If another request changed the ticket mid-transfer.
        """
        if from_user_id == to_user_id:
            raise InvalidTransferError("Cannot transfer a ticket to its owner")
        if self._directory.get_user(to_user_id) is None:
            raise UserNotFoundError(str(to_user_id))

        ticket = self._tickets.reassign(ticket_id, from_user_id, to_user_id)
        if ticket is None:
            raise self._conflict(ticket_id, from_user_id)
        logger.info("Ticket %s transferred from user %s to user %s", ticket_id, from_user_id, to_user_id)
        return ticket

    def add_to_calendar(self, ticket_id: TicketId) -> None:
        if not self._tickets.set_flags(ticket_id, added_to_calendar=True):
            raise TicketNotFoundError()

    def set_reminder(self, ticket_id: TicketId) -> None:
        if not self._tickets.set_flags(ticket_id, reminder_set=True):
            raise TicketNotFoundError()

    def _conflict(self, ticket_id: TicketId, user_id: UserId) -> DomainError:
        ticket = self._tickets.get(ticket_id)
        if ticket is None:
            return TicketNotFoundError()
        if ticket.user_id != user_id:
            return NotOwnerError()
        if ticket.state is TicketState.USED:
            return TicketAlreadyUsedError()
        if ticket.state is TicketState.CANCELLED:
            return TicketNotRedeemableError()
        # Changed by another request between the update and the re-read.
        return TicketBusyError()
