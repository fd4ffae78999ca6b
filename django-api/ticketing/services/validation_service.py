"""Validation gate - redeems a ticket credential at the point of entry.

Valid and unexpired -> Used happens in one conditional update in the store.
When that update matches nothing, the ticket is re-read only to pick the
error to show the scanner; the re-read never grants entry.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from django.utils import timezone

from ticketing.domain import Credential, Redemption, RedemptionResult, Ticket, TicketId, TicketState
from ticketing.domain.errors import (
    DomainError,
    TicketAlreadyUsedError,
    TicketBusyError,
    TicketExpiredError,
    TicketNotFoundError,
    TicketNotRedeemableError,
)
from ticketing.services.credentials import CredentialGenerator
from ticketing.services.notifier import Notifier, notify_after_commit
from ticketing.stores.interfaces import Directory, TicketStore

logger = logging.getLogger(__name__)

UNKNOWN_VALIDATOR = "unknown"
REDEEM_ATTEMPTS = 2


class ValidationService:
    """Service for entrance scanning."""

    def __init__(
        self,
        tickets: TicketStore,
        directory: Directory,
        notifier: Notifier,
        credentials: CredentialGenerator | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._tickets = tickets
        self._directory = directory
        self._notifier = notifier
        self._credentials = credentials or CredentialGenerator()
        self._clock = clock

    def validate(self, raw_credential: str, validator_id: str | None = None) -> RedemptionResult:
        """Redeem a scanned credential.

        Raises:
            TicketNotFoundError: If no ticket carries the credential.
            TicketAlreadyUsedError: If the ticket was already redeemed.
            TicketExpiredError: If the ticket's validity window has passed.
            TicketNotRedeemableError: If the ticket was cancelled.
            TicketBusyError: If concurrent changes kept the ticket from settling.
        """
        credential = self._credentials.verify(raw_credential)
        validator = validator_id or UNKNOWN_VALIDATOR

        for _ in range(REDEEM_ATTEMPTS):
            now = self._clock()
            ticket = self._tickets.redeem(credential, validator, now)
            if ticket is not None:
                break
            rejection = self._rejection(credential, now)
            if rejection is not None:
                logger.info("Rejected credential %s: %s", credential, rejection)
                raise rejection
        else:
            raise TicketBusyError()

        logger.info("Ticket %s validated by %s at %s", ticket.id, validator, now.isoformat())
        buyer = self._directory.get_user(ticket.user_id)
        event = self._directory.get_event(ticket.event_id)
        self._announce(ticket, event.title if event else "")
        return RedemptionResult(ticket=ticket, buyer=buyer, event=event)

    def history(self, ticket_id: TicketId) -> list[Redemption]:
        """Return the redemption audit trail of a ticket."""
        if self._tickets.get(ticket_id) is None:
            raise TicketNotFoundError()
        return self._tickets.list_redemptions(ticket_id)

    def _rejection(self, credential: Credential, now: datetime) -> DomainError | None:
        ticket = self._tickets.get_by_credential(credential)
        if ticket is None:
            return TicketNotFoundError()
        if ticket.state is TicketState.CANCELLED:
            return TicketNotRedeemableError()
        if ticket.state is TicketState.USED:
            validated_at = ticket.validated_at.isoformat() if ticket.validated_at else None
            return TicketAlreadyUsedError(validated_at)
        if ticket.is_expired(now):
            return TicketExpiredError()
        return None

    def _announce(self, ticket: Ticket, event_title: str) -> None:
        notify_after_commit(
            self._notifier,
            ticket.user_id,
            "ticket_validated",
            "Enjoy the show!",
            f'Your ticket for "{event_title}" was validated at the entrance',
            {"ticket_id": str(ticket.id), "event_id": str(ticket.event_id)},
        )
