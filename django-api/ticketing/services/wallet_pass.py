"""Wallet pass links for Apple Wallet and Google Wallet.

The pass document is JSON, url-encoded into the platform's save link.
Nothing here writes to the ticket store.
"""

import json
from urllib.parse import quote

from ticketing.conf import TicketingConfig, get_config
from ticketing.domain import Event, Ticket, TicketId, User, WalletPass
from ticketing.domain.errors import (
    EventNotFoundError,
    InvalidPlatformError,
    TicketNotFoundError,
    UserNotFoundError,
)
from ticketing.stores.interfaces import Directory, TicketStore

PLATFORMS = ("ios", "android")


class WalletPassService:
    def __init__(
        self,
        tickets: TicketStore,
        directory: Directory,
        config: TicketingConfig | None = None,
    ) -> None:
        self._tickets = tickets
        self._directory = directory
        self._config = config or get_config()

    def generate(self, ticket_id: TicketId, platform: str) -> WalletPass:
        """Build the save-to-wallet link for a ticket.

        Raises:
            InvalidPlatformError: If platform is not ``ios`` or ``android``.
            TicketNotFoundError: If the ticket does not exist.
            EventNotFoundError: If the ticket's event is gone.
            UserNotFoundError: If the ticket's owner is gone.
        """
        if platform not in PLATFORMS:
            raise InvalidPlatformError(platform)
        ticket = self._tickets.get(ticket_id)
        if ticket is None:
            raise TicketNotFoundError()
        event = self._directory.get_event(ticket.event_id)
        if event is None:
            raise EventNotFoundError(str(ticket.event_id))
        holder = self._directory.get_user(ticket.user_id)
        if holder is None:
            raise UserNotFoundError(str(ticket.user_id))

        if platform == "ios":
            document = self._apple_pass(ticket, event, holder)
            base_url = f"{self._config.wallet_apple_base_url}?pass="
        else:
            document = self._google_pass(ticket, event, holder)
            base_url = f"{self._config.wallet_google_base_url}/"
        encoded = quote(json.dumps(document, ensure_ascii=False), safe="")
        return WalletPass(platform=platform, url=base_url + encoded)

    def _apple_pass(self, ticket: Ticket, event: Event, holder: User) -> dict:
        organization = self._config.wallet_organization
        return {
            "formatVersion": 1,
            "passTypeIdentifier": f"pass.com.{organization.lower()}.ticket",
            "serialNumber": str(ticket.id),
            "teamIdentifier": organization.upper(),
            "organizationName": organization,
            "description": f"Ticket for {event.title}",
            "logoText": organization,
            "barcode": {
                "message": ticket.credential.value,
                "format": "PKBarcodeFormatQR",
                "messageEncoding": "iso-8859-1",
            },
            "relevantDate": event.starts_at.isoformat(),
            "expirationDate": ticket.valid_until.isoformat(),
            "eventTicket": {
                "headerFields": [{"key": "event", "label": "EVENT", "value": event.title}],
                "primaryFields": [{"key": "holder", "label": "NAME", "value": holder.name}],
                "secondaryFields": [
                    {"key": "venue", "label": "VENUE", "value": event.venue_name},
                    {"key": "quantity", "label": "QUANTITY", "value": f"{ticket.quantity}x"},
                ],
                "auxiliaryFields": [
                    {"key": "date", "label": "DATE", "value": event.starts_at.date().isoformat()},
                    {"key": "time", "label": "TIME", "value": event.starts_at.strftime("%H:%M")},
                ],
                "backFields": [
                    {"key": "ticketId", "label": "Ticket ID", "value": str(ticket.id)},
                    {"key": "address", "label": "Address", "value": event.venue_address},
                    {"key": "price", "label": "Price", "value": f"€{ticket.price}"},
                ],
            },
        }

    def _google_pass(self, ticket: Ticket, event: Event, holder: User) -> dict:
        organization = self._config.wallet_organization
        return {
            "id": str(ticket.id),
            "classId": f"{organization.lower()}_event_ticket",
            "state": "ACTIVE",
            "barcode": {"type": "QR_CODE", "value": ticket.credential.value},
            "cardTitle": {"defaultValue": {"language": "en", "value": organization}},
            "header": {"defaultValue": {"language": "en", "value": event.title}},
            "subheader": {"defaultValue": {"language": "en", "value": event.venue_name}},
            "body": {"defaultValue": {"language": "en", "value": holder.name}},
            "validTimeInterval": {"end": {"date": ticket.valid_until.isoformat()}},
            "textModulesData": [
                {"id": "quantity", "header": "QUANTITY", "body": f"{ticket.quantity} ticket(s)"},
                {"id": "date", "header": "DATE", "body": event.starts_at.date().isoformat()},
                {"id": "time", "header": "TIME", "body": event.starts_at.strftime("%H:%M")},
                {"id": "address", "header": "ADDRESS", "body": event.venue_address},
                {"id": "price", "header": "PRICE", "body": f"€{ticket.price}"},
            ],
        }
