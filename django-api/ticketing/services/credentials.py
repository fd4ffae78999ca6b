"""Redemption credentials (the payload of a ticket's QR code).

A credential reads ``PREFIX_<event>_<type>_<ticket>_<NONCE>`` so staff can
correlate a scanned code by eye. Uniqueness, not secrecy, is its job; the
ticket store's unique index is the final word on collisions. Signing is an
optional hardening step that rejects hand-edited codes before lookup.
"""

import secrets

from django.core import signing

from ticketing.conf import TicketingConfig, get_config
from ticketing.domain import Credential, EventId, TicketId, TicketTypeId
from ticketing.domain.errors import TicketNotFoundError

SIGNING_SALT = "ticketing.credential"
NONCE_BYTES = 8


class CredentialGenerator:
    def __init__(self, config: TicketingConfig | None = None) -> None:
        self._config = config or get_config()
        self._signer = signing.Signer(salt=SIGNING_SALT)

    def generate(
        self, ticket_id: TicketId, event_id: EventId, ticket_type_id: TicketTypeId
    ) -> Credential:
        nonce = secrets.token_hex(NONCE_BYTES).upper()
        token = "_".join(
            [
                self._config.credential_prefix,
                event_id.value.hex[:8],
                ticket_type_id.value.hex[:8],
                ticket_id.value.hex,
                nonce,
            ]
        )
        if self._config.sign_credentials:
            token = self._signer.sign(token)
        return Credential(token)

    def verify(self, raw: str) -> Credential:
        """Turn a scanned string into a credential fit for lookup.

        Raises:
            TicketNotFoundError: If the string is empty or its signature is bad.
        """
        raw = (raw or "").strip()
        if not raw:
            raise TicketNotFoundError()
        if self._config.sign_credentials:
            try:
                self._signer.unsign(raw)
            except signing.BadSignature as exc:
                raise TicketNotFoundError() from exc
        return Credential(raw)
