"""Helpers shared by the test modules."""

from datetime import datetime, timedelta, timezone

from ticketing import models
from ticketing.domain import CartLine, EventId, TicketTypeId

# Views run on the real clock, so fixtures stay near it.
NOW = datetime.now(timezone.utc).replace(microsecond=0)


class FixedClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def cart_line(ticket_type: models.TicketType, quantity: int = 1, unit_price=None) -> CartLine:
    return CartLine(
        event_id=EventId(ticket_type.event_id),
        ticket_type_id=TicketTypeId(ticket_type.id),
        quantity=quantity,
        unit_price=unit_price,
    )


def remaining(ticket_type: models.TicketType) -> int:
    ticket_type.refresh_from_db(fields=["remaining"])
    return ticket_type.remaining
