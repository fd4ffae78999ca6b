"""Django ORM implementation of the ticketing stores.

Every state change that other requests may race on is a single conditional
``UPDATE ... WHERE`` issued through ``QuerySet.update``. The row count it
returns decides the outcome; nothing is read first and written later.
"""

import logging
from datetime import datetime
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import F

from ticketing import models
from ticketing.domain import (
    Capacity,
    CheckoutReceipt,
    Credential,
    Event,
    EventId,
    LineFailure,
    Money,
    Redemption,
    Reservation,
    Ticket,
    TicketId,
    TicketType,
    TicketTypeId,
    User,
    UserId,
)
from ticketing.domain.errors import (
    CredentialCollisionError,
    InsufficientInventoryError,
    TicketTypeNotFoundError,
)
from ticketing.stores.interfaces import Directory, InventoryLedger, TicketStore

logger = logging.getLogger(__name__)


def _to_event(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        title=row.title,
        venue_name=row.venue_name,
        venue_address=row.venue_address,
        starts_at=row.starts_at,
        ends_at=row.ends_at,
        promoter_id=UserId(row.promoter_id),
    )


def _to_ticket_type(row: models.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        price=Money(row.price),
        capacity=Capacity(row.capacity),
        remaining=Capacity(row.remaining),
        max_per_purchaser=row.max_per_purchaser,
    )


def _to_ticket(row: models.Ticket) -> Ticket:
    return Ticket(
        id=TicketId(row.id),
        event_id=EventId(row.event_id),
        ticket_type_id=TicketTypeId(row.ticket_type_id),
        user_id=UserId(row.user_id),
        quantity=row.quantity,
        price=Money(row.price),
        credential=Credential(row.qr_code),
        purchase_date=row.purchase_date,
        valid_until=row.valid_until,
        is_used=row.is_used,
        validated_at=row.validated_at,
        validated_by=row.validated_by,
        cancelled_at=row.cancelled_at,
        added_to_calendar=row.added_to_calendar,
        reminder_set=row.reminder_set,
    )


def _to_receipt(row: models.CheckoutReceipt) -> CheckoutReceipt:
    return CheckoutReceipt(
        id=row.pk,
        user_id=UserId(row.user_id),
        idempotency_key=row.idempotency_key,
        failures=tuple(LineFailure(**failure) for failure in row.failures),
        ticket_ids=tuple(TicketId(UUID(pk)) for pk in row.ticket_ids),
        completed_at=row.completed_at,
    )


class DjangoInventoryLedger(InventoryLedger):
    """Inventory counters kept on the ticket type rows."""

    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        row = models.TicketType.objects.filter(pk=ticket_type_id.value).first()
        return _to_ticket_type(row) if row else None

    def reserve(self, ticket_type_id: TicketTypeId, quantity: int) -> Reservation:
        if quantity <= 0:
            raise ValueError("Reservation quantity must be positive")
        updated = models.TicketType.objects.filter(
            pk=ticket_type_id.value, remaining__gte=quantity
        ).update(remaining=F("remaining") - quantity)
        if updated:
            logger.debug("Reserved %d of ticket type %s", quantity, ticket_type_id)
            return Reservation(ticket_type_id=ticket_type_id, quantity=quantity)
        if not models.TicketType.objects.filter(pk=ticket_type_id.value).exists():
            raise TicketTypeNotFoundError(str(ticket_type_id))
        logger.info(
            "Insufficient inventory for ticket type %s (requested %d)",
            ticket_type_id,
            quantity,
        )
        raise InsufficientInventoryError(str(ticket_type_id), quantity)

    def release(self, ticket_type_id: TicketTypeId, quantity: int) -> None:
        if quantity <= 0:
            raise ValueError("Release quantity must be positive")
        updated = models.TicketType.objects.filter(
            pk=ticket_type_id.value,
            remaining__lte=F("capacity") - quantity,
        ).update(remaining=F("remaining") + quantity)
        if updated:
            logger.debug("Released %d of ticket type %s", quantity, ticket_type_id)
            return

        with transaction.atomic():
            row = models.TicketType.objects.select_for_update().filter(pk=ticket_type_id.value).first()
            if row is None:
                raise TicketTypeNotFoundError(str(ticket_type_id))
            logger.error(
                "Inventory release overflow on ticket type %s: remaining=%d capacity=%d release=%d",
                ticket_type_id,
                row.remaining,
                row.capacity,
                quantity,
            )
            row.remaining = row.capacity
            row.save(update_fields=["remaining"])


class DjangoTicketStore(TicketStore):
    """PostgreSQL-backed ticket store using Django ORM."""

    def insert(self, ticket: Ticket) -> Ticket:
        try:
            with transaction.atomic():
                row = models.Ticket.objects.create(
                    id=ticket.id.value,
                    event_id=ticket.event_id.value,
                    user_id=ticket.user_id.value,
                    ticket_type_id=ticket.ticket_type_id.value,
                    quantity=ticket.quantity,
                    price=ticket.price.amount,
                    qr_code=ticket.credential.value,
                    purchase_date=ticket.purchase_date,
                    valid_until=ticket.valid_until,
                )
        except IntegrityError as exc:
            if models.Ticket.objects.filter(qr_code=ticket.credential.value).exists():
                raise CredentialCollisionError() from exc
            raise
        return _to_ticket(row)

    def get(self, ticket_id: TicketId) -> Ticket | None:
        row = models.Ticket.objects.filter(pk=ticket_id.value).first()
        return _to_ticket(row) if row else None

    def get_by_credential(self, credential: Credential) -> Ticket | None:
        row = models.Ticket.objects.filter(qr_code=credential.value).first()
        return _to_ticket(row) if row else None

    def list_for_user(self, user_id: UserId) -> list[Ticket]:
        rows = models.Ticket.objects.filter(user_id=user_id.value).order_by("-purchase_date")
        return [_to_ticket(row) for row in rows]

    def get_tickets(self, ticket_ids: list[TicketId]) -> list[Ticket]:
        rows = models.Ticket.objects.in_bulk([ticket_id.value for ticket_id in ticket_ids])
        return [_to_ticket(rows[ticket_id.value]) for ticket_id in ticket_ids if ticket_id.value in rows]

    def redeem(self, credential: Credential, validator_id: str, now: datetime) -> Ticket | None:
        with transaction.atomic():
            updated = models.Ticket.objects.filter(
                qr_code=credential.value,
                is_used=False,
                cancelled_at__isnull=True,
                valid_until__gte=now,
            ).update(is_used=True, validated_at=now, validated_by=validator_id)
            if not updated:
                return None
            row = models.Ticket.objects.get(qr_code=credential.value)
            models.Redemption.objects.create(ticket=row, redeemed_at=now, validator_id=validator_id)
        return _to_ticket(row)

    def cancel(self, ticket_id: TicketId, owner_id: UserId, now: datetime) -> Ticket | None:
        updated = models.Ticket.objects.filter(
            pk=ticket_id.value,
            user_id=owner_id.value,
            is_used=False,
            cancelled_at__isnull=True,
        ).update(cancelled_at=now)
        return self.get(ticket_id) if updated else None

    def reassign(
        self, ticket_id: TicketId, from_user_id: UserId, to_user_id: UserId
    ) -> Ticket | None:
        updated = models.Ticket.objects.filter(
            pk=ticket_id.value,
            user_id=from_user_id.value,
            is_used=False,
            cancelled_at__isnull=True,
        ).update(user_id=to_user_id.value)
        return self.get(ticket_id) if updated else None

    def set_flags(
        self,
        ticket_id: TicketId,
        *,
        added_to_calendar: bool | None = None,
        reminder_set: bool | None = None,
    ) -> bool:
        changes = {}
        if added_to_calendar is not None:
            changes["added_to_calendar"] = added_to_calendar
        if reminder_set is not None:
            changes["reminder_set"] = reminder_set
        queryset = models.Ticket.objects.filter(pk=ticket_id.value)
        if not changes:
            return queryset.exists()
        return bool(queryset.update(**changes))

    def list_redemptions(self, ticket_id: TicketId) -> list[Redemption]:
        rows = models.Redemption.objects.filter(ticket_id=ticket_id.value).order_by("redeemed_at", "pk")
        return [
            Redemption(
                ticket_id=ticket_id,
                redeemed_at=row.redeemed_at,
                validator_id=row.validator_id,
            )
            for row in rows
        ]

    def open_receipt(self, user_id: UserId, idempotency_key: str) -> tuple[CheckoutReceipt, bool]:
        row, created = models.CheckoutReceipt.objects.get_or_create(
            user_id=user_id.value, idempotency_key=idempotency_key
        )
        return _to_receipt(row), created

    def close_receipt(
        self,
        receipt_id: int,
        ticket_ids: list[TicketId],
        failures: list[LineFailure],
        completed_at: datetime,
    ) -> None:
        models.CheckoutReceipt.objects.filter(pk=receipt_id).update(
            ticket_ids=[str(ticket_id) for ticket_id in ticket_ids],
            failures=[
                {"line_index": f.line_index, "code": f.code, "message": f.message}
                for f in failures
            ],
            completed_at=completed_at,
        )


class DjangoDirectory(Directory):
    """Events from the ticketing tables, users from the auth user model."""

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(pk=event_id.value).first()
        return _to_event(row) if row else None

    def get_user(self, user_id: UserId) -> User | None:
        row = get_user_model().objects.filter(pk=user_id.value).first()
        if row is None:
            return None
        return User(
            id=UserId(row.pk),
            name=row.get_full_name() or row.get_username(),
            email=row.email or "",
        )
