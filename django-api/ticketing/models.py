"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.conf import settings
from django.db import models


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    venue_name = models.CharField(max_length=255)
    venue_address = models.CharField(max_length=500, blank=True, default="")
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField(blank=True, null=True)
    promoter = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="promoted_events"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["starts_at"]

    def __str__(self) -> str:
        return self.title


class TicketType(models.Model):
    """Persistence model for ticket types.

    ``remaining`` is the inventory ledger counter and is only ever changed
    through conditional updates in the store.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    capacity = models.PositiveIntegerField()
    remaining = models.PositiveIntegerField(blank=True)
    max_per_purchaser = models.PositiveIntegerField(default=10)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["event"], name="ticketing_t_event_i_5c1f0e_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(remaining__gte=0) & models.Q(remaining__lte=models.F("capacity")),
                name="ticket_type_remaining_within_capacity",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        if self._state.adding and self.remaining is None:
            self.remaining = self.capacity
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class CheckoutReceipt(models.Model):
    """Outcome of a checkout call made with an idempotency key.

    ``completed_at`` stays empty while the first call is still issuing.
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    idempotency_key = models.CharField(max_length=128)
    ticket_ids = models.JSONField(default=list)
    failures = models.JSONField(default=list)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "idempotency_key"], name="unique_checkout_key_per_user"
            ),
        ]


class Ticket(models.Model):
    """Persistence model for issued tickets."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.PROTECT, related_name="tickets")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="tickets"
    )
    ticket_type = models.ForeignKey(
        TicketType, on_delete=models.PROTECT, related_name="tickets"
    )
    quantity = models.PositiveIntegerField()
    price = models.DecimalField(max_digits=10, decimal_places=2)
    qr_code = models.CharField(max_length=255, unique=True)
    is_used = models.BooleanField(default=False)
    validated_at = models.DateTimeField(blank=True, null=True)
    validated_by = models.CharField(max_length=255, blank=True, null=True)
    purchase_date = models.DateTimeField()
    valid_until = models.DateTimeField()
    added_to_calendar = models.BooleanField(default=False)
    reminder_set = models.BooleanField(default=False)
    cancelled_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["-purchase_date"]
        indexes = [
            models.Index(fields=["user", "-purchase_date"], name="ticketing_t_user_id_3b9a51_idx"),
            models.Index(fields=["event"], name="ticketing_t_event_i_8e2d74_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(valid_until__gte=models.F("purchase_date")),
                name="ticket_valid_until_after_purchase",
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="ticket_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.ticket_type_id} ({self.qr_code})"


class Redemption(models.Model):
    """Append-only audit trail of successful validations."""

    ticket = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name="redemptions")
    redeemed_at = models.DateTimeField()
    validator_id = models.CharField(max_length=255)

    class Meta:
        ordering = ["redeemed_at"]


class Notification(models.Model):
    """In-app notification inbox row written by the notifier."""

    class Kind(models.TextChoices):
        TICKET_SOLD = "ticket_sold"
        TICKET_VALIDATED = "ticket_validated"
        EVENT_REMINDER = "event_reminder"
        SYSTEM = "system"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    kind = models.CharField(max_length=32, choices=Kind.choices)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="ticketing_n_user_id_7f4c2a_idx"),
        ]

    def __str__(self) -> str:
        return self.title
