"""Tests for cancellation, transfer and ticket flags."""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from ticketing import models
from ticketing.domain import Money, TicketId, TicketState, UserId
from ticketing.domain.errors import (
    InvalidTransferError,
    NotOwnerError,
    TicketAlreadyUsedError,
    TicketNotFoundError,
    TicketNotRedeemableError,
    UserNotFoundError,
)
from ticketing.services import TicketLifecycleService

from support import NOW, remaining


@pytest.mark.django_db
class TestCancel:
    def test_refund_keeps_fee_and_returns_inventory(self, lifecycle_service, issue, buyer, general):
        ticket = issue(quantity=2)
        assert remaining(general) == 98

        refund = lifecycle_service.cancel(ticket.id, UserId(buyer.pk))

        assert refund == Money(Decimal("90.00"))
        assert remaining(general) == 100
        cancelled = lifecycle_service.get(ticket.id)
        assert cancelled.state is TicketState.CANCELLED
        assert cancelled.cancelled_at == NOW

    def test_refund_rounds_half_up_to_cents(
        self, ledger, ticket_store, directory, clock, issue, buyer, make_ticket_type, settings
    ):
        settings.TICKETING = {"CANCELLATION_FEE_RATE": "0.15"}
        ticket = issue(ticket_type=make_ticket_type(price="0.10"))
        service = TicketLifecycleService(ledger, ticket_store, directory, clock=clock)

        # 0.10 * 0.85 = 0.085
        assert service.cancel(ticket.id, UserId(buyer.pk)) == Money(Decimal("0.09"))

    def test_zero_fee_refunds_everything(
        self, ledger, ticket_store, directory, clock, issue, buyer, settings
    ):
        settings.TICKETING = {"CANCELLATION_FEE_RATE": "0"}
        ticket = issue(quantity=3)
        service = TicketLifecycleService(ledger, ticket_store, directory, clock=clock)

        assert service.cancel(ticket.id, UserId(buyer.pk)) == Money(Decimal("150.00"))

    def test_only_the_owner_may_cancel(self, lifecycle_service, issue, friend, general):
        ticket = issue()

        with pytest.raises(NotOwnerError):
            lifecycle_service.cancel(ticket.id, UserId(friend.pk))

        assert lifecycle_service.get(ticket.id).state is TicketState.VALID
        assert remaining(general) == 99

    def test_used_ticket_cannot_be_cancelled(self, lifecycle_service, validation_service, issue, buyer, general):
        ticket = issue()
        validation_service.validate(ticket.credential.value)

        with pytest.raises(TicketAlreadyUsedError):
            lifecycle_service.cancel(ticket.id, UserId(buyer.pk))

        assert remaining(general) == 99

    def test_second_cancel_is_rejected_and_releases_nothing(self, lifecycle_service, issue, buyer, general):
        ticket = issue(quantity=2)
        lifecycle_service.cancel(ticket.id, UserId(buyer.pk))

        with pytest.raises(TicketNotRedeemableError):
            lifecycle_service.cancel(ticket.id, UserId(buyer.pk))

        assert remaining(general) == 100

    def test_unknown_ticket(self, lifecycle_service, buyer):
        with pytest.raises(TicketNotFoundError):
            lifecycle_service.cancel(TicketId(uuid4()), UserId(buyer.pk))


@pytest.mark.django_db
class TestTransfer:
    def test_new_owner_keeps_credential_price_and_validity(self, lifecycle_service, issue, buyer, friend):
        ticket = issue(quantity=2)

        moved = lifecycle_service.transfer(ticket.id, UserId(buyer.pk), UserId(friend.pk))

        assert moved.user_id == UserId(friend.pk)
        assert moved.credential == ticket.credential
        assert moved.price == ticket.price
        assert moved.quantity == 2
        assert moved.valid_until == ticket.valid_until
        assert moved.state is TicketState.VALID
        assert [t.id for t in lifecycle_service.list_for_user(UserId(friend.pk))] == [ticket.id]
        assert lifecycle_service.list_for_user(UserId(buyer.pk)) == []

    def test_transferred_ticket_still_validates(
        self, lifecycle_service, validation_service, issue, buyer, friend
    ):
        ticket = issue()
        lifecycle_service.transfer(ticket.id, UserId(buyer.pk), UserId(friend.pk))

        result = validation_service.validate(ticket.credential.value)

        assert result.buyer.id == UserId(friend.pk)

    def test_previous_owner_loses_control(self, lifecycle_service, issue, buyer, friend):
        ticket = issue()
        lifecycle_service.transfer(ticket.id, UserId(buyer.pk), UserId(friend.pk))

        with pytest.raises(NotOwnerError):
            lifecycle_service.transfer(ticket.id, UserId(buyer.pk), UserId(friend.pk))
        with pytest.raises(NotOwnerError):
            lifecycle_service.cancel(ticket.id, UserId(buyer.pk))

    def test_transfer_to_self(self, lifecycle_service, issue, buyer):
        ticket = issue()

        with pytest.raises(InvalidTransferError):
            lifecycle_service.transfer(ticket.id, UserId(buyer.pk), UserId(buyer.pk))

    def test_unknown_recipient(self, lifecycle_service, issue, buyer):
        ticket = issue()

        with pytest.raises(UserNotFoundError):
            lifecycle_service.transfer(ticket.id, UserId(buyer.pk), UserId(9999))

        assert lifecycle_service.get(ticket.id).user_id == UserId(buyer.pk)

    def test_used_ticket_cannot_change_owner(
        self, lifecycle_service, validation_service, issue, buyer, friend
    ):
        ticket = issue()
        validation_service.validate(ticket.credential.value)

        with pytest.raises(TicketAlreadyUsedError):
            lifecycle_service.transfer(ticket.id, UserId(buyer.pk), UserId(friend.pk))

    def test_cancelled_ticket_cannot_change_owner(self, lifecycle_service, issue, buyer, friend):
        ticket = issue()
        lifecycle_service.cancel(ticket.id, UserId(buyer.pk))

        with pytest.raises(TicketNotRedeemableError):
            lifecycle_service.transfer(ticket.id, UserId(buyer.pk), UserId(friend.pk))


@pytest.mark.django_db
class TestFlags:
    def test_add_to_calendar(self, lifecycle_service, issue):
        ticket = issue()

        lifecycle_service.add_to_calendar(ticket.id)

        row = models.Ticket.objects.get(pk=ticket.id.value)
        assert row.added_to_calendar is True
        assert row.reminder_set is False

    def test_set_reminder_is_idempotent(self, lifecycle_service, issue):
        ticket = issue()

        lifecycle_service.set_reminder(ticket.id)
        lifecycle_service.set_reminder(ticket.id)

        assert lifecycle_service.get(ticket.id).reminder_set is True

    def test_flags_do_not_touch_state(self, lifecycle_service, validation_service, issue):
        ticket = issue()
        validation_service.validate(ticket.credential.value)

        lifecycle_service.add_to_calendar(ticket.id)

        assert lifecycle_service.get(ticket.id).state is TicketState.USED

    @pytest.mark.parametrize("operation", ["add_to_calendar", "set_reminder"])
    def test_unknown_ticket(self, lifecycle_service, operation):
        with pytest.raises(TicketNotFoundError):
            getattr(lifecycle_service, operation)(TicketId(uuid4()))


@pytest.mark.django_db
def test_list_for_user_is_newest_first(lifecycle_service, issue, buyer, clock):
    first = issue()
    clock.advance(timedelta(minutes=1))
    second = issue()

    assert [t.id for t in lifecycle_service.list_for_user(UserId(buyer.pk))] == [second.id, first.id]
