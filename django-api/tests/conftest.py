"""Pytest configuration and shared fixtures."""

from datetime import timedelta
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from ticketing import models
from ticketing.domain import Ticket, UserId
from ticketing.services import (
    CheckoutService,
    TicketLifecycleService,
    ValidationService,
    WalletPassService,
)
from ticketing.services.notifier import DatabaseNotifier
from ticketing.stores.django_store import DjangoDirectory, DjangoInventoryLedger, DjangoTicketStore

from support import NOW, FixedClock, cart_line


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def promoter(django_user_model):
    return django_user_model.objects.create_user(
        username="promoter", email="promoter@example.com", password="x"
    )


@pytest.fixture
def buyer(django_user_model):
    return django_user_model.objects.create_user(
        username="ana",
        first_name="Ana",
        last_name="Silva",
        email="ana@example.com",
        password="x",
    )


@pytest.fixture
def friend(django_user_model):
    return django_user_model.objects.create_user(
        username="rui", email="rui@example.com", password="x"
    )


@pytest.fixture
def event(promoter) -> models.Event:
    return models.Event.objects.create(
        title="Summer Nights",
        venue_name="Coliseu",
        venue_address="Rua das Portas de Santo Antao 96, Lisboa",
        starts_at=NOW + timedelta(days=30),
        ends_at=NOW + timedelta(days=30, hours=5),
        promoter=promoter,
    )


@pytest.fixture
def make_ticket_type(event):
    def _make(
        name: str = "General",
        price: str = "50.00",
        capacity: int = 100,
        max_per_purchaser: int = 10,
        for_event: models.Event | None = None,
    ) -> models.TicketType:
        return models.TicketType.objects.create(
            event=for_event or event,
            name=name,
            price=Decimal(price),
            capacity=capacity,
            remaining=capacity,
            max_per_purchaser=max_per_purchaser,
        )

    return _make


@pytest.fixture
def general(make_ticket_type) -> models.TicketType:
    return make_ticket_type()


@pytest.fixture
def ledger() -> DjangoInventoryLedger:
    return DjangoInventoryLedger()


@pytest.fixture
def ticket_store() -> DjangoTicketStore:
    return DjangoTicketStore()


@pytest.fixture
def directory() -> DjangoDirectory:
    return DjangoDirectory()


@pytest.fixture
def notifier() -> DatabaseNotifier:
    return DatabaseNotifier()


@pytest.fixture
def checkout_service(ledger, ticket_store, directory, notifier, clock) -> CheckoutService:
    return CheckoutService(ledger, ticket_store, directory, notifier, clock=clock)


@pytest.fixture
def validation_service(ticket_store, directory, notifier, clock) -> ValidationService:
    return ValidationService(ticket_store, directory, notifier, clock=clock)


@pytest.fixture
def lifecycle_service(ledger, ticket_store, directory, clock) -> TicketLifecycleService:
    return TicketLifecycleService(ledger, ticket_store, directory, clock=clock)


@pytest.fixture
def wallet_pass_service(ticket_store, directory) -> WalletPassService:
    return WalletPassService(ticket_store, directory)


@pytest.fixture
def issue(checkout_service, buyer, general):
    """Buy one cart line and return the issued ticket."""

    def _issue(quantity: int = 1, ticket_type=None, user=None) -> Ticket:
        result = checkout_service.checkout(
            UserId((user or buyer).pk), [cart_line(ticket_type or general, quantity)]
        )
        assert result.failed == ()
        return result.issued[0]

    return _issue
