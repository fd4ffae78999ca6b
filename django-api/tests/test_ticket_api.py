"""Tests for the ticketing HTTP API."""

from uuid import uuid4

import pytest

from ticketing import models
from ticketing.domain import UserId

from support import remaining


def checkout_payload(user, *lines, key=None) -> dict:
    payload = {
        "user_id": user.pk,
        "lines": [
            {"event_id": str(ticket_type.event_id), "ticket_type_id": str(ticket_type.id), "quantity": quantity}
            for ticket_type, quantity in lines
        ],
    }
    if key:
        payload["idempotency_key"] = key
    return payload


@pytest.mark.django_db
class TestCheckoutEndpoint:
    def test_creates_tickets(self, api_client, buyer, general):
        response = api_client.post("/api/checkout", checkout_payload(buyer, (general, 2)), format="json")

        assert response.status_code == 201
        [ticket] = response.json()["issued"]
        assert ticket["quantity"] == 2
        assert ticket["price"] == "50.00"
        assert ticket["state"] == "valid"
        assert ticket["qr_code"].startswith("LYVEN_")
        assert response.json()["failed"] == []
        assert response.json()["replayed"] is False
        assert remaining(general) == 98

    def test_partial_failure_is_reported_per_line(self, api_client, buyer, make_ticket_type):
        scarce = make_ticket_type(name="VIP", capacity=1)
        plenty = make_ticket_type(name="General")

        response = api_client.post(
            "/api/checkout", checkout_payload(buyer, (scarce, 2), (plenty, 1)), format="json"
        )

        assert response.status_code == 201
        body = response.json()
        assert len(body["issued"]) == 1
        assert body["failed"] == [
            {
                "line_index": 0,
                "code": "INSUFFICIENT_INVENTORY",
                "message": "Not enough tickets of this type remain for the requested quantity",
            }
        ]

    def test_replay_returns_200(self, api_client, buyer, general):
        payload = checkout_payload(buyer, (general, 1), key="abc-123")

        first = api_client.post("/api/checkout", payload, format="json")
        second = api_client.post("/api/checkout", payload, format="json")

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["replayed"] is True
        assert second.json()["issued"][0]["id"] == first.json()["issued"][0]["id"]

    def test_retry_while_first_call_is_running_is_a_conflict(self, api_client, ticket_store, buyer, general):
        ticket_store.open_receipt(UserId(buyer.pk), "abc-456")

        response = api_client.post(
            "/api/checkout", checkout_payload(buyer, (general, 1), key="abc-456"), format="json"
        )

        assert response.status_code == 409
        assert response.json()["code"] == "CHECKOUT_IN_PROGRESS"
        assert remaining(general) == 100

    def test_unknown_buyer(self, api_client, django_user_model, general):
        ghost = django_user_model(pk=4242)

        response = api_client.post("/api/checkout", checkout_payload(ghost, (general, 1)), format="json")

        assert response.status_code == 404
        assert response.json()["code"] == "USER_NOT_FOUND"

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"user_id": 1, "lines": []},
            {"user_id": 0, "lines": [{"event_id": str(uuid4()), "ticket_type_id": str(uuid4()), "quantity": 1}]},
            {"user_id": 1, "lines": [{"event_id": "nope", "ticket_type_id": str(uuid4()), "quantity": 1}]},
        ],
    )
    def test_malformed_request(self, api_client, payload):
        response = api_client.post("/api/checkout", payload, format="json")

        assert response.status_code == 400


@pytest.mark.django_db
class TestValidateEndpoint:
    def test_grants_entry_once(self, api_client, issue):
        ticket = issue()
        payload = {"credential": ticket.credential.value, "validator_id": "gate-1"}

        first = api_client.post("/api/tickets/validate", payload, format="json")
        second = api_client.post("/api/tickets/validate", payload, format="json")

        assert first.status_code == 200
        body = first.json()
        assert body["ticket"]["state"] == "used"
        assert body["ticket"]["validated_by"] == "gate-1"
        assert body["buyer"]["name"] == "Ana Silva"
        assert body["event"]["title"] == "Summer Nights"
        assert second.status_code == 409
        assert second.json()["code"] == "ALREADY_USED"
        assert second.json()["message"] == "Ticket has already been used"
        assert "validated_at" in second.json()

    def test_unknown_credential(self, api_client):
        response = api_client.post("/api/tickets/validate", {"credential": "LYVEN_nope"}, format="json")

        assert response.status_code == 404
        assert response.json() == {"code": "TICKET_NOT_FOUND", "message": "Ticket not found"}

    def test_missing_credential(self, api_client):
        response = api_client.post("/api/tickets/validate", {}, format="json")

        assert response.status_code == 400


@pytest.mark.django_db
class TestTicketEndpoints:
    def test_detail(self, api_client, issue):
        ticket = issue()

        response = api_client.get(f"/api/tickets/{ticket.id}")

        assert response.status_code == 200
        assert response.json()["id"] == str(ticket.id)
        assert response.json()["qr_code"] == ticket.credential.value

    def test_malformed_ticket_id(self, api_client):
        response = api_client.get("/api/tickets/not-a-uuid")

        assert response.status_code == 400
        assert response.json() == {"code": "INVALID_TICKET_ID", "message": "Invalid ticket ID format"}

    def test_missing_ticket(self, api_client):
        response = api_client.get(f"/api/tickets/{uuid4()}")

        assert response.status_code == 404

    def test_redemptions(self, api_client, issue):
        ticket = issue()
        api_client.post(
            "/api/tickets/validate",
            {"credential": ticket.credential.value, "validator_id": "door-2"},
            format="json",
        )

        response = api_client.get(f"/api/tickets/{ticket.id}/redemptions")

        assert response.status_code == 200
        assert [r["validator_id"] for r in response.json()] == ["door-2"]

    def test_cancel(self, api_client, issue, buyer, general):
        ticket = issue(quantity=2)

        response = api_client.post(
            f"/api/tickets/{ticket.id}/cancel", {"requester_id": buyer.pk}, format="json"
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "refund_amount": "90.00"}
        assert remaining(general) == 100

    def test_cancel_by_stranger(self, api_client, issue, friend):
        ticket = issue()

        response = api_client.post(
            f"/api/tickets/{ticket.id}/cancel", {"requester_id": friend.pk}, format="json"
        )

        assert response.status_code == 403
        assert response.json()["code"] == "NOT_OWNER"

    def test_transfer(self, api_client, issue, buyer, friend):
        ticket = issue()

        response = api_client.post(
            f"/api/tickets/{ticket.id}/transfer",
            {"from_user_id": buyer.pk, "to_user_id": friend.pk},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["ticket"]["user_id"] == friend.pk
        assert response.json()["ticket"]["qr_code"] == ticket.credential.value

    def test_transfer_to_self(self, api_client, issue, buyer):
        ticket = issue()

        response = api_client.post(
            f"/api/tickets/{ticket.id}/transfer",
            {"from_user_id": buyer.pk, "to_user_id": buyer.pk},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_TRANSFER"

    @pytest.mark.parametrize(
        "suffix, field", [("calendar", "added_to_calendar"), ("reminder", "reminder_set")]
    )
    def test_flags(self, api_client, issue, suffix, field):
        ticket = issue()

        response = api_client.post(f"/api/tickets/{ticket.id}/{suffix}", format="json")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert getattr(models.Ticket.objects.get(pk=ticket.id.value), field) is True

    def test_flags_on_missing_ticket(self, api_client):
        response = api_client.post(f"/api/tickets/{uuid4()}/calendar", format="json")

        assert response.status_code == 404

    def test_wallet_pass(self, api_client, issue):
        ticket = issue()

        response = api_client.post(
            f"/api/tickets/{ticket.id}/wallet-pass", {"platform": "android"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["platform"] == "android"
        assert response.json()["url"].startswith("https://pay.google.com/gp/v/save/")

    def test_wallet_pass_unknown_platform(self, api_client, issue):
        ticket = issue()

        response = api_client.post(
            f"/api/tickets/{ticket.id}/wallet-pass", {"platform": "palm"}, format="json"
        )

        assert response.status_code == 400


@pytest.mark.django_db
class TestUserTicketsEndpoint:
    def test_lists_owned_tickets(self, api_client, issue, buyer, friend, lifecycle_service):
        kept = issue()
        given = issue()
        lifecycle_service.transfer(given.id, UserId(buyer.pk), UserId(friend.pk))

        response = api_client.get(f"/api/users/{buyer.pk}/tickets")

        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [str(kept.id)]

    def test_user_without_tickets(self, api_client, buyer):
        response = api_client.get(f"/api/users/{buyer.pk}/tickets")

        assert response.status_code == 200
        assert response.json() == []

    def test_zero_user_id(self, api_client):
        response = api_client.get("/api/users/0/tickets")

        assert response.status_code == 400
        assert response.json() == {"code": "INVALID_USER_ID", "message": "Invalid user ID"}
