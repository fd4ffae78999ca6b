"""Serializers for request parsing and for rendering domain models."""

from rest_framework import serializers

from ticketing.domain import CartLine, EventId, Money, TicketTypeId, UserId
from ticketing.services.wallet_pass import PLATFORMS


class CartLineSerializer(serializers.Serializer):
    """One cart line. Quantity rules are checked per line by checkout.

    ``unit_price`` is ignored unless ``TICKETING["ACCEPT_CLIENT_PRICES"]`` is set.
    """

    event_id = serializers.UUIDField()
    ticket_type_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False
    )

    def to_cart_line(self, data: dict) -> CartLine:
        unit_price = data.get("unit_price")
        return CartLine(
            event_id=EventId(data["event_id"]),
            ticket_type_id=TicketTypeId(data["ticket_type_id"]),
            quantity=data["quantity"],
            unit_price=Money(unit_price) if unit_price is not None else None,
        )


class CheckoutRequestSerializer(serializers.Serializer):
    user_id = serializers.IntegerField(min_value=1)
    lines = CartLineSerializer(many=True, allow_empty=False)
    idempotency_key = serializers.CharField(max_length=128, required=False)

    def cart_lines(self) -> list[CartLine]:
        line_serializer = CartLineSerializer()
        return [line_serializer.to_cart_line(line) for line in self.validated_data["lines"]]

    def buyer_id(self) -> UserId:
        return UserId(self.validated_data["user_id"])


class ValidateTicketRequestSerializer(serializers.Serializer):
    credential = serializers.CharField(max_length=512)
    validator_id = serializers.CharField(max_length=255, required=False)


class CancelTicketRequestSerializer(serializers.Serializer):
    requester_id = serializers.IntegerField(min_value=1)


class TransferTicketRequestSerializer(serializers.Serializer):
    from_user_id = serializers.IntegerField(min_value=1)
    to_user_id = serializers.IntegerField(min_value=1)


class WalletPassRequestSerializer(serializers.Serializer):
    platform = serializers.ChoiceField(choices=PLATFORMS)


class TicketSerializer(serializers.Serializer):
    """Serializer for Ticket domain model."""

    id = serializers.UUIDField(source="id.value")
    event_id = serializers.UUIDField(source="event_id.value")
    ticket_type_id = serializers.UUIDField(source="ticket_type_id.value")
    user_id = serializers.IntegerField(source="user_id.value")
    quantity = serializers.IntegerField()
    price = serializers.DecimalField(source="price.amount", max_digits=10, decimal_places=2)
    qr_code = serializers.CharField(source="credential.value")
    state = serializers.CharField(source="state.value")
    is_used = serializers.BooleanField()
    validated_at = serializers.DateTimeField(allow_null=True)
    validated_by = serializers.CharField(allow_null=True)
    purchase_date = serializers.DateTimeField()
    valid_until = serializers.DateTimeField()
    added_to_calendar = serializers.BooleanField()
    reminder_set = serializers.BooleanField()


class LineFailureSerializer(serializers.Serializer):
    line_index = serializers.IntegerField()
    code = serializers.CharField()
    message = serializers.CharField()


class CheckoutResultSerializer(serializers.Serializer):
    issued = TicketSerializer(many=True)
    failed = LineFailureSerializer(many=True)
    replayed = serializers.BooleanField()


class BuyerSerializer(serializers.Serializer):
    id = serializers.IntegerField(source="id.value")
    name = serializers.CharField()
    email = serializers.CharField()


class EventSummarySerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    title = serializers.CharField()


class RedemptionResultSerializer(serializers.Serializer):
    ticket = TicketSerializer()
    buyer = BuyerSerializer(allow_null=True)
    event = EventSummarySerializer(allow_null=True)


class RedemptionSerializer(serializers.Serializer):
    redeemed_at = serializers.DateTimeField()
    validator_id = serializers.CharField()
