"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ticketing.domain import TicketId, UserId
from ticketing.domain.errors import (
    DomainError,
    ErrorCode,
    InvalidTicketIdError,
    InvalidUserIdError,
    TicketAlreadyUsedError,
)
from ticketing.handlers.serializers import (
    CancelTicketRequestSerializer,
    CheckoutRequestSerializer,
    CheckoutResultSerializer,
    RedemptionResultSerializer,
    RedemptionSerializer,
    TicketSerializer,
    TransferTicketRequestSerializer,
    ValidateTicketRequestSerializer,
    WalletPassRequestSerializer,
)
from ticketing.services import (
    CheckoutService,
    TicketLifecycleService,
    ValidationService,
    WalletPassService,
)
from ticketing.services.notifier import DatabaseNotifier
from ticketing.stores.django_store import DjangoDirectory, DjangoInventoryLedger, DjangoTicketStore

STATUS_BY_CODE = {
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_TYPE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.TICKET_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NOT_OWNER: status.HTTP_403_FORBIDDEN,
    ErrorCode.ALREADY_USED: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_REDEEMABLE: status.HTTP_409_CONFLICT,
    ErrorCode.TICKET_BUSY: status.HTTP_409_CONFLICT,
    ErrorCode.CHECKOUT_IN_PROGRESS: status.HTTP_409_CONFLICT,
    ErrorCode.INSUFFICIENT_INVENTORY: status.HTTP_409_CONFLICT,
    ErrorCode.CREDENTIAL_COLLISION: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorCode.EXPIRED: status.HTTP_410_GONE,
    ErrorCode.INVALID_CART_LINE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_TRANSFER: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_PLATFORM: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_TICKET_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_USER_ID: status.HTTP_400_BAD_REQUEST,
}


def error_response(error: DomainError) -> Response:
    body = {"code": error.code.value, "message": error.message}
    if isinstance(error, TicketAlreadyUsedError) and error.validated_at:
        body["validated_at"] = error.validated_at
    return Response(body, status=STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST))


def parse_ticket_id(value: str) -> TicketId:
    try:
        return TicketId.from_string(value)
    except ValueError as exc:
        raise InvalidTicketIdError() from exc


def checkout_service() -> CheckoutService:
    return CheckoutService(
        DjangoInventoryLedger(), DjangoTicketStore(), DjangoDirectory(), DatabaseNotifier()
    )


def validation_service() -> ValidationService:
    return ValidationService(DjangoTicketStore(), DjangoDirectory(), DatabaseNotifier())


def lifecycle_service() -> TicketLifecycleService:
    return TicketLifecycleService(DjangoInventoryLedger(), DjangoTicketStore(), DjangoDirectory())


def wallet_pass_service() -> WalletPassService:
    return WalletPassService(DjangoTicketStore(), DjangoDirectory())


class CheckoutView(APIView):
    """Handler for POST /api/checkout"""

    def post(self, request: Request) -> Response:
        serializer = CheckoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = checkout_service().checkout(
                serializer.buyer_id(),
                serializer.cart_lines(),
                idempotency_key=serializer.validated_data.get("idempotency_key"),
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(
            CheckoutResultSerializer(result).data,
            status=status.HTTP_200_OK if result.replayed else status.HTTP_201_CREATED,
        )


class ValidateTicketView(APIView):
    """Handler for POST /api/tickets/validate"""

    def post(self, request: Request) -> Response:
        serializer = ValidateTicketRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = validation_service().validate(
                serializer.validated_data["credential"],
                serializer.validated_data.get("validator_id"),
            )
        except DomainError as exc:
            return error_response(exc)
        return Response(RedemptionResultSerializer(result).data)


class TicketDetailView(APIView):
    """Handler for GET /api/tickets/{ticket_id}"""

    def get(self, request: Request, ticket_id: str) -> Response:
        try:
            ticket = lifecycle_service().get(parse_ticket_id(ticket_id))
        except DomainError as exc:
            return error_response(exc)
        return Response(TicketSerializer(ticket).data)


class TicketRedemptionListView(APIView):
    """Handler for GET /api/tickets/{ticket_id}/redemptions"""

    def get(self, request: Request, ticket_id: str) -> Response:
        try:
            redemptions = validation_service().history(parse_ticket_id(ticket_id))
        except DomainError as exc:
            return error_response(exc)
        return Response(RedemptionSerializer(redemptions, many=True).data)


class CancelTicketView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/cancel"""

    def post(self, request: Request, ticket_id: str) -> Response:
        serializer = CancelTicketRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            refund = lifecycle_service().cancel(
                parse_ticket_id(ticket_id),
                UserId(serializer.validated_data["requester_id"]),
            )
        except DomainError as exc:
            return error_response(exc)
        return Response({"success": True, "refund_amount": str(refund)})


class TransferTicketView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/transfer"""

    def post(self, request: Request, ticket_id: str) -> Response:
        serializer = TransferTicketRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            ticket = lifecycle_service().transfer(
                parse_ticket_id(ticket_id),
                UserId(serializer.validated_data["from_user_id"]),
                UserId(serializer.validated_data["to_user_id"]),
            )
        except DomainError as exc:
            return error_response(exc)
        return Response({"success": True, "ticket": TicketSerializer(ticket).data})


class AddToCalendarView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/calendar"""

    def post(self, request: Request, ticket_id: str) -> Response:
        try:
            lifecycle_service().add_to_calendar(parse_ticket_id(ticket_id))
        except DomainError as exc:
            return error_response(exc)
        return Response({"success": True})


class SetReminderView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/reminder"""

    def post(self, request: Request, ticket_id: str) -> Response:
        try:
            lifecycle_service().set_reminder(parse_ticket_id(ticket_id))
        except DomainError as exc:
            return error_response(exc)
        return Response({"success": True})


class WalletPassView(APIView):
    """Handler for POST /api/tickets/{ticket_id}/wallet-pass"""

    def post(self, request: Request, ticket_id: str) -> Response:
        serializer = WalletPassRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            wallet_pass = wallet_pass_service().generate(
                parse_ticket_id(ticket_id), serializer.validated_data["platform"]
            )
        except DomainError as exc:
            return error_response(exc)
        return Response({"success": True, "platform": wallet_pass.platform, "url": wallet_pass.url})


class UserTicketListView(APIView):
    """Handler for GET /api/users/{user_id}/tickets"""

    def get(self, request: Request, user_id: int) -> Response:
        if user_id < 1:
            return error_response(InvalidUserIdError())
        tickets = lifecycle_service().list_for_user(UserId(user_id))
        return Response(TicketSerializer(tickets, many=True).data)
