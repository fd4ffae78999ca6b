from django.urls import path

from ticketing.handlers import (
    AddToCalendarView,
    CancelTicketView,
    CheckoutView,
    SetReminderView,
    TicketDetailView,
    TicketRedemptionListView,
    TransferTicketView,
    UserTicketListView,
    ValidateTicketView,
    WalletPassView,
)

urlpatterns = [
    path("checkout", CheckoutView.as_view(), name="checkout"),
    path("tickets/validate", ValidateTicketView.as_view(), name="ticket-validate"),
    path("tickets/<str:ticket_id>", TicketDetailView.as_view(), name="ticket-detail"),
    path(
        "tickets/<str:ticket_id>/redemptions",
        TicketRedemptionListView.as_view(),
        name="ticket-redemptions",
    ),
    path("tickets/<str:ticket_id>/cancel", CancelTicketView.as_view(), name="ticket-cancel"),
    path("tickets/<str:ticket_id>/transfer", TransferTicketView.as_view(), name="ticket-transfer"),
    path("tickets/<str:ticket_id>/calendar", AddToCalendarView.as_view(), name="ticket-calendar"),
    path("tickets/<str:ticket_id>/reminder", SetReminderView.as_view(), name="ticket-reminder"),
    path("tickets/<str:ticket_id>/wallet-pass", WalletPassView.as_view(), name="ticket-wallet-pass"),
    path("users/<int:user_id>/tickets", UserTicketListView.as_view(), name="user-tickets"),
]
