from ticketing.handlers.views import (
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

__all__ = [
    "AddToCalendarView",
    "CancelTicketView",
    "CheckoutView",
    "SetReminderView",
    "TicketDetailView",
    "TicketRedemptionListView",
    "TransferTicketView",
    "UserTicketListView",
    "ValidateTicketView",
    "WalletPassView",
]
