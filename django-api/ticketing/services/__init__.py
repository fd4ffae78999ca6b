"""Ticketing services - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or raise domain errors
"""

from ticketing.services.checkout_service import CheckoutService
from ticketing.services.transfer_service import TicketLifecycleService
from ticketing.services.validation_service import ValidationService
from ticketing.services.wallet_pass import WalletPassService

__all__ = [
    "CheckoutService",
    "TicketLifecycleService",
    "ValidationService",
    "WalletPassService",
]
