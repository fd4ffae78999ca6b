"""Ticketing settings, read from ``settings.TICKETING`` with defaults."""

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal

from django.conf import settings

DEFAULTS = {
    "CANCELLATION_FEE_RATE": "0.10",
    "DEFAULT_VALIDITY_DAYS": 180,
    "CREDENTIAL_PREFIX": "LYVEN",
    "CREDENTIAL_MAX_ATTEMPTS": 5,
    "SIGN_CREDENTIALS": False,
    "ACCEPT_CLIENT_PRICES": False,
    "WALLET_APPLE_BASE_URL": "https://wallet.lyven.app/apple",
    "WALLET_GOOGLE_BASE_URL": "https://pay.google.com/gp/v/save",
    "WALLET_ORGANIZATION": "Lyven",
}


@dataclass(frozen=True)
class TicketingConfig:
    cancellation_fee_rate: Decimal
    default_validity: timedelta
    credential_prefix: str
    credential_max_attempts: int
    sign_credentials: bool
    accept_client_prices: bool
    wallet_apple_base_url: str
    wallet_google_base_url: str
    wallet_organization: str

    def __post_init__(self) -> None:
        if not Decimal(0) <= self.cancellation_fee_rate <= Decimal(1):
            raise ValueError("CANCELLATION_FEE_RATE must be between 0 and 1")
        if self.credential_max_attempts < 1:
            raise ValueError("CREDENTIAL_MAX_ATTEMPTS must be at least 1")


def get_config() -> TicketingConfig:
    """Build the config from the current settings.

    Not cached, so ``override_settings`` in tests takes effect.
    """
    values = {**DEFAULTS, **getattr(settings, "TICKETING", {})}
    return TicketingConfig(
        cancellation_fee_rate=Decimal(str(values["CANCELLATION_FEE_RATE"])),
        default_validity=timedelta(days=int(values["DEFAULT_VALIDITY_DAYS"])),
        credential_prefix=str(values["CREDENTIAL_PREFIX"]),
        credential_max_attempts=int(values["CREDENTIAL_MAX_ATTEMPTS"]),
        sign_credentials=bool(values["SIGN_CREDENTIALS"]),
        accept_client_prices=bool(values["ACCEPT_CLIENT_PRICES"]),
        wallet_apple_base_url=str(values["WALLET_APPLE_BASE_URL"]).rstrip("/"),
        wallet_google_base_url=str(values["WALLET_GOOGLE_BASE_URL"]).rstrip("/"),
        wallet_organization=str(values["WALLET_ORGANIZATION"]),
    )
