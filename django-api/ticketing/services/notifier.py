"""Side-effect notifications.

The core calls ``notify_safely`` after its own transaction has committed.
Delivery problems never reach the caller of a checkout or validation.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from django.db import transaction

from ticketing import models
from ticketing.domain import UserId

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Interface for delivering user-visible notifications."""

    @abstractmethod
    def notify(
        self,
        user_id: UserId,
        kind: str,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        ...


class DatabaseNotifier(Notifier):
    """Writes notifications to the in-app inbox table."""

    def notify(
        self,
        user_id: UserId,
        kind: str,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        models.Notification.objects.create(
            user_id=user_id.value,
            kind=kind,
            title=title,
            message=message,
            data=data or {},
        )
        logger.info("Notification %r queued for user %s", kind, user_id)


def notify_safely(
    notifier: Notifier,
    user_id: UserId,
    kind: str,
    title: str,
    message: str,
    data: dict[str, Any] | None = None,
) -> None:
    try:
        notifier.notify(user_id, kind, title, message, data)
    except Exception:
        logger.exception("Failed to deliver %r notification to user %s", kind, user_id)


def notify_after_commit(
    notifier: Notifier,
    user_id: UserId,
    kind: str,
    title: str,
    message: str,
    data: dict[str, Any] | None = None,
) -> None:
    """Schedule a best-effort notification for when the current transaction commits."""
    transaction.on_commit(
        lambda: notify_safely(notifier, user_id, kind, title, message, data)
    )
