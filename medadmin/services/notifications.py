"""Delivery of verification and password reset links to account holders."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised by a notifier that could not deliver a message."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class Notifier(Protocol):
    """Delivers account links. Implementations raise NotificationError when delivery fails."""

    def send_verification(self, email: str, name: str, link: str) -> None: ...

    def send_password_reset(self, email: str, name: str, link: str) -> None: ...


class LogNotifier:
    """
    Records deliveries in the application log instead of sending mail.

    Links carry live tokens, so they are only written out when
    include_links is set (dev environments).
    """

    def __init__(self, include_links: bool = False) -> None:
        self.include_links = include_links

    def _deliver(self, kind: str, email: str, name: str, link: str) -> None:
        extra: dict[str, str] = {"notification": kind, "recipient": email}
        if self.include_links:
            extra["link"] = link
            logger.info("Notification queued for %s: %s", email, link, extra=extra)
        else:
            logger.info("Notification queued for %s", email, extra=extra)

    def send_verification(self, email: str, name: str, link: str) -> None:
        self._deliver("verify_email", email, name, link)

    def send_password_reset(self, email: str, name: str, link: str) -> None:
        self._deliver("password_reset", email, name, link)
