"""Notification senders for password-reset hand-off."""

import logging

logger = logging.getLogger(__name__)


class LoggingNotificationSender:
    """Records that a reset was requested.

    Stands in until an email provider is wired up; the token itself is
    never written to the log.
    """

    async def send_password_reset(self, email: str, token: str) -> None:
        logger.info(
            "Password reset requested",
            extra={"email": email, "token_length": len(token)},
        )
