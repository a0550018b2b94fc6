"""
Activation Mail Service

Hands activation codes to users. Delivery is an external concern; this
implementation records the outgoing mail in the log.
"""

import logging
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)


class MailService:
    """Service to deliver account activation mail."""

    def send_activation_code(self, email: str, name: Optional[str], code: str, expires_at: datetime) -> None:
        """Send the activation code to the user."""
        # In a real deployment this would go through an SMTP relay or mail API
        logger.info(
            f"ACTIVATION MAIL to {email} ({name or 'unnamed'}): "
            f"code {code} valid until {expires_at.isoformat()}"
        )


def get_mail_service() -> MailService:
    """Dependency for getting MailService instance."""
    return MailService()
