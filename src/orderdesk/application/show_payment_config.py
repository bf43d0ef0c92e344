"""Application service: client-side payment configuration (query)."""

from __future__ import annotations

from orderdesk.domain.exceptions import ConfigurationError


class ShowPaymentConfigHandler:

    def __init__(self, publishable_key: str | None) -> None:
        self._publishable_key = publishable_key

    def handle(self) -> str:
        """Return the publishable key browsers use to confirm payments."""
        if not self._publishable_key:
            raise ConfigurationError("Payment publishable key not configured")
        return self._publishable_key
