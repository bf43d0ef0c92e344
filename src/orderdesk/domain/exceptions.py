"""Domain-level exceptions.

All failures are expressed as subclasses of DomainException so the CLI
layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ConfigurationError(DomainException):
    """Required collaborator credentials or settings are missing."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class InvalidSignatureError(ValidationError):
    """A webhook payload did not carry a valid signature."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class UpstreamError(DomainException):
    """A collaborator (payment gateway, record store) call failed.

    ``str(exc)`` is safe to show to callers.  ``detail`` carries the raw
    upstream diagnostic and belongs in operational logs only.
    """

    def __init__(self, message: str, service: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.service = service
        self.detail = detail


class ReconciliationError(DomainException):
    """The payment went through but the order could not be recorded.

    Money has moved without a durable order record, so somebody has to
    follow up by hand using ``order_id`` and ``payment_id``.
    """

    def __init__(self, order_id: str, payment_id: str, cause: str) -> None:
        super().__init__(
            f"Payment {payment_id} succeeded but order {order_id} could not be "
            f"recorded ({cause}). Manual follow-up required."
        )
        self.order_id = order_id
        self.payment_id = payment_id
