"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

import re
import secrets
import string
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from orderdesk.domain.exceptions import ValidationError


@dataclass(frozen=True)
class Money:
    """Monetary amount in major currency units (dollars, not cents).

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"${self.amount:.2f}"

    def __float__(self) -> float:
        return float(self.amount)

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely."""
        if isinstance(amount, bool):
            raise ValidationError(f"Invalid money amount: {amount!r}")
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)


# Deliberately loose: one "@", something on both sides, a dot in the domain.
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class EmailAddress:
    """A syntactically plausible e-mail address."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _EMAIL_PATTERN.match(self.value):
            raise ValidationError(f"Invalid customer email: {self.value!r}")

    def __str__(self) -> str:
        return self.value


_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
ORDER_ID_SUFFIX_LENGTH = 8


@dataclass(frozen=True)
class OrderId:
    """Human-shareable order reference, e.g. ``NG1718031234567K3Z9QX2A``.

    Prefix + millisecond timestamp + random base-36 suffix.  The suffix
    alone gives 36**8 combinations per millisecond.
    """

    value: str

    def __str__(self) -> str:
        return self.value

    @staticmethod
    def generate(prefix: str = "NG") -> OrderId:
        millis = time.time_ns() // 1_000_000
        suffix = "".join(
            secrets.choice(_SUFFIX_ALPHABET) for _ in range(ORDER_ID_SUFFIX_LENGTH)
        )
        return OrderId(f"{prefix}{millis}{suffix}".upper())
