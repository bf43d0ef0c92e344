"""Staff members that orders can be assigned to."""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.domain.exceptions import ValidationError


@dataclass(frozen=True)
class StaffMember:
    id: str
    name: str
    role: str = ""
    email: str = ""

    @staticmethod
    def parse(entry: str) -> StaffMember:
        """Parse ``id:Name:Role:email`` (role and email optional)."""
        parts = [p.strip() for p in entry.split(":")]
        if len(parts) < 2 or not parts[0] or not parts[1]:
            raise ValidationError(
                f"Invalid staff entry {entry!r}. Expected 'id:Name[:Role[:email]]'."
            )
        parts += [""] * (4 - len(parts))
        return StaffMember(id=parts[0], name=parts[1], role=parts[2], email=parts[3])
