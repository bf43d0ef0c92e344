"""Application service: List Staff use case (query)."""

from __future__ import annotations

from orderdesk.domain.model.staff import StaffMember


class ListStaffHandler:

    def __init__(self, staff: list[StaffMember]) -> None:
        self._staff = staff

    def handle(self) -> list[StaffMember]:
        return sorted(self._staff, key=lambda member: member.name.lower())
