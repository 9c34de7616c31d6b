"""Punishment repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.enums import AssignmentStatus
from ...models.punishment import Punishment, PunishmentAssignment


class PunishmentRepository(Protocol):
    def get_by_id(self, punishment_id: int) -> Optional[Punishment]:
        ...

    def list_for_user(self, *, user_id: int, include_inactive: bool = False) -> list[Punishment]:
        ...

    def get_assignment(self, assignment_id: int) -> Optional[PunishmentAssignment]:
        ...

    def list_assignments(
        self, *, user_id: int, status: Optional[AssignmentStatus] = None
    ) -> list[PunishmentAssignment]:
        ...
