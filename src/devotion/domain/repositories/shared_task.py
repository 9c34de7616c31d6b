"""Shared task repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.shared_task import SharedTask, TaskContribution


class SharedTaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[SharedTask]:
        ...

    def list_for_partnership(self, *, partnership_id: int, include_completed: bool = True) -> list[SharedTask]:
        ...

    def list_contributions(self, *, task_id: int) -> list[TaskContribution]:
        ...
