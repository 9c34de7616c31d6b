"""Points ledger repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ...models.enums import TransactionType
from ...models.transaction import PointsTransaction


class TransactionRepository(Protocol):
    """Read access to the append-only points ledger."""

    def get_by_id(self, transaction_id: int, *, user_id: int) -> Optional[PointsTransaction]:
        """Retrieve a transaction owned by ``user_id``."""
        ...

    def list_all(self, *, user_id: int, limit: int = 100, offset: int = 0) -> list[PointsTransaction]:
        """List a user's transactions, newest first."""
        ...

    def search(
        self,
        *,
        user_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        txn_type: Optional[TransactionType] = None,
        reference_id: Optional[int] = None,
        text: Optional[str] = None,
    ) -> list[PointsTransaction]:
        """Filter a user's transactions."""
        ...

    def balance(self, *, user_id: int) -> int:
        """Sum of all points for a user."""
        ...

    def totals(self, *, user_id: int) -> dict[str, int]:
        """Earned, spent and net totals for a user."""
        ...
