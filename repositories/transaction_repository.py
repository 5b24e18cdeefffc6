"""
Transaction repository (in-memory persistence).

This module provides *only* storage operations for the Transaction domain
entity. It does not validate form input or decide delivery outcomes; it only
appends, fetches and replaces records.

State lives on a repository instance owned by the application desk; there is
no module-level store. Nothing survives a process restart.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from domain.transaction import EmailStatus, Transaction


class TransactionNotFoundError(LookupError):
    """Raised when a transaction id is not in the store."""


class DuplicateTransactionError(ValueError):
    """Raised when appending a record whose id already exists."""


class InMemoryTransactionRepository:
    """
    Append-only ordered store of transactions.

    Invariants:
    - Insertion order is preserved.
    - transaction_id is unique.
    - A stored record can only be replaced by a copy with the same id
      (status updates); nothing is ever removed.
    """

    def __init__(self) -> None:
        self._order: List[str] = []
        self._by_id: Dict[str, Transaction] = {}
        self._last_timestamp: int = -1

    def __len__(self) -> int:
        return len(self._order)

    def next_timestamp(self, now_millis: int) -> int:
        """
        Allocate a creation timestamp that is strictly greater than every
        previously allocated one, so ids derived from it stay unique.
        """

        timestamp = max(now_millis, self._last_timestamp + 1)
        self._last_timestamp = timestamp
        return timestamp

    def add(self, transaction: Transaction) -> Transaction:
        if transaction.transaction_id in self._by_id:
            raise DuplicateTransactionError(
                f"Transaction already exists: {transaction.transaction_id}"
            )
        self._order.append(transaction.transaction_id)
        self._by_id[transaction.transaction_id] = transaction
        self._last_timestamp = max(self._last_timestamp, transaction.timestamp)
        return transaction

    def get(self, transaction_id: str) -> Optional[Transaction]:
        return self._by_id.get(transaction_id)

    def require(self, transaction_id: str) -> Transaction:
        transaction = self.get(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(f"Transaction not found: {transaction_id}")
        return transaction

    def update_status(self, transaction_id: str, status: EmailStatus) -> Transaction:
        """
        Move one record to a new delivery status; every other record is
        left untouched.
        """

        updated = self.require(transaction_id).with_status(status)
        self._by_id[transaction_id] = updated
        return updated

    def list_all(self) -> List[Transaction]:
        """All records in insertion order."""

        return [self._by_id[transaction_id] for transaction_id in self._order]

    def list_recent_sends(self, limit: int = 10) -> List[Transaction]:
        """
        Records that have entered the delivery workflow, newest first.
        """

        attempted = [
            transaction
            for transaction in self.list_all()
            if transaction.email_status is not EmailStatus.IDLE
        ]
        attempted.sort(key=lambda transaction: transaction.timestamp, reverse=True)
        return attempted[:limit]


__all__ = [
    "DuplicateTransactionError",
    "InMemoryTransactionRepository",
    "TransactionNotFoundError",
]
