"""
Domain: Buy-to-sell transactions and receipt delivery status.

Contract excerpts implemented here:
- A Transaction is uniquely identified by transaction_id, derived from its
  creation timestamp.
- Transactions are append-only; the only field that ever changes is
  email_status, and only through the delivery workflow.
- Delivery status moves idle/delivered/failed -> pending -> delivered|failed.
- Delivery counters are a running log of observed transitions, not a tally of
  current statuses.

This module contains only pure domain entities/value objects: no I/O, no
frameworks. Status changes return new instances.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, Tuple

TRADE_PERCENTAGES: Tuple[str, ...] = (
    "10%", "15%", "20%", "25%", "30%", "35%", "40%", "45%", "50%",
)


class EmailStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    DELIVERED = "delivered"
    FAILED = "failed"

    @property
    def label(self) -> str:
        """Human-readable status shown in listings."""
        return _STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (EmailStatus.DELIVERED, EmailStatus.FAILED)


_STATUS_LABELS: Dict[EmailStatus, str] = {
    EmailStatus.IDLE: "Not Sent",
    EmailStatus.PENDING: "Pending",
    EmailStatus.DELIVERED: "Delivered",
    EmailStatus.FAILED: "Failed",
}

_ALLOWED_TRANSITIONS: Dict[EmailStatus, FrozenSet[EmailStatus]] = {
    EmailStatus.IDLE: frozenset({EmailStatus.PENDING}),
    EmailStatus.PENDING: frozenset({EmailStatus.DELIVERED, EmailStatus.FAILED}),
    EmailStatus.DELIVERED: frozenset({EmailStatus.PENDING}),
    EmailStatus.FAILED: frozenset({EmailStatus.PENDING}),
}


@dataclass(frozen=True, slots=True)
class Transaction:
    """
    Immutable record of one buy-to-sell deposit.

    amount is kept exactly as entered (validated to be a positive number);
    use `amount_value` for arithmetic and formatting.
    """

    transaction_id: str
    full_name: str
    state: str
    date: str
    amount: str
    email: str
    trade_percentage: str
    pbo_name: str
    timestamp: int
    email_status: EmailStatus = EmailStatus.IDLE

    def __post_init__(self) -> None:
        if not self.transaction_id:
            raise ValueError("transaction_id is required")
        if self.timestamp < 0:
            raise ValueError("timestamp must be non-negative")
        if self.amount_value <= 0:
            raise ValueError("amount must be greater than zero")

    @property
    def amount_value(self) -> Decimal:
        return Decimal(self.amount.strip())

    def with_status(self, status: EmailStatus) -> "Transaction":
        """
        Return a copy carrying the new delivery status.

        Raises ValueError for a transition the delivery lifecycle forbids.
        """

        if status not in _ALLOWED_TRANSITIONS[self.email_status]:
            raise ValueError(
                f"Cannot move transaction {self.transaction_id} "
                f"from {self.email_status.value} to {status.value}"
            )
        return replace(self, email_status=status)


@dataclass(frozen=True, slots=True)
class DeliveryCounters:
    """
    Running counters of delivery transitions.

    `sent` counts send attempts (one per move into pending), so after any
    number of completed sends sent == delivered + failed.
    """

    sent: int = 0
    pending: int = 0
    delivered: int = 0
    failed: int = 0

    def record(self, status: EmailStatus) -> "DeliveryCounters":
        if status is EmailStatus.PENDING:
            return replace(self, sent=self.sent + 1, pending=self.pending + 1)
        if status is EmailStatus.DELIVERED:
            return replace(self, delivered=self.delivered + 1)
        if status is EmailStatus.FAILED:
            return replace(self, failed=self.failed + 1)
        raise ValueError(f"{status.value} is not a delivery transition")


__all__ = [
    "DeliveryCounters",
    "EmailStatus",
    "TRADE_PERCENTAGES",
    "Transaction",
]
