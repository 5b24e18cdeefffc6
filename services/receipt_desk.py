"""
Receipt desk: the application state and its action handlers.

The desk owns the transaction store, the running delivery counters, the
selected receipt and the recipient email field. Every change goes through
one of its methods:

- submit_transaction: validate a form and append a record
- generate_receipt: select a record and pre-fill the recipient
- export_receipt_csv: render the selected receipt as CSV
- begin_send / complete_send (or send_receipt): run one delivery attempt
- records / analytics: read-only projections

Delivery lifecycle for one attempt:
    idle|delivered|failed -> pending -> delivered|failed

A record that is already pending cannot be sent again until it resolves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from domain.time import Clock, to_epoch_millis, utc_now
from domain.transaction import DeliveryCounters, EmailStatus, Transaction
from repositories.transaction_repository import InMemoryTransactionRepository
from services.delivery_gateway import DeliveryGateway, SimulatedDeliveryGateway
from services.notifications import LoggingNotifier, Notifier, SafeNotifier
from services.receipt_export_service import (
    ReceiptExport,
    ReceiptView,
    build_receipt_view,
    export_receipt,
)
from services.validation import (
    INVALID_EMAIL_MESSAGE,
    TransactionForm,
    TransactionValidationError,
    blank_form,
    is_valid_email,
    validate_transaction_form,
)

logger = logging.getLogger(__name__)


class NoReceiptSelectedError(LookupError):
    """Raised when a receipt action needs a selected transaction and none is."""


class InvalidRecipientError(ValueError):
    """Raised when the recipient email fails the syntactic email check."""


class DeliveryInProgressError(RuntimeError):
    """Raised when a send is triggered for a record that is still pending."""


@dataclass(frozen=True, slots=True)
class PendingDelivery:
    """
    A send attempt that has entered pending and awaits its outcome.

    Captures the record and recipient at trigger time, so changing the
    selection while the attempt is in flight does not redirect it.
    """
    transaction_id: str
    recipient: str
    receipt: ReceiptView


@dataclass(frozen=True, slots=True)
class AnalyticsSnapshot:
    counters: DeliveryCounters
    recent_sends: List[Transaction]


class ReceiptDesk:
    """
    Single owner of all buy-to-sell application state.
    """

    def __init__(
        self,
        repository: Optional[InMemoryTransactionRepository] = None,
        gateway: Optional[DeliveryGateway] = None,
        notifier: Optional[Notifier] = None,
        *,
        clock: Clock = utc_now,
        analytics_limit: int = 10,
    ) -> None:
        self._repository = repository if repository is not None else InMemoryTransactionRepository()
        self._gateway = gateway if gateway is not None else SimulatedDeliveryGateway()
        self._notifier = SafeNotifier(notifier if notifier is not None else LoggingNotifier())
        self._clock = clock
        self._analytics_limit = analytics_limit

        self._counters = DeliveryCounters()
        self._selected_id: Optional[str] = None
        self._recipient_email: str = ""
        self._email_status: EmailStatus = EmailStatus.IDLE

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def counters(self) -> DeliveryCounters:
        return self._counters

    @property
    def recipient_email(self) -> str:
        return self._recipient_email

    @property
    def email_status(self) -> EmailStatus:
        """Status of the most recent delivery transition, as the UI shows it."""
        return self._email_status

    @property
    def selected_transaction(self) -> Optional[Transaction]:
        if self._selected_id is None:
            return None
        return self._repository.get(self._selected_id)

    def set_recipient_email(self, email: str) -> None:
        self._recipient_email = email.strip()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def form_defaults(self) -> TransactionForm:
        return blank_form(self._clock)

    def submit_transaction(self, form: TransactionForm) -> Transaction:
        """
        Validate a form submission and append it to the store.

        Raises:
            TransactionValidationError: If any rule fails (store unchanged)
        """
        try:
            cleaned = validate_transaction_form(form, self._clock)
        except TransactionValidationError as e:
            logger.info(
                "Transaction submission rejected",
                extra={"field": e.field, "reason": e.message},
            )
            self._notifier.notify("error", e.message)
            raise

        timestamp = self._repository.next_timestamp(to_epoch_millis(self._clock()))
        transaction = self._repository.add(
            Transaction(
                transaction_id=str(timestamp),
                full_name=cleaned.full_name,
                state=cleaned.state,
                date=cleaned.date,
                amount=cleaned.amount,
                email=cleaned.email,
                trade_percentage=cleaned.trade_percentage,
                pbo_name=cleaned.pbo_name,
                timestamp=timestamp,
            )
        )
        self._recipient_email = transaction.email

        logger.info(
            "Transaction recorded",
            extra={"transaction_id": transaction.transaction_id, "state": transaction.state},
        )
        self._notifier.play_sound("success")
        self._notifier.notify("success", "Transaction Saved")
        return transaction

    def get_transaction(self, transaction_id: str) -> Transaction:
        return self._repository.require(transaction_id)

    def records(self) -> List[Transaction]:
        return self._repository.list_all()

    def analytics(self) -> AnalyticsSnapshot:
        return AnalyticsSnapshot(
            counters=self._counters,
            recent_sends=self._repository.list_recent_sends(self._analytics_limit),
        )

    # ------------------------------------------------------------------
    # Receipts
    # ------------------------------------------------------------------

    def generate_receipt(self, transaction_id: str) -> ReceiptView:
        """
        Select a transaction and pre-fill the recipient with its email.

        Raises:
            TransactionNotFoundError: If the id is not in the store
        """
        transaction = self._repository.require(transaction_id)
        self._selected_id = transaction.transaction_id
        self._recipient_email = transaction.email
        return build_receipt_view(transaction)

    def current_receipt(self) -> ReceiptView:
        transaction = self.selected_transaction
        if transaction is None:
            raise NoReceiptSelectedError("No receipt selected")
        return build_receipt_view(transaction)

    def export_receipt_csv(self) -> Optional[ReceiptExport]:
        """Render the selected receipt as CSV; None when nothing is selected."""
        transaction = self.selected_transaction
        if transaction is None:
            return None

        export = export_receipt(transaction)
        self._notifier.play_sound("success")
        self._notifier.notify("success", "Receipt Downloaded as CSV")
        return export

    # ------------------------------------------------------------------
    # Delivery workflow
    # ------------------------------------------------------------------

    def begin_send(self) -> PendingDelivery:
        """
        Move the selected record into pending.

        Raises:
            NoReceiptSelectedError: If no record is selected
            InvalidRecipientError: If the recipient email is malformed
            DeliveryInProgressError: If the record is already pending
        """
        transaction = self.selected_transaction
        if transaction is None:
            raise NoReceiptSelectedError("No receipt selected")

        recipient = self._recipient_email
        if not is_valid_email(recipient):
            self._notifier.notify("error", INVALID_EMAIL_MESSAGE)
            raise InvalidRecipientError(INVALID_EMAIL_MESSAGE)

        if transaction.email_status is EmailStatus.PENDING:
            raise DeliveryInProgressError(
                f"Receipt {transaction.transaction_id} is already being sent"
            )

        updated = self._transition(transaction.transaction_id, EmailStatus.PENDING)
        self._notifier.play_sound("notification")
        self._notifier.notify("success", f"Sending receipt to {recipient}...")

        return PendingDelivery(
            transaction_id=updated.transaction_id,
            recipient=recipient,
            receipt=build_receipt_view(updated),
        )

    async def complete_send(self, pending: PendingDelivery) -> EmailStatus:
        """
        Await the gateway and resolve the attempt to delivered or failed.

        Gateway exceptions are treated exactly like a failed delivery.
        """
        try:
            result = await self._gateway.send(pending.receipt, pending.recipient)
            delivered = result.delivered
        except Exception:
            logger.exception(
                "Receipt delivery raised",
                extra={"transaction_id": pending.transaction_id, "recipient": pending.recipient},
            )
            delivered = False

        if delivered:
            self._transition(pending.transaction_id, EmailStatus.DELIVERED)
            self._notifier.play_sound("success")
            self._notifier.notify("success", f"Receipt delivered to {pending.recipient}")
            return EmailStatus.DELIVERED

        self._transition(pending.transaction_id, EmailStatus.FAILED)
        self._notifier.play_sound("error")
        self._notifier.notify("error", f"Failed to send to {pending.recipient}")
        return EmailStatus.FAILED

    async def send_receipt(self) -> EmailStatus:
        """Run a full delivery attempt for the selected receipt."""
        pending = self.begin_send()
        return await self.complete_send(pending)

    def _transition(self, transaction_id: str, status: EmailStatus) -> Transaction:
        updated = self._repository.update_status(transaction_id, status)
        self._counters = self._counters.record(status)
        self._email_status = status
        logger.info(
            "Receipt delivery status changed",
            extra={"transaction_id": transaction_id, "email_status": status.value},
        )
        return updated


__all__ = [
    "AnalyticsSnapshot",
    "DeliveryInProgressError",
    "InvalidRecipientError",
    "NoReceiptSelectedError",
    "PendingDelivery",
    "ReceiptDesk",
]
