"""
Tests for `services/receipt_desk.py`.

Covers contract rules:
- Rejected submissions leave the store unchanged.
- New records start not-sent; ids come from the clock and stay unique.
- Generating a receipt selects the record and pre-fills the recipient.
- CSV export is a no-op when nothing is selected.
- A send moves the record to pending immediately, then to exactly one of
  delivered/failed; the stored status always matches the last transition.
- Invalid recipients and overlapping sends change nothing.
- Counters: sent and pending grow once per attempt.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from conftest import ADA_FORM, ScriptedGateway
from domain.transaction import DeliveryCounters, EmailStatus
from repositories.transaction_repository import TransactionNotFoundError
from services.receipt_desk import (
    DeliveryInProgressError,
    InvalidRecipientError,
    NoReceiptSelectedError,
    ReceiptDesk,
)
from services.validation import TransactionValidationError


def _select_ada(desk: ReceiptDesk) -> str:
    transaction = desk.submit_transaction(ADA_FORM)
    desk.generate_receipt(transaction.transaction_id)
    return transaction.transaction_id


# ----------------------------------------------------------------------------
# Submission
# ----------------------------------------------------------------------------

def test_submit_records_transaction_not_sent(desk, notifier) -> None:
    transaction = desk.submit_transaction(ADA_FORM)

    assert transaction.transaction_id == "1704844800000"
    assert transaction.timestamp == 1704844800000
    assert transaction.email_status is EmailStatus.IDLE
    assert transaction.full_name == "Ada Obi"
    assert desk.records() == [transaction]
    assert desk.recipient_email == "ada@example.com"
    assert notifier.sounds == ["success"]
    assert notifier.notifications == [("success", "Transaction Saved")]


@pytest.mark.parametrize(
    "overrides",
    [
        {"full_name": ""},
        {"email": ""},
        {"amount": ""},
        {"state": ""},
        {"trade_percentage": ""},
        {"pbo_name": ""},
        {"amount": "0"},
        {"amount": "-10"},
        {"amount": "ten"},
        {"email": "ada.example.com"},
        {"amount": "1e30"},
        {"full_name": "-Ada"},
    ],
)
def test_rejected_submission_leaves_store_unchanged(desk, notifier, overrides) -> None:
    with pytest.raises(TransactionValidationError):
        desk.submit_transaction(replace(ADA_FORM, **overrides))

    assert desk.records() == []
    assert notifier.notifications[-1][0] == "error"


def test_ids_stay_unique_when_clock_does_not_advance(desk) -> None:
    first = desk.submit_transaction(ADA_FORM)
    second = desk.submit_transaction(ADA_FORM)

    assert first.transaction_id != second.transaction_id
    assert second.timestamp > first.timestamp


def test_form_defaults_reset_date_to_today(desk, clock) -> None:
    clock.advance(days=1)

    form = desk.form_defaults()

    assert form.date == "2024-01-11"
    assert form.full_name == ""


# ----------------------------------------------------------------------------
# Receipts
# ----------------------------------------------------------------------------

def test_generate_receipt_is_idempotent(desk) -> None:
    transaction_id = _select_ada(desk)
    desk.set_recipient_email("someone@else.com")

    first = desk.generate_receipt(transaction_id)
    first_recipient = desk.recipient_email
    second = desk.generate_receipt(transaction_id)

    assert first == second
    assert first_recipient == desk.recipient_email == "ada@example.com"
    assert desk.selected_transaction.transaction_id == transaction_id


def test_generate_receipt_for_unknown_id_raises(desk) -> None:
    with pytest.raises(TransactionNotFoundError):
        desk.generate_receipt("nope")
    assert desk.selected_transaction is None


def test_export_without_selection_is_noop(desk, notifier) -> None:
    desk.submit_transaction(ADA_FORM)
    notifier.sounds.clear()

    assert desk.export_receipt_csv() is None
    assert notifier.sounds == []


def test_export_selected_receipt(desk, notifier) -> None:
    transaction_id = _select_ada(desk)

    export = desk.export_receipt_csv()

    assert export.filename == f"PWAN-Receipt-{transaction_id}.csv"
    assert 'Amount (₦):,"₦500,000"' in export.content
    assert notifier.notifications[-1] == ("success", "Receipt Downloaded as CSV")


def test_current_receipt_requires_selection(desk) -> None:
    with pytest.raises(NoReceiptSelectedError):
        desk.current_receipt()


# ----------------------------------------------------------------------------
# Delivery workflow
# ----------------------------------------------------------------------------

def test_send_goes_pending_then_delivered(desk, gateway, notifier) -> None:
    transaction_id = _select_ada(desk)

    pending = desk.begin_send()

    assert pending.transaction_id == transaction_id
    assert desk.get_transaction(transaction_id).email_status is EmailStatus.PENDING
    assert desk.email_status is EmailStatus.PENDING
    assert desk.counters == DeliveryCounters(sent=1, pending=1)
    assert notifier.sounds[-1] == "notification"

    outcome = asyncio.run(desk.complete_send(pending))

    assert outcome is EmailStatus.DELIVERED
    assert desk.get_transaction(transaction_id).email_status is EmailStatus.DELIVERED
    assert desk.email_status is EmailStatus.DELIVERED
    assert desk.counters == DeliveryCounters(sent=1, pending=1, delivered=1)
    assert gateway.calls == [(transaction_id, "ada@example.com")]
    assert notifier.notifications[-1] == ("success", "Receipt delivered to ada@example.com")


def test_send_failure_marks_failed(clock, notifier) -> None:
    desk = ReceiptDesk(gateway=ScriptedGateway([False]), notifier=notifier, clock=clock)
    transaction_id = _select_ada(desk)

    outcome = asyncio.run(desk.send_receipt())

    assert outcome is EmailStatus.FAILED
    assert desk.get_transaction(transaction_id).email_status is EmailStatus.FAILED
    assert desk.counters == DeliveryCounters(sent=1, pending=1, failed=1)
    assert notifier.sounds[-1] == "error"
    assert notifier.notifications[-1] == ("error", "Failed to send to ada@example.com")


def test_gateway_exception_is_treated_as_failure(clock, notifier) -> None:
    desk = ReceiptDesk(gateway=ScriptedGateway([ConnectionError("smtp down")]), notifier=notifier, clock=clock)
    transaction_id = _select_ada(desk)

    outcome = asyncio.run(desk.send_receipt())

    assert outcome is EmailStatus.FAILED
    assert desk.get_transaction(transaction_id).email_status is EmailStatus.FAILED
    assert desk.counters.failed == 1


def test_invalid_recipient_changes_nothing(desk, gateway) -> None:
    transaction_id = _select_ada(desk)
    desk.set_recipient_email("not-an-email")

    with pytest.raises(InvalidRecipientError):
        desk.begin_send()

    assert desk.get_transaction(transaction_id).email_status is EmailStatus.IDLE
    assert desk.counters == DeliveryCounters()
    assert gateway.calls == []


def test_send_without_selection_raises(desk) -> None:
    desk.submit_transaction(ADA_FORM)

    with pytest.raises(NoReceiptSelectedError):
        desk.begin_send()
    assert desk.counters == DeliveryCounters()


def test_overlapping_send_for_pending_record_is_rejected(desk) -> None:
    _select_ada(desk)
    pending = desk.begin_send()

    with pytest.raises(DeliveryInProgressError):
        desk.begin_send()
    assert desk.counters == DeliveryCounters(sent=1, pending=1)

    asyncio.run(desk.complete_send(pending))
    desk.begin_send()
    assert desk.counters.sent == 2


def test_resolution_follows_the_record_that_was_sent(desk) -> None:
    first_id = _select_ada(desk)
    pending = desk.begin_send()

    second = desk.submit_transaction(replace(ADA_FORM, full_name="Bola Ade", email="bola@example.com"))
    desk.generate_receipt(second.transaction_id)
    asyncio.run(desk.complete_send(pending))

    assert desk.get_transaction(first_id).email_status is EmailStatus.DELIVERED
    assert desk.get_transaction(second.transaction_id).email_status is EmailStatus.IDLE
    assert desk.recipient_email == "bola@example.com"


def test_hundred_sends_count_once_per_attempt(clock, notifier) -> None:
    outcomes = [index % 5 != 0 for index in range(100)]
    desk = ReceiptDesk(gateway=ScriptedGateway(outcomes), notifier=notifier, clock=clock)
    transaction_id = _select_ada(desk)

    async def send_many() -> None:
        for _ in range(100):
            await desk.send_receipt()

    asyncio.run(send_many())

    counters = desk.counters
    assert counters.sent == 100
    assert counters.pending == 100
    assert counters.delivered + counters.failed == 100
    assert counters.failed == 20
    assert desk.get_transaction(transaction_id).email_status is EmailStatus.DELIVERED


def test_notifier_failures_do_not_break_actions(clock) -> None:
    class BrokenNotifier:
        def notify(self, kind, message):
            raise RuntimeError("toast unavailable")

        def play_sound(self, kind):
            raise OSError("no audio device")

    desk = ReceiptDesk(gateway=ScriptedGateway(), notifier=BrokenNotifier(), clock=clock)
    _select_ada(desk)

    assert asyncio.run(desk.send_receipt()) is EmailStatus.DELIVERED


# ----------------------------------------------------------------------------
# Analytics
# ----------------------------------------------------------------------------

def test_analytics_lists_recent_sends_newest_first(clock, notifier) -> None:
    desk = ReceiptDesk(gateway=ScriptedGateway(), notifier=notifier, clock=clock, analytics_limit=2)
    ids = []
    for _ in range(4):
        ids.append(desk.submit_transaction(ADA_FORM).transaction_id)
        clock.advance(seconds=1)

    for transaction_id in ids[:3]:
        desk.generate_receipt(transaction_id)
        asyncio.run(desk.send_receipt())

    snapshot = desk.analytics()

    assert [tx.transaction_id for tx in snapshot.recent_sends] == [ids[2], ids[1]]
    assert snapshot.counters == DeliveryCounters(sent=3, pending=3, delivered=3)
    assert len(desk.records()) == 4
