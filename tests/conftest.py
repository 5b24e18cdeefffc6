"""
Pytest configuration and shared test doubles.

Adds the project root to the Python path so that tests can import from the
domain, repositories, services and api modules.
"""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.transaction import Transaction  # noqa: E402
from services.delivery_gateway import DeliveryResult  # noqa: E402
from services.receipt_desk import ReceiptDesk  # noqa: E402
from services.receipt_export_service import ReceiptView  # noqa: E402
from services.validation import TransactionForm  # noqa: E402


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingNotifier:
    def __init__(self) -> None:
        self.notifications: List[Tuple[str, str]] = []
        self.sounds: List[str] = []

    def notify(self, kind: str, message: str) -> None:
        self.notifications.append((kind, message))

    def play_sound(self, kind: str) -> None:
        self.sounds.append(kind)


class ScriptedGateway:
    """
    Gateway that replays a script of outcomes: True (delivered),
    False (failed) or an exception instance (raised).
    """

    def __init__(self, outcomes: Optional[list] = None, default: bool = True) -> None:
        self._outcomes = list(outcomes or [])
        self._default = default
        self.calls: List[Tuple[str, str]] = []

    async def send(self, receipt: ReceiptView, recipient: str) -> DeliveryResult:
        self.calls.append((receipt.transaction_id, recipient))
        outcome = self._outcomes.pop(0) if self._outcomes else self._default
        if isinstance(outcome, Exception):
            raise outcome
        return DeliveryResult(delivered=outcome, error_message=None if outcome else "scripted failure")


ADA_FORM = TransactionForm(
    full_name="Ada Obi",
    state="Lagos",
    date="2024-01-10",
    amount="500000",
    email="ada@example.com",
    trade_percentage="20%",
    pbo_name="Chidi",
)


def make_transaction(**overrides) -> Transaction:
    fields = dict(
        transaction_id="1704844800000",
        full_name="Ada Obi",
        state="Lagos",
        date="2024-01-10",
        amount="500000",
        email="ada@example.com",
        trade_percentage="20%",
        pbo_name="Chidi",
        timestamp=1704844800000,
    )
    fields.update(overrides)
    return Transaction(**fields)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 10, 0, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def gateway() -> ScriptedGateway:
    return ScriptedGateway()


@pytest.fixture
def desk(clock: FixedClock, notifier: RecordingNotifier, gateway: ScriptedGateway) -> ReceiptDesk:
    return ReceiptDesk(gateway=gateway, notifier=notifier, clock=clock)
