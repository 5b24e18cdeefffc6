"""
Receipt delivery gateways.

A gateway performs one delivery attempt for a rendered receipt and reports
whether it was delivered. The desk only depends on the `DeliveryGateway`
protocol, so tests substitute a deterministic implementation.

No real email is sent: `SimulatedDeliveryGateway` waits a fixed latency and
then succeeds with a configured probability.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol

from services.receipt_export_service import ReceiptView

logger = logging.getLogger(__name__)

DEFAULT_LATENCY_SECONDS = 2.0
DEFAULT_SUCCESS_RATE = 0.8


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    """
    Outcome of a delivery attempt.

    delivered: True if the receipt reached the recipient
    error_message: Reason for failure (None when delivered)
    """
    delivered: bool
    error_message: Optional[str] = None


class DeliveryGateway(Protocol):
    async def send(self, receipt: ReceiptView, recipient: str) -> DeliveryResult: ...


class SimulatedDeliveryGateway:
    """
    Stand-in for an email provider.

    Sleeps for `latency_seconds`, then reports delivered when a uniform draw
    falls below `success_rate`.
    """

    def __init__(
        self,
        latency_seconds: float = DEFAULT_LATENCY_SECONDS,
        success_rate: float = DEFAULT_SUCCESS_RATE,
        *,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if latency_seconds < 0:
            raise ValueError("latency_seconds must be non-negative")
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError("success_rate must be between 0 and 1")
        self._latency_seconds = latency_seconds
        self._success_rate = success_rate
        self._rng = rng or random.Random()
        self._sleep = sleep

    async def send(self, receipt: ReceiptView, recipient: str) -> DeliveryResult:
        await self._sleep(self._latency_seconds)

        if self._rng.random() < self._success_rate:
            logger.info(
                "Simulated receipt delivery succeeded",
                extra={"transaction_id": receipt.transaction_id, "recipient": recipient},
            )
            return DeliveryResult(delivered=True)

        logger.info(
            "Simulated receipt delivery failed",
            extra={"transaction_id": receipt.transaction_id, "recipient": recipient},
        )
        return DeliveryResult(delivered=False, error_message="Simulated delivery failure")


__all__ = [
    "DeliveryGateway",
    "DeliveryResult",
    "SimulatedDeliveryGateway",
]
