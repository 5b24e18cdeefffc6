#!/usr/bin/env python3
"""
Delivery Simulation Script

Records one transaction, then emails its receipt repeatedly through the
simulated gateway and prints the running counters.

Usage:
    python simulate_deliveries.py
    python simulate_deliveries.py --sends 100 --latency 0 --seed 7
    python simulate_deliveries.py --success-rate 0.5 --export receipt.csv
"""

from __future__ import annotations

import argparse
import asyncio
import random
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.config import load_settings
from services.delivery_gateway import SimulatedDeliveryGateway
from services.receipt_desk import ReceiptDesk
from services.validation import TransactionForm


def print_section(title: str) -> None:
    """Print a section header."""
    print()
    print("=" * 80)
    print(title)
    print("=" * 80)


async def run(sends: int, latency: float, success_rate: float, seed: int | None, export_path: str | None) -> None:
    gateway = SimulatedDeliveryGateway(
        latency_seconds=latency,
        success_rate=success_rate,
        rng=random.Random(seed),
    )
    desk = ReceiptDesk(gateway=gateway)

    print_section("1. Recording transaction")
    transaction = desk.submit_transaction(
        TransactionForm(
            full_name="Ada Obi",
            state="Lagos",
            date="2024-01-10",
            amount="500000",
            email="ada@example.com",
            trade_percentage="20%",
            pbo_name="Chidi",
        )
    )
    print(f"   Transaction ID: {transaction.transaction_id}")
    print(f"   Status: {transaction.email_status.label}")

    receipt = desk.generate_receipt(transaction.transaction_id)
    print(f"   Receipt amount: {receipt.formatted_amount}")

    if export_path:
        export = desk.export_receipt_csv()
        if export is not None:
            Path(export_path).write_text(export.content, encoding="utf-8")
            print(f"   Wrote {export.filename} to {export_path}")

    print_section(f"2. Sending receipt {sends} time(s)")
    for attempt in range(1, sends + 1):
        outcome = await desk.send_receipt()
        print(f"   Attempt {attempt}: {outcome.value}")

    print_section("3. Counters")
    counters = desk.counters
    print(f"   Sent:      {counters.sent}")
    print(f"   Pending:   {counters.pending}")
    print(f"   Delivered: {counters.delivered}")
    print(f"   Failed:    {counters.failed}")


def main() -> None:
    settings = load_settings()

    parser = argparse.ArgumentParser(description="Simulate receipt email deliveries")
    parser.add_argument("--sends", type=int, default=10, help="Number of send attempts")
    parser.add_argument("--latency", type=float, default=settings.delivery_latency_seconds,
                        help="Simulated latency per send in seconds")
    parser.add_argument("--success-rate", type=float, default=settings.delivery_success_rate,
                        help="Probability a send is delivered")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible runs")
    parser.add_argument("--export", dest="export_path", default=None, help="Also write the CSV receipt here")
    args = parser.parse_args()

    if args.sends < 1:
        parser.error("--sends must be at least 1")

    asyncio.run(run(args.sends, args.latency, args.success_rate, args.seed, args.export_path))


if __name__ == "__main__":
    main()
