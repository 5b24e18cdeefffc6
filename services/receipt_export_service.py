"""
Receipt rendering and CSV export service.

Builds the human-readable receipt view for one transaction and the
downloadable CSV document that goes with it.

Security:
- CSV Injection Prevention: free-text fields are sanitized to prevent formula
  execution when the file is opened in Excel/Sheets
- Security Logging: logs when dangerous characters are stripped
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from io import StringIO
from typing import List

from domain.money import NAIRA_SIGN, format_naira
from domain.transaction import EmailStatus, Transaction

logger = logging.getLogger(__name__)

RECEIPT_TITLE = "PWAN MAX LAND BUY TO SELL - TRANSACTION RECEIPT"
THANK_YOU_LINES = (
    "Thank you for your investment in our Buy to Sell trade.",
    "Your money is growing and you are becoming more wealthy.",
)
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def sanitize_csv_field(value: str | None, field_name: str = "unknown") -> str:
    """
    Sanitize field to prevent CSV injection attacks with security logging.

    Strips leading characters that can trigger formula execution in Excel/Sheets:
    =, +, -, @, tab, carriage return

    If dangerous characters are found and stripped, a warning is logged for
    security monitoring.

    Example:
        sanitize_csv_field("=1+1", "full_name")
        # Returns "1+1" and logs warning about stripped "=" character

        sanitize_csv_field("Ada Obi", "full_name")
        # Returns "Ada Obi" (unchanged, no logging)
    """
    if value is None or value == "":
        return ""

    text = str(value).strip()
    original_text = text
    dangerous_chars = {'=', '+', '-', '@', '\t', '\r'}

    stripped_chars = []
    while text and text[0] in dangerous_chars:
        stripped_chars.append(text[0])
        text = text[1:]

    if stripped_chars:
        logger.warning(
            f"CSV injection character(s) stripped from field '{field_name}'",
            extra={
                "field_name": field_name,
                "stripped_characters": "".join(stripped_chars),
                "original_value": original_text[:100],
                "sanitized_value": text[:100],
                "modification_type": "csv_injection_prevention"
            }
        )

    return text


@dataclass(frozen=True, slots=True)
class ReceiptView:
    """
    Everything the receipt page shows for one transaction.
    """
    transaction_id: str
    full_name: str
    state: str
    email: str
    date: str
    amount: str
    formatted_amount: str
    trade_percentage: str
    pbo_name: str
    email_status: EmailStatus


@dataclass(frozen=True, slots=True)
class ReceiptExport:
    """A rendered CSV receipt ready to be downloaded."""
    filename: str
    content: str
    media_type: str = CSV_MEDIA_TYPE


def build_receipt_view(transaction: Transaction) -> ReceiptView:
    return ReceiptView(
        transaction_id=transaction.transaction_id,
        full_name=transaction.full_name,
        state=transaction.state,
        email=transaction.email,
        date=transaction.date,
        amount=transaction.amount,
        formatted_amount=format_naira(transaction.amount_value),
        trade_percentage=transaction.trade_percentage,
        pbo_name=transaction.pbo_name,
        email_status=transaction.email_status,
    )


def receipt_filename(transaction_id: str) -> str:
    return f"PWAN-Receipt-{transaction_id}.csv"


def generate_receipt_csv(transaction: Transaction) -> str:
    """
    Render the receipt for a single transaction as CSV text.

    Layout: title, blank line, one "Label:,value" row per field, blank line,
    two thank-you lines. Values containing commas (such as the formatted
    amount) are quoted, so the document parses back into the stored values.

    Example:
        csv_content = generate_receipt_csv(transaction)
        # PWAN MAX LAND BUY TO SELL - TRANSACTION RECEIPT
        #
        # Receipt ID:,1704844800000
        # ...
        # Amount (₦):,"₦500,000"
    """
    rows: List[List[str]] = [
        [RECEIPT_TITLE],
        [],
        ["Receipt ID:", transaction.transaction_id],
        ["Date:", transaction.date],
        ["Buyer Name:", sanitize_csv_field(transaction.full_name, "full_name")],
        ["PBO/Lead:", sanitize_csv_field(transaction.pbo_name, "pbo_name")],
        ["State:", sanitize_csv_field(transaction.state, "state")],
        [f"Amount ({NAIRA_SIGN}):", format_naira(transaction.amount_value)],
        ["Trade Percentage:", transaction.trade_percentage],
        [],
        *([line] for line in THANK_YOU_LINES),
    ]

    output = StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerows(rows)

    # The document ends without a trailing newline
    return output.getvalue().rstrip("\n")


def export_receipt(transaction: Transaction) -> ReceiptExport:
    return ReceiptExport(
        filename=receipt_filename(transaction.transaction_id),
        content=generate_receipt_csv(transaction),
    )


__all__ = [
    "ReceiptExport",
    "ReceiptView",
    "build_receipt_view",
    "export_receipt",
    "generate_receipt_csv",
    "receipt_filename",
    "sanitize_csv_field",
]
