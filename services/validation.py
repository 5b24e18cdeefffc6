"""
Validation service for transaction form submissions and receipt recipients.

Rules are checked in a fixed order and the first failure wins, so the caller
always gets one user-facing message. Validation never touches the store.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Optional

from domain.time import Clock, is_iso_date, iso_today, utc_now
from domain.transaction import TRADE_PERCENTAGES

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
AMOUNT_PATTERN = re.compile(r"[0-9]+(\.[0-9]*)?|\.[0-9]+")
FORMULA_PREFIXES = ("=", "+", "-", "@")

MISSING_FIELDS_MESSAGE = "Please fill in all required fields"
INVALID_EMAIL_MESSAGE = "Please enter a valid email address"
INVALID_AMOUNT_MESSAGE = "Please enter a valid positive amount"
INVALID_PERCENTAGE_MESSAGE = "Please select a valid trade percentage"
INVALID_DATE_MESSAGE = "Please enter a valid date (YYYY-MM-DD)"
INVALID_TEXT_PREFIX_MESSAGE = "Names and state cannot start with =, +, - or @"


class TransactionValidationError(ValueError):
    """Raised when form input cannot be recorded; str(error) is user-facing."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field


@dataclass(frozen=True, slots=True)
class TransactionForm:
    """
    Raw form fields exactly as the buyer entered them.
    """
    full_name: str = ""
    state: str = ""
    date: str = ""
    amount: str = ""
    email: str = ""
    trade_percentage: str = ""
    pbo_name: str = ""


def blank_form(clock: Clock = utc_now) -> TransactionForm:
    """Form defaults: every field empty except the date, which is today."""

    return TransactionForm(date=iso_today(clock))


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_PATTERN.fullmatch(value) is not None


def parse_positive_amount(value: str) -> Optional[Decimal]:
    """
    Return the amount as a Decimal, or None unless it is a plain decimal
    number (digits with an optional fractional part) greater than zero.
    """

    text = value.strip()
    if AMOUNT_PATTERN.fullmatch(text) is None:
        return None
    try:
        amount = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def validate_transaction_form(form: TransactionForm, clock: Clock = utc_now) -> TransactionForm:
    """
    Validate a submission and return the cleaned form.

    Cleaning trims surrounding whitespace and fills an empty date with
    today's date.

    Raises:
        TransactionValidationError: on the first rule that fails
    """

    cleaned = TransactionForm(
        full_name=form.full_name.strip(),
        state=form.state.strip(),
        date=form.date.strip(),
        amount=form.amount.strip(),
        email=form.email.strip(),
        trade_percentage=form.trade_percentage.strip(),
        pbo_name=form.pbo_name.strip(),
    )

    required = (
        ("full_name", cleaned.full_name),
        ("state", cleaned.state),
        ("amount", cleaned.amount),
        ("email", cleaned.email),
        ("trade_percentage", cleaned.trade_percentage),
        ("pbo_name", cleaned.pbo_name),
    )
    for field_name, value in required:
        if not value:
            raise TransactionValidationError(MISSING_FIELDS_MESSAGE, field_name)

    if not is_valid_email(cleaned.email):
        raise TransactionValidationError(INVALID_EMAIL_MESSAGE, "email")

    if parse_positive_amount(cleaned.amount) is None:
        raise TransactionValidationError(INVALID_AMOUNT_MESSAGE, "amount")

    if cleaned.trade_percentage not in TRADE_PERCENTAGES:
        raise TransactionValidationError(INVALID_PERCENTAGE_MESSAGE, "trade_percentage")

    for field_name, value in (
        ("full_name", cleaned.full_name),
        ("state", cleaned.state),
        ("pbo_name", cleaned.pbo_name),
    ):
        if value.startswith(FORMULA_PREFIXES):
            raise TransactionValidationError(INVALID_TEXT_PREFIX_MESSAGE, field_name)

    if not cleaned.date:
        cleaned = replace(cleaned, date=iso_today(clock))
    elif not is_iso_date(cleaned.date):
        raise TransactionValidationError(INVALID_DATE_MESSAGE, "date")

    return cleaned


__all__ = [
    "AMOUNT_PATTERN",
    "EMAIL_PATTERN",
    "FORMULA_PREFIXES",
    "TransactionForm",
    "TransactionValidationError",
    "blank_form",
    "is_valid_email",
    "parse_positive_amount",
    "validate_transaction_form",
]
