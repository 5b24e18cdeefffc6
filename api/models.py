"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from domain.money import format_naira
from domain.transaction import DeliveryCounters, Transaction
from services.receipt_export_service import ReceiptView
from services.validation import TransactionForm


# ============================================================================
# Transaction Models
# ============================================================================

class TransactionFormModel(BaseModel):
    """Transaction form fields as entered by the user."""
    full_name: str = Field("", description="Full name of the land buyer")
    state: str = Field("", description="State of the land purchase")
    date: str = Field("", description="Date of deposit (YYYY-MM-DD); empty means today")
    amount: str = Field("", description="Amount deposited in naira")
    email: str = Field("", description="Buyer email address")
    trade_percentage: str = Field("", description="Trade percentage, e.g. '20%'")
    pbo_name: str = Field("", description="Name of the referring PBO/Lead")

    class Config:
        json_schema_extra = {
            "example": {
                "full_name": "Ada Obi",
                "state": "Lagos",
                "date": "2024-01-10",
                "amount": "500000",
                "email": "ada@example.com",
                "trade_percentage": "20%",
                "pbo_name": "Chidi"
            }
        }

    def to_form(self) -> TransactionForm:
        return TransactionForm(
            full_name=self.full_name,
            state=self.state,
            date=self.date,
            amount=self.amount,
            email=self.email,
            trade_percentage=self.trade_percentage,
            pbo_name=self.pbo_name,
        )

    @classmethod
    def from_form(cls, form: TransactionForm) -> "TransactionFormModel":
        return cls(
            full_name=form.full_name,
            state=form.state,
            date=form.date,
            amount=form.amount,
            email=form.email,
            trade_percentage=form.trade_percentage,
            pbo_name=form.pbo_name,
        )


class FormDefaultsResponse(BaseModel):
    """Blank form plus the selectable trade percentages."""
    form: TransactionFormModel
    trade_percentages: List[str]


class TransactionResponse(BaseModel):
    """Single transaction record in API response."""
    transaction_id: str
    full_name: str
    state: str
    date: str
    amount: str
    formatted_amount: str
    email: str
    trade_percentage: str
    pbo_name: str
    timestamp: int
    email_status: str  # "idle", "pending", "delivered" or "failed"
    email_status_label: str  # "Not Sent", "Pending", ...

    class Config:
        json_schema_extra = {
            "example": {
                "transaction_id": "1704844800000",
                "full_name": "Ada Obi",
                "state": "Lagos",
                "date": "2024-01-10",
                "amount": "500000",
                "formatted_amount": "₦500,000",
                "email": "ada@example.com",
                "trade_percentage": "20%",
                "pbo_name": "Chidi",
                "timestamp": 1704844800000,
                "email_status": "idle",
                "email_status_label": "Not Sent"
            }
        }

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionResponse":
        return cls(
            transaction_id=transaction.transaction_id,
            full_name=transaction.full_name,
            state=transaction.state,
            date=transaction.date,
            amount=transaction.amount,
            formatted_amount=format_naira(transaction.amount_value),
            email=transaction.email,
            trade_percentage=transaction.trade_percentage,
            pbo_name=transaction.pbo_name,
            timestamp=transaction.timestamp,
            email_status=transaction.email_status.value,
            email_status_label=transaction.email_status.label,
        )


class TransactionCreatedResponse(BaseModel):
    """Response after recording a transaction."""
    transaction: TransactionResponse
    next_form: TransactionFormModel
    message: str = "Transaction Saved"


class TransactionListResponse(BaseModel):
    """Response for transaction listing."""
    items: List[TransactionResponse]
    total_count: int


# ============================================================================
# Receipt Models
# ============================================================================

class ReceiptResponse(BaseModel):
    """Receipt view for the selected transaction."""
    transaction_id: str
    full_name: str
    state: str
    email: str
    date: str
    amount: str
    formatted_amount: str
    trade_percentage: str
    pbo_name: str
    email_status: str
    recipient_email: str

    @classmethod
    def from_view(cls, view: ReceiptView, recipient_email: str) -> "ReceiptResponse":
        return cls(
            transaction_id=view.transaction_id,
            full_name=view.full_name,
            state=view.state,
            email=view.email,
            date=view.date,
            amount=view.amount,
            formatted_amount=view.formatted_amount,
            trade_percentage=view.trade_percentage,
            pbo_name=view.pbo_name,
            email_status=view.email_status.value,
            recipient_email=recipient_email,
        )


class RecipientRequest(BaseModel):
    """Request to change the recipient of the selected receipt."""
    email: str = Field(..., description="Email address to send the receipt to")


class SendReceiptResponse(BaseModel):
    """Response after triggering a receipt delivery."""
    transaction_id: str
    recipient_email: str
    email_status: str
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "transaction_id": "1704844800000",
                "recipient_email": "ada@example.com",
                "email_status": "pending",
                "message": "Sending receipt to ada@example.com..."
            }
        }


# ============================================================================
# Analytics Models
# ============================================================================

class CountersResponse(BaseModel):
    sent: int
    pending: int
    delivered: int
    failed: int

    @classmethod
    def from_counters(cls, counters: DeliveryCounters) -> "CountersResponse":
        return cls(
            sent=counters.sent,
            pending=counters.pending,
            delivered=counters.delivered,
            failed=counters.failed,
        )


class AnalyticsResponse(BaseModel):
    """Running delivery counters and the most recent sends."""
    counters: CountersResponse
    recent_sends: List[TransactionResponse]

