"""
Transactions API Endpoints.

Endpoints for recording buy-to-sell transactions and listing them.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from api.deps import get_desk
from api.models import (
    FormDefaultsResponse,
    TransactionCreatedResponse,
    TransactionFormModel,
    TransactionListResponse,
    TransactionResponse,
)
from domain.transaction import TRADE_PERCENTAGES
from repositories.transaction_repository import TransactionNotFoundError
from services.receipt_desk import ReceiptDesk
from services.validation import TransactionValidationError

router = APIRouter()


@router.get(
    "/transactions/form-defaults",
    response_model=FormDefaultsResponse,
    summary="Blank Transaction Form",
    description="Default form values (date set to today) and the allowed trade percentages."
)
def get_form_defaults(desk: ReceiptDesk = Depends(get_desk)):
    return FormDefaultsResponse(
        form=TransactionFormModel.from_form(desk.form_defaults()),
        trade_percentages=list(TRADE_PERCENTAGES),
    )


@router.post(
    "/transactions",
    response_model=TransactionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record Transaction",
    description="Validate a transaction form and append it to the store."
)
def create_transaction(request: TransactionFormModel, desk: ReceiptDesk = Depends(get_desk)):
    """
    Record a new buy-to-sell transaction.

    **Validation (first failure wins):**
    1. Full name, state, amount, email, trade percentage and PBO/Lead are required
    2. Email must look like `name@domain.tld`
    3. Amount must be a number greater than zero
    4. Trade percentage must be one of the offered values
    5. Date, when given, must be `YYYY-MM-DD` (empty means today)

    A rejected submission returns 400 with the message and stores nothing.
    New records start with email status `idle` ("Not Sent").
    """
    try:
        transaction = desk.submit_transaction(request.to_form())
    except TransactionValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to record transaction: {str(e)}"
        )

    return TransactionCreatedResponse(
        transaction=TransactionResponse.from_transaction(transaction),
        next_form=TransactionFormModel.from_form(desk.form_defaults()),
    )


@router.get(
    "/transactions",
    response_model=TransactionListResponse,
    summary="List Transactions",
    description="All recorded transactions in the order they were entered."
)
def list_transactions(desk: ReceiptDesk = Depends(get_desk)):
    items = [TransactionResponse.from_transaction(tx) for tx in desk.records()]
    return TransactionListResponse(items=items, total_count=len(items))


@router.get(
    "/transactions/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get Transaction"
)
def get_transaction(transaction_id: str, desk: ReceiptDesk = Depends(get_desk)):
    try:
        transaction = desk.get_transaction(transaction_id)
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return TransactionResponse.from_transaction(transaction)
