"""
Receipts API Endpoints.

Endpoints for generating, downloading and emailing transaction receipts.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response, status

from api.deps import get_desk
from api.models import ReceiptResponse, RecipientRequest, SendReceiptResponse
from repositories.transaction_repository import TransactionNotFoundError
from services.receipt_desk import (
    DeliveryInProgressError,
    InvalidRecipientError,
    NoReceiptSelectedError,
    ReceiptDesk,
)

router = APIRouter()


@router.post(
    "/receipts/{transaction_id}",
    response_model=ReceiptResponse,
    summary="Generate Receipt",
    description="Select a transaction as the current receipt and pre-fill the recipient email."
)
def generate_receipt(transaction_id: str, desk: ReceiptDesk = Depends(get_desk)):
    """
    Generate the receipt view for a recorded transaction.

    Selecting the same transaction again yields the same receipt and resets
    the recipient to the buyer's stored email.
    """
    try:
        view = desk.generate_receipt(transaction_id)
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ReceiptResponse.from_view(view, desk.recipient_email)


@router.get(
    "/receipts/current",
    response_model=ReceiptResponse,
    summary="Current Receipt"
)
def get_current_receipt(desk: ReceiptDesk = Depends(get_desk)):
    try:
        view = desk.current_receipt()
    except NoReceiptSelectedError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return ReceiptResponse.from_view(view, desk.recipient_email)


@router.put(
    "/receipts/current/recipient",
    response_model=ReceiptResponse,
    summary="Set Receipt Recipient"
)
def set_recipient(request: RecipientRequest, desk: ReceiptDesk = Depends(get_desk)):
    """
    Change the email address the current receipt will be sent to.

    The address is only checked when a send is triggered.
    """
    try:
        view = desk.current_receipt()
    except NoReceiptSelectedError as e:
        raise HTTPException(status_code=404, detail=str(e))

    desk.set_recipient_email(request.email)
    return ReceiptResponse.from_view(view, desk.recipient_email)


@router.get(
    "/receipts/current/download",
    summary="Download Receipt CSV",
    description="Download the current receipt as a CSV file.",
    response_class=Response
)
def download_receipt_csv(desk: ReceiptDesk = Depends(get_desk)):
    """
    Download the CSV export of the current receipt.

    **Response:**
    CSV file download with filename: `PWAN-Receipt-{transaction_id}.csv`,
    or 204 No Content when no receipt is selected.
    """
    try:
        export = desk.export_receipt_csv()
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to generate CSV: {str(e)}"
        )

    if export is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={
            "Content-Disposition": f"attachment; filename={export.filename}"
        }
    )


@router.post(
    "/receipts/current/send",
    response_model=SendReceiptResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Email Receipt",
    description="Start a simulated email delivery of the current receipt."
)
def send_receipt(background_tasks: BackgroundTasks, desk: ReceiptDesk = Depends(get_desk)):
    """
    Send the current receipt to the recipient email.

    **Process:**
    1. Validates the recipient email
    2. Marks the transaction `pending` and responds immediately (202)
    3. Resolves the delivery in the background to `delivered` or `failed`

    Poll `GET /receipts/current` or `GET /analytics` for the outcome.

    **Errors:**
    - 400: recipient email is invalid (nothing changes)
    - 404: no receipt selected
    - 409: this receipt is already being sent
    """
    try:
        pending = desk.begin_send()
    except NoReceiptSelectedError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidRecipientError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DeliveryInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))

    background_tasks.add_task(desk.complete_send, pending)

    return SendReceiptResponse(
        transaction_id=pending.transaction_id,
        recipient_email=pending.recipient,
        email_status=pending.receipt.email_status.value,
        message=f"Sending receipt to {pending.recipient}..."
    )
