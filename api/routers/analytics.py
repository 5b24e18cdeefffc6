"""
Analytics API Endpoints.

Read-only view of receipt delivery activity.
"""

from fastapi import APIRouter, Depends

from api.deps import get_desk
from api.models import AnalyticsResponse, CountersResponse, TransactionResponse
from services.receipt_desk import ReceiptDesk

router = APIRouter()


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Email Receipt Analytics",
    description="Running delivery counters and the most recently sent receipts."
)
def get_analytics(desk: ReceiptDesk = Depends(get_desk)):
    """
    Return the four delivery counters and the latest sends.

    Counters are a running log of transitions (sent, pending, delivered,
    failed), not a tally of current statuses. Recent sends exclude records
    that were never sent and are ordered newest first.
    """
    snapshot = desk.analytics()
    return AnalyticsResponse(
        counters=CountersResponse.from_counters(snapshot.counters),
        recent_sends=[TransactionResponse.from_transaction(tx) for tx in snapshot.recent_sends],
    )
