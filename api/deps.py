"""
Shared API dependencies.
"""

from fastapi import Request

from services.receipt_desk import ReceiptDesk


def get_desk(request: Request) -> ReceiptDesk:
    """Return the desk that owns this application's state."""
    return request.app.state.desk
