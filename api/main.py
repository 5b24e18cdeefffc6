"""
Buy-to-Sell Receipt Desk API - Main Application.

FastAPI application with CORS enabled for frontend communication.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__
from api.routers import analytics, receipts, transactions
from services.config import Settings, load_settings
from services.delivery_gateway import SimulatedDeliveryGateway
from services.receipt_desk import ReceiptDesk


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_desk(settings: Settings) -> ReceiptDesk:
    """Wire a desk with the simulated email gateway from settings."""
    gateway = SimulatedDeliveryGateway(
        latency_seconds=settings.delivery_latency_seconds,
        success_rate=settings.delivery_success_rate,
    )
    return ReceiptDesk(gateway=gateway, analytics_limit=settings.analytics_recent_limit)


def create_app(desk: Optional[ReceiptDesk] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application around one desk.

    Tests pass their own desk; otherwise one is built from the environment.
    """
    settings = settings or load_settings()
    configure_logging(settings)

    application = FastAPI(
        title="Buy-to-Sell Receipt Desk API",
        description="Record land buy-to-sell transactions, export receipts and track email delivery",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    application.state.desk = desk if desk is not None else build_desk(settings)

    # Configure CORS - Allow all origins for development
    # TODO: Restrict origins once the form frontend has a fixed host
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.get("/health", tags=["Health"])
    def health_check():
        """
        Health check endpoint.

        Returns the API status and version.
        """
        return {
            "status": "healthy",
            "version": __version__,
            "service": "buy-to-sell-receipt-desk-api"
        }

    @application.get("/", tags=["Root"])
    def root():
        """
        Root endpoint with API information.
        """
        return {
            "message": "Buy-to-Sell Receipt Desk API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health"
        }

    application.include_router(transactions.router, prefix="/api/v1", tags=["Transactions"])
    application.include_router(receipts.router, prefix="/api/v1", tags=["Receipts"])
    application.include_router(analytics.router, prefix="/api/v1", tags=["Analytics"])

    return application


app = create_app()
