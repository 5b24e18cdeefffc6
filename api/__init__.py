"""Buy-to-Sell Receipt Desk HTTP API."""

__version__ = "0.1.0"
