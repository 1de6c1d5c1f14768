"""Pytest configuration for Pi Network SDK tests."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def configure_structlog():
    """Render SDK logs to the console without caching loggers."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def payment_data():
    """Payment record as returned by the Pi Network API."""
    return {
        "identifier": "pay-123",
        "user_uid": "user-456",
        "amount": 3.14,
        "memo": "Order #42",
        "metadata": {"order_id": 42},
        "from_address": "GAPPWALLET",
        "to_address": "GUSERWALLET",
        "direction": "app_to_user",
        "created_at": "2024-05-01T12:00:00Z",
        "network": "Pi Testnet",
        "status": {
            "developer_approved": True,
            "transaction_verified": True,
            "developer_completed": True,
            "cancelled": False,
            "user_cancelled": False,
        },
        "transaction": {
            "txid": "tx-789",
            "verified": True,
            "_link": "https://api.testnet.minepi.com/transactions/tx-789",
        },
    }
