"""Data models for the Pi Network payment API."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PaymentDirection(str, Enum):
    """Direction of a Pi payment."""

    USER_TO_APP = "user_to_app"
    APP_TO_USER = "app_to_user"


class PaymentStatus(BaseModel):
    """Lifecycle flags of a payment."""

    developer_approved: bool = Field(..., description="Server-side approval done")
    transaction_verified: bool = Field(..., description="Blockchain transaction verified")
    developer_completed: bool = Field(..., description="Server-side completion done")
    cancelled: bool = Field(..., description="Cancelled by the developer or Pi")
    user_cancelled: bool = Field(..., description="Cancelled by the user")


class PaymentTransaction(BaseModel):
    """Blockchain transaction attached to a payment."""

    model_config = ConfigDict(populate_by_name=True)

    txid: str = Field(..., description="Stellar transaction ID")
    verified: bool = Field(..., description="Whether Pi verified the transaction")
    link: str = Field(..., alias="_link", description="Horizon URL of the transaction")


class Payment(BaseModel):
    """Payment record as returned by the Pi Network API."""

    identifier: str = Field(..., description="Payment identifier")
    user_uid: str = Field(..., description="App-specific user UID")
    amount: float = Field(..., description="Payment amount in Pi")
    memo: str = Field(..., description="Memo shown to the user")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Developer metadata")
    from_address: str = Field(..., description="Sender wallet address")
    to_address: str = Field(..., description="Recipient wallet address")
    direction: PaymentDirection = Field(..., description="Payment direction")
    created_at: datetime = Field(..., description="Creation timestamp")
    network: str = Field(..., description="Pi Network or Pi Testnet")
    status: PaymentStatus = Field(..., description="Payment status flags")
    transaction: PaymentTransaction | None = Field(
        None, description="Blockchain transaction, once submitted"
    )
