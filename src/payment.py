from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from ride import RidePayment
from utils.timestamps import utc_now


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Payment(BaseModel):
    """Payment for a ride. Only ``status`` changes after creation."""

    payment_id: str = Field(default_factory=lambda: str(uuid4()))
    ride_id: str
    user_id: str
    amount: float = Field(gt=0)
    method: str = Field(min_length=1)
    status: PaymentStatus = PaymentStatus.COMPLETED
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def summary(self) -> RidePayment:
        return RidePayment(
            payment_id=self.payment_id,
            amount=self.amount,
            method=self.method,
            status=self.status.value,
        )


def card_brand(card_number: str) -> str:
    """Card network from the leading digits; ``unknown`` when unrecognised."""
    if card_number.startswith("4"):
        return "visa"
    if card_number[:2] in {"34", "37"}:
        return "amex"
    if "51" <= card_number[:2] <= "55" or "2221" <= card_number[:4] <= "2720":
        return "mastercard"
    if card_number.startswith("6011") or card_number.startswith("65"):
        return "discover"
    return "unknown"


class SavedPaymentMethod(BaseModel):
    """A card kept on file. Only the last four digits are stored."""

    method_id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    type: str = Field(min_length=1)
    brand: str = "unknown"
    last4: str = Field(pattern=r"^\d{4}$")
    expiry_month: int = Field(ge=1, le=12)
    expiry_year: int = Field(ge=2000, le=2100)
    is_default: bool = False
    created_at: datetime = Field(default_factory=utc_now)
