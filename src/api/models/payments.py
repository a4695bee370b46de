from datetime import datetime

from api.models.base import CamelModel, LocationBody
from api.models.rides import location_out
from payment import Payment, SavedPaymentMethod
from rides import PaymentView


class PaymentBody(CamelModel):
    method: str | None = None
    amount: float | None = None


class PaymentReceipt(CamelModel):
    success: bool = True
    payment_id: str
    amount: float
    method: str
    status: str
    timestamp: datetime

    @classmethod
    def from_payment(cls, payment: Payment) -> "PaymentReceipt":
        return cls(
            payment_id=payment.payment_id,
            amount=payment.amount,
            method=payment.method,
            status=payment.status.value,
            timestamp=payment.created_at,
        )


class PaymentRide(CamelModel):
    ride_id: str
    origin: LocationBody
    destination: LocationBody
    status: str
    created_at: datetime


class PaymentResponse(CamelModel):
    payment_id: str
    amount: float
    method: str
    status: str
    date: datetime
    ride: PaymentRide | None

    @classmethod
    def from_view(cls, view: PaymentView) -> "PaymentResponse":
        payment, ride = view.payment, view.ride
        return cls(
            payment_id=payment.payment_id,
            amount=payment.amount,
            method=payment.method,
            status=payment.status.value,
            date=payment.created_at,
            ride=PaymentRide(
                ride_id=ride.ride_id,
                origin=location_out(ride.origin),
                destination=location_out(ride.destination),
                status=ride.status.value,
                created_at=ride.created_at,
            )
            if ride
            else None,
        )


class ConfirmBody(CamelModel):
    status: str | None = None


class ConfirmResponse(CamelModel):
    payment_id: str
    status: str
    updated_at: datetime


class PaymentMethodBody(CamelModel):
    type: str | None = None
    card_number: str | int | None = None
    expiry_month: int | str | None = None
    expiry_year: int | str | None = None
    cvv: str | int | None = None
    is_default: bool = False


class PaymentMethodResponse(CamelModel):
    id: str
    type: str
    brand: str
    last4: str
    expiry_month: int
    expiry_year: int
    is_default: bool
    created_at: datetime

    @classmethod
    def from_method(cls, method: SavedPaymentMethod) -> "PaymentMethodResponse":
        return cls(
            id=method.method_id,
            type=method.type,
            brand=method.brand,
            last4=method.last4,
            expiry_month=method.expiry_month,
            expiry_year=method.expiry_year,
            is_default=method.is_default,
            created_at=method.created_at,
        )


class MessageResponse(CamelModel):
    message: str
