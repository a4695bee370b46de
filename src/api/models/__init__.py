"""Pydantic models for API requests and responses."""

from api.models.base import CamelModel, LocationBody, PointBody
from api.models.locations import (
    AddressResponse,
    DirectionsBody,
    DirectionsResponse,
    EstimateResponse,
    TierFaresResponse,
    TripBody,
)
from api.models.payments import (
    ConfirmBody,
    ConfirmResponse,
    MessageResponse,
    PaymentBody,
    PaymentMethodBody,
    PaymentMethodResponse,
    PaymentReceipt,
    PaymentResponse,
)
from api.models.rides import (
    CancelResponse,
    DriverResponse,
    RatingBody,
    RatingResponse,
    RideDetailsResponse,
    RideHistoryResponse,
    RideRequestBody,
    RideResponse,
    StatusBody,
    StatusResponse,
)

__all__ = [
    "AddressResponse",
    "CamelModel",
    "CancelResponse",
    "ConfirmBody",
    "ConfirmResponse",
    "DirectionsBody",
    "DirectionsResponse",
    "DriverResponse",
    "MessageResponse",
    "EstimateResponse",
    "LocationBody",
    "PaymentBody",
    "PaymentMethodBody",
    "PaymentMethodResponse",
    "PaymentReceipt",
    "PaymentResponse",
    "PointBody",
    "RatingBody",
    "RatingResponse",
    "RideDetailsResponse",
    "RideHistoryResponse",
    "RideRequestBody",
    "RideResponse",
    "StatusBody",
    "StatusResponse",
    "TierFaresResponse",
    "TripBody",
]
