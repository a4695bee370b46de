"""Storage interfaces consumed by the lifecycle and payment services.

Implementations return copies: mutating a returned model never changes
stored state, only ``update``/``update_status`` do.
"""

from typing import Any, Protocol, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from driver import Driver
from payment import Payment, PaymentStatus, SavedPaymentMethod
from ride import IMMUTABLE_RIDE_FIELDS, Ride
from utils.timestamps import utc_now


class RideStore(Protocol):
    def create(self, ride: Ride) -> Ride: ...

    def find_by_id(self, ride_id: str) -> Ride: ...

    def find_by_user(self, user_id: str) -> list[Ride]: ...

    def update(self, ride_id: str, patch: dict[str, Any]) -> Ride: ...


class DriverStore(Protocol):
    def add(self, driver: Driver) -> Driver: ...

    def get(self, driver_id: str) -> Driver: ...

    def list_all(self) -> list[Driver]: ...

    def list_available(self) -> list[Driver]: ...

    def update(self, driver_id: str, patch: dict[str, Any]) -> Driver: ...


class PaymentStore(Protocol):
    def create(self, payment: Payment) -> Payment: ...

    def get(self, payment_id: str) -> Payment: ...

    def find_by_user(self, user_id: str) -> list[Payment]: ...

    def update_status(self, payment_id: str, status: PaymentStatus) -> Payment: ...


class PaymentMethodStore(Protocol):
    def add(self, method: SavedPaymentMethod) -> SavedPaymentMethod: ...

    def list_for_user(self, user_id: str) -> list[SavedPaymentMethod]:
        """Oldest first."""
        ...

    def delete(self, user_id: str, method_id: str) -> SavedPaymentMethod: ...

    def set_default(self, user_id: str, method_id: str) -> None:
        """Flag ``method_id`` as default and clear the flag on the user's other methods."""
        ...


ModelT = TypeVar("ModelT", bound=BaseModel)


def merge_patch(record: ModelT, patch: dict[str, Any]) -> ModelT:
    """Apply ``patch`` to ``record``, revalidate and stamp ``updated_at``."""
    data = {**record.model_dump(), **patch, "updated_at": utc_now()}
    try:
        return type(record).model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Invalid update for {type(record).__name__}",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


def check_ride_patch(patch: dict[str, Any]) -> None:
    """Reject patches that touch immutable or unknown ride fields."""
    immutable = IMMUTABLE_RIDE_FIELDS.intersection(patch)
    if immutable:
        raise ValidationError(
            f"Ride fields are immutable: {', '.join(sorted(immutable))}",
            details={"fields": sorted(immutable)},
        )
    unknown = set(patch) - set(Ride.model_fields)
    if unknown:
        raise ValidationError(
            f"Unknown ride fields: {', '.join(sorted(unknown))}",
            details={"fields": sorted(unknown)},
        )


def check_driver_patch(patch: dict[str, Any]) -> None:
    forbidden = {"driver_id", "created_at"}.intersection(patch)
    unknown = set(patch) - set(Driver.model_fields)
    bad = sorted(forbidden | unknown)
    if bad:
        raise ValidationError(
            f"Driver fields cannot be patched: {', '.join(bad)}",
            details={"fields": bad},
        )
