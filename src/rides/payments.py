"""Payment processing tied to ride completion."""

import logging
from typing import Any

from core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from payment import Payment, PaymentStatus
from ride import RideStatus
from store import PaymentStore, RideStore

from .lifecycle import RideLifecycleManager
from .summaries import PaidRideSummary, PaymentView

logger = logging.getLogger(__name__)


def coerce_amount(value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError("Invalid payment amount")
    try:
        amount = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError("Invalid payment amount", details={"amount": value}) from e
    if amount <= 0:
        raise ValidationError("Payment amount must be positive", details={"amount": amount})
    return amount


class PaymentService:
    """Records payments and completes the rides they pay for.

    Shares the lifecycle manager's per-ride locks so a payment can never
    interleave with a cancellation or status change of the same ride.
    """

    def __init__(
        self,
        payments: PaymentStore,
        rides: RideStore,
        lifecycle: RideLifecycleManager,
    ) -> None:
        self._payments = payments
        self._rides = rides
        self._lifecycle = lifecycle

    def process_payment(
        self, ride_id: str, requesting_user_id: str, method: Any, amount: Any
    ) -> Payment:
        if not method or amount is None:
            raise ValidationError("Payment method and amount are required")
        value = coerce_amount(amount)

        with self._lifecycle.locked_ride(ride_id, requesting_user_id) as ride:
            if ride.status == RideStatus.COMPLETED:
                raise InvalidStateError("Ride already paid", details={"ride_id": ride_id})
            if ride.status == RideStatus.CANCELLED:
                raise InvalidStateError(
                    "Cannot pay for a cancelled ride", details={"ride_id": ride_id}
                )
            if self._lifecycle.strict and ride.status != RideStatus.IN_PROGRESS:
                raise InvalidStateError(
                    "Payment is accepted once the ride is in progress",
                    details={"ride_id": ride_id, "status": ride.status.value},
                )

            payment = self._payments.create(
                Payment(
                    ride_id=ride_id,
                    user_id=requesting_user_id,
                    amount=value,
                    method=str(method),
                )
            )
            try:
                self._rides.update(
                    ride_id, {"status": RideStatus.COMPLETED, "payment": payment.summary()}
                )
            except Exception:
                # Stores commit separately; a completed payment must not outlive a failed completion
                logger.error(
                    "Completing ride %s failed, marking payment %s failed",
                    ride_id,
                    payment.payment_id,
                )
                self._payments.update_status(payment.payment_id, PaymentStatus.FAILED)
                raise
            if ride.driver_id:
                self._lifecycle.release_driver(ride.driver_id)

            logger.info(
                "Payment %s of %.2f recorded for ride %s", payment.payment_id, value, ride_id
            )
            return payment

    def get_payment_history(self, user_id: str) -> list[PaymentView]:
        views = [self._view(payment) for payment in self._payments.find_by_user(user_id)]
        views.sort(key=lambda view: view.payment.created_at, reverse=True)
        return views

    def get_payment_details(self, payment_id: str, requesting_user_id: str) -> PaymentView:
        payment = self._payments.get(payment_id)
        if payment.user_id != requesting_user_id:
            logger.warning("User %s denied access to payment %s", requesting_user_id, payment_id)
            raise AuthorizationError(
                "Payment belongs to another user", details={"payment_id": payment_id}
            )
        return self._view(payment)

    def confirm_payment(self, payment_id: str, status: Any) -> Payment:
        """Apply an externally confirmed payment status.

        Called by the payment provider webhook, so no user ownership check
        applies. The summary embedded on the ride follows the new status.
        """
        if not status:
            raise ValidationError("Payment status is required")
        try:
            new_status = PaymentStatus(status)
        except ValueError as e:
            raise ValidationError(
                f"Invalid payment status: {status!r}",
                details={"allowed": [s.value for s in PaymentStatus]},
            ) from e

        payment = self._payments.get(payment_id)
        with self._lifecycle.ride_lock(payment.ride_id):
            updated = self._payments.update_status(payment_id, new_status)
            try:
                ride = self._rides.find_by_id(payment.ride_id)
            except NotFoundError:
                logger.warning(
                    "Payment %s references missing ride %s", payment_id, payment.ride_id
                )
                return updated
            if ride.payment is not None and ride.payment.payment_id == payment_id:
                self._rides.update(ride.ride_id, {"payment": updated.summary()})

        logger.info("Payment %s confirmed as %s", payment_id, new_status.value)
        return updated

    def _view(self, payment: Payment) -> PaymentView:
        try:
            ride = self._rides.find_by_id(payment.ride_id)
        except NotFoundError:
            return PaymentView(payment=payment)
        return PaymentView(payment=payment, ride=PaidRideSummary.from_ride(ride))
