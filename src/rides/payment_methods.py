"""Cards kept on file for a rider.

A user's first saved card becomes the default. Removing the default card
promotes the oldest remaining one, so a user with saved cards always has
exactly one default.
"""

import logging
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from core.locks import KeyedLocks
from payment import SavedPaymentMethod, card_brand
from store import PaymentMethodStore

logger = logging.getLogger(__name__)

_CARD_NUMBER = re.compile(r"^\d{12,19}$")
_CVV = re.compile(r"^\d{3,4}$")


def normalize_card_number(value: Any) -> str:
    digits = re.sub(r"[\s-]", "", str(value))
    if not _CARD_NUMBER.match(digits):
        raise ValidationError("Card number must be 12 to 19 digits")
    return digits


class PaymentMethodService:
    def __init__(self, methods: PaymentMethodStore) -> None:
        self._methods = methods
        self._user_locks = KeyedLocks()

    def list_methods(self, user_id: str) -> list[SavedPaymentMethod]:
        return self._methods.list_for_user(user_id)

    def add_method(
        self,
        user_id: str,
        method_type: Any,
        card_number: Any,
        expiry_month: Any,
        expiry_year: Any,
        cvv: Any,
        make_default: bool = False,
    ) -> SavedPaymentMethod:
        """Save a card. The CVV is checked and then discarded."""
        if not all((method_type, card_number, expiry_month, expiry_year, cvv)):
            raise ValidationError("All payment details are required")
        digits = normalize_card_number(card_number)
        if not _CVV.match(str(cvv)):
            raise ValidationError("CVV must be 3 or 4 digits")

        with self._user_locks.hold(user_id):
            is_default = make_default or not self._methods.list_for_user(user_id)
            try:
                method = SavedPaymentMethod(
                    user_id=user_id,
                    type=str(method_type),
                    brand=card_brand(digits),
                    last4=digits[-4:],
                    expiry_month=expiry_month,
                    expiry_year=expiry_year,
                    is_default=is_default,
                )
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid card expiry",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                ) from e

            saved = self._methods.add(method)
            if is_default:
                self._methods.set_default(user_id, saved.method_id)
            logger.info(
                "User %s saved %s card ending %s", user_id, saved.brand, saved.last4
            )
            return saved

    def remove_method(self, user_id: str, method_id: str) -> None:
        with self._user_locks.hold(user_id):
            if not self._methods.list_for_user(user_id):
                raise ValidationError("No payment methods found")
            removed = self._methods.delete(user_id, method_id)
            remaining = self._methods.list_for_user(user_id)
            if removed.is_default and remaining:
                self._methods.set_default(user_id, remaining[0].method_id)
                logger.info(
                    "Payment method %s is now the default for user %s",
                    remaining[0].method_id,
                    user_id,
                )
            logger.info("User %s removed payment method %s", user_id, method_id)
