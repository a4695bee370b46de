"""Saved payment method repository backed by SQLite."""

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from core.exceptions import DuplicateIdError, NotFoundError
from payment import SavedPaymentMethod
from utils.timestamps import as_utc

from ..schema import PaymentMethodRow
from ..session import session_scope


class PaymentMethodRepository:
    """PaymentMethodStore implementation over the ``payment_methods`` table."""

    def __init__(self, session_maker: sessionmaker[Session]):
        self.session_maker = session_maker

    def add(self, method: SavedPaymentMethod) -> SavedPaymentMethod:
        with session_scope(self.session_maker) as session:
            if session.get(PaymentMethodRow, method.method_id) is not None:
                raise DuplicateIdError(
                    f"Payment method {method.method_id} already exists",
                    details={"method_id": method.method_id},
                )
            session.add(
                PaymentMethodRow(
                    method_id=method.method_id,
                    user_id=method.user_id,
                    type=method.type,
                    brand=method.brand,
                    last4=method.last4,
                    expiry_month=method.expiry_month,
                    expiry_year=method.expiry_year,
                    is_default=method.is_default,
                    created_at=method.created_at,
                )
            )
        return method.model_copy(deep=True)

    def list_for_user(self, user_id: str) -> list[SavedPaymentMethod]:
        with self.session_maker() as session:
            stmt = (
                select(PaymentMethodRow)
                .where(PaymentMethodRow.user_id == user_id)
                .order_by(PaymentMethodRow.created_at, PaymentMethodRow.method_id)
            )
            return [self._to_domain(row) for row in session.scalars(stmt)]

    def delete(self, user_id: str, method_id: str) -> SavedPaymentMethod:
        with session_scope(self.session_maker) as session:
            row = self._owned_row(session, user_id, method_id)
            method = self._to_domain(row)
            session.delete(row)
        return method

    def set_default(self, user_id: str, method_id: str) -> None:
        with session_scope(self.session_maker) as session:
            self._owned_row(session, user_id, method_id)
            stmt = select(PaymentMethodRow).where(PaymentMethodRow.user_id == user_id)
            for row in session.scalars(stmt):
                row.is_default = row.method_id == method_id

    @staticmethod
    def _owned_row(session: Session, user_id: str, method_id: str) -> PaymentMethodRow:
        row = session.get(PaymentMethodRow, method_id)
        if row is None or row.user_id != user_id:
            raise NotFoundError("Payment method not found", details={"method_id": method_id})
        return row

    @staticmethod
    def _to_domain(row: PaymentMethodRow) -> SavedPaymentMethod:
        return SavedPaymentMethod(
            method_id=row.method_id,
            user_id=row.user_id,
            type=row.type,
            brand=row.brand,
            last4=row.last4,
            expiry_month=row.expiry_month,
            expiry_year=row.expiry_year,
            is_default=row.is_default,
            created_at=as_utc(row.created_at),
        )
