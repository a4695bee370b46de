"""Payment repository backed by SQLite."""

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from core.exceptions import DuplicateIdError, NotFoundError
from payment import Payment, PaymentStatus
from utils.timestamps import as_utc, utc_now

from ..schema import PaymentRow
from ..session import session_scope


class PaymentRepository:
    """PaymentStore implementation over the ``payments`` table."""

    def __init__(self, session_maker: sessionmaker[Session]):
        self.session_maker = session_maker

    def create(self, payment: Payment) -> Payment:
        with session_scope(self.session_maker) as session:
            if session.get(PaymentRow, payment.payment_id) is not None:
                raise DuplicateIdError(
                    f"Payment {payment.payment_id} already exists",
                    details={"payment_id": payment.payment_id},
                )
            session.add(
                PaymentRow(
                    payment_id=payment.payment_id,
                    ride_id=payment.ride_id,
                    user_id=payment.user_id,
                    amount=payment.amount,
                    method=payment.method,
                    status=payment.status.value,
                    created_at=payment.created_at,
                    updated_at=payment.updated_at,
                )
            )
        return payment.model_copy(deep=True)

    def get(self, payment_id: str) -> Payment:
        with self.session_maker() as session:
            row = session.get(PaymentRow, payment_id)
            if row is None:
                raise NotFoundError("Payment not found", details={"payment_id": payment_id})
            return self._to_domain(row)

    def find_by_user(self, user_id: str) -> list[Payment]:
        with self.session_maker() as session:
            stmt = (
                select(PaymentRow)
                .where(PaymentRow.user_id == user_id)
                .order_by(PaymentRow.created_at, PaymentRow.payment_id)
            )
            return [self._to_domain(row) for row in session.scalars(stmt)]

    def update_status(self, payment_id: str, status: PaymentStatus) -> Payment:
        with session_scope(self.session_maker) as session:
            row = session.get(PaymentRow, payment_id)
            if row is None:
                raise NotFoundError("Payment not found", details={"payment_id": payment_id})
            row.status = status.value
            row.updated_at = utc_now()
            payment = self._to_domain(row)
        return payment

    @staticmethod
    def _to_domain(row: PaymentRow) -> Payment:
        return Payment(
            payment_id=row.payment_id,
            ride_id=row.ride_id,
            user_id=row.user_id,
            amount=row.amount,
            method=row.method,
            status=PaymentStatus(row.status),
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )
