"""Ride repository backed by SQLite."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from core.exceptions import DuplicateIdError, NotFoundError
from ride import Location, Ride, RidePayment, RideRating, RideStatus, RideType
from store.base import check_ride_patch, merge_patch
from utils.timestamps import as_utc

from ..schema import RideRow
from ..session import session_scope


class RideRepository:
    """RideStore implementation over the ``rides`` table.

    Each call runs in its own session scope.
    """

    def __init__(self, session_maker: sessionmaker[Session]):
        self.session_maker = session_maker

    def create(self, ride: Ride) -> Ride:
        with session_scope(self.session_maker) as session:
            if session.get(RideRow, ride.ride_id) is not None:
                raise DuplicateIdError(
                    f"Ride {ride.ride_id} already exists", details={"ride_id": ride.ride_id}
                )
            row = RideRow(ride_id=ride.ride_id)
            self._apply(row, ride)
            session.add(row)
        return ride.model_copy(deep=True)

    def find_by_id(self, ride_id: str) -> Ride:
        with self.session_maker() as session:
            row = session.get(RideRow, ride_id)
            if row is None:
                raise NotFoundError("Ride not found", details={"ride_id": ride_id})
            return self._to_domain(row)

    def find_by_user(self, user_id: str) -> list[Ride]:
        with self.session_maker() as session:
            stmt = (
                select(RideRow)
                .where(RideRow.user_id == user_id)
                .order_by(RideRow.created_at, RideRow.ride_id)
            )
            return [self._to_domain(row) for row in session.scalars(stmt)]

    def update(self, ride_id: str, patch: dict[str, Any]) -> Ride:
        check_ride_patch(patch)
        with session_scope(self.session_maker) as session:
            row = session.get(RideRow, ride_id)
            if row is None:
                raise NotFoundError("Ride not found", details={"ride_id": ride_id})
            updated = merge_patch(self._to_domain(row), patch)
            self._apply(row, updated)
        return updated

    @staticmethod
    def _apply(row: RideRow, ride: Ride) -> None:
        row.user_id = ride.user_id
        row.driver_id = ride.driver_id
        row.origin_json = ride.origin.model_dump_json()
        row.destination_json = ride.destination.model_dump_json()
        row.ride_type = ride.ride_type.value
        row.estimated_price = ride.estimated_price
        row.estimated_time = ride.estimated_time
        row.distance_km = ride.distance_km
        row.status = ride.status.value
        row.payment_json = ride.payment.model_dump_json() if ride.payment else None
        row.rating_json = ride.rating.model_dump_json() if ride.rating else None
        row.created_at = ride.created_at
        row.updated_at = ride.updated_at

    @staticmethod
    def _to_domain(row: RideRow) -> Ride:
        return Ride(
            ride_id=row.ride_id,
            user_id=row.user_id,
            driver_id=row.driver_id,
            origin=Location.model_validate_json(row.origin_json),
            destination=Location.model_validate_json(row.destination_json),
            ride_type=RideType(row.ride_type),
            estimated_price=row.estimated_price,
            estimated_time=row.estimated_time,
            distance_km=row.distance_km,
            status=RideStatus(row.status),
            payment=RidePayment.model_validate_json(row.payment_json) if row.payment_json else None,
            rating=RideRating.model_validate_json(row.rating_json) if row.rating_json else None,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )
