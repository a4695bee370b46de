"""Driver repository backed by SQLite."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from core.exceptions import DuplicateIdError, NotFoundError
from driver import Coordinates, Driver, Vehicle
from store.base import check_driver_patch, merge_patch
from utils.timestamps import as_utc

from ..schema import DriverRow
from ..session import session_scope


class DriverRepository:
    """DriverStore implementation over the ``drivers`` table."""

    def __init__(self, session_maker: sessionmaker[Session]):
        self.session_maker = session_maker

    def add(self, driver: Driver) -> Driver:
        with session_scope(self.session_maker) as session:
            if session.get(DriverRow, driver.driver_id) is not None:
                raise DuplicateIdError(
                    f"Driver {driver.driver_id} already exists",
                    details={"driver_id": driver.driver_id},
                )
            row = DriverRow(driver_id=driver.driver_id)
            self._apply(row, driver)
            session.add(row)
        return driver.model_copy(deep=True)

    def get(self, driver_id: str) -> Driver:
        with self.session_maker() as session:
            row = session.get(DriverRow, driver_id)
            if row is None:
                raise NotFoundError("Driver not found", details={"driver_id": driver_id})
            return self._to_domain(row)

    def list_all(self) -> list[Driver]:
        with self.session_maker() as session:
            stmt = select(DriverRow).order_by(DriverRow.created_at, DriverRow.driver_id)
            return [self._to_domain(row) for row in session.scalars(stmt)]

    def list_available(self) -> list[Driver]:
        with self.session_maker() as session:
            stmt = (
                select(DriverRow)
                .where(DriverRow.is_available.is_(True))
                .order_by(DriverRow.created_at, DriverRow.driver_id)
            )
            return [self._to_domain(row) for row in session.scalars(stmt)]

    def update(self, driver_id: str, patch: dict[str, Any]) -> Driver:
        check_driver_patch(patch)
        with session_scope(self.session_maker) as session:
            row = session.get(DriverRow, driver_id)
            if row is None:
                raise NotFoundError("Driver not found", details={"driver_id": driver_id})
            updated = merge_patch(self._to_domain(row), patch)
            self._apply(row, updated)
        return updated

    @staticmethod
    def _apply(row: DriverRow, driver: Driver) -> None:
        row.name = driver.name
        row.phone = driver.phone
        row.photo = driver.photo
        row.car_json = driver.car.model_dump_json()
        row.latitude = driver.location.latitude
        row.longitude = driver.location.longitude
        row.rating = driver.rating
        row.rating_count = driver.rating_count
        row.rating_total = driver.rating_total
        row.is_available = driver.is_available
        row.created_at = driver.created_at
        row.updated_at = driver.updated_at

    @staticmethod
    def _to_domain(row: DriverRow) -> Driver:
        return Driver(
            driver_id=row.driver_id,
            name=row.name,
            phone=row.phone,
            photo=row.photo,
            car=Vehicle.model_validate_json(row.car_json),
            location=Coordinates(latitude=row.latitude, longitude=row.longitude),
            rating=row.rating,
            rating_count=row.rating_count,
            rating_total=row.rating_total,
            is_available=row.is_available,
            created_at=as_utc(row.created_at),
            updated_at=as_utc(row.updated_at),
        )
