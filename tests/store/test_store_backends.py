"""Behaviour shared by the in-memory stores and the SQLite repositories."""

from datetime import timedelta

import pytest

from core.exceptions import DuplicateIdError, NotFoundError, ValidationError
from db import init_database
from db.repositories import (
    DriverRepository,
    PaymentMethodRepository,
    PaymentRepository,
    RideRepository,
)
from payment import Payment, PaymentStatus, SavedPaymentMethod
from ride import RidePayment, RideRating, RideStatus
from store import (
    InMemoryDriverStore,
    InMemoryPaymentMethodStore,
    InMemoryPaymentStore,
    InMemoryRideStore,
)
from tests.factories import make_driver, make_ride


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, temp_sqlite_db):
    if request.param == "memory":
        return (
            InMemoryRideStore(),
            InMemoryDriverStore(),
            InMemoryPaymentStore(),
            InMemoryPaymentMethodStore(),
        )
    session_maker = init_database(str(temp_sqlite_db))
    return (
        RideRepository(session_maker),
        DriverRepository(session_maker),
        PaymentRepository(session_maker),
        PaymentMethodRepository(session_maker),
    )


@pytest.fixture
def rides(backend):
    return backend[0]


@pytest.fixture
def drivers(backend):
    return backend[1]


@pytest.fixture
def payments(backend):
    return backend[2]


@pytest.fixture
def saved_methods(backend):
    return backend[3]


@pytest.mark.unit
class TestRideStore:
    def test_create_and_find(self, rides):
        ride = make_ride()
        rides.create(ride)

        found = rides.find_by_id(ride.ride_id)
        assert found == ride

    def test_find_missing(self, rides):
        with pytest.raises(NotFoundError) as exc_info:
            rides.find_by_id("nope")
        assert exc_info.value.details == {"ride_id": "nope"}

    def test_duplicate_id_rejected(self, rides):
        ride = make_ride()
        rides.create(ride)
        with pytest.raises(DuplicateIdError):
            rides.create(ride)

    def test_find_by_user_in_creation_order(self, rides):
        first = make_ride(user_id="alice")
        second = make_ride(user_id="alice", created_at=first.created_at + timedelta(seconds=1))
        rides.create(first)
        rides.create(make_ride(user_id="bob"))
        rides.create(second)

        found = rides.find_by_user("alice")
        assert [r.ride_id for r in found] == [first.ride_id, second.ride_id]
        assert rides.find_by_user("carol") == []

    def test_update_applies_patch_and_stamps_updated_at(self, rides):
        ride = rides.create(make_ride())

        updated = rides.update(ride.ride_id, {"status": RideStatus.DRIVER_ASSIGNED, "driver_id": "d1"})

        assert updated.status == RideStatus.DRIVER_ASSIGNED
        assert updated.driver_id == "d1"
        assert updated.updated_at >= ride.updated_at
        assert rides.find_by_id(ride.ride_id) == updated

    def test_update_nested_records(self, rides):
        ride = rides.create(make_ride())
        payment = RidePayment(payment_id="p1", amount=20.5, method="card", status="completed")
        rating = RideRating(value=4, comment="Smooth")

        rides.update(ride.ride_id, {"payment": payment, "rating": rating})

        found = rides.find_by_id(ride.ride_id)
        assert found.payment == payment
        assert found.rating.value == 4
        assert found.rating.comment == "Smooth"

    @pytest.mark.parametrize("field", ["ride_id", "user_id", "ride_type", "created_at"])
    def test_immutable_fields_rejected(self, rides, field):
        ride = rides.create(make_ride())
        with pytest.raises(ValidationError, match="immutable"):
            rides.update(ride.ride_id, {field: "x"})

    def test_unknown_field_rejected(self, rides):
        ride = rides.create(make_ride())
        with pytest.raises(ValidationError, match="Unknown"):
            rides.update(ride.ride_id, {"surge": 2})

    def test_invalid_value_rejected_and_not_stored(self, rides):
        ride = rides.create(make_ride())
        with pytest.raises(ValidationError):
            rides.update(ride.ride_id, {"status": "teleported"})
        assert rides.find_by_id(ride.ride_id).status == RideStatus.PENDING

    def test_update_missing(self, rides):
        with pytest.raises(NotFoundError):
            rides.update("nope", {"status": RideStatus.CANCELLED})

    def test_returned_copies_are_detached(self, rides):
        ride = rides.create(make_ride())
        found = rides.find_by_id(ride.ride_id)
        found.status = RideStatus.CANCELLED
        assert rides.find_by_id(ride.ride_id).status == RideStatus.PENDING


@pytest.mark.unit
class TestDriverStore:
    def test_add_and_get(self, drivers):
        drivers.add(make_driver("d1", rating=4.8))
        driver = drivers.get("d1")
        assert driver.rating == 4.8
        assert driver.car.model == "Toyota Camry"
        assert driver.location.latitude == pytest.approx(40.7549)

    def test_get_missing(self, drivers):
        with pytest.raises(NotFoundError):
            drivers.get("nope")

    def test_duplicate_rejected(self, drivers):
        drivers.add(make_driver("d1"))
        with pytest.raises(DuplicateIdError):
            drivers.add(make_driver("d1"))

    def test_list_available(self, drivers):
        drivers.add(make_driver("d1"))
        drivers.add(make_driver("d2", is_available=False))

        assert [d.driver_id for d in drivers.list_all()] == ["d1", "d2"]
        assert [d.driver_id for d in drivers.list_available()] == ["d1"]

    def test_update(self, drivers):
        drivers.add(make_driver("d1"))

        updated = drivers.update("d1", {"rating": 4.5, "rating_count": 1, "rating_total": 4.0})

        assert updated.rating == 4.5
        assert drivers.get("d1").rating_count == 1

    def test_update_rejects_identity_fields(self, drivers):
        drivers.add(make_driver("d1"))
        with pytest.raises(ValidationError):
            drivers.update("d1", {"driver_id": "d2"})

    def test_update_rejects_out_of_range_rating(self, drivers):
        drivers.add(make_driver("d1"))
        with pytest.raises(ValidationError):
            drivers.update("d1", {"rating": 7})


@pytest.mark.unit
class TestPaymentStore:
    def test_create_get_and_update_status(self, payments):
        payment = payments.create(Payment(ride_id="r1", user_id="alice", amount=20.5, method="card"))

        assert payments.get(payment.payment_id).amount == 20.5

        refunded = payments.update_status(payment.payment_id, PaymentStatus.REFUNDED)
        assert refunded.status == PaymentStatus.REFUNDED
        assert payments.get(payment.payment_id).status == PaymentStatus.REFUNDED

    def test_find_by_user(self, payments):
        payments.create(Payment(ride_id="r1", user_id="alice", amount=10, method="card"))
        payments.create(Payment(ride_id="r2", user_id="bob", amount=12, method="cash"))

        found = payments.find_by_user("alice")
        assert [p.ride_id for p in found] == ["r1"]

    def test_missing(self, payments):
        with pytest.raises(NotFoundError):
            payments.get("nope")
        with pytest.raises(NotFoundError):
            payments.update_status("nope", PaymentStatus.FAILED)


def saved_card(user_id="alice", last4="4242", **overrides):
    return SavedPaymentMethod(
        user_id=user_id,
        type="card",
        brand="visa",
        last4=last4,
        expiry_month=12,
        expiry_year=2030,
        **overrides,
    )


@pytest.mark.unit
class TestPaymentMethodStore:
    def test_add_and_list_oldest_first(self, saved_methods):
        first = saved_methods.add(saved_card(last4="1111"))
        second = saved_methods.add(
            saved_card(last4="2222", created_at=first.created_at + timedelta(seconds=1))
        )
        saved_methods.add(saved_card(user_id="bob"))

        listed = saved_methods.list_for_user("alice")

        assert [m.method_id for m in listed] == [first.method_id, second.method_id]
        assert listed[0] == first

    def test_set_default_clears_others(self, saved_methods):
        first = saved_methods.add(saved_card(is_default=True))
        second = saved_methods.add(saved_card(last4="9999"))
        bobs = saved_methods.add(saved_card(user_id="bob", is_default=True))

        saved_methods.set_default("alice", second.method_id)

        flags = {m.method_id: m.is_default for m in saved_methods.list_for_user("alice")}
        assert flags == {first.method_id: False, second.method_id: True}
        assert saved_methods.list_for_user("bob")[0].method_id == bobs.method_id
        assert saved_methods.list_for_user("bob")[0].is_default is True

    def test_delete(self, saved_methods):
        method = saved_methods.add(saved_card())

        removed = saved_methods.delete("alice", method.method_id)

        assert removed.method_id == method.method_id
        assert saved_methods.list_for_user("alice") == []

    def test_other_users_method_is_not_found(self, saved_methods):
        method = saved_methods.add(saved_card())

        with pytest.raises(NotFoundError):
            saved_methods.delete("bob", method.method_id)
        with pytest.raises(NotFoundError):
            saved_methods.set_default("bob", method.method_id)
        assert len(saved_methods.list_for_user("alice")) == 1

    def test_duplicate_rejected(self, saved_methods):
        method = saved_methods.add(saved_card())
        with pytest.raises(DuplicateIdError):
            saved_methods.add(method)
