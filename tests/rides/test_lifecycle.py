"""Tests for the ride lifecycle manager."""

import pytest

from core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    NoDriverAvailableError,
    NotFoundError,
    ValidationError,
)
from matching import RandomDriverMatcher
from ride import RideStatus, RideType
from rides import RideLifecycleManager
from settings import RideSettings
from tests.factories import (
    CENTRAL_PARK,
    TIMES_SQUARE,
    TRIP_PROGRESSION,
    make_ride,
    request_standard_ride,
    ride_in_progress,
)


@pytest.mark.unit
class TestRequestRide:
    def test_creates_pending_ride_with_given_estimates(self, lifecycle, ride_store):
        ride = request_standard_ride(lifecycle, estimated_price=15.5, estimated_time=12)

        assert ride.status == RideStatus.PENDING
        assert ride.user_id == "alice"
        assert ride.driver_id is None
        assert ride.ride_type == RideType.STANDARD
        assert ride.estimated_price == 15.5
        assert ride.estimated_time == 12
        assert ride.origin.address == "Times Square"
        assert ride_store.find_by_id(ride.ride_id) == ride

    def test_fills_missing_estimates(self, lifecycle):
        ride = request_standard_ride(lifecycle)

        assert ride.estimated_price == pytest.approx(16.47)
        assert ride.estimated_time == 7
        assert ride.distance_km == pytest.approx(3.59)

    def test_accepts_numeric_strings(self, lifecycle):
        ride = request_standard_ride(lifecycle, estimated_price="15.50", estimated_time="12")
        assert ride.estimated_price == 15.5
        assert ride.estimated_time == 12.0

    @pytest.mark.parametrize("missing", ["origin", "destination", "ride_type"])
    def test_missing_required_field(self, lifecycle, missing):
        fields = {"origin": TIMES_SQUARE, "destination": CENTRAL_PARK, "ride_type": "economy"}
        fields[missing] = None

        with pytest.raises(ValidationError, match="required") as exc_info:
            lifecycle.request_ride("alice", **fields)

        assert exc_info.value.details == {"missing": [missing]}

    def test_unknown_ride_type(self, lifecycle):
        with pytest.raises(ValidationError, match="ride_type"):
            lifecycle.request_ride("alice", TIMES_SQUARE, CENTRAL_PARK, "helicopter")

    def test_out_of_range_coordinates(self, lifecycle):
        bad_origin = {"latitude": 123.0, "longitude": -73.9855}
        with pytest.raises(ValidationError, match="origin"):
            lifecycle.request_ride("alice", bad_origin, CENTRAL_PARK, "economy")

    def test_negative_estimate(self, lifecycle):
        with pytest.raises(ValidationError, match="negative"):
            request_standard_ride(lifecycle, estimated_price=-3)

    def test_same_origin_and_destination(self, lifecycle, ride_store):
        with pytest.raises(ValidationError, match="different locations"):
            lifecycle.request_ride("alice", TIMES_SQUARE, dict(TIMES_SQUARE), "standard")

        assert ride_store.find_by_user("alice") == []

    @pytest.mark.parametrize("minutes", [0, "0", 0.0])
    def test_zero_time_estimate(self, lifecycle, minutes):
        with pytest.raises(ValidationError, match="must be positive"):
            request_standard_ride(lifecycle, estimated_time=minutes)

    def test_zero_price_estimate_allowed(self, lifecycle):
        assert request_standard_ride(lifecycle, estimated_price=0).estimated_price == 0

    def test_ride_ids_are_unique(self, lifecycle):
        ids = {request_standard_ride(lifecycle).ride_id for _ in range(20)}
        assert len(ids) == 20


@pytest.mark.unit
class TestOwnership:
    def test_unknown_ride_is_not_found(self, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.get_ride_status("missing", "alice")

    def test_other_users_ride_is_forbidden(self, lifecycle):
        ride = request_standard_ride(lifecycle, "alice")

        with pytest.raises(AuthorizationError):
            lifecycle.get_ride_status(ride.ride_id, "bob")
        with pytest.raises(AuthorizationError):
            lifecycle.get_ride_details(ride.ride_id, "bob")
        with pytest.raises(AuthorizationError):
            lifecycle.assign_driver(ride.ride_id, "bob")

    def test_cancel_by_other_user_leaves_status(self, lifecycle):
        ride = request_standard_ride(lifecycle, "alice")

        with pytest.raises(AuthorizationError):
            lifecycle.cancel_ride(ride.ride_id, "bob")

        assert lifecycle.get_ride_status(ride.ride_id, "alice").status == RideStatus.PENDING


@pytest.mark.unit
class TestAssignDriver:
    def test_assigns_available_driver(self, lifecycle, driver_store):
        ride = request_standard_ride(lifecycle)

        driver = lifecycle.assign_driver(ride.ride_id, "alice")

        assert driver.driver_id in {"driver_1", "driver_2", "driver_3"}
        assert driver.is_available is False
        assert driver_store.get(driver.driver_id).is_available is False

        status = lifecycle.get_ride_status(ride.ride_id, "alice")
        assert status.status == RideStatus.DRIVER_ASSIGNED

    def test_only_pending_rides(self, lifecycle):
        ride = request_standard_ride(lifecycle)
        lifecycle.assign_driver(ride.ride_id, "alice")

        with pytest.raises(InvalidStateError):
            lifecycle.assign_driver(ride.ride_id, "alice")

    def test_no_driver_available(self, lifecycle):
        rides = [request_standard_ride(lifecycle) for _ in range(4)]
        for ride in rides[:3]:
            lifecycle.assign_driver(ride.ride_id, "alice")

        with pytest.raises(NoDriverAvailableError):
            lifecycle.assign_driver(rides[3].ride_id, "alice")

        assert lifecycle.get_ride_status(rides[3].ride_id, "alice").status == RideStatus.PENDING

    def test_distinct_drivers_for_concurrent_rides(self, lifecycle):
        rides = [request_standard_ride(lifecycle) for _ in range(3)]
        assigned = {lifecycle.assign_driver(r.ride_id, "alice").driver_id for r in rides}
        assert len(assigned) == 3

    def test_permissive_mode_reassigns_and_frees_previous(self, permissive_lifecycle, driver_store):
        ride = request_standard_ride(permissive_lifecycle)
        first = permissive_lifecycle.assign_driver(ride.ride_id, "alice")

        second = permissive_lifecycle.assign_driver(ride.ride_id, "alice")

        assert second.driver_id != first.driver_id
        assert driver_store.get(first.driver_id).is_available is True
        assert driver_store.get(second.driver_id).is_available is False


@pytest.mark.unit
class TestUpdateStatus:
    def test_follows_graph(self, lifecycle):
        ride, _ = ride_in_progress(lifecycle)
        assert lifecycle.get_ride_status(ride.ride_id, "alice").status == RideStatus.IN_PROGRESS

    def test_snapshot_has_updated_at(self, lifecycle):
        ride = request_standard_ride(lifecycle)
        lifecycle.assign_driver(ride.ride_id, "alice")

        snapshot = lifecycle.update_status(ride.ride_id, "alice", "picking_up")

        assert snapshot.status == RideStatus.PICKING_UP
        assert snapshot.updated_at >= ride.updated_at

    def test_skipping_rejected(self, lifecycle):
        ride = request_standard_ride(lifecycle)
        with pytest.raises(InvalidStateError):
            lifecycle.update_status(ride.ride_id, "alice", RideStatus.IN_PROGRESS)

    def test_driver_assigned_only_through_assignment(self, lifecycle):
        ride = request_standard_ride(lifecycle)
        with pytest.raises(InvalidStateError, match="driver endpoint"):
            lifecycle.update_status(ride.ride_id, "alice", "driver_assigned")

    def test_completed_only_through_payment(self, lifecycle):
        ride, _ = ride_in_progress(lifecycle)
        with pytest.raises(InvalidStateError, match="payment"):
            lifecycle.update_status(ride.ride_id, "alice", "completed")

    def test_unknown_status(self, lifecycle):
        ride = request_standard_ride(lifecycle)
        with pytest.raises(ValidationError):
            lifecycle.update_status(ride.ride_id, "alice", "teleported")

    def test_missing_status(self, lifecycle):
        ride = request_standard_ride(lifecycle)
        with pytest.raises(ValidationError, match="required"):
            lifecycle.update_status(ride.ride_id, "alice", None)

    def test_cancel_through_status_frees_driver(self, lifecycle, driver_store):
        ride = request_standard_ride(lifecycle)
        driver = lifecycle.assign_driver(ride.ride_id, "alice")

        lifecycle.update_status(ride.ride_id, "alice", "cancelled")

        assert driver_store.get(driver.driver_id).is_available is True

    def test_permissive_mode_overwrites(self, permissive_lifecycle):
        ride = request_standard_ride(permissive_lifecycle)

        snapshot = permissive_lifecycle.update_status(ride.ride_id, "alice", "completed")
        assert snapshot.status == RideStatus.COMPLETED

        snapshot = permissive_lifecycle.update_status(ride.ride_id, "alice", "pending")
        assert snapshot.status == RideStatus.PENDING


@pytest.mark.unit
class TestCancelRide:
    def test_cancel_pending(self, lifecycle):
        ride = request_standard_ride(lifecycle)

        cancelled = lifecycle.cancel_ride(ride.ride_id, "alice")

        assert cancelled.status == RideStatus.CANCELLED

    @pytest.mark.parametrize("steps", range(len(TRIP_PROGRESSION) + 1))
    def test_cancel_active_ride_frees_driver(self, lifecycle, driver_store, steps):
        ride = request_standard_ride(lifecycle)
        driver = lifecycle.assign_driver(ride.ride_id, "alice")
        for status in TRIP_PROGRESSION[:steps]:
            lifecycle.update_status(ride.ride_id, "alice", status)

        lifecycle.cancel_ride(ride.ride_id, "alice")

        assert lifecycle.get_ride_status(ride.ride_id, "alice").status == RideStatus.CANCELLED
        assert driver_store.get(driver.driver_id).is_available is True

    def test_cancel_twice_is_idempotent(self, lifecycle):
        ride = request_standard_ride(lifecycle)
        first = lifecycle.cancel_ride(ride.ride_id, "alice")

        second = lifecycle.cancel_ride(ride.ride_id, "alice")

        assert second.status == RideStatus.CANCELLED
        assert second.updated_at == first.updated_at

    def test_cannot_cancel_completed(self, lifecycle, payment_service):
        ride, _ = ride_in_progress(lifecycle)
        payment_service.process_payment(ride.ride_id, "alice", "card", 20.5)

        with pytest.raises(InvalidStateError, match="completed"):
            lifecycle.cancel_ride(ride.ride_id, "alice")

        assert lifecycle.get_ride_status(ride.ride_id, "alice").status == RideStatus.COMPLETED


@pytest.mark.unit
class TestRideDetails:
    def test_breakdown(self, lifecycle):
        ride = request_standard_ride(lifecycle, estimated_time=12)

        details = lifecycle.get_ride_details(ride.ride_id, "alice")

        assert details.ride.ride_id == ride.ride_id
        assert details.breakdown.base_fare == 7.5
        assert details.breakdown.distance_fare == pytest.approx(10.0)
        assert details.breakdown.time_fare == pytest.approx(3.0)
        assert details.breakdown.fare == pytest.approx(20.5)
        assert details.tip_amount == 0.0
        assert details.payment_method == "card"

    def test_stored_distance_source(self, ride_store, driver_store, estimator):
        manager = RideLifecycleManager(
            ride_store,
            driver_store,
            estimator,
            RandomDriverMatcher(seed=1),
            ride_settings=RideSettings(breakdown_distance_source="stored"),
        )
        ride = request_standard_ride(manager, estimated_time=12)

        details = manager.get_ride_details(ride.ride_id, "alice")

        assert details.breakdown.distance_km == pytest.approx(3.59)

    @pytest.mark.parametrize("minutes", [0, None])
    def test_unusable_time_estimate(self, lifecycle, ride_store, minutes):
        ride = ride_store.create(make_ride(estimated_time=minutes))

        with pytest.raises(ValidationError, match="time estimate"):
            lifecycle.get_ride_details(ride.ride_id, "alice")


@pytest.mark.unit
class TestRideHistory:
    def test_most_recent_first_with_driver(self, lifecycle):
        first = request_standard_ride(lifecycle, estimated_time=12)
        second = request_standard_ride(lifecycle, estimated_time=6)
        driver = lifecycle.assign_driver(second.ride_id, "alice")
        request_standard_ride(lifecycle, "bob")

        history = lifecycle.get_ride_history("alice")

        assert [entry.id for entry in history] == [second.ride_id, first.ride_id]
        assert history[0].driver.id == driver.driver_id
        assert history[0].driver.name == driver.name
        assert history[1].driver is None
        assert history[1].distance == pytest.approx(4.0)
        assert history[1].fare == pytest.approx(20.5)

    def test_empty(self, lifecycle):
        assert lifecycle.get_ride_history("nobody") == []

    def test_list_drivers(self, lifecycle):
        assert {d.driver_id for d in lifecycle.list_drivers()} == {
            "driver_1",
            "driver_2",
            "driver_3",
        }
