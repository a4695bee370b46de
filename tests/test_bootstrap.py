"""Tests for service wiring and driver seeding."""

import json
from pathlib import Path

import pytest

from bootstrap import build_services, load_seed_drivers, seed_drivers
from core.exceptions import ConfigurationError
from db import SCHEMA_VERSION, ServiceMetadata, init_database
from db.repositories import DriverRepository, RideRepository
from settings import Settings, StorageSettings
from store import InMemoryDriverStore, InMemoryRideStore
from tests.factories import request_standard_ride

SEED_FILE = Path(__file__).resolve().parents[1] / "data" / "drivers.json"


@pytest.mark.unit
class TestLoadSeedDrivers:
    def test_bundled_seed_file(self):
        drivers = load_seed_drivers(SEED_FILE)

        assert [d.driver_id for d in drivers] == ["driver_1", "driver_2", "driver_3"]
        assert drivers[0].name == "John Smith"
        assert drivers[1].rating == 4.9
        assert drivers[2].car.model == "Tesla Model 3"
        assert all(d.is_available for d in drivers)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_seed_drivers(tmp_path / "absent.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "drivers.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            load_seed_drivers(path)

    def test_invalid_driver(self, tmp_path):
        path = tmp_path / "drivers.json"
        path.write_text(json.dumps([{"driver_id": "d1", "name": "No Car"}]), encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid driver seed file"):
            load_seed_drivers(path)


@pytest.mark.unit
class TestSeedDrivers:
    def test_existing_drivers_skipped(self):
        store = InMemoryDriverStore()
        drivers = load_seed_drivers(SEED_FILE)

        assert seed_drivers(store, drivers) == 3
        assert seed_drivers(store, drivers) == 0
        assert len(store.list_all()) == 3


@pytest.mark.unit
class TestBuildServices:
    def test_memory_backend(self):
        settings = Settings(storage=StorageSettings(drivers_seed_path=str(SEED_FILE)))

        services = build_services(settings)

        assert isinstance(services.rides, InMemoryRideStore)
        assert len(services.lifecycle.list_drivers()) == 3

    def test_default_settings_can_assign(self):
        services = build_services(Settings())

        assert len(services.lifecycle.list_drivers()) == 3
        ride = request_standard_ride(services.lifecycle)
        driver = services.lifecycle.assign_driver(ride.ride_id, "alice")
        assert services.drivers.get(driver.driver_id).is_available is False

    def test_seeding_disabled(self):
        services = build_services(Settings(storage=StorageSettings(drivers_seed_path="")))

        assert services.lifecycle.list_drivers() == []

    def test_sqlite_backend_persists(self, temp_sqlite_db):
        storage = StorageSettings(
            backend="sqlite",
            sqlite_path=str(temp_sqlite_db),
            drivers_seed_path=str(SEED_FILE),
        )
        services = build_services(Settings(storage=storage))
        assert isinstance(services.rides, RideRepository)
        assert isinstance(services.drivers, DriverRepository)

        ride = request_standard_ride(services.lifecycle)
        driver = services.lifecycle.assign_driver(ride.ride_id, "alice")

        # A second wiring over the same file sees the ride and does not reseed
        reopened = build_services(Settings(storage=storage))
        assert reopened.lifecycle.get_ride_status(ride.ride_id, "alice").status == "driver_assigned"
        assert len(reopened.lifecycle.list_drivers()) == 3
        assert reopened.drivers.get(driver.driver_id).is_available is False


@pytest.mark.unit
class TestInitDatabase:
    def test_records_schema_version(self, temp_sqlite_db):
        session_maker = init_database(str(temp_sqlite_db))

        with session_maker() as session:
            assert session.get(ServiceMetadata, "schema_version").value == SCHEMA_VERSION

    def test_reopening_same_version(self, temp_sqlite_db):
        init_database(str(temp_sqlite_db))
        init_database(str(temp_sqlite_db))

    def test_refuses_other_schema_version(self, temp_sqlite_db):
        session_maker = init_database(str(temp_sqlite_db))
        with session_maker() as session, session.begin():
            session.get(ServiceMetadata, "schema_version").value = "0.9.0"

        with pytest.raises(ConfigurationError, match="schema 0.9.0"):
            init_database(str(temp_sqlite_db))
