from .driver_matcher import (
    DriverMatcher,
    NearestDriverMatcher,
    RandomDriverMatcher,
    create_driver_matcher,
)

__all__ = [
    "DriverMatcher",
    "NearestDriverMatcher",
    "RandomDriverMatcher",
    "create_driver_matcher",
]
