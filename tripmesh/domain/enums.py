"""Domain enums."""

from enum import Enum


class TransportMode(str, Enum):
    WALK = "WALK"
    BUS = "BUS"
    METRO = "METRO"
    RAIL = "RAIL"
    BIKE = "BIKE"
    RIDE_HAIL = "RIDE_HAIL"


class SourceStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    TIMEOUT = "timeout"
