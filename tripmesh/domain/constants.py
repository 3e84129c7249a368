"""Domain constants shared by deterministic logic."""

from tripmesh.domain.enums import TransportMode

COMFORT_BY_MODE = {
    TransportMode.WALK: 0.6,
    TransportMode.BIKE: 0.7,
    TransportMode.BUS: 0.6,
    TransportMode.METRO: 0.7,
    TransportMode.RAIL: 0.75,
    TransportMode.RIDE_HAIL: 0.85,
}
DEFAULT_COMFORT = 0.6

# km/h, used whenever no usable duration comes back from a provider
ASSUMED_SPEED_KMH = {
    TransportMode.WALK: 5.0,
    TransportMode.BIKE: 15.0,
    TransportMode.BUS: 20.0,
    TransportMode.METRO: 35.0,
    TransportMode.RAIL: 45.0,
    TransportMode.RIDE_HAIL: 30.0,
}

ROAD_DISTANCE_FACTOR = 1.4
FARE_CURRENCY = "INR"
MS_PER_MINUTE = 60_000

DEFAULT_WEIGHT_TIME = 0.5
DEFAULT_WEIGHT_COST = 0.3
DEFAULT_WEIGHT_COMFORT = 0.2
DEFAULT_MAX_TRANSFERS = 3

LEARNING_STEP = 0.05
LEARNING_COST_TOLERANCE = 0.05
