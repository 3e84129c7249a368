"""Domain semantic exceptions."""


class DomainError(Exception):
    """Base domain exception."""


class InvalidItineraryError(DomainError):
    """Raised when an itinerary is built from an empty leg list."""


class InvalidCoordinateError(DomainError):
    """Raised when a planning endpoint is not a finite WGS84 coordinate."""
