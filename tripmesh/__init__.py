"""tripmesh: multimodal itinerary aggregation and ranking engine."""

__version__ = "0.3.0"
