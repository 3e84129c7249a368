"""Generative itinerary collaborators."""
