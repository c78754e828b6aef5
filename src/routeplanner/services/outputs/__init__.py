"""Itinerary presentation helpers."""
