"""Trip-planning map client backend: keeps the map viewport in step with the trip search."""

__version__ = "0.1.0"
