"""Exceptions raised by the places-of-interest core."""


class PlacesOfInterestError(Exception):
    """Base class for errors raised by this package."""


class NoPlacesError(PlacesOfInterestError, LookupError):
    """Raised when a nearest-place lookup runs against an empty collection."""
