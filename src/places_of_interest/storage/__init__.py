"""Place storage: per-player store, filtered views and the import engine."""

from places_of_interest.storage.collection import PlaceCollection, UpdateCounts
from places_of_interest.storage.importer import ExistingPlaceAction, ImportResult, import_places
from places_of_interest.storage.store import InMemoryStoreProvider, PlaceStore, StoreProvider

__all__ = [
    "ExistingPlaceAction",
    "ImportResult",
    "InMemoryStoreProvider",
    "PlaceCollection",
    "PlaceStore",
    "StoreProvider",
    "UpdateCounts",
    "import_places",
]
