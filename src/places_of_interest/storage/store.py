"""
Per-player place storage.

``PlaceStore`` owns the in-memory list of one player's places for the length
of a command. It is loaded from a ``StoreProvider`` at the start and saved
back once at the end; collections derived from it only hold references.
"""

from collections.abc import Iterable
from typing import Protocol

import structlog

from places_of_interest.config import DEFAULT_CONFIG, PlacesConfig
from places_of_interest.core.place import Place, RoughPlace, Vec3
from places_of_interest.core.records import PlaceRecord
from places_of_interest.storage.collection import PlaceCollection
from places_of_interest.storage.importer import ExistingPlaceAction, ImportResult, import_places

logger = structlog.get_logger()


class StoreProvider(Protocol):
    """Persistence for place lists, keyed by an opaque player identifier.

    Providers that still hold data in an older shape migrate it before
    returning from ``load``; the engine only ever sees current places.
    """

    def load(self, player_id: str) -> list[Place]: ...

    def save(self, player_id: str, places: list[Place]) -> None: ...

    def clear(self, player_id: str) -> None: ...


class InMemoryStoreProvider:
    """Keeps saved place lists in a dict. Lists are deep-copied in and out."""

    def __init__(self) -> None:
        self._data: dict[str, list[Place]] = {}
        self._log = logger.bind(component="memory_store")

    @property
    def player_count(self) -> int:
        return len(self._data)

    def load(self, player_id: str) -> list[Place]:
        return [place.model_copy(deep=True) for place in self._data.get(player_id, [])]

    def save(self, player_id: str, places: list[Place]) -> None:
        self._data[player_id] = [place.model_copy(deep=True) for place in places]
        self._log.debug("places_saved", player_id=player_id, count=len(places))

    def clear(self, player_id: str) -> None:
        self._data.pop(player_id, None)
        self._log.debug("places_cleared", player_id=player_id)


class PlaceStore:
    """The places of one player, plus the day and grid settings they are viewed with."""

    def __init__(
        self,
        player_id: str,
        provider: StoreProvider,
        today: int,
        places: Iterable[Place] = (),
        config: PlacesConfig = DEFAULT_CONFIG,
    ) -> None:
        self._player_id = player_id
        self._provider = provider
        self._today = today
        self._config = config
        self._places: list[Place] = []
        self._log = logger.bind(component="place_store", player_id=player_id)

        for place in places:
            # Stored places without tags are invalid; drop them on the way in.
            if place.tags:
                self._places.append(place)

    @classmethod
    def load(
        cls,
        player_id: str,
        provider: StoreProvider,
        today: int,
        config: PlacesConfig = DEFAULT_CONFIG,
    ) -> "PlaceStore":
        store = cls(player_id, provider, today, provider.load(player_id), config)
        store._log.debug("places_loaded", count=len(store))
        return store

    @property
    def player_id(self) -> str:
        return self._player_id

    @property
    def today(self) -> int:
        return self._today

    @property
    def config(self) -> PlacesConfig:
        return self._config

    @property
    def all(self) -> PlaceCollection:
        return PlaceCollection(self, self._places)

    def __len__(self) -> int:
        return len(self._places)

    def rough_place(self, position: Vec3) -> RoughPlace:
        return RoughPlace.from_position(
            position,
            self._config.rough_place_resolution,
            self._config.rough_place_offset,
        )

    def get(self, place_id: str) -> Place | None:
        return next((p for p in self._places if p.id == place_id), None)

    def add(self, place: Place) -> None:
        if not place.tags:
            raise ValueError("Cannot store a place without tags")
        self._places.append(place)

    def remove(self, place: Place) -> bool:
        """Remove a place by id. Returns False if it was not stored."""
        before = len(self._places)
        self._places = [p for p in self._places if p.id != place.id]
        return len(self._places) != before

    def save(self) -> None:
        self._provider.save(self._player_id, [p for p in self._places if p.tags])
        self._log.debug("store_saved", count=len(self._places))

    def clear(self) -> None:
        self._provider.clear(self._player_id)
        self._places.clear()
        self._log.info("store_cleared")

    def import_places(
        self,
        incoming: Iterable[Place | PlaceRecord | None],
        action: ExistingPlaceAction,
    ) -> ImportResult:
        """Merge incoming places into this store and save it."""
        return import_places(self, incoming, action)
