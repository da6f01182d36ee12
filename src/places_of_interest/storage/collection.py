"""
PlaceCollection: a chainable, read-only view over a player's places.

Filtering returns a new, narrower view; nothing is copied except the list of
references. The only mutating entry point is ``update``, which routes
additions and removals through the owning ``PlaceStore``.
"""

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from places_of_interest.core.place import (
    Place,
    RoughPlace,
    Vec3,
    horizontal_distance,
    squared_distance,
)
from places_of_interest.core.tags import Tag, TagName
from places_of_interest.errors import NoPlacesError
from places_of_interest.query import evaluator
from places_of_interest.query.model import ResolvedQuery

if TYPE_CHECKING:
    from places_of_interest.storage.store import PlaceStore

logger = structlog.get_logger()


@dataclass
class UpdateCounts:
    """How many places one update removed, changed or added."""

    removed: int = 0
    changed: int = 0
    added: int = 0

    def __add__(self, other: "UpdateCounts") -> "UpdateCounts":
        return UpdateCounts(
            removed=self.removed + other.removed,
            changed=self.changed + other.changed,
            added=self.added + other.added,
        )

    @property
    def total(self) -> int:
        return self.removed + self.changed + self.added


class PlaceCollection:
    """A filtered view over the places of one store."""

    def __init__(self, store: "PlaceStore", places: Iterable[Place]) -> None:
        self._store = store
        self._places = list(places)
        self._log = logger.bind(component="place_collection", player_id=store.player_id)

    def _derive(self, places: Iterable[Place]) -> "PlaceCollection":
        return PlaceCollection(self._store, places)

    @property
    def count(self) -> int:
        return len(self._places)

    def __len__(self) -> int:
        return len(self._places)

    def __iter__(self) -> Iterator[Place]:
        return iter(self._places)

    def __bool__(self) -> bool:
        return bool(self._places)

    @property
    def places(self) -> list[Place]:
        return list(self._places)

    # --- Filters ---

    def at_rough_place(self, cell: RoughPlace) -> "PlaceCollection":
        """Places whose grid cell is ``cell``."""
        return self._derive(p for p in self._places if self._store.rough_place(p.position) == cell)

    def around_point(self, center: Vec3, radius: float) -> "PlaceCollection":
        """Places within ``radius`` of ``center`` on the X/Z plane, boundary included."""
        return self._derive(
            p for p in self._places if horizontal_distance(p.position, center) <= radius
        )

    def where(self, resolved: ResolvedQuery) -> "PlaceCollection":
        """Places matching ``resolved``."""
        return self._derive(p for p in self._places if evaluator.test_place(resolved, p))

    def filter(self, predicate: Callable[[Place], bool]) -> "PlaceCollection":
        return self._derive(p for p in self._places if predicate(p))

    # --- Projections ---

    @property
    def active_tags(self) -> set[TagName]:
        """Names of every tag active today on any place in the view."""
        today = self._store.today
        return {name for place in self._places for name in place.active_tag_names(today)}

    @property
    def tags(self) -> list[Tag]:
        """Unexpired tags across the view, first occurrence per name."""
        today = self._store.today
        seen: set[TagName] = set()
        result: list[Tag] = []
        for place in self._places:
            for tag in place.tags:
                if tag.is_expired(today) or tag.name in seen:
                    continue
                seen.add(tag.name)
                result.append(tag)
        return result

    def find_nearest(self, point: Vec3) -> Place:
        """The place closest to ``point`` in 3D. Raises NoPlacesError on an empty view."""
        place = self.find_nearest_or_none(point)
        if place is None:
            raise NoPlacesError("No places to find the nearest one from")
        return place

    def find_nearest_or_none(self, point: Vec3) -> Place | None:
        if not self._places:
            return None
        return min(self._places, key=lambda p: squared_distance(point, p.position))

    # --- Mutation ---

    def update(
        self,
        resolved: ResolvedQuery,
        anchor: Vec3,
        *,
        allow_remove: bool = True,
        allow_change: bool = True,
        allow_add: bool = True,
    ) -> UpdateCounts:
        """Apply ``resolved`` as an update to every place in the view.

        An empty view creates a new place at ``anchor`` (if ``allow_add``) and
        keeps it only when it ends up with tags. Places that lose their last
        tag are removed from the store. Each place is counted at most once.
        """
        counts = UpdateCounts()

        if not self._places:
            if not allow_add:
                return counts

            place = Place(position=anchor)
            evaluator.update_place(resolved, place, allow_remove)
            if place.tags:
                self._store.add(place)
                counts.added += 1
                self._log.debug("place_added", place_id=place.id, tags=len(place.tags))
            return counts

        if not (allow_remove or allow_change):
            return counts

        for place in list(self._places):
            if not evaluator.update_place(resolved, place, allow_remove):
                continue

            if place.tags:
                counts.changed += 1
                self._log.debug("place_changed", place_id=place.id, tags=len(place.tags))
            else:
                self._store.remove(place)
                self._places = [p for p in self._places if p is not place]
                counts.removed += 1
                self._log.debug("place_removed", place_id=place.id)

        return counts
