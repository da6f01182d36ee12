"""
PlacesOfInterest: one player's session over the engine.

Each public method runs one command to completion: it resolves the query
text against the calendar once, works on the player's store, saves at most
once and returns plain data. Formatting and localization of the results are
left to the caller.
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from places_of_interest.config import DEFAULT_CONFIG, PlacesConfig
from places_of_interest.core.calendar import Calendar, day_lengths
from places_of_interest.core.place import Place, Vec3, horizontal_distance, vertical_distance
from places_of_interest.core.records import PlaceRecord
from places_of_interest.core.tags import TagName
from places_of_interest.query import evaluator
from places_of_interest.query.model import ParsedQuery, ResolvedQuery
from places_of_interest.query.parser import (
    parse,
    parse_search_and_filter,
    parse_search_and_update,
)
from places_of_interest.storage.collection import UpdateCounts
from places_of_interest.storage.importer import ExistingPlaceAction, ImportResult
from places_of_interest.storage.store import PlaceStore, StoreProvider

logger = structlog.get_logger()


@dataclass
class TagResult:
    """Outcome of tagging the player's current spot."""

    counts: UpdateCounts = field(default_factory=UpdateCounts)
    created: bool = False  # No place existed at the spot before
    nothing_to_do: bool = False
    query: ParsedQuery = field(default_factory=ParsedQuery)


@dataclass
class NearestPlace:
    """The closest matching place and how far away it is."""

    place: Place
    active_tag_names: list[TagName]
    horizontal_distance: int
    vertical_distance: int  # Positive when the place is above the player


@dataclass
class EditResult:
    """Outcome of a search-and-update edit."""

    searched: int = 0  # Places within the radius
    matched: int = 0  # Of those, places matching the search half
    counts: UpdateCounts = field(default_factory=UpdateCounts)


class PlacesOfInterest:
    """Commands for one player standing at ``position``."""

    def __init__(
        self,
        player_id: str,
        position: Vec3,
        provider: StoreProvider,
        calendar: Calendar,
        config: PlacesConfig = DEFAULT_CONFIG,
    ) -> None:
        self._player_id = player_id
        self._position = position
        self._provider = provider
        self._calendar = calendar
        self._config = config
        self._store: PlaceStore | None = None
        self._log = logger.bind(component="places_of_interest", player_id=player_id)

    @property
    def position(self) -> Vec3:
        return self._position

    @property
    def today(self) -> int:
        return self._calendar.today()

    @property
    def store(self) -> PlaceStore:
        if self._store is None:
            self._store = PlaceStore.load(self._player_id, self._provider, self.today, self._config)
        return self._store

    def resolve(self, parsed: ParsedQuery) -> ResolvedQuery:
        return evaluator.resolve(parsed, self.today, day_lengths(self._calendar))

    # --- Commands ---

    def clear(self) -> None:
        """Forget every place of the player."""
        self.store.clear()
        self._log.info("places_cleared")

    def tag_here(self, text: str) -> TagResult:
        """Add, refresh or remove tags on the place at the player's rough position."""
        parsed = parse(text)
        here = self.store.all.at_rough_place(self.store.rough_place(self._position))
        result = TagResult(created=not here, query=parsed)

        if not here and not parsed.included_tag_names:
            result.nothing_to_do = True
            return result
        if here and not (parsed.included_tag_names or parsed.has_excluded()):
            result.nothing_to_do = True
            return result

        result.counts = here.update(self.resolve(parsed), self._position)
        self.store.save()

        self._log.info(
            "place_tagged",
            added=result.counts.added,
            changed=result.counts.changed,
            removed=result.counts.removed,
        )
        return result

    def find_nearest(self, text: str) -> NearestPlace | None:
        """The nearest place matching ``text``, or None."""
        resolved = self.resolve(parse(text))
        place = self.store.all.where(resolved).find_nearest_or_none(self._position)
        if place is None:
            return None

        return NearestPlace(
            place=place,
            active_tag_names=place.active_tag_names(self.today),
            horizontal_distance=round(horizontal_distance(self._position, place.position)),
            vertical_distance=round(vertical_distance(self._position, place.position)),
        )

    def tags_around(self, text: str = "", radius: float | None = None) -> set[TagName]:
        """Active tag names of matching places nearby, filtered by the tag half of ``text``."""
        if radius is None:
            radius = self._config.tags_search_radius
        elif radius <= 0:
            radius = self._config.tags_fallback_radius

        search, tag_filter = parse_search_and_filter(text)
        resolved_filter = self.resolve(tag_filter)

        matching = self.store.all.around_point(self._position, radius).where(self.resolve(search))
        return {name for name in matching.active_tags if evaluator.test_tag(resolved_filter, name)}

    def places_around(self, text: str = "", radius: float | None = None) -> list[Place]:
        """Matching places within ``radius`` of the player."""
        if radius is None or radius <= 0:
            radius = self._config.tags_search_radius
        resolved = self.resolve(parse(text))
        return self.store.all.around_point(self._position, radius).where(resolved).places

    def edit_places(self, text: str, radius: float | None = None) -> EditResult:
        """Apply the update half of ``search -> update`` to matching places nearby.

        A non-positive radius searches everywhere. Edits never create places.
        """
        if radius is None:
            radius = self._config.edit_search_radius
        elif radius <= 0:
            radius = math.inf

        search, update = parse_search_and_update(text)
        nearby = self.store.all.around_point(self._position, radius)
        matching = nearby.where(self.resolve(search))
        result = EditResult(searched=nearby.count, matched=matching.count)

        if not matching:
            return result

        result.counts = matching.update(self.resolve(update), self._position, allow_add=False)
        self.store.save()

        self._log.info(
            "places_edited",
            matched=result.matched,
            changed=result.counts.changed,
            removed=result.counts.removed,
        )
        return result

    def import_places(
        self,
        incoming: Iterable[Place | PlaceRecord | None],
        action: ExistingPlaceAction = ExistingPlaceAction.UPDATE,
    ) -> ImportResult:
        """Merge places from outside (e.g. a paste) into the player's places."""
        return self.store.import_places(incoming, action)
