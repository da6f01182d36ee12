"""
Import/merge engine.

Reconciles a batch of incoming places with the places a player already has.
Incoming places are grouped by rough place; each group is merged into
whatever already occupies that cell according to an ``ExistingPlaceAction``:

SKIP
    Leave occupied cells alone; only fill empty ones.
UPDATE
    Add incoming tags and refresh their windows. Never removes anything.
REPLACE
    Make the cell's tags exactly the incoming ones.

Every change goes through ``PlaceCollection.update`` with one included-tag
batch per distinct (start_day, end_day) window, plus one exclusion batch for
REPLACE. The store is saved once, after all groups.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from places_of_interest.core.place import Place, RoughPlace
from places_of_interest.core.records import PlaceRecord
from places_of_interest.core.tags import Tag, TagName
from places_of_interest.query.model import ResolvedQuery
from places_of_interest.storage.collection import UpdateCounts

if TYPE_CHECKING:
    from places_of_interest.storage.store import PlaceStore

logger = structlog.get_logger()


class ExistingPlaceAction(Enum):
    """What to do when an incoming place lands on an occupied rough place."""

    SKIP = auto()
    UPDATE = auto()
    REPLACE = auto()


@dataclass
class ImportResult:
    """Outcome of one import."""

    accepted: int = 0  # Incoming places that survived sanitizing
    groups: int = 0  # Distinct rough places among them
    skipped: int = 0  # Groups left alone because the cell was occupied
    added: int = 0
    changed: int = 0
    removed: int = 0


def accept_incoming(incoming: Iterable[Place | PlaceRecord | None]) -> list[Place]:
    """Drop malformed entries and places without usable tags.

    A bad entry only drops itself; the rest of the batch is still accepted.
    """
    accepted: list[Place] = []
    for item in incoming:
        if item is None:
            continue
        try:
            place = item.to_place() if isinstance(item, PlaceRecord) else item
        except ValidationError as exc:
            logger.debug("incoming_place_rejected", errors=exc.error_count())
            continue
        if place is None or not place.tags:
            continue
        accepted.append(place)
    return accepted


def group_by_rough_place(store: "PlaceStore", places: Iterable[Place]) -> dict[RoughPlace, list[Place]]:
    groups: dict[RoughPlace, list[Place]] = {}
    for place in places:
        groups.setdefault(store.rough_place(place.position), []).append(place)
    return groups


def merge_tags(places: Iterable[Place], today: int) -> list[Tag]:
    """Union of unexpired tags, first occurrence per name wins."""
    seen: set[TagName] = set()
    merged: list[Tag] = []
    for place in places:
        for tag in place.tags:
            if tag.is_expired(today) or tag.name in seen:
                continue
            seen.add(tag.name)
            merged.append(tag)
    return merged


def group_by_window(tags: Iterable[Tag]) -> dict[tuple[int, int], list[TagName]]:
    windows: dict[tuple[int, int], list[TagName]] = {}
    for tag in tags:
        windows.setdefault(tag.window, []).append(tag.name)
    return windows


def _existing_tag_names(places: Iterable[Place]) -> list[TagName]:
    names: list[TagName] = []
    for place in places:
        for name in place.tag_names:
            if name not in names:
                names.append(name)
    return names


def import_places(
    store: "PlaceStore",
    incoming: Iterable[Place | PlaceRecord | None],
    action: ExistingPlaceAction,
) -> ImportResult:
    """Merge ``incoming`` into ``store`` and save it once."""
    log = logger.bind(component="place_importer", player_id=store.player_id, action=action.name)
    result = ImportResult()

    places = accept_incoming(incoming)
    result.accepted = len(places)

    groups = group_by_rough_place(store, places)
    result.groups = len(groups)

    for cell, group in groups.items():
        existing = store.all.at_rough_place(cell)
        if existing and action is ExistingPlaceAction.SKIP:
            result.skipped += 1
            log.debug("group_skipped", cell=(cell.x, cell.y, cell.z))
            continue

        new_tags = merge_tags(group, store.today)
        old_names = _existing_tag_names(existing)
        anchor = group[0].position
        counts = UpdateCounts()

        for (start_day, end_day), names in group_by_window(new_tags).items():
            query = ResolvedQuery.for_update(names, (), store.today, start_day, end_day)
            # Re-derive the view so a place created by an earlier batch is reused.
            counts += store.all.at_rough_place(cell).update(
                query,
                anchor,
                allow_remove=False,
                allow_change=True,
                allow_add=True,
            )

        if action is ExistingPlaceAction.REPLACE:
            new_names = {tag.name for tag in new_tags}
            names_to_remove = [name for name in old_names if name not in new_names]
            if names_to_remove:
                query = ResolvedQuery.for_update((), names_to_remove, store.today)
                counts += store.all.at_rough_place(cell).update(
                    query,
                    anchor,
                    allow_remove=True,
                    allow_change=True,
                    allow_add=False,
                )

        result.added += counts.added
        result.removed += counts.removed
        if existing and counts.changed and store.all.at_rough_place(cell):
            result.changed += 1

    store.save()
    log.info(
        "places_imported",
        accepted=result.accepted,
        groups=result.groups,
        skipped=result.skipped,
        added=result.added,
        changed=result.changed,
        removed=result.removed,
    )
    return result
