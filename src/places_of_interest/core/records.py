"""
Loose inbound place records.

Places arriving from outside the engine (clipboard pastes, packets, legacy
saves already migrated by a store provider) may carry missing or blank data.
Records accept anything shaped roughly right and convert to core types,
dropping what cannot be represented.
"""

import math

import structlog
from pydantic import BaseModel, ConfigDict

from places_of_interest.core.place import Place, Vec3
from places_of_interest.core.tags import Tag, TagName

logger = structlog.get_logger()


class TagRecord(BaseModel):
    """An unvalidated tag."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    start_day: int = 0
    end_day: int = 0

    @classmethod
    def from_tag(cls, tag: Tag) -> "TagRecord":
        return cls(name=tag.name.value, start_day=tag.start_day, end_day=tag.end_day)

    def to_tag(self) -> Tag | None:
        if self.name is None or not self.name.strip():
            return None
        return Tag(name=TagName(self.name), start_day=self.start_day, end_day=self.end_day)


class PlaceRecord(BaseModel):
    """An unvalidated place."""

    model_config = ConfigDict(extra="ignore")

    x: float
    y: float
    z: float
    tags: list[TagRecord | None] | None = None

    @classmethod
    def from_place(cls, place: Place) -> "PlaceRecord":
        return cls(
            x=place.position.x,
            y=place.position.y,
            z=place.position.z,
            tags=[TagRecord.from_tag(tag) for tag in place.tags],
        )

    def to_place(self) -> Place | None:
        """Convert to a Place, or None if no usable tag survives."""
        if self.tags is None:
            logger.debug("place_record_without_tags", x=self.x, y=self.y, z=self.z)
            return None
        if not all(math.isfinite(value) for value in (self.x, self.y, self.z)):
            logger.debug("place_record_bad_position", x=self.x, y=self.y, z=self.z)
            return None

        tags: list[Tag] = []
        seen: set[TagName] = set()
        for record in self.tags:
            if record is None:
                continue
            tag = record.to_tag()
            if tag is None or tag.name in seen:
                continue
            seen.add(tag.name)
            tags.append(tag)

        if not tags:
            logger.debug("place_record_dropped", x=self.x, y=self.y, z=self.z)
            return None

        return Place(position=Vec3(x=self.x, y=self.y, z=self.z), tags=tags)
