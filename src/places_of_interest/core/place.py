"""
Places: positions in the world carrying an ordered, de-duplicated tag list.

Positions are float vectors; places that should count as the same spot are
grouped through their integer ``RoughPlace`` grid cell, never by comparing
floats directly.
"""

import math
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from ulid import ULID

from places_of_interest.core.tags import Tag, TagName


def _coerce_triple(data: Any) -> Any:
    if isinstance(data, (list, tuple)):
        if len(data) != 3:
            raise ValueError(f"Expected 3 coordinates, got {len(data)}")
        return {"x": data[0], "y": data[1], "z": data[2]}
    return data


class Vec3(BaseModel):
    """A position in the world. Y is the vertical axis; coordinates are finite."""

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    x: float
    y: float
    z: float

    @model_validator(mode="before")
    @classmethod
    def _from_sequence(cls, data: Any) -> Any:
        return _coerce_triple(data)

    @property
    def xz(self) -> tuple[float, float]:
        return self.x, self.z


class RoughPlace(BaseModel):
    """Integer grid cell used to treat nearby positions as one spot."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: int
    y: int
    z: int

    @model_validator(mode="before")
    @classmethod
    def _from_sequence(cls, data: Any) -> Any:
        return _coerce_triple(data)

    @classmethod
    def from_position(cls, position: Vec3, resolution: int = 8, offset: int = 4) -> "RoughPlace":
        return cls(
            x=math.floor(position.x / resolution) * resolution + offset,
            y=math.floor(position.y / resolution) * resolution + offset,
            z=math.floor(position.z / resolution) * resolution + offset,
        )

    def to_vec3(self) -> Vec3:
        return Vec3(x=self.x, y=self.y, z=self.z)


def horizontal_distance(a: Vec3, b: Vec3) -> float:
    """Distance between two positions on the X/Z plane."""
    return math.hypot(a.x - b.x, a.z - b.z)


def vertical_distance(a: Vec3, b: Vec3) -> float:
    """Signed height of ``b`` above ``a``."""
    return b.y - a.y


def squared_distance(a: Vec3, b: Vec3) -> float:
    return (a.x - b.x) ** 2 + (a.y - b.y) ** 2 + (a.z - b.z) ** 2


class Place(BaseModel):
    """A tagged position owned by one player's store.

    The tag list is rewritten in place by update operations. A place left
    without tags must be removed from its store rather than saved.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(default_factory=lambda: str(ULID()))
    position: Vec3
    tags: list[Tag] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_names(self) -> "Place":
        seen: set[TagName] = set()
        for tag in self.tags:
            if tag.name in seen:
                raise ValueError(f"Duplicate tag name: {tag.name}")
            seen.add(tag.name)
        return self

    @property
    def tag_names(self) -> list[TagName]:
        return [tag.name for tag in self.tags]

    def active_tags(self, day: int) -> list[Tag]:
        return [tag for tag in self.tags if tag.is_active(day)]

    def active_tag_names(self, day: int) -> list[TagName]:
        return [tag.name for tag in self.active_tags(day)]

    def replace_tags(self, new_tags: Iterable[Tag]) -> None:
        """Swap the tag list contents while keeping the list object itself."""
        self.tags[:] = list(new_tags)

    def rough_place(self, resolution: int = 8, offset: int = 4) -> RoughPlace:
        return RoughPlace.from_position(self.position, resolution, offset)
