"""Core value types: tags, places, records and the calendar."""

from places_of_interest.core.calendar import (
    Calendar,
    FixedCalendar,
    PeriodUnit,
    day_lengths,
)
from places_of_interest.core.place import (
    Place,
    RoughPlace,
    Vec3,
    horizontal_distance,
    squared_distance,
    vertical_distance,
)
from places_of_interest.core.records import PlaceRecord, TagRecord
from places_of_interest.core.tags import (
    RESERVED_TAG_NAMES,
    Tag,
    TagName,
    TagPattern,
    TagPatternType,
)

__all__ = [
    "Calendar",
    "FixedCalendar",
    "PeriodUnit",
    "Place",
    "PlaceRecord",
    "RESERVED_TAG_NAMES",
    "RoughPlace",
    "Tag",
    "TagName",
    "TagPattern",
    "TagPatternType",
    "TagRecord",
    "Vec3",
    "day_lengths",
    "horizontal_distance",
    "squared_distance",
    "vertical_distance",
]
