"""
places-of-interest

Player-tagged places in a persistent world, queried with a compact tag
query language.

- core: tags, places, calendar
- query: parser, resolved queries, evaluator
- storage: per-player store, filtered views, import engine
- service: one player's session running a command end to end
"""

__version__ = "0.1.0"

from places_of_interest.config import PlacesConfig
from places_of_interest.core import (
    FixedCalendar,
    PeriodUnit,
    Place,
    PlaceRecord,
    RoughPlace,
    Tag,
    TagName,
    TagPattern,
    TagRecord,
    Vec3,
)
from places_of_interest.errors import NoPlacesError, PlacesOfInterestError
from places_of_interest.log import configure_logging
from places_of_interest.query import (
    ParsedQuery,
    ResolvedQuery,
    parse,
    parse_search_and_filter,
    parse_search_and_update,
    resolve,
)
from places_of_interest.service import EditResult, NearestPlace, PlacesOfInterest, TagResult
from places_of_interest.storage import (
    ExistingPlaceAction,
    ImportResult,
    InMemoryStoreProvider,
    PlaceCollection,
    PlaceStore,
    UpdateCounts,
)

__all__ = [
    "__version__",
    "EditResult",
    "ExistingPlaceAction",
    "FixedCalendar",
    "ImportResult",
    "InMemoryStoreProvider",
    "NearestPlace",
    "NoPlacesError",
    "ParsedQuery",
    "PeriodUnit",
    "Place",
    "PlaceCollection",
    "PlaceRecord",
    "PlaceStore",
    "PlacesConfig",
    "PlacesOfInterest",
    "PlacesOfInterestError",
    "ResolvedQuery",
    "RoughPlace",
    "Tag",
    "TagName",
    "TagPattern",
    "TagRecord",
    "TagResult",
    "UpdateCounts",
    "Vec3",
    "configure_logging",
    "parse",
    "parse_search_and_filter",
    "parse_search_and_update",
    "resolve",
]
