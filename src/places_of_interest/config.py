"""
Configuration for the places-of-interest engine.

Grid resolution and search radii are plain values handed in by the host;
nothing here reads files or the environment.
"""

from pydantic import BaseModel, ConfigDict, Field


class PlacesConfig(BaseModel):
    """Tunable constants shared by the store, collections and the session facade."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Rough place grid
    rough_place_resolution: int = Field(default=8, gt=0)
    rough_place_offset: int = 4

    # Search radii (blocks, horizontal)
    tags_search_radius: float = Field(default=100, gt=0)
    tags_fallback_radius: float = Field(default=16, gt=0)
    edit_search_radius: float = Field(default=16, gt=0)


DEFAULT_CONFIG = PlacesConfig()
