from playground_search.adapters.base import BaseSearchAdapter, HttpSearchAdapter
from playground_search.adapters.database import (
    DatabaseSearchAdapter,
    PlaygroundRowSource,
    PlaygroundSearchRow,
    apply_coordinate_fallback,
)
from playground_search.adapters.google_places import GooglePlacesAdapter
from playground_search.adapters.overpass import OverpassAdapter
from playground_search.adapters.synthetic import synthetic_playgrounds

__all__ = [
    "BaseSearchAdapter",
    "DatabaseSearchAdapter",
    "GooglePlacesAdapter",
    "HttpSearchAdapter",
    "OverpassAdapter",
    "PlaygroundRowSource",
    "PlaygroundSearchRow",
    "apply_coordinate_fallback",
    "synthetic_playgrounds",
]
