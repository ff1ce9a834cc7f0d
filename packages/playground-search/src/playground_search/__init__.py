"""Multi-source playground search: adapters, merge engine and pipeline."""

from playground_search.exceptions import AdapterError, AuthorizationError, ProviderConfigurationError, SearchError
from playground_search.geocoding import NominatimGeocoder
from playground_search.merge import DEFAULT_DEDUP_THRESHOLD_DEGREES, merge_results
from playground_search.models import PhotoSource, PlaygroundPhoto, PlaygroundRecord, PlaygroundSource
from playground_search.photos import PhotoAttacher, stock_photo_url
from playground_search.pipeline import PlaygroundSearchPipeline, SearchOutcome

__all__ = [
    "AdapterError",
    "AuthorizationError",
    "DEFAULT_DEDUP_THRESHOLD_DEGREES",
    "NominatimGeocoder",
    "PhotoAttacher",
    "PhotoSource",
    "PlaygroundPhoto",
    "PlaygroundRecord",
    "PlaygroundSearchPipeline",
    "PlaygroundSource",
    "ProviderConfigurationError",
    "SearchError",
    "SearchOutcome",
    "merge_results",
    "stock_photo_url",
]
