from __future__ import annotations

from devkit.config import ServiceSettings, load_settings
from geo_engine.models import GeoPoint
from playground_search.adapters.database import DatabaseSearchAdapter
from playground_search.adapters.google_places import GooglePlacesAdapter
from playground_search.adapters.overpass import OverpassAdapter
from playground_search.geocoding import NominatimGeocoder
from playground_search.photos import PhotoAttacher
from playground_search.pipeline import PlaygroundSearchPipeline
from shared.security import JWTManager

from playground_api.observability import PrometheusApiMetricsCollector
from playground_api.proxy import ProviderProxy
from playground_api.repositories.photo_storage import LocalPhotoStorage
from playground_api.repositories.playground_store import PlaygroundStore
from playground_api.services.catalogue_service import CatalogueService
from playground_api.services.community_service import CommunityService
from playground_api.services.photo_service import PhotoService
from playground_api.services.profile_service import ProfileService
from playground_api.services.search_service import SearchService

PLACES_PHOTO_PROXY_PATH = "/api/places/photo"

_settings = load_settings("playground-api")
_jwt = JWTManager(secret=_settings.AUTH_JWT_SECRET, audience=_settings.AUTH_JWT_AUDIENCE)
_prom_metrics = PrometheusApiMetricsCollector()

_store = PlaygroundStore(_settings.DATABASE_URL)
_photo_storage = LocalPhotoStorage(_settings.PHOTO_STORAGE_DIR, _settings.PHOTO_PUBLIC_BASE_URL)

_pipeline = PlaygroundSearchPipeline(
    places=GooglePlacesAdapter(
        api_key=_settings.GOOGLE_PLACES_API_KEY,
        base_url=_settings.GOOGLE_PLACES_BASE_URL,
        region=_settings.PLACES_REGION,
        photo_proxy_path=PLACES_PHOTO_PROXY_PATH,
        timeout_seconds=_settings.PROVIDER_TIMEOUT_SECONDS,
    ),
    map_data=OverpassAdapter(
        base_url=_settings.OVERPASS_BASE_URL,
        timeout_seconds=_settings.PROVIDER_TIMEOUT_SECONDS,
        user_agent=_settings.PROVIDER_USER_AGENT,
    ),
    database=DatabaseSearchAdapter(
        _store,
        limit=_settings.SEARCH_RESULT_LIMIT,
        jitter_enabled=_settings.DB_COORDINATE_JITTER,
    ),
    geocoder=NominatimGeocoder(
        base_url=_settings.NOMINATIM_BASE_URL,
        country_codes=_settings.GEOCODE_COUNTRY_CODES,
        user_agent=_settings.PROVIDER_USER_AGENT,
        timeout_seconds=_settings.PROVIDER_TIMEOUT_SECONDS,
    ),
    photos=PhotoAttacher(base_url=_settings.STOCK_PHOTO_BASE_URL),
    dedup_threshold_degrees=_settings.SEARCH_DEDUP_THRESHOLD_DEGREES,
    default_anchor=GeoPoint(lat=_settings.DEFAULT_ANCHOR_LAT, lng=_settings.DEFAULT_ANCHOR_LNG),
    synthetic_fallback=_settings.SEARCH_SYNTHETIC_FALLBACK,
)

_community_service = CommunityService(_store)
_catalogue_service = CatalogueService(_store, _community_service)
_profile_service = ProfileService(_store)
_photo_service = PhotoService(_store, _photo_storage, max_bytes=_settings.PHOTO_MAX_BYTES)
_search_service = SearchService(_pipeline, default_limit=_settings.SEARCH_RESULT_LIMIT, metrics=_prom_metrics)
_provider_proxy = ProviderProxy(
    timeout_seconds=_settings.PROVIDER_TIMEOUT_SECONDS,
    user_agent=_settings.PROVIDER_USER_AGENT,
)


def get_settings() -> ServiceSettings:
    return _settings


def get_jwt_manager() -> JWTManager:
    return _jwt


def get_prometheus_collector() -> PrometheusApiMetricsCollector:
    return _prom_metrics


def get_store() -> PlaygroundStore:
    return _store


def get_photo_storage() -> LocalPhotoStorage:
    return _photo_storage


def get_search_service() -> SearchService:
    return _search_service


def get_community_service() -> CommunityService:
    return _community_service


def get_catalogue_service() -> CatalogueService:
    return _catalogue_service


def get_profile_service() -> ProfileService:
    return _profile_service


def get_photo_service() -> PhotoService:
    return _photo_service


def get_provider_proxy() -> ProviderProxy:
    return _provider_proxy
