from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "service"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str | None = None

    AUTH_JWT_SECRET: str = "dev-only-secret"
    AUTH_JWT_AUDIENCE: str = "authenticated"
    SIGN_IN_PATH: str = "/auth/signin"

    GOOGLE_PLACES_API_KEY: str | None = None
    GOOGLE_PLACES_BASE_URL: str = "https://maps.googleapis.com/maps/api/place"
    PLACES_REGION: str = "uk"
    NOMINATIM_BASE_URL: str = "https://nominatim.openstreetmap.org"
    GEOCODE_COUNTRY_CODES: str = "gb"
    OVERPASS_BASE_URL: str = "https://overpass-api.de/api/interpreter"
    PROVIDER_TIMEOUT_SECONDS: float = 5.0
    PROVIDER_USER_AGENT: str = "PlaygroundExplorer/1.0"

    SEARCH_DEDUP_THRESHOLD_DEGREES: float = 0.001
    SEARCH_RESULT_LIMIT: int = 20
    SEARCH_SYNTHETIC_FALLBACK: bool = False
    DB_COORDINATE_JITTER: bool = True
    DEFAULT_ANCHOR_LAT: float = 51.5074
    DEFAULT_ANCHOR_LNG: float = -0.1278

    STOCK_PHOTO_BASE_URL: str = "https://source.unsplash.com/featured/800x600"
    PHOTO_STORAGE_DIR: str = "./var/photos"
    PHOTO_PUBLIC_BASE_URL: str = "/media/photos"
    PHOTO_MAX_BYTES: int = 5 * 1024 * 1024

    PLAYGROUND_API_HOST: str = "0.0.0.0"
    PLAYGROUND_API_PORT: int = 8100


def load_settings(service_name: str) -> ServiceSettings:
    return ServiceSettings(SERVICE_NAME=service_name)
