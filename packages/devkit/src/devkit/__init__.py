"""Settings, database and observability plumbing shared by the Playground Explorer services."""

from devkit.config import ServiceSettings, load_settings
from devkit.db import (
    AsyncDatabaseManager,
    Base,
    create_all_tables,
    create_schema_if_not_exists,
    is_permission_denied_error,
    normalize_postgres_dsn,
)
from devkit.observability import configure_logging, configure_otel, configure_health_check_access_log_filter

__all__ = [
    "AsyncDatabaseManager",
    "Base",
    "ServiceSettings",
    "configure_logging",
    "configure_otel",
    "configure_health_check_access_log_filter",
    "create_all_tables",
    "create_schema_if_not_exists",
    "is_permission_denied_error",
    "load_settings",
    "normalize_postgres_dsn",
]
