from __future__ import annotations

import logging

from devkit.observability import ExtraFieldsFormatter, _HealthCheckAccessLogFilter


def _access_record(path: str, status: int) -> logging.LogRecord:
    return logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=("127.0.0.1:12345", "GET", path, "1.1", status),
        exc_info=None,
    )


def test_health_check_access_log_filter_ignores_successful_checks() -> None:
    access_filter = _HealthCheckAccessLogFilter(ignored_paths=("/healthz", "/readyz", "/metrics"))
    assert access_filter.filter(_access_record("/healthz", 200)) is False
    assert access_filter.filter(_access_record("/metrics", 200)) is False
    assert access_filter.filter(_access_record("/readyz?full=true", 200)) is False


def test_health_check_access_log_filter_keeps_other_paths_and_failures() -> None:
    access_filter = _HealthCheckAccessLogFilter(ignored_paths=("/healthz", "/readyz"))
    assert access_filter.filter(_access_record("/healthz", 500)) is True
    assert access_filter.filter(_access_record("/v1/playgrounds/search", 200)) is True


def test_extra_fields_formatter_appends_extras() -> None:
    record = logging.LogRecord(
        name="playground_search",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="adapter_completed",
        args=(),
        exc_info=None,
    )
    record.provider = "google_places"
    record.result_count = 3

    line = ExtraFieldsFormatter("%(message)s").format(record)

    assert line == "adapter_completed provider='google_places' result_count=3"
