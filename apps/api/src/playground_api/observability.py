from __future__ import annotations

from contextvars import ContextVar
from dataclasses import asdict, dataclass, field
from typing import Protocol

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

_trace_id_ctx: ContextVar[str] = ContextVar("trace_id", default="")


def set_trace_id(trace_id: str) -> None:
    _trace_id_ctx.set(trace_id)


def get_trace_id() -> str:
    return _trace_id_ctx.get()


@dataclass(frozen=True)
class ApiRequestMetric:
    method: str
    route: str
    status_code: int
    duration_ms: float
    trace_id: str


@dataclass(frozen=True)
class SearchMetric:
    mode: str
    result_count: int
    source_counts: dict[str, int] = field(default_factory=dict)


class ApiMetricCollector(Protocol):
    def observe(self, metric: ApiRequestMetric) -> None: ...


class SearchMetricCollector(Protocol):
    def observe_search(self, metric: SearchMetric) -> None: ...


class InMemoryApiMetricsCollector(ApiMetricCollector):
    def __init__(self) -> None:
        self._metrics: list[ApiRequestMetric] = []

    def observe(self, metric: ApiRequestMetric) -> None:
        self._metrics.append(metric)

    def snapshot(self) -> list[dict]:
        return [asdict(item) for item in self._metrics]


class PrometheusApiMetricsCollector(ApiMetricCollector, SearchMetricCollector):
    """Owns a private registry so each app instance renders only its own series."""

    def __init__(self) -> None:
        self._registry = CollectorRegistry()
        self._request_counter = Counter(
            "playground_api_http_requests_total",
            "Total playground API HTTP requests",
            labelnames=("method", "route", "status_code"),
            registry=self._registry,
        )
        self._latency_histogram = Histogram(
            "playground_api_http_request_duration_ms",
            "Playground API HTTP request latency in milliseconds",
            labelnames=("method", "route"),
            buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 3000, 6000),
            registry=self._registry,
        )
        self._search_counter = Counter(
            "playground_search_requests_total",
            "Playground searches by mode",
            labelnames=("mode",),
            registry=self._registry,
        )
        self._search_results = Counter(
            "playground_search_results_total",
            "Merged playground results by source",
            labelnames=("mode", "source"),
            registry=self._registry,
        )
        self._search_empty = Counter(
            "playground_search_empty_total",
            "Playground searches that returned nothing",
            labelnames=("mode",),
            registry=self._registry,
        )

    def observe(self, metric: ApiRequestMetric) -> None:
        status = str(metric.status_code)
        self._request_counter.labels(metric.method, metric.route, status).inc()
        self._latency_histogram.labels(metric.method, metric.route).observe(metric.duration_ms)

    def observe_search(self, metric: SearchMetric) -> None:
        self._search_counter.labels(metric.mode).inc()
        for source, count in metric.source_counts.items():
            self._search_results.labels(metric.mode, source).inc(count)
        if metric.result_count == 0:
            self._search_empty.labels(metric.mode).inc()

    def render(self) -> str:
        return generate_latest(self._registry).decode("utf-8")


class CompositeApiMetricsCollector(ApiMetricCollector):
    def __init__(self, collectors: list[ApiMetricCollector]) -> None:
        self._collectors = collectors

    def observe(self, metric: ApiRequestMetric) -> None:
        for collector in self._collectors:
            collector.observe(metric)
