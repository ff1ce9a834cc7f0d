from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import replace

from geo_engine.distance import haversine_distance_km
from geo_engine.models import GeoPoint

from playground_search.models import PlaygroundRecord

logger = logging.getLogger(__name__)

# Roughly 100m of latitude; one threshold for every call site.
DEFAULT_DEDUP_THRESHOLD_DEGREES = 0.001


def has_valid_coordinates(record: PlaygroundRecord) -> bool:
    point = record.coordinates
    if point is None:
        return False
    return (
        isinstance(point.lat, (int, float))
        and isinstance(point.lng, (int, float))
        and math.isfinite(point.lat)
        and math.isfinite(point.lng)
    )


def is_duplicate(
    candidate: PlaygroundRecord,
    existing: PlaygroundRecord,
    threshold_degrees: float = DEFAULT_DEDUP_THRESHOLD_DEGREES,
) -> bool:
    if candidate.name.strip().lower() != existing.name.strip().lower():
        return False
    if candidate.coordinates is None or existing.coordinates is None:
        return False
    return (
        abs(candidate.coordinates.lat - existing.coordinates.lat) < threshold_degrees
        and abs(candidate.coordinates.lng - existing.coordinates.lng) < threshold_degrees
    )


def dedupe_records(
    records: Iterable[PlaygroundRecord],
    threshold_degrees: float = DEFAULT_DEDUP_THRESHOLD_DEGREES,
) -> list[PlaygroundRecord]:
    kept: list[PlaygroundRecord] = []
    for record in records:
        if any(is_duplicate(record, existing, threshold_degrees) for existing in kept):
            continue
        kept.append(record)
    return kept


def sort_by_distance(records: list[PlaygroundRecord], reference: GeoPoint | None) -> list[PlaygroundRecord]:
    if reference is None:
        return records
    measured = [
        replace(record, distance_km=haversine_distance_km(reference, record.coordinates))
        for record in records
        if record.coordinates is not None
    ]
    return sorted(measured, key=lambda record: record.distance_km)


def merge_results(
    result_lists: Sequence[Sequence[PlaygroundRecord]],
    reference: GeoPoint | None = None,
    threshold_degrees: float = DEFAULT_DEDUP_THRESHOLD_DEGREES,
    limit: int | None = None,
) -> list[PlaygroundRecord]:
    """Combine adapter outputs into one list.

    Lists are concatenated in the order given, records lacking usable
    coordinates are dropped, later near-duplicates (same name, both coordinate
    deltas under ``threshold_degrees``) are removed so the first occurrence
    wins, and the survivors are ordered by distance from ``reference`` when it
    is known. ``sorted`` is stable, so equal distances keep dedupe order.
    """
    concatenated = [record for records in result_lists for record in records]
    valid = [record for record in concatenated if has_valid_coordinates(record)]
    deduped = dedupe_records(valid, threshold_degrees)
    ordered = sort_by_distance(deduped, reference)
    if limit is not None:
        ordered = ordered[:limit]
    logger.info(
        "search_results_merged",
        extra={
            "input_count": len(concatenated),
            "dropped_invalid": len(concatenated) - len(valid),
            "dropped_duplicates": len(valid) - len(deduped),
            "output_count": len(ordered),
            "sorted_by_distance": reference is not None,
        },
    )
    return ordered
