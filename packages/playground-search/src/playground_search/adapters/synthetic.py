from __future__ import annotations

from geo_engine.models import GeoPoint

from playground_search.models import PlaygroundRecord, PlaygroundSource

OFFSET_DEGREES = 0.01


def synthetic_playgrounds(reference: GeoPoint, offset_degrees: float = OFFSET_DEGREES) -> list[PlaygroundRecord]:
    """Two placeholder playgrounds either side of ``reference`` for demo deployments."""
    return [
        PlaygroundRecord(
            source=PlaygroundSource.SYNTHETIC_FALLBACK,
            source_id="1",
            name="Local Adventure Playground",
            coordinates=GeoPoint(lat=reference.lat + offset_degrees, lng=reference.lng + offset_degrees),
            address="Nearby",
            amenities=("Swings", "Slides", "Climbing Frame"),
            coordinates_approximate=True,
        ),
        PlaygroundRecord(
            source=PlaygroundSource.SYNTHETIC_FALLBACK,
            source_id="2",
            name="Community Park Play Area",
            coordinates=GeoPoint(lat=reference.lat - offset_degrees, lng=reference.lng - offset_degrees),
            address="Nearby",
            amenities=("Sandpit", "Toddler Area"),
            coordinates_approximate=True,
        ),
    ]
