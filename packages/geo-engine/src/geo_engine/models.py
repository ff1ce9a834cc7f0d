import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    @classmethod
    def parse(cls, lat: Any, lng: Any) -> "GeoPoint | None":
        """Build a point from loosely typed provider values, or None when either part is unusable."""
        try:
            lat_value = float(lat)
            lng_value = float(lng)
        except (TypeError, ValueError):
            return None
        if not (math.isfinite(lat_value) and math.isfinite(lng_value)):
            return None
        if not (-90 <= lat_value <= 90 and -180 <= lng_value <= 180):
            return None
        return cls(lat=lat_value, lng=lng_value)
