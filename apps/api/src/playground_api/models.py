from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

RATING_CATEGORIES = (
    "Safety",
    "Equipment Quality",
    "Cleanliness",
    "Age Appropriateness",
    "Accessibility",
    "Overall Fun Factor",
)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class PlaygroundRow:
    id: str
    name: str
    created_by: str
    location: str | None = None
    description: str | None = None
    age_range: str | None = None
    accessibility: str | None = None
    opening_hours: str | None = None
    equipment: list[str] = field(default_factory=list)
    facilities: list[str] = field(default_factory=list)
    lat: float | None = None
    lng: float | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)


@dataclass
class RatingEntry:
    user_id: str
    playground_id: str
    category: str
    score: int
    review: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)


@dataclass
class FavoriteEntry:
    user_id: str
    playground_id: str
    created_at: str = field(default_factory=utc_now_iso)


@dataclass
class UserProfile:
    id: str
    email: str | None
    name: str
    avatar_url: str | None = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)


@dataclass
class UserPhoto:
    id: str
    user_id: str
    playground_id: str
    storage_key: str
    public_url: str
    content_type: str
    size_bytes: int
    created_at: str = field(default_factory=utc_now_iso)


@dataclass(frozen=True)
class RatingSummary:
    playground_id: str
    average: float
    rating_count: int
