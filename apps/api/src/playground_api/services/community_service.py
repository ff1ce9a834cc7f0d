from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass
from typing import Any, Protocol

from playground_api.models import (
    RATING_CATEGORIES,
    FavoriteEntry,
    PlaygroundRow,
    RatingEntry,
    RatingSummary,
)
from playground_api.session import AuthSession, ensure_session
from shared.security import sanitize_html_text

logger = logging.getLogger(__name__)


class CommunityStoreLike(Protocol):
    async def get_playground(self, playground_id: str) -> PlaygroundRow | None: ...

    async def get_playgrounds(self, playground_ids: Iterable[str]) -> dict[str, PlaygroundRow]: ...

    async def get_favorite(self, user_id: str, playground_id: str) -> FavoriteEntry | None: ...

    async def add_favorite(self, entry: FavoriteEntry) -> FavoriteEntry: ...

    async def remove_favorite(self, user_id: str, playground_id: str) -> bool: ...

    async def list_favorites(self, user_id: str) -> list[FavoriteEntry]: ...

    async def upsert_rating(self, entry: RatingEntry) -> RatingEntry: ...

    async def list_ratings(self, playground_id: str) -> list[RatingEntry]: ...

    async def rating_summaries(self, playground_ids: Iterable[str] | None = None) -> dict[str, RatingSummary]: ...


@dataclass(frozen=True)
class RatingAggregate:
    playground_id: str
    category_averages: dict[str, float]
    overall_average: float
    total_ratings: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def aggregate_entries(playground_id: str, entries: list[RatingEntry]) -> RatingAggregate:
    """Per-category means, the mean of those means, and how many people rated."""
    scores: dict[str, list[int]] = {category: [] for category in RATING_CATEGORIES}
    for entry in entries:
        scores.setdefault(entry.category, []).append(entry.score)
    category_averages = {
        category: round(sum(values) / len(values), 2) if values else 0.0 for category, values in scores.items()
    }
    rated = [sum(values) / len(values) for values in scores.values() if values]
    overall = round(sum(rated) / len(rated), 2) if rated else 0.0
    return RatingAggregate(
        playground_id=playground_id,
        category_averages=category_averages,
        overall_average=overall,
        total_ratings=len({entry.user_id for entry in entries}),
    )


def validate_scores(ratings: Mapping[str, Any]) -> dict[str, int]:
    if not ratings:
        raise ValueError("at least one rating is required")
    validated: dict[str, int] = {}
    for category, score in ratings.items():
        if category not in RATING_CATEGORIES:
            raise ValueError(f"unknown rating category: {category}")
        if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
            raise ValueError(f"score for {category} must be an integer from 1 to 5")
        validated[category] = score
    return validated


class CommunityService:
    def __init__(self, store: CommunityStoreLike) -> None:
        self._store = store

    async def _require_playground(self, playground_id: str) -> PlaygroundRow:
        row = await self._store.get_playground(playground_id)
        if row is None:
            raise LookupError("playground not found")
        return row

    async def toggle_favorite(self, session: AuthSession | None, playground_id: str) -> bool:
        user = ensure_session(session)
        await self._require_playground(playground_id)
        existing = await self._store.get_favorite(user.user_id, playground_id)
        if existing is not None:
            await self._store.remove_favorite(user.user_id, playground_id)
            state = False
        else:
            await self._store.add_favorite(FavoriteEntry(user_id=user.user_id, playground_id=playground_id))
            state = True
        logger.info(
            "favorite_toggled",
            extra={"user_id": user.user_id, "playground_id": playground_id, "favorite": state},
        )
        return state

    async def is_favorite(self, session: AuthSession | None, playground_id: str) -> bool:
        if session is None:
            return False
        return await self._store.get_favorite(session.user_id, playground_id) is not None

    async def list_favorites(self, session: AuthSession | None) -> list[dict[str, Any]]:
        user = ensure_session(session)
        entries = await self._store.list_favorites(user.user_id)
        playgrounds = await self._store.get_playgrounds(entry.playground_id for entry in entries)
        return [
            {
                "playground_id": entry.playground_id,
                "favorited_at": entry.created_at,
                "playground": asdict(playgrounds[entry.playground_id]) if entry.playground_id in playgrounds else None,
            }
            for entry in entries
        ]

    async def submit_ratings(
        self,
        session: AuthSession | None,
        playground_id: str,
        ratings: Mapping[str, Any],
        review: str | None = None,
    ) -> RatingAggregate:
        user = ensure_session(session)
        scores = validate_scores(ratings)
        await self._require_playground(playground_id)
        cleaned_review = sanitize_html_text(review) if review else None
        for category, score in scores.items():
            await self._store.upsert_rating(
                RatingEntry(
                    user_id=user.user_id,
                    playground_id=playground_id,
                    category=category,
                    score=score,
                    review=cleaned_review or None,
                )
            )
        logger.info(
            "ratings_submitted",
            extra={"user_id": user.user_id, "playground_id": playground_id, "category_count": len(scores)},
        )
        return await self.aggregate_ratings(playground_id)

    async def aggregate_ratings(self, playground_id: str) -> RatingAggregate:
        return aggregate_entries(playground_id, await self._store.list_ratings(playground_id))

    async def top_rated(self, limit: int = 10) -> tuple[list[dict[str, Any]], bool]:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        summaries = sorted(
            (await self._store.rating_summaries()).values(),
            key=lambda summary: (-summary.average, -summary.rating_count, summary.playground_id),
        )
        has_more = len(summaries) > limit
        page = summaries[:limit]
        playgrounds = await self._store.get_playgrounds(summary.playground_id for summary in page)
        items = [
            {
                "playground": asdict(playgrounds[summary.playground_id]),
                "average_rating": round(summary.average, 2),
                "rating_count": summary.rating_count,
            }
            for summary in page
            if summary.playground_id in playgrounds
        ]
        return items, has_more
