from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from devkit.db import AsyncDatabaseManager, Base, create_all_tables, create_schema_if_not_exists
from sqlalchemy import and_, func, or_, select
from sqlalchemy.dialects.postgresql import Insert
from sqlalchemy.dialects.postgresql import insert as pg_insert

from playground_api.models import (
    FavoriteEntry,
    PlaygroundRow,
    RatingEntry,
    RatingSummary,
    UserPhoto,
    UserProfile,
    utc_now_iso,
)
from playground_api.repositories.orm import (
    PLAYGROUND_SCHEMA,
    FavoriteORM,
    PlaygroundORM,
    RatingORM,
    UserPhotoORM,
    UserProfileORM,
)
from playground_search.adapters.database import PlaygroundSearchRow


def rating_upsert_statement(entry: RatingEntry, now: datetime) -> Insert:
    """Insert-or-overwrite one (user, playground, category) score; the last write wins."""
    stmt = pg_insert(RatingORM).values(
        user_id=entry.user_id,
        playground_id=entry.playground_id,
        category=entry.category,
        score=entry.score,
        review=entry.review,
        created_at=now,
        updated_at=now,
    )
    return stmt.on_conflict_do_update(
        index_elements=[RatingORM.user_id, RatingORM.playground_id, RatingORM.category],
        set_={
            "score": stmt.excluded.score,
            "review": stmt.excluded.review,
            "updated_at": stmt.excluded.updated_at,
        },
    ).returning(RatingORM)


def favorite_insert_statement(entry: FavoriteEntry, created_at: datetime) -> Insert:
    return pg_insert(FavoriteORM).values(
        user_id=entry.user_id,
        playground_id=entry.playground_id,
        created_at=created_at,
    ).on_conflict_do_nothing(index_elements=[FavoriteORM.user_id, FavoriteORM.playground_id])


class PlaygroundStore:
    """Users, playgrounds, ratings, favourites and photo rows.

    Without a database URL everything lives in process dictionaries, which is
    what tests and local runs use.
    """

    def __init__(self, database_url: str | None = None) -> None:
        self._playgrounds: dict[str, PlaygroundRow] = {}
        self._ratings: dict[tuple[str, str, str], RatingEntry] = {}
        self._favorites: dict[tuple[str, str], FavoriteEntry] = {}
        self._profiles: dict[str, UserProfile] = {}
        self._photos: dict[str, UserPhoto] = {}
        self._db = AsyncDatabaseManager(database_url) if database_url else None
        self._orm_ready = False

    @property
    def uses_database(self) -> bool:
        return self._db is not None

    async def ensure_ready(self) -> None:
        await self._ensure_orm_ready()

    async def close(self) -> None:
        if self._db is not None:
            await self._db.disconnect()

    # playgrounds

    async def create_playground(self, row: PlaygroundRow) -> PlaygroundRow:
        if self._db is None:
            self._playgrounds[row.id] = row
            return row

        await self._ensure_orm_ready()

        async def _run(session):
            orm_row = PlaygroundORM(
                id=row.id,
                name=row.name,
                location=row.location,
                description=row.description,
                age_range=row.age_range,
                accessibility=row.accessibility,
                opening_hours=row.opening_hours,
                equipment=list(row.equipment),
                facilities=list(row.facilities),
                lat=row.lat,
                lng=row.lng,
                created_by=row.created_by,
                created_at=self._parse_dt(row.created_at),
                updated_at=self._parse_dt(row.updated_at),
            )
            session.add(orm_row)
            return self._to_playground(orm_row)

        return await self._db.run_with_session(_run)

    async def get_playground(self, playground_id: str) -> PlaygroundRow | None:
        if self._db is None:
            return self._playgrounds.get(playground_id)

        await self._ensure_orm_ready()

        async def _run(session):
            row = await session.get(PlaygroundORM, playground_id)
            return self._to_playground(row) if row is not None else None

        return await self._db.run_with_session(_run)

    async def get_playgrounds(self, playground_ids: Iterable[str]) -> dict[str, PlaygroundRow]:
        wanted = list(dict.fromkeys(playground_ids))
        if not wanted:
            return {}
        if self._db is None:
            return {pid: self._playgrounds[pid] for pid in wanted if pid in self._playgrounds}

        await self._ensure_orm_ready()

        async def _run(session):
            rows = (await session.scalars(select(PlaygroundORM).where(PlaygroundORM.id.in_(wanted)))).all()
            return {row.id: self._to_playground(row) for row in rows}

        return await self._db.run_with_session(_run)

    async def search_rows(self, text: str, limit: int) -> list[PlaygroundSearchRow]:
        needle = text.strip().lower()
        if self._db is None:
            matches = [
                row
                for row in self._playgrounds.values()
                if needle in row.name.lower() or needle in (row.location or "").lower()
            ][:limit]
            return self._to_search_rows(matches, await self.rating_summaries([row.id for row in matches]))

        await self._ensure_orm_ready()
        pattern = f"%{needle}%"

        async def _run(session):
            stmt = (
                select(PlaygroundORM)
                .where(or_(PlaygroundORM.name.ilike(pattern), PlaygroundORM.location.ilike(pattern)))
                .order_by(PlaygroundORM.created_at.desc())
                .limit(limit)
            )
            return [self._to_playground(row) for row in (await session.scalars(stmt)).all()]

        matches = await self._db.run_with_session(_run)
        return self._to_search_rows(matches, await self.rating_summaries([row.id for row in matches]))

    async def rows_in_bounds(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        limit: int,
    ) -> list[PlaygroundSearchRow]:
        if self._db is None:
            matches = [
                row
                for row in self._playgrounds.values()
                if row.lat is not None
                and row.lng is not None
                and min_lat <= row.lat <= max_lat
                and min_lng <= row.lng <= max_lng
            ][:limit]
            return self._to_search_rows(matches, await self.rating_summaries([row.id for row in matches]))

        await self._ensure_orm_ready()

        async def _run(session):
            stmt = (
                select(PlaygroundORM)
                .where(
                    and_(
                        PlaygroundORM.lat.between(min_lat, max_lat),
                        PlaygroundORM.lng.between(min_lng, max_lng),
                    )
                )
                .limit(limit)
            )
            return [self._to_playground(row) for row in (await session.scalars(stmt)).all()]

        matches = await self._db.run_with_session(_run)
        return self._to_search_rows(matches, await self.rating_summaries([row.id for row in matches]))

    # ratings

    async def upsert_rating(self, entry: RatingEntry) -> RatingEntry:
        key = (entry.user_id, entry.playground_id, entry.category)
        if self._db is None:
            existing = self._ratings.get(key)
            if existing is not None:
                entry.created_at = existing.created_at
            entry.updated_at = utc_now_iso()
            self._ratings[key] = entry
            return entry

        await self._ensure_orm_ready()
        now = datetime.now(timezone.utc)

        async def _run(session):
            row = (await session.scalars(rating_upsert_statement(entry, now))).one()
            return self._to_rating(row)

        return await self._db.run_with_session(_run)

    async def list_ratings(self, playground_id: str) -> list[RatingEntry]:
        if self._db is None:
            return [entry for entry in self._ratings.values() if entry.playground_id == playground_id]

        await self._ensure_orm_ready()

        async def _run(session):
            stmt = select(RatingORM).where(RatingORM.playground_id == playground_id)
            return [self._to_rating(row) for row in (await session.scalars(stmt)).all()]

        return await self._db.run_with_session(_run)

    async def rating_summaries(self, playground_ids: Iterable[str] | None = None) -> dict[str, RatingSummary]:
        """Mean of every score row and the number of distinct raters, per playground with ratings."""
        wanted = None if playground_ids is None else set(playground_ids)
        if wanted is not None and not wanted:
            return {}
        if self._db is None:
            scores: dict[str, list[int]] = {}
            raters: dict[str, set[str]] = {}
            for entry in self._ratings.values():
                if wanted is None or entry.playground_id in wanted:
                    scores.setdefault(entry.playground_id, []).append(entry.score)
                    raters.setdefault(entry.playground_id, set()).add(entry.user_id)
            return {
                pid: RatingSummary(playground_id=pid, average=sum(values) / len(values), rating_count=len(raters[pid]))
                for pid, values in scores.items()
            }

        await self._ensure_orm_ready()

        async def _run(session):
            stmt = select(
                RatingORM.playground_id,
                func.avg(RatingORM.score),
                func.count(func.distinct(RatingORM.user_id)),
            ).group_by(RatingORM.playground_id)
            if wanted is not None:
                stmt = stmt.where(RatingORM.playground_id.in_(wanted))
            result = await session.execute(stmt)
            return {
                pid: RatingSummary(playground_id=pid, average=float(average), rating_count=int(count))
                for pid, average, count in result.all()
            }

        return await self._db.run_with_session(_run)

    # favourites

    async def get_favorite(self, user_id: str, playground_id: str) -> FavoriteEntry | None:
        if self._db is None:
            return self._favorites.get((user_id, playground_id))

        await self._ensure_orm_ready()

        async def _run(session):
            row = await session.get(FavoriteORM, (user_id, playground_id))
            return self._to_favorite(row) if row is not None else None

        return await self._db.run_with_session(_run)

    async def add_favorite(self, entry: FavoriteEntry) -> FavoriteEntry:
        if self._db is None:
            self._favorites[(entry.user_id, entry.playground_id)] = entry
            return entry

        await self._ensure_orm_ready()

        async def _run(session):
            await session.execute(favorite_insert_statement(entry, self._parse_dt(entry.created_at)))
            row = await session.get(FavoriteORM, (entry.user_id, entry.playground_id))
            return self._to_favorite(row)

        return await self._db.run_with_session(_run)

    async def remove_favorite(self, user_id: str, playground_id: str) -> bool:
        if self._db is None:
            return self._favorites.pop((user_id, playground_id), None) is not None

        await self._ensure_orm_ready()

        async def _run(session):
            row = await session.get(FavoriteORM, (user_id, playground_id))
            if row is None:
                return False
            await session.delete(row)
            return True

        return await self._db.run_with_session(_run)

    async def list_favorites(self, user_id: str) -> list[FavoriteEntry]:
        if self._db is None:
            entries = [entry for entry in self._favorites.values() if entry.user_id == user_id]
            return sorted(entries, key=lambda entry: entry.created_at, reverse=True)

        await self._ensure_orm_ready()

        async def _run(session):
            stmt = (
                select(FavoriteORM)
                .where(FavoriteORM.user_id == user_id)
                .order_by(FavoriteORM.created_at.desc())
            )
            return [self._to_favorite(row) for row in (await session.scalars(stmt)).all()]

        return await self._db.run_with_session(_run)

    # profiles

    async def get_profile(self, user_id: str) -> UserProfile | None:
        if self._db is None:
            return self._profiles.get(user_id)

        await self._ensure_orm_ready()

        async def _run(session):
            row = await session.get(UserProfileORM, user_id)
            return self._to_profile(row) if row is not None else None

        return await self._db.run_with_session(_run)

    async def upsert_profile(self, profile: UserProfile) -> UserProfile:
        if self._db is None:
            existing = self._profiles.get(profile.id)
            if existing is not None:
                profile.created_at = existing.created_at
            profile.updated_at = utc_now_iso()
            self._profiles[profile.id] = profile
            return profile

        await self._ensure_orm_ready()
        now = datetime.now(timezone.utc)

        async def _run(session):
            row = await session.get(UserProfileORM, profile.id)
            if row is None:
                row = UserProfileORM(
                    id=profile.id,
                    email=profile.email,
                    name=profile.name,
                    avatar_url=profile.avatar_url,
                    created_at=now,
                    updated_at=now,
                )
                session.add(row)
            else:
                row.email = profile.email
                row.name = profile.name
                row.avatar_url = profile.avatar_url
                row.updated_at = now
            return self._to_profile(row)

        return await self._db.run_with_session(_run)

    # photos

    async def add_photo(self, photo: UserPhoto) -> UserPhoto:
        if self._db is None:
            self._photos[photo.id] = photo
            return photo

        await self._ensure_orm_ready()

        async def _run(session):
            row = UserPhotoORM(
                id=photo.id,
                user_id=photo.user_id,
                playground_id=photo.playground_id,
                storage_key=photo.storage_key,
                public_url=photo.public_url,
                content_type=photo.content_type,
                size_bytes=photo.size_bytes,
                created_at=self._parse_dt(photo.created_at),
            )
            session.add(row)
            return self._to_photo(row)

        return await self._db.run_with_session(_run)

    async def get_photo(self, photo_id: str) -> UserPhoto | None:
        if self._db is None:
            return self._photos.get(photo_id)

        await self._ensure_orm_ready()

        async def _run(session):
            row = await session.get(UserPhotoORM, photo_id)
            return self._to_photo(row) if row is not None else None

        return await self._db.run_with_session(_run)

    async def list_photos(self, user_id: str, playground_id: str) -> list[UserPhoto]:
        if self._db is None:
            photos = [
                photo
                for photo in self._photos.values()
                if photo.user_id == user_id and photo.playground_id == playground_id
            ]
            return sorted(photos, key=lambda photo: photo.created_at, reverse=True)

        await self._ensure_orm_ready()

        async def _run(session):
            stmt = (
                select(UserPhotoORM)
                .where(UserPhotoORM.user_id == user_id, UserPhotoORM.playground_id == playground_id)
                .order_by(UserPhotoORM.created_at.desc())
            )
            return [self._to_photo(row) for row in (await session.scalars(stmt)).all()]

        return await self._db.run_with_session(_run)

    async def delete_photo(self, photo_id: str) -> bool:
        if self._db is None:
            return self._photos.pop(photo_id, None) is not None

        await self._ensure_orm_ready()

        async def _run(session):
            row = await session.get(UserPhotoORM, photo_id)
            if row is None:
                return False
            await session.delete(row)
            return True

        return await self._db.run_with_session(_run)

    async def _ensure_orm_ready(self) -> None:
        if self._db is None or self._orm_ready:
            return
        await self._db.connect()
        await create_schema_if_not_exists(self._db.engine, PLAYGROUND_SCHEMA)
        await create_all_tables(self._db.engine, Base.metadata)
        self._orm_ready = True

    def _to_search_rows(
        self,
        rows: list[PlaygroundRow],
        summaries: dict[str, RatingSummary],
    ) -> list[PlaygroundSearchRow]:
        search_rows: list[PlaygroundSearchRow] = []
        for row in rows:
            summary = summaries.get(row.id)
            search_rows.append(
                PlaygroundSearchRow(
                    id=row.id,
                    name=row.name,
                    location=row.location,
                    lat=row.lat,
                    lng=row.lng,
                    opening_hours=row.opening_hours,
                    equipment=tuple(row.equipment),
                    facilities=tuple(row.facilities),
                    rating_average=summary.average if summary else None,
                    rating_count=summary.rating_count if summary else 0,
                )
            )
        return search_rows

    def _to_playground(self, row: PlaygroundORM) -> PlaygroundRow:
        return PlaygroundRow(
            id=row.id,
            name=row.name,
            created_by=row.created_by,
            location=row.location,
            description=row.description,
            age_range=row.age_range,
            accessibility=row.accessibility,
            opening_hours=row.opening_hours,
            equipment=list(row.equipment or []),
            facilities=list(row.facilities or []),
            lat=row.lat,
            lng=row.lng,
            created_at=self._iso(row.created_at),
            updated_at=self._iso(row.updated_at),
        )

    def _to_rating(self, row: RatingORM) -> RatingEntry:
        return RatingEntry(
            user_id=row.user_id,
            playground_id=row.playground_id,
            category=row.category,
            score=row.score,
            review=row.review,
            created_at=self._iso(row.created_at),
            updated_at=self._iso(row.updated_at),
        )

    def _to_favorite(self, row: FavoriteORM) -> FavoriteEntry:
        return FavoriteEntry(user_id=row.user_id, playground_id=row.playground_id, created_at=self._iso(row.created_at))

    def _to_profile(self, row: UserProfileORM) -> UserProfile:
        return UserProfile(
            id=row.id,
            email=row.email,
            name=row.name,
            avatar_url=row.avatar_url,
            created_at=self._iso(row.created_at),
            updated_at=self._iso(row.updated_at),
        )

    def _to_photo(self, row: UserPhotoORM) -> UserPhoto:
        return UserPhoto(
            id=row.id,
            user_id=row.user_id,
            playground_id=row.playground_id,
            storage_key=row.storage_key,
            public_url=row.public_url,
            content_type=row.content_type,
            size_bytes=row.size_bytes,
            created_at=self._iso(row.created_at),
        )

    def _iso(self, value: datetime | None) -> str:
        return value.isoformat() if value else utc_now_iso()

    def _parse_dt(self, value: str | None) -> datetime:
        if not value:
            return datetime.now(timezone.utc)
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return datetime.now(timezone.utc)
