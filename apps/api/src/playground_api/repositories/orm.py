from __future__ import annotations

from datetime import datetime
from typing import Any

from devkit.db import Base
from sqlalchemy import JSON, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

PLAYGROUND_SCHEMA = "playground"


class UserProfileORM(Base):
    __tablename__ = "users"
    __table_args__ = {"schema": PLAYGROUND_SCHEMA}

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PlaygroundORM(Base):
    __tablename__ = "playgrounds"
    __table_args__ = {"schema": PLAYGROUND_SCHEMA}

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    age_range: Mapped[str | None] = mapped_column(String(64), nullable=True)
    accessibility: Mapped[str | None] = mapped_column(Text, nullable=True)
    opening_hours: Mapped[str | None] = mapped_column(String(255), nullable=True)
    equipment: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    facilities: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    lat: Mapped[float | None] = mapped_column(Float, nullable=True, index=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True, index=True)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class RatingORM(Base):
    __tablename__ = "ratings"
    __table_args__ = {"schema": PLAYGROUND_SCHEMA}

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    playground_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey(f"{PLAYGROUND_SCHEMA}.playgrounds.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    category: Mapped[str] = mapped_column(String(64), primary_key=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    review: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class FavoriteORM(Base):
    __tablename__ = "favorites"
    __table_args__ = {"schema": PLAYGROUND_SCHEMA}

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    playground_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey(f"{PLAYGROUND_SCHEMA}.playgrounds.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class UserPhotoORM(Base):
    __tablename__ = "user_photos"
    __table_args__ = {"schema": PLAYGROUND_SCHEMA}

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    playground_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    storage_key: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)
    public_url: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String(64), nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
