from pydantic import BaseModel, Field


class PlaygroundCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    location: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    age_range: str | None = Field(default=None, max_length=64)
    accessibility: str | None = Field(default=None, max_length=500)
    opening_hours: str | None = Field(default=None, max_length=255)
    equipment: list[str] = Field(default_factory=list, max_length=50)
    facilities: list[str] = Field(default_factory=list, max_length=50)
    lat: float | None = Field(default=None, ge=-90, le=90)
    lng: float | None = Field(default=None, ge=-180, le=180)


class RatingsSubmitRequest(BaseModel):
    ratings: dict[str, int] = Field(min_length=1)
    review: str | None = Field(default=None, max_length=2000)


class ProfileUpsertRequest(BaseModel):
    name: str | None = Field(default=None, max_length=120)
    avatar_url: str | None = Field(default=None, max_length=2048)
