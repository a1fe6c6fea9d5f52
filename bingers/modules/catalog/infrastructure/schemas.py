"""TVmaze wire schemas.

Only the fields bingers consumes are declared; everything else in a response
is ignored.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bingers.modules.shows.domain.entities import ShowStatus, Weekday


class TvMazeModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TvMazeNetwork(TvMazeModel):
    id: int
    name: str


class TvMazeSchedule(TvMazeModel):
    time: str | None = None
    days: list[Weekday] = Field(default_factory=list)


class TvMazeShow(TvMazeModel):
    id: int
    name: str
    language: str | None = None
    status: ShowStatus
    runtime: int | None = None
    schedule: TvMazeSchedule = Field(default_factory=TvMazeSchedule)
    network: TvMazeNetwork | None = None
    web_channel: TvMazeNetwork | None = Field(default=None, alias="webChannel")
    updated: int = 0


class TvMazeSearchResult(TvMazeModel):
    score: float
    show: TvMazeShow


class TvMazeEpisode(TvMazeModel):
    id: int
    name: str | None = None
    season: int
    number: int | None = None
    airstamp: datetime | None = None
    runtime: int | None = None

    @field_validator("airstamp", mode="before")
    @classmethod
    def _empty_airstamp(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
