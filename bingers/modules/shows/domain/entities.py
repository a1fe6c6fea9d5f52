"""Show and episode value types."""

from datetime import UTC, datetime
from enum import StrEnum
from functools import total_ordering
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

EpisodeNumber = tuple[int, int]
"""(season, number) pair, compared lexicographically."""

NO_EPISODE: EpisodeNumber = (0, 0)


class ShowStatus(StrEnum):
    """Show lifecycle status, as spelled by the catalog."""

    RUNNING = "Running"
    ENDED = "Ended"
    TO_BE_DETERMINED = "To Be Determined"
    IN_DEVELOPMENT = "In Development"


class Weekday(StrEnum):
    """Broadcast weekday."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


_WEEKDAY_ORDER = {day: index for index, day in enumerate(Weekday)}


class Network(BaseModel):
    """Broadcast network or web channel."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Catalog network id")
    name: str = Field(..., description="Network name")


class Schedule(BaseModel):
    """Weekly broadcast schedule."""

    model_config = ConfigDict(frozen=True)

    days: tuple[Weekday, ...] = Field(default=(), description="Broadcast days")

    @field_validator("days", mode="after")
    @classmethod
    def _order_days(cls, days: tuple[Weekday, ...]) -> tuple[Weekday, ...]:
        return tuple(sorted(set(days), key=_WEEKDAY_ORDER.__getitem__))


@total_ordering
class Show(BaseModel):
    """A subscribed (or candidate) show.

    Equality, hashing and ordering use the catalog id only, so a refreshed copy
    of a show compares equal to the stored one.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    id: int = Field(..., description="Catalog show id")
    name: str = Field(..., description="Display name")
    language: str | None = Field(default=None, description="Spoken language")
    network: Network | None = Field(default=None, description="Broadcast network")
    web_channel: Network | None = Field(default=None, description="Web channel")
    status: ShowStatus = Field(..., description="Lifecycle status")
    runtime: int | None = Field(default=None, description="Runtime in minutes")
    schedule: Schedule = Field(default_factory=Schedule, description="Weekly schedule")
    last_updated: int = Field(default=0, description="Catalog update marker")
    last_watched_episode: EpisodeNumber = Field(
        default=NO_EPISODE, description="Watch pointer (season, number)"
    )

    @property
    def network_name(self) -> str:
        """Network name, falling back to the web channel, then "Unknown"."""
        if self.network is not None:
            return self.network.name
        if self.web_channel is not None:
            return self.web_channel.name
        return "Unknown"

    def __str__(self) -> str:
        return f"{self.name} ({self.network_name})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Show):
            return NotImplemented
        return self.id == other.id

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Show):
            return NotImplemented
        return self.id < other.id

    def __hash__(self) -> int:
        return hash(self.id)


@total_ordering
class Episode(BaseModel):
    """One numbered installment of a show.

    Two episodes are equal when episode id and show id match. Episodes order
    by (show id, season, number).
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    episode_id: int = Field(..., description="Catalog episode id")
    show_id: int = Field(..., description="Owning show id")
    name: str = Field(default="", description="Episode title")
    season: int = Field(..., ge=0, description="Season number")
    number: int = Field(..., ge=0, description="Episode number within season")
    airstamp: datetime | None = Field(default=None, description="Air time, None if unknown")
    runtime: int = Field(default=0, description="Runtime in minutes")
    watched: bool = Field(default=False, description="Marked as watched")

    @field_validator("airstamp", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def episode_number(self) -> EpisodeNumber:
        return (self.season, self.number)

    @property
    def label(self) -> str:
        return f"S{self.season:02d}E{self.number:02d}"

    @property
    def key(self) -> tuple[int, int]:
        """Identity key (episode id, show id)."""
        return (self.episode_id, self.show_id)

    def has_aired(self, now: datetime) -> bool:
        """Whether the episode aired at or before ``now``; unknown air time never counts."""
        return self.airstamp is not None and self.airstamp <= now

    def __str__(self) -> str:
        return f"{self.label} {self.name}".rstrip()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Episode):
            return NotImplemented
        return self.key == other.key

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Episode):
            return NotImplemented
        return (self.show_id, self.season, self.number) < (
            other.show_id,
            other.season,
            other.number,
        )

    def __hash__(self) -> int:
        return hash(self.key)
