"""Domain models shared by the scoring, aggregation and timeline stages."""

from __future__ import annotations

import datetime as dt
import math
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

Domain = Literal["social", "onchain"]


def parse_amount(value: Any) -> float:
    """Parse a volume/gas figure, treating anything unusable as ``0.0``."""
    if isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


def parse_count(value: Any) -> int:
    """Like :func:`parse_amount` but for integer tallies."""
    return int(parse_amount(value))


class _CamelModel(BaseModel):
    # Wire shape is camelCase; Python code uses the snake_case field names.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActivityBucket(_CamelModel):
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    hour: int = Field(0, ge=0, le=23)
    chain: str = ""
    contract: str = ""
    count: int = 0
    volume: float = 0.0
    gas_used: float = 0.0
    intensity: int = Field(0, ge=0, le=100)

    @field_validator("date", mode="before")
    @classmethod
    def _iso_date(cls, value: Any) -> Any:
        if isinstance(value, dt.datetime):
            return value.date().isoformat()
        if isinstance(value, str):
            # the pattern only checks shape; this rejects 2025-13-45
            dt.date.fromisoformat(value)
        if isinstance(value, dt.date):
            return value.isoformat()
        return value

    @field_validator("count", mode="before")
    @classmethod
    def _count(cls, value: Any) -> int:
        return parse_count(value)

    @field_validator("volume", "gas_used", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> float:
        return parse_amount(value)


class CastEvent(_CamelModel):
    id: str = Field("", validation_alias=AliasChoices("id", "castHash", "hash"))
    text: str = ""
    timestamp: dt.datetime
    likes: int = 0
    replies: int = 0
    reposts: int = 0

    @field_validator("likes", "replies", "reposts", mode="before")
    @classmethod
    def _tally(cls, value: Any) -> int:
        return parse_count(value)

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: dt.datetime) -> dt.datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=dt.UTC)
        return value

    @property
    def engagement(self) -> int:
        return self.likes + self.replies + self.reposts


class DailyAggregate(_CamelModel):
    date: str
    total_likes: int = 0
    total_replies: int = 0
    total_reposts: int = 0
    total_casts: int = 0
    engagement_rate: float = 0.0

    @property
    def engagement(self) -> int:
        return self.total_likes + self.total_replies + self.total_reposts


class EngagementSummary(_CamelModel):
    total_engagement: int = 0
    avg_daily_engagement: float = 0.0
    top_day: str = ""


class ContractCount(_CamelModel):
    contract: str
    count: int = 0


class LinkedEvent(_CamelModel):
    """Display-only pointer to a nearby event from the other domain."""

    domain: Domain
    time_diff_minutes: float
    payload: CastEvent | ActivityBucket


class TimelineEvent(_CamelModel):
    domain: Domain
    timestamp: dt.datetime
    payload: CastEvent | ActivityBucket
    linked_event: LinkedEvent | None = None


class HourlyDensity(_CamelModel):
    hour: int
    social: int = 0
    onchain: int = 0


class CalendarDay(_CamelModel):
    date: str
    intensity: int = 0


class PrivacySettings(_CamelModel):
    # data_sharing is carried through unchanged for the caller; only
    # exclude_chains and anonymize_data alter the buckets.
    data_sharing: Literal["public", "private", "signed"] = "public"
    exclude_chains: list[str] = Field(default_factory=list)
    anonymize_data: bool = False


class SourceConfig(_CamelModel):
    """Where to read one identity's activity from (see ``sources.yml``).

    A top-level ``exclude_chains`` list is shorthand for
    ``privacy.exclude_chains``; when both are given they are combined.
    """

    user_id: str = ""
    address: str = ""
    period: str = "30d"
    casts: str = ""
    chains: dict[str, str] = Field(default_factory=dict)
    privacy: PrivacySettings = Field(default_factory=PrivacySettings)

    @model_validator(mode="before")
    @classmethod
    def _lift_exclude_chains(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        top = (data.pop("exclude_chains", None) or []) + (data.pop("excludeChains", None) or [])
        if not top:
            return data

        privacy = data.get("privacy") or {}
        if isinstance(privacy, PrivacySettings):
            privacy = privacy.model_dump()
        privacy = dict(privacy)
        nested = (privacy.pop("exclude_chains", None) or []) + (
            privacy.pop("excludeChains", None) or []
        )
        privacy["exclude_chains"] = list(dict.fromkeys([*nested, *top]))
        data["privacy"] = privacy
        return data


# ── Reports ────────────────────────────────────────────────────────────────


class HeatmapReport(_CamelModel):
    address: str = ""
    period: str = ""
    buckets: list[ActivityBucket] = Field(default_factory=list)
    chains: list[str] = Field(default_factory=list)
    top_contracts: list[ContractCount] = Field(default_factory=list)
    peak_hour: int = 0
    peak_day: str = ""


class MetricsReport(_CamelModel):
    user_id: str = ""
    period: str = ""
    daily_aggregates: list[DailyAggregate] = Field(default_factory=list)
    recent_casts: list[CastEvent] = Field(default_factory=list)
    summary: EngagementSummary = Field(default_factory=EngagementSummary)


class TimelineReport(_CamelModel):
    events: list[TimelineEvent] = Field(default_factory=list)


class DashboardReport(_CamelModel):
    generated_at: dt.datetime
    heatmap: HeatmapReport
    metrics: MetricsReport
    timeline: TimelineReport
    hourly_density: list[HourlyDensity] = Field(default_factory=list)
    calendar: list[CalendarDay] = Field(default_factory=list)
