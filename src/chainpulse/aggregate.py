"""Fold cast events into per-day engagement aggregates."""

from __future__ import annotations

import datetime as dt
import logging

from chainpulse.models import CastEvent, DailyAggregate, EngagementSummary
from chainpulse.peaks import top_day

logger = logging.getLogger(__name__)


def utc_day(moment: dt.datetime) -> str:
    """ISO calendar day of *moment* in UTC (naive values are taken as UTC)."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.UTC)
    return moment.astimezone(dt.UTC).date().isoformat()


def aggregate_by_day(casts: list[CastEvent]) -> list[DailyAggregate]:
    """Return one aggregate per distinct UTC day, ascending by date."""
    days: dict[str, DailyAggregate] = {}
    for cast in casts:
        key = utc_day(cast.timestamp)
        day = days.get(key)
        if day is None:
            day = days[key] = DailyAggregate(date=key)
        day.total_likes += cast.likes
        day.total_replies += cast.replies
        day.total_reposts += cast.reposts
        day.total_casts += 1

    for day in days.values():
        day.engagement_rate = day.engagement / day.total_casts if day.total_casts else 0.0

    aggregates = sorted(days.values(), key=lambda d: d.date)
    logger.info("Aggregated %d casts into %d days", len(casts), len(aggregates))
    return aggregates


def summarize(aggregates: list[DailyAggregate]) -> EngagementSummary:
    total = sum(day.engagement for day in aggregates)
    best = top_day(aggregates)
    return EngagementSummary(
        total_engagement=total,
        avg_daily_engagement=total / len(aggregates) if aggregates else 0.0,
        top_day=best.date if best else "",
    )


def recent_casts(casts: list[CastEvent], limit: int = 20) -> list[CastEvent]:
    """Most recent *limit* casts, newest first (input order kept on ties)."""
    return sorted(casts, key=lambda c: c.timestamp, reverse=True)[:limit]
