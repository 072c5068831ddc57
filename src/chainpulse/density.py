"""Hour-of-day density and calendar series for the dashboard."""

from __future__ import annotations

import datetime as dt
from collections import defaultdict

from chainpulse.models import ActivityBucket, CalendarDay, CastEvent, HourlyDensity


def hourly_density(
    casts: list[CastEvent], buckets: list[ActivityBucket]
) -> list[HourlyDensity]:
    """Cast counts and summed transaction counts for each UTC hour 0–23."""
    rows = [HourlyDensity(hour=hour) for hour in range(24)]
    for cast in casts:
        rows[cast.timestamp.astimezone(dt.UTC).hour].social += 1
    for bucket in buckets:
        rows[bucket.hour].onchain += bucket.count
    return rows


def calendar(
    buckets: list[ActivityBucket],
    days: int = 30,
    end: dt.date | None = None,
) -> list[CalendarDay]:
    """Summed bucket intensity for each of the *days* days ending at *end*.

    Days without buckets are present with intensity 0; buckets outside the
    window are ignored.
    """
    end = end or dt.datetime.now(dt.UTC).date()
    totals: dict[str, int] = defaultdict(int)
    for bucket in buckets:
        totals[bucket.date] += bucket.intensity

    series: list[CalendarDay] = []
    for offset in range(days - 1, -1, -1):
        key = (end - dt.timedelta(days=offset)).isoformat()
        series.append(CalendarDay(date=key, intensity=totals.get(key, 0)))
    return series
