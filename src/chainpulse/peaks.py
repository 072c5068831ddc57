"""Peak and top-N selection over buckets and daily aggregates.

Every selection breaks ties first-seen-wins: the earliest hour, the earliest
date, or the first contract encountered.
"""

from __future__ import annotations

from collections import defaultdict

from chainpulse.models import ActivityBucket, ContractCount, DailyAggregate

_HOURS = 24


def peak_hour(buckets: list[ActivityBucket]) -> int:
    """Hour of day (0–23) with the highest summed transaction count."""
    totals = [0] * _HOURS
    for bucket in buckets:
        totals[bucket.hour] += bucket.count

    best = 0
    for hour in range(_HOURS):
        if totals[hour] > totals[best]:
            best = hour
    return best


def peak_day(buckets: list[ActivityBucket]) -> str:
    """Date with the highest summed transaction count, or ``""`` if none."""
    totals: dict[str, int] = defaultdict(int)
    for bucket in buckets:
        totals[bucket.date] += bucket.count

    best = ""
    for day in sorted(totals):
        if not best or totals[day] > totals[best]:
            best = day
    return best


def top_day(aggregates: list[DailyAggregate]) -> DailyAggregate | None:
    """Day with the most likes + replies + reposts."""
    best: DailyAggregate | None = None
    for day in sorted(aggregates, key=lambda a: a.date):
        if best is None or day.engagement > best.engagement:
            best = day
    return best


def top_contracts(buckets: list[ActivityBucket], limit: int = 5) -> list[ContractCount]:
    """Contracts ranked by summed count; equal counts keep first-seen order."""
    totals: dict[str, int] = {}
    for bucket in buckets:
        totals[bucket.contract] = totals.get(bucket.contract, 0) + bucket.count

    # sorted() is stable, so insertion order survives among equal counts
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    return [ContractCount(contract=c, count=n) for c, n in ranked[:limit]]


def active_chains(buckets: list[ActivityBucket]) -> list[str]:
    """Distinct chain identifiers in first-seen order."""
    return list(dict.fromkeys(b.chain for b in buckets))
