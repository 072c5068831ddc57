"""Merge social and on-chain activity into one linked, newest-first timeline."""

from __future__ import annotations

import datetime as dt
import logging
from enum import Enum

from chainpulse.models import ActivityBucket, CastEvent, LinkedEvent, TimelineEvent

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
DEFAULT_WINDOW = dt.timedelta(hours=1)


class LinkPolicy(str, Enum):
    """How a partner is picked when several events fall inside the window.

    ``FIRST`` takes the first qualifying event in merge order (casts, then
    buckets, each in input order). ``NEAREST`` takes the one with the smallest
    time difference, falling back to merge order on ties.
    """

    FIRST = "first"
    NEAREST = "nearest"


def bucket_timestamp(bucket: ActivityBucket) -> dt.datetime:
    """Buckets only resolve to the hour: ``date`` at ``hour:00:00`` UTC."""
    day = dt.date.fromisoformat(bucket.date)
    return dt.datetime(day.year, day.month, day.day, bucket.hour, tzinfo=dt.UTC)


def merge_events(
    casts: list[CastEvent], buckets: list[ActivityBucket]
) -> list[TimelineEvent]:
    """Wrap both streams as timeline events, casts first, in input order."""
    events = [
        TimelineEvent(domain="social", timestamp=cast.timestamp, payload=cast)
        for cast in casts
    ]
    events.extend(
        TimelineEvent(domain="onchain", timestamp=bucket_timestamp(b), payload=b)
        for b in buckets
    )
    return events


def find_link(
    event: TimelineEvent,
    candidates: list[TimelineEvent],
    window: dt.timedelta = DEFAULT_WINDOW,
    policy: LinkPolicy = LinkPolicy.FIRST,
) -> LinkedEvent | None:
    """Pick an opposite-domain event strictly less than *window* away."""
    best: TimelineEvent | None = None
    best_diff = window
    for other in candidates:
        if other is event or other.domain == event.domain:
            continue
        diff = abs(event.timestamp - other.timestamp)
        if diff >= best_diff:
            continue
        best, best_diff = other, diff
        if policy is LinkPolicy.FIRST:
            break

    if best is None:
        return None
    return LinkedEvent(
        domain=best.domain,
        time_diff_minutes=best_diff.total_seconds() / 60,
        payload=best.payload,
    )


def correlate(
    casts: list[CastEvent],
    buckets: list[ActivityBucket],
    *,
    limit: int = DEFAULT_LIMIT,
    window: dt.timedelta = DEFAULT_WINDOW,
    policy: LinkPolicy = LinkPolicy.FIRST,
) -> list[TimelineEvent]:
    """Build the newest-first timeline, capped at *limit* events.

    Truncation happens after the full sort; link partners are searched in the
    whole merged set, so an event may link to one that did not make the cut.
    """
    merged = merge_events(casts, buckets)
    # sorted() is stable: equal timestamps keep merge order
    kept = sorted(merged, key=lambda e: e.timestamp, reverse=True)[:limit]

    timeline: list[TimelineEvent] = []
    linked = 0
    for event in kept:
        link = find_link(event, merged, window=window, policy=policy)
        if link is not None:
            linked += 1
            event = event.model_copy(update={"linked_event": link})
        timeline.append(event)

    logger.info(
        "Timeline: %d events merged, %d kept, %d linked (policy=%s)",
        len(merged),
        len(timeline),
        linked,
        policy.value,
    )
    return timeline
