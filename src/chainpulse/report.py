"""Assemble heatmap, metrics and timeline reports and write them to disk."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path

from chainpulse.aggregate import aggregate_by_day, recent_casts, summarize
from chainpulse.density import calendar, hourly_density
from chainpulse.intensity import score_buckets
from chainpulse.models import (
    ActivityBucket,
    CastEvent,
    DashboardReport,
    HeatmapReport,
    MetricsReport,
    TimelineReport,
)
from chainpulse.peaks import active_chains, peak_day, peak_hour, top_contracts
from chainpulse.timeline import DEFAULT_LIMIT, DEFAULT_WINDOW, LinkPolicy, correlate

logger = logging.getLogger(__name__)


def build_heatmap(
    buckets: list[ActivityBucket],
    *,
    address: str = "",
    period: str = "30d",
    contracts_limit: int = 5,
) -> HeatmapReport:
    """Score *buckets* and derive chains, top contracts and peaks from them."""
    scored = score_buckets(buckets)
    return HeatmapReport(
        address=address,
        period=period,
        buckets=scored,
        chains=active_chains(scored),
        top_contracts=top_contracts(scored, limit=contracts_limit),
        peak_hour=peak_hour(scored),
        peak_day=peak_day(scored),
    )


def build_metrics(
    casts: list[CastEvent],
    *,
    user_id: str = "",
    period: str = "30d",
    recent_limit: int = 20,
) -> MetricsReport:
    aggregates = aggregate_by_day(casts)
    return MetricsReport(
        user_id=user_id,
        period=period,
        daily_aggregates=aggregates,
        recent_casts=recent_casts(casts, limit=recent_limit),
        summary=summarize(aggregates),
    )


def build_dashboard(
    casts: list[CastEvent],
    buckets: list[ActivityBucket],
    *,
    user_id: str = "",
    address: str = "",
    period: str = "30d",
    timeline_limit: int = DEFAULT_LIMIT,
    link_window: dt.timedelta = DEFAULT_WINDOW,
    link_policy: LinkPolicy = LinkPolicy.FIRST,
    recent_limit: int = 20,
    contracts_limit: int = 5,
    calendar_days: int = 30,
    today: dt.date | None = None,
) -> DashboardReport:
    """Run every stage over one identity's casts and buckets.

    The timeline and calendar use the scored buckets so intensity is visible
    on on-chain events.
    """
    heatmap = build_heatmap(
        buckets, address=address, period=period, contracts_limit=contracts_limit
    )
    metrics = build_metrics(
        casts, user_id=user_id, period=period, recent_limit=recent_limit
    )
    events = correlate(
        casts,
        heatmap.buckets,
        limit=timeline_limit,
        window=link_window,
        policy=link_policy,
    )
    return DashboardReport(
        generated_at=dt.datetime.now(dt.UTC),
        heatmap=heatmap,
        metrics=metrics,
        timeline=TimelineReport(events=events),
        hourly_density=hourly_density(casts, heatmap.buckets),
        calendar=calendar(heatmap.buckets, days=calendar_days, end=today),
    )


def write_report(report: DashboardReport, output_dir: Path) -> Path:
    """Write *report* as camelCase JSON and return the file path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = report.generated_at.strftime("%Y%m%d-%H%M%S")
    name = report.heatmap.address or report.metrics.user_id or "anonymous"
    out_path = output_dir / f"dashboard-{name}-{stamp}.json"
    out_path.write_text(report.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    logger.info("Wrote dashboard report to %s", out_path)
    return out_path
