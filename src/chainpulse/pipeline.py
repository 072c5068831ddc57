"""Pipeline orchestration: wires load → privacy → score → aggregate → correlate → write."""

from __future__ import annotations

import datetime as dt
import logging
import sys
from pathlib import Path

from chainpulse import config
from chainpulse.models import DashboardReport, SourceConfig
from chainpulse.privacy import apply_privacy
from chainpulse.report import build_dashboard, write_report
from chainpulse.sources import load_buckets, load_casts, load_sources
from chainpulse.timeline import LinkPolicy

logger = logging.getLogger(__name__)


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def link_policy() -> LinkPolicy:
    """The configured :class:`LinkPolicy`, falling back to ``first``."""
    try:
        return LinkPolicy(config.LINK_POLICY.lower())
    except ValueError:
        logger.warning("Unknown CHAINPULSE_LINK_POLICY '%s'; using 'first'.", config.LINK_POLICY)
        return LinkPolicy.FIRST


def build_from_sources(sources: SourceConfig) -> DashboardReport:
    """Load both activity streams for *sources* and build the dashboard."""
    casts = load_casts(sources.casts)
    buckets = load_buckets(sources.chains)
    buckets = apply_privacy(buckets, sources.privacy)
    logger.info("Loaded %d casts and %d buckets", len(casts), len(buckets))

    return build_dashboard(
        casts,
        buckets,
        user_id=sources.user_id,
        address=sources.address,
        period=sources.period,
        timeline_limit=config.TIMELINE_LIMIT,
        link_window=dt.timedelta(minutes=config.LINK_WINDOW_MINUTES),
        link_policy=link_policy(),
        recent_limit=config.RECENT_CASTS,
        contracts_limit=config.TOP_CONTRACTS,
        calendar_days=config.CALENDAR_DAYS,
    )


def run_pipeline(
    sources_path: Path | None = None,
    output_dir: Path | None = None,
    dry_run: bool = False,
) -> Path | None:
    """Execute the full pipeline; return the written report path (``None`` on dry run)."""
    _setup_logging()
    sources_path = sources_path or config.SOURCES_PATH
    output_dir = output_dir or config.OUTPUT_DIR
    logger.info("=== chainpulse pipeline start [sources=%s] ===", sources_path)

    # ── 1. Resolve sources ────────────────────────────────────────────
    sources = load_sources(sources_path)
    if not (sources.casts or sources.chains):
        logger.error("No cast or chain sources configured in %s; nothing to do.", sources_path)
        return None

    # ── 2. Load, score, aggregate, correlate ──────────────────────────
    report = build_from_sources(sources)

    if dry_run:
        heatmap, summary = report.heatmap, report.metrics.summary
        logger.info("Dry-run mode; skipping report write.")
        logger.info(
            "  chains=%s peak_hour=%d peak_day=%s",
            ",".join(heatmap.chains) or "-",
            heatmap.peak_hour,
            heatmap.peak_day or "-",
        )
        logger.info(
            "  engagement total=%d avg/day=%.1f top_day=%s",
            summary.total_engagement,
            summary.avg_daily_engagement,
            summary.top_day or "-",
        )
        for event in report.timeline.events[:10]:
            link = event.linked_event
            logger.info(
                "  %s %-7s%s",
                event.timestamp.isoformat(),
                event.domain,
                f" ↔ {link.domain} ({link.time_diff_minutes:.0f} min)" if link else "",
            )
        return None

    # ── 3. Write report ───────────────────────────────────────────────
    out_path = write_report(report, output_dir)
    logger.info("=== chainpulse pipeline done: %s ===", out_path)
    return out_path
