"""CLI entry-point: ``python -m chainpulse run`` / ``python -m chainpulse timeline``."""

from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
import sys
from pathlib import Path

from chainpulse import config
from chainpulse.intensity import score_buckets
from chainpulse.pipeline import link_policy, run_pipeline
from chainpulse.privacy import apply_privacy
from chainpulse.sources import load_buckets, load_casts, load_sources
from chainpulse.timeline import correlate

logger = logging.getLogger(__name__)


def _print_timeline(sources_path: Path, limit: int) -> None:
    """Print the linked timeline for *sources_path* as JSON on stdout."""
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    sources = load_sources(sources_path)
    casts = load_casts(sources.casts)
    buckets = score_buckets(apply_privacy(load_buckets(sources.chains), sources.privacy))
    events = correlate(
        casts,
        buckets,
        limit=limit,
        window=dt.timedelta(minutes=config.LINK_WINDOW_MINUTES),
        policy=link_policy(),
    )
    payload = [e.model_dump(mode="json", by_alias=True) for e in events]
    json.dump(payload, sys.stdout, indent=2)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="chainpulse",
        description="Correlate on-chain and social activity for one identity.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── run ────────────────────────────────────────────────────────────
    run_parser = sub.add_parser("run", help="Build and write the dashboard report.")
    run_parser.add_argument(
        "--sources",
        type=Path,
        default=config.SOURCES_PATH,
        help="Path to sources.yml (default: $CHAINPULSE_SOURCES or config/sources.yml).",
    )
    run_parser.add_argument(
        "--output-dir",
        type=Path,
        default=config.OUTPUT_DIR,
        help="Directory for the JSON report.",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load and analyse but only log the headline numbers.",
    )

    # ── timeline ──────────────────────────────────────────────────────
    timeline_parser = sub.add_parser(
        "timeline",
        help="Print the merged, linked timeline as JSON.",
    )
    timeline_parser.add_argument(
        "--sources",
        type=Path,
        default=config.SOURCES_PATH,
        help="Path to sources.yml.",
    )
    timeline_parser.add_argument(
        "--limit",
        type=int,
        default=config.TIMELINE_LIMIT,
        help=f"Maximum number of events (default: {config.TIMELINE_LIMIT}).",
    )

    args = parser.parse_args(argv)

    if args.command == "run":
        run_pipeline(sources_path=args.sources, output_dir=args.output_dir, dry_run=args.dry_run)
    elif args.command == "timeline":
        _print_timeline(args.sources, args.limit)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
