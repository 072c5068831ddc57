"""Read raw activity records and normalise them into buckets and casts.

Records come from local JSON files or ``http(s)`` URLs returning JSON. One
source per chain is loaded in parallel; a source that fails or returns
nothing contributes an empty list instead of aborting the run.
"""

from __future__ import annotations

import concurrent.futures
import datetime as dt
import json
import logging
from pathlib import Path
from typing import Any

import requests
import yaml
from pydantic import ValidationError

from chainpulse import config
from chainpulse.models import ActivityBucket, CastEvent, SourceConfig

logger = logging.getLogger(__name__)

# Keys under which providers wrap their record lists, searched in this order.
_LIST_KEYS = ("messages", "transactions", "transfers", "data", "result")

# Unix timestamps above this are milliseconds.
_MS_THRESHOLD = 1e12


class SourceError(Exception):
    """Raised when an activity source cannot be read or understood."""


# ── Config ─────────────────────────────────────────────────────────────────


def _is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def _resolve(location: str, base_dir: Path) -> str:
    if not location or _is_url(location) or Path(location).is_absolute():
        return location
    return str(base_dir / location)


def load_sources(path: Path) -> SourceConfig:
    """Parse ``sources.yml``.

    File locations inside it are relative to the YAML file's own directory.
    """
    with open(path, encoding="utf-8") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    base_dir = path.resolve().parent
    cfg = SourceConfig.model_validate(raw)
    cfg.casts = _resolve(cfg.casts, base_dir)
    cfg.chains = {chain: _resolve(loc, base_dir) for chain, loc in cfg.chains.items()}
    logger.info(
        "Loaded sources for user=%s address=%s (%d chains)",
        cfg.user_id,
        cfg.address,
        len(cfg.chains),
    )
    return cfg


# ── Raw records ────────────────────────────────────────────────────────────


def _unwrap(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, list):
        return [r for r in data if isinstance(r, dict)]
    if isinstance(data, dict):
        for key in _LIST_KEYS:
            if key in data and data[key] is not None:
                return _unwrap(data[key])
    raise SourceError(f"No record list found in payload of type {type(data).__name__}")


def _get_json(url: str) -> Any:
    resp = requests.get(url, timeout=config.HTTP_TIMEOUT)
    if resp.status_code != 200:
        raise SourceError(f"{url} returned {resp.status_code}: {resp.text[:500]}")
    try:
        return resp.json()
    except ValueError as exc:
        raise SourceError(f"{url} did not return JSON") from exc


def load_records(location: str) -> list[dict[str, Any]]:
    """Return the list of raw record dicts stored at *location*."""
    if _is_url(location):
        data = _get_json(location)
    else:
        path = Path(location)
        if not path.exists():
            raise SourceError(f"Source not found: {path}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except UnicodeDecodeError as exc:
            raise SourceError(f"{path} is not UTF-8 text: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise SourceError(f"Invalid JSON in {path}: {exc}") from exc
    return _unwrap(data)


def parse_instant(value: Any) -> dt.datetime | None:
    """Unix seconds/milliseconds or ISO-8601 → aware UTC datetime."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            pass
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > _MS_THRESHOLD else value
        try:
            return dt.datetime.fromtimestamp(seconds, tz=dt.UTC)
        except (OverflowError, OSError, ValueError):
            return None
    try:
        parsed = dt.datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def bucket_from_transaction(raw: dict[str, Any], chain: str) -> ActivityBucket | None:
    """Turn one indexer transaction/transfer into a single-count bucket."""
    metadata = raw.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    moment = parse_instant(raw.get("timestamp") or metadata.get("blockTimestamp"))
    if moment is None:
        logger.warning(
            "Skipping %s record without a usable timestamp: %s", chain, raw.get("id", "?")
        )
        return None
    return ActivityBucket(
        date=moment.date().isoformat(),
        hour=moment.hour,
        chain=chain,
        contract=str(raw.get("to") or raw.get("contract") or ""),
        count=1,
        volume=raw.get("value"),
        gas_used=raw.get("gasUsed"),
    )


def cast_from_message(raw: dict[str, Any]) -> CastEvent | None:
    try:
        return CastEvent.model_validate(raw)
    except ValidationError as exc:
        logger.warning(
            "Skipping malformed cast %s: %s", raw.get("castHash", raw.get("id", "?")), exc
        )
        return None


# ── Loading ────────────────────────────────────────────────────────────────


def _load_chain(chain: str, location: str) -> list[ActivityBucket]:
    buckets: list[ActivityBucket] = []
    for raw in load_records(location):
        bucket = bucket_from_transaction(raw, chain)
        if bucket is not None:
            buckets.append(bucket)
    return buckets


def load_buckets(
    chain_sources: dict[str, str], max_workers: int | None = None
) -> list[ActivityBucket]:
    """Load every chain in parallel and concatenate in configuration order.

    ``chain_sources`` maps chain name → file path or URL.
    """
    if not chain_sources:
        return []

    workers = max(1, min(max_workers or config.MAX_WORKERS, len(chain_sources)))
    results: dict[str, list[ActivityBucket]] = {}
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        future_map = {
            executor.submit(_load_chain, chain, location): chain
            for chain, location in chain_sources.items()
        }
        for future in concurrent.futures.as_completed(future_map):
            chain = future_map[future]
            try:
                results[chain] = future.result()
            except (SourceError, requests.RequestException, OSError) as exc:
                logger.warning("Chain source %s failed, treating as empty: %s", chain, exc)
                results[chain] = []
            logger.info("  [%s] loaded %d buckets", chain, len(results[chain]))

    return [b for chain in chain_sources for b in results[chain]]


def load_casts(location: str) -> list[CastEvent]:
    """Load cast events; a missing or failing source yields ``[]``."""
    if not location:
        return []
    try:
        records = load_records(location)
    except (SourceError, requests.RequestException, OSError) as exc:
        logger.warning("Cast source failed, treating as empty: %s", exc)
        return []

    casts = [c for c in (cast_from_message(r) for r in records) if c is not None]
    logger.info("Loaded %d casts", len(casts))
    return casts
