"""Batch-normalised 0–100 intensity scores for on-chain activity buckets."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from chainpulse.models import ActivityBucket

logger = logging.getLogger(__name__)

# ── Weights (sum to 100) ───────────────────────────────────────────────────
_W_COUNT = 40.0
_W_VOLUME = 40.0
_W_GAS = 20.0

# Maxima never drop below this, so an all-zero batch scores 0 instead of dividing by zero.
_MAX_FLOOR = 1.0


@dataclass(frozen=True)
class BatchMaxima:
    count: float = _MAX_FLOOR
    volume: float = _MAX_FLOOR
    gas: float = _MAX_FLOOR


def batch_maxima(buckets: list[ActivityBucket]) -> BatchMaxima:
    """Return the floored maxima of count, volume and gas across *buckets*.

    ``intensity`` is never read, so maxima of a scored batch equal those of
    the unscored one.
    """
    return BatchMaxima(
        count=max([float(b.count) for b in buckets] + [_MAX_FLOOR]),
        volume=max([b.volume for b in buckets] + [_MAX_FLOOR]),
        gas=max([b.gas_used for b in buckets] + [_MAX_FLOOR]),
    )


def _round_half_up(value: float) -> int:
    # Inputs are non-negative, so this is round-half-away-from-zero.
    return int(math.floor(value + 0.5))


def score_bucket(bucket: ActivityBucket, maxima: BatchMaxima) -> int:
    """Score one bucket against precomputed batch maxima."""
    raw = (
        (bucket.count / maxima.count) * _W_COUNT
        + (bucket.volume / maxima.volume) * _W_VOLUME
        + (bucket.gas_used / maxima.gas) * _W_GAS
    )
    return min(max(_round_half_up(raw), 0), 100)


def score_buckets(buckets: list[ActivityBucket]) -> list[ActivityBucket]:
    """Return copies of *buckets* with ``intensity`` filled in.

    Normalisation is global: every bucket is scored against the maxima of the
    whole batch, so adding or removing buckets can change everyone's score.
    """
    maxima = batch_maxima(buckets)
    scored = [
        b.model_copy(update={"intensity": score_bucket(b, maxima)}) for b in buckets
    ]
    logger.info(
        "Scored %d buckets (max count=%g, volume=%g, gas=%g)",
        len(scored),
        maxima.count,
        maxima.volume,
        maxima.gas,
    )
    return scored
