"""Apply a user's privacy settings to on-chain buckets before scoring."""

from __future__ import annotations

import logging

from chainpulse.models import ActivityBucket, PrivacySettings

logger = logging.getLogger(__name__)


def mask_address(address: str) -> str:
    """``0x1234567890abcdef`` → ``0x1234...cdef``; short values pass through."""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def apply_privacy(
    buckets: list[ActivityBucket], settings: PrivacySettings
) -> list[ActivityBucket]:
    """Drop excluded chains and optionally mask contract addresses.

    Run this before scoring so excluded chains never influence the batch maxima.
    """
    excluded = {c.lower() for c in settings.exclude_chains}
    kept = [b for b in buckets if b.chain.lower() not in excluded]
    if len(kept) != len(buckets):
        logger.info(
            "Privacy: dropped %d buckets on excluded chains %s",
            len(buckets) - len(kept),
            sorted(excluded),
        )

    if settings.anonymize_data:
        kept = [
            b.model_copy(update={"contract": mask_address(b.contract)}) for b in kept
        ]
    return kept
