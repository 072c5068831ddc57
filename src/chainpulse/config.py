"""Centralised configuration loaded from environment variables and dotenv."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ── Paths ──────────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parents[2]

SOURCES_PATH: Path = Path(
    os.getenv("CHAINPULSE_SOURCES", str(PROJECT_ROOT / "config" / "sources.yml"))
)
OUTPUT_DIR: Path = Path(os.getenv("CHAINPULSE_OUTPUT_DIR", str(PROJECT_ROOT / "out")))

# ── Sources ────────────────────────────────────────────────────────────────
MAX_WORKERS: int = int(os.getenv("CHAINPULSE_MAX_WORKERS", "5"))
HTTP_TIMEOUT: int = int(os.getenv("CHAINPULSE_HTTP_TIMEOUT", "30"))

# ── Report limits ──────────────────────────────────────────────────────────
TIMELINE_LIMIT: int = int(os.getenv("CHAINPULSE_TIMELINE_LIMIT", "50"))
RECENT_CASTS: int = int(os.getenv("CHAINPULSE_RECENT_CASTS", "20"))
TOP_CONTRACTS: int = int(os.getenv("CHAINPULSE_TOP_CONTRACTS", "5"))
CALENDAR_DAYS: int = int(os.getenv("CHAINPULSE_CALENDAR_DAYS", "30"))

# ── Timeline linking ───────────────────────────────────────────────────────
LINK_WINDOW_MINUTES: float = float(os.getenv("CHAINPULSE_LINK_WINDOW_MINUTES", "60"))
LINK_POLICY: str = os.getenv("CHAINPULSE_LINK_POLICY", "first")
