"""End-to-end tests for report assembly, the pipeline and the CLI."""

import json
from datetime import date
from pathlib import Path

import pytest

from chainpulse import config
from chainpulse.__main__ import main
from chainpulse.models import ActivityBucket, CastEvent
from chainpulse.pipeline import build_from_sources, link_policy, run_pipeline
from chainpulse.report import build_dashboard, build_heatmap, build_metrics
from chainpulse.sources import load_sources
from chainpulse.timeline import LinkPolicy

# 2025-01-01T14:00:00Z
_TS = 1735740000


def _sources(tmp_path: Path) -> Path:
    data = tmp_path / "data"
    data.mkdir()
    (data / "casts.json").write_text(
        json.dumps(
            {
                "messages": [
                    {"timestamp": "2025-01-01T14:20:00Z", "likes": 10, "replies": 2, "reposts": 1, "castHash": "0xa", "text": "shipping"},
                    {"timestamp": "2025-01-02T09:00:00Z", "likes": 1, "replies": 0, "reposts": 0, "castHash": "0xb", "text": "gm"},
                ]
            }
        )
    )
    (data / "eth.json").write_text(
        json.dumps(
            [
                {"timestamp": _TS, "to": "0xrouter", "value": "2.0", "gasUsed": "0.01"},
                {"timestamp": _TS + 60, "to": "0xrouter", "value": "1.0", "gasUsed": "0.02"},
            ]
        )
    )
    (data / "base.json").write_text(json.dumps([{"timestamp": _TS, "to": "0xbridge", "value": "5"}]))
    cfg = tmp_path / "sources.yml"
    cfg.write_text(
        "user_id: '3621'\n"
        "address: '0xme'\n"
        "casts: data/casts.json\n"
        "chains:\n"
        "  ethereum: data/eth.json\n"
        "  base: data/base.json\n"
        "  optimism: data/missing.json\n"
    )
    return cfg


class TestBuildReports:
    def test_heatmap(self) -> None:
        buckets = [
            ActivityBucket(date="2025-01-01", hour=14, chain="ethereum", contract="0xa", count=3, volume=2, gas_used=1),
            ActivityBucket(date="2025-01-02", hour=9, chain="base", contract="0xb", count=1, volume=1, gas_used=1),
        ]
        report = build_heatmap(buckets, address="0xme")
        assert report.chains == ["ethereum", "base"]
        assert report.peak_hour == 14
        assert report.peak_day == "2025-01-01"
        assert report.buckets[0].intensity == 100
        assert [c.contract for c in report.top_contracts] == ["0xa", "0xb"]

    def test_metrics_reference_shape(self) -> None:
        casts = [
            CastEvent(id=str(i), timestamp=f"2025-01-01T{i:02d}:00:00Z", likes=5, replies=2, reposts=1 + (i % 2))  # type: ignore[arg-type]
            for i in range(10)
        ]
        report = build_metrics(casts, user_id="test-user")
        [day] = report.daily_aggregates
        assert day.engagement_rate == 8.5
        assert report.summary.total_engagement == 85
        assert report.summary.avg_daily_engagement == 85
        assert report.summary.top_day == "2025-01-01"
        assert report.recent_casts[0].id == "9"

    def test_dashboard_empty_inputs(self) -> None:
        report = build_dashboard([], [], today=date(2025, 1, 31))
        assert report.timeline.events == []
        assert report.heatmap.peak_day == ""
        assert report.metrics.summary.top_day == ""
        assert len(report.hourly_density) == 24
        assert len(report.calendar) == 30

    def test_serialises_camel_case(self) -> None:
        bucket = ActivityBucket(date="2025-01-01", hour=14, chain="base", contract="0xa", count=1, gas_used="0.5")
        cast = CastEvent(id="0xc", timestamp="2025-01-01T14:10:00Z", likes=1)  # type: ignore[arg-type]
        payload = json.loads(build_dashboard([cast], [bucket]).model_dump_json(by_alias=True))
        assert payload["heatmap"]["buckets"][0]["gasUsed"] == 0.5
        assert "engagementRate" in payload["metrics"]["dailyAggregates"][0]
        assert payload["timeline"]["events"][0]["linkedEvent"]["timeDiffMinutes"] == 10


class TestRunPipeline:
    def test_writes_report(self, tmp_path: Path) -> None:
        out_path = run_pipeline(sources_path=_sources(tmp_path), output_dir=tmp_path / "out")
        assert out_path is not None and out_path.exists()
        payload = json.loads(out_path.read_text())
        assert payload["heatmap"]["chains"] == ["ethereum", "base"]
        assert payload["heatmap"]["peakHour"] == 14
        assert payload["heatmap"]["topContracts"][0] == {"contract": "0xrouter", "count": 2}
        assert payload["metrics"]["summary"]["topDay"] == "2025-01-01"
        assert len(payload["timeline"]["events"]) == 5

    def test_dry_run_writes_nothing(self, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        assert run_pipeline(sources_path=_sources(tmp_path), output_dir=out_dir, dry_run=True) is None
        assert not out_dir.exists()

    def test_no_sources_configured(self, tmp_path: Path) -> None:
        cfg = tmp_path / "sources.yml"
        cfg.write_text("user_id: '1'\n")
        assert run_pipeline(sources_path=cfg, output_dir=tmp_path / "out") is None

    def test_shipped_sample_config_has_data(self) -> None:
        report = build_from_sources(load_sources(config.PROJECT_ROOT / "config" / "sources.yml"))
        assert report.heatmap.chains == ["ethereum", "base", "optimism"]
        assert report.heatmap.buckets
        assert report.metrics.daily_aggregates
        assert any(e.linked_event is not None for e in report.timeline.events)


class TestLinkPolicy:
    def test_unknown_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "LINK_POLICY", "closest-ish")
        assert link_policy() is LinkPolicy.FIRST

    def test_nearest(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config, "LINK_POLICY", "NEAREST")
        assert link_policy() is LinkPolicy.NEAREST


class TestCli:
    def test_timeline_prints_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        main(["timeline", "--sources", str(_sources(tmp_path)), "--limit", "3"])
        events = json.loads(capsys.readouterr().out)
        assert len(events) == 3
        # newest cast has nothing on-chain nearby; the 14:20 cast links to the 14:00 bucket
        assert events[0]["linkedEvent"] is None
        assert events[1]["domain"] == "social"
        assert events[1]["linkedEvent"]["domain"] == "onchain"
        assert events[1]["linkedEvent"]["timeDiffMinutes"] == 20

    def test_no_command_exits(self) -> None:
        with pytest.raises(SystemExit):
            main([])
