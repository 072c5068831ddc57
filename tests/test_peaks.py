"""Unit tests for peak and top-N selection."""

from chainpulse.models import ActivityBucket, DailyAggregate
from chainpulse.peaks import active_chains, peak_day, peak_hour, top_contracts, top_day


def _make(
    date: str = "2025-01-01",
    hour: int = 0,
    count: int = 1,
    contract: str = "0xaaaa",
    chain: str = "ethereum",
) -> ActivityBucket:
    return ActivityBucket(date=date, hour=hour, chain=chain, contract=contract, count=count)


def _day(date: str, likes: int = 0, replies: int = 0, reposts: int = 0) -> DailyAggregate:
    return DailyAggregate(
        date=date,
        total_likes=likes,
        total_replies=replies,
        total_reposts=reposts,
        total_casts=1,
    )


class TestPeakHour:
    def test_sums_across_dates(self) -> None:
        buckets = [
            _make("2025-01-01", hour=9, count=5),
            _make("2025-01-02", hour=9, count=5),
            _make("2025-01-01", hour=14, count=8),
        ]
        assert peak_hour(buckets) == 9

    def test_tie_lowest_hour_wins(self) -> None:
        buckets = [_make(hour=20, count=4), _make(hour=3, count=4)]
        assert peak_hour(buckets) == 3

    def test_empty(self) -> None:
        assert peak_hour([]) == 0


class TestPeakDay:
    def test_max_sum(self) -> None:
        buckets = [
            _make("2025-01-01", count=2),
            _make("2025-01-02", count=3),
            _make("2025-01-02", count=3),
        ]
        assert peak_day(buckets) == "2025-01-02"

    def test_tie_earliest_date_wins(self) -> None:
        buckets = [_make("2025-01-05", count=7), _make("2025-01-02", count=7)]
        assert peak_day(buckets) == "2025-01-02"

    def test_empty(self) -> None:
        assert peak_day([]) == ""

    def test_deterministic(self) -> None:
        buckets = [_make(f"2025-01-{d:02d}", hour=d % 24, count=d % 3) for d in range(1, 29)]
        assert len({(peak_day(buckets), peak_hour(buckets)) for _ in range(5)}) == 1


class TestTopDay:
    def test_max_engagement(self) -> None:
        days = [_day("2025-01-01", likes=3), _day("2025-01-02", replies=9), _day("2025-01-03", reposts=4)]
        best = top_day(days)
        assert best is not None
        assert best.date == "2025-01-02"

    def test_tie_earliest_wins(self) -> None:
        days = [_day("2025-01-01", likes=5), _day("2025-01-02", replies=5)]
        best = top_day(days)
        assert best is not None
        assert best.date == "2025-01-01"

    def test_empty(self) -> None:
        assert top_day([]) is None


class TestTopContracts:
    def test_ranked_and_capped(self) -> None:
        buckets = [_make(contract=f"0x{i}", count=i) for i in range(1, 9)]
        top = top_contracts(buckets)
        assert [c.contract for c in top] == ["0x8", "0x7", "0x6", "0x5", "0x4"]
        assert top[0].count == 8

    def test_sums_per_contract(self) -> None:
        buckets = [_make(contract="0xa", count=2), _make(contract="0xb", count=3), _make(contract="0xa", count=2)]
        top = top_contracts(buckets)
        assert [(c.contract, c.count) for c in top] == [("0xa", 4), ("0xb", 3)]

    def test_ties_keep_first_seen_order(self) -> None:
        buckets = [_make(contract=c, count=1) for c in ("0xc", "0xa", "0xb")]
        assert [c.contract for c in top_contracts(buckets)] == ["0xc", "0xa", "0xb"]


class TestActiveChains:
    def test_first_seen_order(self) -> None:
        buckets = [_make(chain="base"), _make(chain="ethereum"), _make(chain="base")]
        assert active_chains(buckets) == ["base", "ethereum"]
