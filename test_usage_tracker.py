from datetime import date, timedelta

import pytest

from store.usage_tracker import UsageTracker


class Clock:
    def __init__(self, day: date):
        self.day = day

    def __call__(self) -> date:
        return self.day


@pytest.fixture
def clock():
    return Clock(date(2026, 10, 19))


@pytest.fixture
def tracker(tmp_path, clock):
    return UsageTracker(tmp_path / "usage.json", today=clock)


def test_track_analysis_counts_daily_and_lifetime(tracker):
    assert tracker.track("portfolio_analysis") is True
    usage = tracker.get()
    assert usage.portfolio_analyses == 1
    assert usage.total_consultations == 1
    assert tracker.remaining("portfolio_analysis") == 9
    assert tracker.usage_percentage("portfolio_analysis") == 10


def test_stock_queries_do_not_count_as_consultations(tracker):
    tracker.track("stock_query")
    usage = tracker.get()
    assert usage.stock_queries == 1
    assert usage.total_consultations == 0


def test_limit_stops_counting(tracker):
    for _ in range(10):
        assert tracker.track("portfolio_analysis")
    assert tracker.can_use("portfolio_analysis") is False
    assert tracker.track("portfolio_analysis") is False
    assert tracker.get().portfolio_analyses == 10
    assert tracker.remaining("portfolio_analysis") == 0


def test_new_day_resets_daily_but_keeps_total(tracker, clock):
    for _ in range(10):
        tracker.track("portfolio_analysis")
    tracker.track("stock_query")

    clock.day += timedelta(days=1)

    assert tracker.can_use("portfolio_analysis") is True
    usage = tracker.get()
    assert usage.portfolio_analyses == 0
    assert usage.stock_queries == 0
    assert usage.total_consultations == 10
    assert usage.last_reset_date == clock.day


def test_state_survives_restart(tmp_path, clock):
    path = tmp_path / "usage.json"
    UsageTracker(path, today=clock).track("portfolio_analysis")

    reloaded = UsageTracker(path, today=clock)
    assert reloaded.get().portfolio_analyses == 1


def test_stale_file_is_reset_on_load(tmp_path, clock):
    path = tmp_path / "usage.json"
    UsageTracker(path, today=clock).track("portfolio_analysis")

    clock.day += timedelta(days=3)
    reloaded = UsageTracker(path, today=clock)
    assert reloaded.get().portfolio_analyses == 0
    assert reloaded.get().total_consultations == 1


def test_manual_daily_reset(tracker):
    tracker.track("portfolio_analysis")
    tracker.reset_daily()
    assert tracker.get().portfolio_analyses == 0
    assert tracker.get().total_consultations == 1


def test_unknown_kind_rejected(tracker):
    with pytest.raises(ValueError):
        tracker.track("news")
    with pytest.raises(ValueError):
        tracker.remaining("news")
