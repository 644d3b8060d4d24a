"""Tests for derived client statistics."""

from datetime import datetime, timedelta

import pytest

from limiter.enforcer import RateLimitEnforcer
from limiter.ledger import LedgerRegistry
from limiter.models import Request, RequestCategory
from limiter.stats import derive_stats
from limiter.tracker import ActivityTracker

T0 = datetime(2025, 3, 14, 12, 0, 0)


def _drive(registry, offsets_and_categories, client="c1"):
    enforcer = RateLimitEnforcer(3, timedelta(seconds=10), registry)
    tracker = ActivityTracker(registry)
    for offset, category in offsets_and_categories:
        request = Request(client, category, T0 + timedelta(seconds=offset))
        tracker.track(request, enforcer.process(request).outcome)


class TestDeriveStats:
    def setup_method(self):
        self.registry = LedgerRegistry()
        # limit 3/10s: the two DELETEs at t=3,4 are refused
        _drive(self.registry, [
            (0, RequestCategory.READ),
            (1, RequestCategory.READ),
            (2, RequestCategory.WRITE),
            (3, RequestCategory.DELETE),
            (4, RequestCategory.DELETE),
        ])

    def test_counters(self):
        stats = derive_stats(self.registry, "c1")
        assert (stats.total, stats.admitted, stats.rejected) == (5, 3, 2)
        assert stats.success_rate == pytest.approx(60.0)

    def test_distribution_defaults_to_admitted_requests(self):
        stats = derive_stats(self.registry, "c1")
        assert stats.source == "requests"
        assert stats.distribution == {RequestCategory.READ: 2,
                                      RequestCategory.WRITE: 1}

    def test_distribution_over_all_attempts(self):
        stats = derive_stats(self.registry, "c1", source="activity")
        assert stats.distribution[RequestCategory.DELETE] == 2
        assert sum(stats.distribution.values()) == 5

    def test_distribution_in_enum_order(self):
        stats = derive_stats(self.registry, "c1", source="activity")
        assert list(stats.distribution) == [RequestCategory.READ,
                                            RequestCategory.WRITE,
                                            RequestCategory.DELETE]

    def test_first_and_last_seen(self):
        stats = derive_stats(self.registry, "c1")
        assert stats.first_seen == T0
        assert stats.last_seen == T0 + timedelta(seconds=2)

    def test_last_activity_includes_rejections(self):
        assert derive_stats(self.registry, "c1").last_activity == "12:00:04"

    def test_share(self):
        stats = derive_stats(self.registry, "c1")
        assert stats.share(RequestCategory.READ) == pytest.approx(200 / 3)
        assert stats.share(RequestCategory.UPDATE) == 0.0

    def test_unknown_client(self):
        stats = derive_stats(self.registry, "nobody")
        assert stats.total == 0
        assert stats.success_rate == 100.0
        assert stats.distribution == {}
        assert stats.first_seen is None
        assert stats.last_activity == "N/A"
        assert stats.share(RequestCategory.READ) == 0.0

    def test_unknown_source_raises(self):
        with pytest.raises(ValueError):
            derive_stats(self.registry, "c1", source="somewhere")
