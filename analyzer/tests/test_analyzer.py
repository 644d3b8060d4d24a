"""Tests for the Analyzer: pipeline wiring, ordering, empty input, determinism."""

from datetime import datetime, timedelta

from analyzer.engine import Analyzer
from analyzer.policies import Policy, default_policies
from analyzer.policies.burst_detection import BurstDetection
from analyzer.policies.sliding_window import SlidingWindow
from analyzer.report import AbuseReport, Level
from limiter.clock import ManualClock
from limiter.ledger import LedgerRegistry
from limiter.models import Request, RequestCategory

T0 = datetime(2025, 3, 14, 12, 0, 0)


def _fill(registry, offsets, client="c1", category=RequestCategory.READ):
    for off in offsets:
        registry.requests.append(
            client, Request(client, category, T0 + timedelta(seconds=off))
        )


class _Raise(Policy):
    """Test policy: always raises to a fixed level with a tagged message."""

    id = "raise"
    name = "Raise"

    def __init__(self, level, tag):
        self.level = level
        self.tag = tag
        self.calls = 0

    def evaluate(self, requests, report):
        self.calls += 1
        report.add_violation(f"{self.tag}:{len(requests)}")
        report.raise_to(self.level)


# ---------------------------------------------------------------------------
# Empty input
# ---------------------------------------------------------------------------

class TestEmptyInput:
    def test_unknown_client_is_normal(self):
        policy = _Raise(Level.CRITICAL, "x")
        report = Analyzer(LedgerRegistry(), [policy]).analyze("nobody")
        assert report == AbuseReport("nobody")
        assert policy.calls == 0

    def test_cleared_client_is_normal_with_default_pipeline(self):
        registry = LedgerRegistry()
        _fill(registry, range(20))
        registry.clear("c1")
        analyzer = Analyzer(registry, default_policies(ManualClock(T0)))
        report = analyzer.analyze("c1")
        assert report.level is Level.NORMAL
        assert report.violations == []


# ---------------------------------------------------------------------------
# Pipeline composition
# ---------------------------------------------------------------------------

class TestPipeline:
    def setup_method(self):
        self.registry = LedgerRegistry()
        _fill(self.registry, range(3))

    def test_every_policy_sees_full_ledger(self):
        first, second = _Raise(Level.NORMAL, "a"), _Raise(Level.NORMAL, "b")
        report = Analyzer(self.registry, [first, second]).analyze("c1")
        assert report.violations == ["a:3", "b:3"]

    def test_violation_order_follows_policy_order(self):
        a, b = _Raise(Level.WARNING, "a"), _Raise(Level.CRITICAL, "b")
        assert Analyzer(self.registry, [a, b]).analyze("c1").violations == ["a:3", "b:3"]
        assert Analyzer(self.registry, [b, a]).analyze("c1").violations == ["b:3", "a:3"]

    def test_level_never_lowered_by_later_policy(self):
        policies = [_Raise(Level.CRITICAL, "hi"), _Raise(Level.WARNING, "lo")]
        assert Analyzer(self.registry, policies).analyze("c1").level is Level.CRITICAL

    def test_level_is_max_regardless_of_order(self):
        policies = [_Raise(Level.WARNING, "lo"), _Raise(Level.CRITICAL, "hi")]
        assert Analyzer(self.registry, policies).analyze("c1").level is Level.CRITICAL

    def test_report_is_fresh_each_call(self):
        analyzer = Analyzer(self.registry, [_Raise(Level.WARNING, "a")])
        first = analyzer.analyze("c1")
        second = analyzer.analyze("c1")
        assert first is not second
        assert second.violations == ["a:3"]

    def test_analysis_does_not_touch_ledger(self):
        before = self.registry.requests.get("c1")
        Analyzer(self.registry, default_policies(ManualClock(T0))).analyze("c1")
        assert self.registry.requests.get("c1") == before

    def test_default_pipeline_order(self):
        names = [p.id for p in default_policies()]
        assert names == ["fixed_window", "sliding_window", "burst_detection",
                         "abnormal_pattern", "retry_abuse"]


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------

class TestDeterminism:
    def test_same_ledger_same_report(self):
        registry = LedgerRegistry()
        _fill(registry, [0, 0.2, 0.4, 1, 1.1, 2, 2.5, 3, 9, 9.5, 30, 31])
        analyzer = Analyzer(registry, default_policies(ManualClock(T0 + timedelta(seconds=31))))
        first = analyzer.analyze("c1")
        second = analyzer.analyze("c1")
        assert first == second
        assert first.level is Level.CRITICAL


class TestAnalyzeAll:
    def test_one_report_per_client(self):
        registry = LedgerRegistry()
        _fill(registry, range(10), client="busy")
        _fill(registry, [0, 60], client="quiet")
        analyzer = Analyzer(registry, [SlidingWindow(5, timedelta(seconds=10)),
                                       BurstDetection(4, timedelta(seconds=3))])
        reports = analyzer.analyze_all()
        assert list(reports) == ["busy", "quiet"]
        assert reports["busy"].level is Level.CRITICAL
        assert reports["quiet"].clean


class TestReportModel:
    def test_raise_to_is_monotone(self):
        report = AbuseReport("c1")
        report.raise_to(Level.CRITICAL)
        report.raise_to(Level.WARNING)
        report.raise_to(Level.NORMAL)
        assert report.level is Level.CRITICAL

    def test_as_dict(self):
        report = AbuseReport("c1")
        report.add_violation("something")
        report.raise_to(Level.WARNING)
        assert report.as_dict() == {
            "client_id": "c1", "level": "WARNING", "violations": ["something"],
        }

    def test_levels_are_ordered(self):
        assert Level.NORMAL < Level.WARNING < Level.CRITICAL
        assert str(Level.WARNING) == "WARNING"
