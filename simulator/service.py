"""Simulator facade: one registry, one enforcer, one tracker, one analyzer.

This is the object a front-end holds.  ``submit`` is the whole ingress
path: decide, record the attempt, update metrics.  Reports and statistics
are computed on demand from the same registry.
"""

from datetime import datetime

import structlog

from analyzer.engine import Analyzer
from analyzer.policies.loader import build_policies
from analyzer.report import AbuseReport
from limiter.clock import Clock, system_clock
from limiter.enforcer import RateLimitEnforcer
from limiter.ledger import LedgerRegistry
from limiter.models import Decision, Request, RequestCategory
from limiter.stats import ClientStats, derive_stats
from limiter.tracker import ActivityTracker
from simulator import metrics
from simulator.config import SimulatorConfig, load_config

logger = structlog.get_logger()


class Simulator:

    def __init__(self, config: SimulatorConfig | None = None,
                 clock: Clock = system_clock):
        self.config = config or load_config()
        self.clock = clock
        self.registry = LedgerRegistry()
        self.enforcer = RateLimitEnforcer(
            self.config.max_requests, self.config.window, self.registry, clock,
        )
        self.tracker = ActivityTracker(self.registry)
        self.analyzer = Analyzer(
            self.registry, build_policies(list(self.config.policies), clock),
        )

    def submit(self, client_id: str, category: RequestCategory,
               timestamp: datetime | None = None) -> Decision:
        """Run one request through the enforcer and record the attempt."""
        request = Request(client_id, category, timestamp or self.clock())
        decision = self.enforcer.process(request)
        self.tracker.track(request, decision.outcome)
        metrics.record_decision(decision)
        return decision

    def report(self, client_id: str) -> AbuseReport:
        with metrics.analysis_seconds.time():
            report = self.analyzer.analyze(client_id)
        metrics.record_report(report)
        return report

    def reports(self) -> dict[str, AbuseReport]:
        """Analyse every known client, in discovery order."""
        with metrics.analysis_seconds.time():
            reports = self.analyzer.analyze_all()
        for report in reports.values():
            metrics.record_report(report)
        return reports

    def stats(self, client_id: str, source: str = "requests") -> ClientStats:
        return derive_stats(self.registry, client_id, source)

    def clear(self, client_id: str) -> None:
        self.registry.clear(client_id)
        metrics.reset_quota(client_id, self.config.max_requests)
        logger.info("history_cleared", client_id=client_id)

    def clients(self) -> list[str]:
        return self.registry.clients()
