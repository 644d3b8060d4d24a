"""Analyzer: runs every configured policy over one client's history.

Pure business logic over the shared LedgerRegistry.  Reports are built fresh
per call and owned by the caller; nothing is cached, so analysing an
unchanged ledger twice gives identical reports.
"""

import structlog

from analyzer.policies import Policy, default_policies
from analyzer.report import AbuseReport
from limiter.ledger import LedgerRegistry

logger = structlog.get_logger()


class Analyzer:

    def __init__(self, registry: LedgerRegistry, policies: list[Policy] | None = None):
        self.registry = registry
        self.policies = policies if policies is not None else default_policies()

    def analyze(self, client_id: str) -> AbuseReport:
        """Produce a report for one client.

        For each policy, in configured order, hand it the client's full
        RequestLedger and the shared report.  Policies only append and
        raise, so the result is the union of their findings at the highest
        level any of them reached.
        """
        report = AbuseReport(client_id)
        if client_id not in self.registry.requests:
            return report

        requests = self.registry.requests.get(client_id)
        for policy in self.policies:
            policy.evaluate(requests, report)

        logger.debug("client_analyzed", client_id=client_id,
                     level=report.level.name, violations=len(report.violations),
                     requests=len(requests))
        return report

    def analyze_all(self) -> dict[str, AbuseReport]:
        return {c: self.analyze(c) for c in self.registry.clients()}
