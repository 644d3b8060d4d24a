# Detection policies as small Python classes, one per file.
#
# Every policy gets the client's full RequestLedger (admitted requests, in
# arrival order) and the shared report for this analysis.  It may append
# violations and raise the level, nothing else: no ledger mutation, no
# blocking, same ledger in -> same findings out.  That keeps the pipeline
# order-independent except for the order of violation messages.

from datetime import timedelta
from typing import Sequence

from analyzer.report import AbuseReport
from limiter.clock import Clock, system_clock
from limiter.models import Request


class Policy:
    """Base detection policy. Subclass and implement evaluate()."""

    id: str
    name: str

    def evaluate(self, requests: Sequence[Request], report: AbuseReport) -> None:
        """Inspect *requests* and record findings on *report*."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def intervals(requests: Sequence[Request]) -> list[timedelta]:
    """Inter-arrival gaps between consecutive requests."""
    return [b.timestamp - a.timestamp for a, b in zip(requests, requests[1:])]


from analyzer.policies.fixed_window import FixedWindow
from analyzer.policies.sliding_window import SlidingWindow
from analyzer.policies.burst_detection import BurstDetection
from analyzer.policies.abnormal_pattern import AbnormalPattern
from analyzer.policies.retry_abuse import RetryAbuse


def default_policies(clock: Clock = system_clock) -> list[Policy]:
    """The stock pipeline, matching simulator/default.yml."""
    return [
        FixedWindow(5, timedelta(seconds=10), clock=clock),
        SlidingWindow(5, timedelta(seconds=10)),
        BurstDetection(4, timedelta(seconds=3)),
        AbnormalPattern(3),
        RetryAbuse(8, timedelta(seconds=2)),
    ]
