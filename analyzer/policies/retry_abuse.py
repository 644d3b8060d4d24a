"""Retry abuse: clients that keep hammering instead of backing off.

Two sub-checks, skipped entirely below ``max_consecutive`` requests:

  * Rapid retries: more than 5 gaps shorter than one second.  CRITICAL.
  * Run of proximity: the longest run of consecutive gaps each within
    ``window``.  A run of ``max_consecutive`` gaps (max+1 requests) is a
    WARNING.

The ledger only holds admitted requests, so this sees retries that got
through; a client retrying into a closed window shows up in the
ActivityLedger rejections instead.
"""

from datetime import timedelta

from analyzer.policies import Policy, intervals
from analyzer.report import Level

_RAPID_RETRY_GAP = timedelta(seconds=1)
_RAPID_RETRY_LIMIT = 5


class RetryAbuse(Policy):
    id = "retry_abuse"
    name = "Retry Abuse"

    def __init__(self, max_consecutive, window):
        self.max_consecutive = max_consecutive
        self.window = window

    def evaluate(self, requests, report):
        if len(requests) < self.max_consecutive:
            return

        gaps = intervals(requests)
        self._rapid_retries(gaps, report)
        self._longest_run(gaps, report)

    def _rapid_retries(self, gaps, report):
        rapid = sum(1 for g in gaps if g < _RAPID_RETRY_GAP)
        if rapid > _RAPID_RETRY_LIMIT:
            report.add_violation(
                f"Retry abuse detected: {rapid} rapid retry attempts "
                f"(< 1 second apart)"
            )
            report.raise_to(Level.CRITICAL)

    def _longest_run(self, gaps, report):
        run = longest = 0
        for gap in gaps:
            if gap <= self.window:
                run += 1
                longest = max(longest, run)
            else:
                run = 0

        if longest >= self.max_consecutive:
            report.add_violation(
                f"Excessive consecutive requests: {longest + 1} requests "
                f"in quick succession"
            )
            report.raise_to(Level.WARNING)

    def __repr__(self):
        return f"RetryAbuse({self.max_consecutive}, {self.window})"
