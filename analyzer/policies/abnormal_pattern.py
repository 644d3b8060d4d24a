"""Abnormal usage patterns: three independent sub-checks, in order.

  1. Off-hours activity: more than ``unusual_hour_threshold`` requests with
     a local hour in [2, 5).  WARNING.
  2. Category imbalance: at least 10 requests and one category above 90% of
     them.  Typical of scrapers hammering a single READ endpoint.  WARNING.
  3. Uniform cadence: consecutive inter-arrival gaps that match within
     ``uniform_tolerance``.  Humans are irregular; a script sleeping a fixed
     interval is not.  Over 70% uniform with at least 10 requests is
     CRITICAL.

The tolerance is a timedelta so sub-second ledgers can use a tighter
notion of "same interval" than the one-second default.
"""

from collections import Counter
from datetime import timedelta

from analyzer.policies import Policy, intervals
from analyzer.report import Level

_OFF_HOURS = range(2, 5)

_IMBALANCE_MIN_REQUESTS = 10
_IMBALANCE_PERCENT = 90

_UNIFORM_MIN_SAMPLE = 5
_UNIFORM_MIN_REQUESTS = 10
_UNIFORM_PERCENT = 70


class AbnormalPattern(Policy):
    id = "abnormal_pattern"
    name = "Abnormal Usage Pattern"

    def __init__(self, unusual_hour_threshold=3,
                 uniform_tolerance=timedelta(seconds=1)):
        self.unusual_hour_threshold = unusual_hour_threshold
        self.uniform_tolerance = uniform_tolerance

    def evaluate(self, requests, report):
        if not requests:
            return
        self._off_hours(requests, report)
        self._category_imbalance(requests, report)
        self._uniform_cadence(requests, report)

    def _off_hours(self, requests, report):
        count = sum(1 for r in requests if r.timestamp.hour in _OFF_HOURS)
        if count > self.unusual_hour_threshold:
            report.add_violation(
                f"Unusual activity: {count} requests during off-hours (2-5 AM)"
            )
            report.raise_to(Level.WARNING)

    def _category_imbalance(self, requests, report):
        total = len(requests)
        if total < _IMBALANCE_MIN_REQUESTS:
            return
        # Counter keeps discovery order, so the first dominant category wins.
        for category, n in Counter(r.category for r in requests).items():
            pct = n * 100.0 / total
            if pct > _IMBALANCE_PERCENT:
                report.add_violation(
                    f"Request type imbalance: {pct:.1f}% are {category.value} "
                    f"requests (potential scraping)"
                )
                report.raise_to(Level.WARNING)
                break

    def _uniform_cadence(self, requests, report):
        if len(requests) < _UNIFORM_MIN_SAMPLE:
            return

        gaps = intervals(requests)
        uniform = sum(
            1 for a, b in zip(gaps, gaps[1:])
            if abs(a - b) <= self.uniform_tolerance
        )
        # Share of all gaps, not of adjacent gap pairs.
        pct = uniform * 100.0 / len(gaps)

        if pct > _UNIFORM_PERCENT and len(requests) >= _UNIFORM_MIN_REQUESTS:
            report.add_violation(
                f"Bot-like behavior: {pct:.1f}% of requests have uniform "
                f"intervals (automated script suspected)"
            )
            report.raise_to(Level.CRITICAL)

    def __repr__(self):
        return (f"AbnormalPattern({self.unusual_hour_threshold}, "
                f"{self.uniform_tolerance})")
