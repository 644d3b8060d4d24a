"""Sliding window: any window anchored on a request holds too many.

For each request, counts it plus every later request within ``window`` of
it.  The first anchor whose count exceeds ``max_requests`` is enough: one
violation, CRITICAL, stop scanning.  O(n^2) worst case, fine for simulator
ledgers.
"""

from analyzer.policies import Policy
from analyzer.report import Level


class SlidingWindow(Policy):
    id = "sliding_window"
    name = "Sliding Window Abuse"

    def __init__(self, max_requests, window):
        self.max_requests = max_requests
        self.window = window

    def evaluate(self, requests, report):
        for i, anchor in enumerate(requests):
            count = 1
            for later in requests[i + 1:]:
                if later.timestamp - anchor.timestamp <= self.window:
                    count += 1
                if count > self.max_requests:
                    report.add_violation("Sliding window abuse detected")
                    report.raise_to(Level.CRITICAL)
                    return

    def __repr__(self):
        return f"SlidingWindow({self.max_requests}, {self.window})"
