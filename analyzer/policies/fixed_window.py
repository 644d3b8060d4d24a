"""Fixed window: too many admitted requests right now.

Counts the requests within ``window`` of the evaluation instant (the clock,
not the last request).  Fires on strictly more than ``max_requests``; the
enforcer refuses at ``>=``, so with identical limits this only trips when
the ledger was filled some other way or the limits differ.
"""

from limiter.clock import system_clock
from analyzer.policies import Policy
from analyzer.report import Level


class FixedWindow(Policy):
    id = "fixed_window"
    name = "Fixed Window Limit"

    def __init__(self, max_requests, window, clock=system_clock):
        self.max_requests = max_requests
        self.window = window
        self.clock = clock

    def evaluate(self, requests, report):
        now = self.clock()
        count = sum(1 for r in requests if now - r.timestamp <= self.window)

        if count > self.max_requests:
            report.add_violation(f"Fixed window limit exceeded: {count} requests")
            report.raise_to(Level.WARNING)

    def __repr__(self):
        return f"FixedWindow({self.max_requests}, {self.window})"
