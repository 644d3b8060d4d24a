"""Burst detection: sudden spikes well above the steady-state rate.

From each request, counts the run of following requests that land within
``window`` of it (stopping at the first one outside).  Every anchor whose
run reaches ``burst_threshold`` is one incident with its own violation
message, so an ongoing burst reports once per anchor inside it.

Three or more incidents is CRITICAL; one or two is a WARNING.
"""

from analyzer.policies import Policy
from analyzer.report import Level

_CRITICAL_INCIDENTS = 3


class BurstDetection(Policy):
    id = "burst_detection"
    name = "Burst Detection"

    def __init__(self, burst_threshold, window):
        self.burst_threshold = burst_threshold
        self.window = window

    def evaluate(self, requests, report):
        incidents = 0
        seconds = int(self.window.total_seconds())

        for i, anchor in enumerate(requests):
            count = 1
            for later in requests[i + 1:]:
                if later.timestamp - anchor.timestamp > self.window:
                    break
                count += 1

            if count >= self.burst_threshold:
                incidents += 1
                report.add_violation(
                    f"Burst detected: {count} requests in {seconds} seconds "
                    f"at {anchor.timestamp:%H:%M:%S}"
                )

        if incidents >= _CRITICAL_INCIDENTS:
            report.raise_to(Level.CRITICAL)
        elif incidents:
            report.raise_to(Level.WARNING)

    def __repr__(self):
        return f"BurstDetection({self.burst_threshold}, {self.window})"
