"""Rate-limit enforcer: admit or refuse each request as it arrives.

Strict sliding-window counter, not a token bucket: a request at ``now`` is
refused when the client already has ``max_requests`` admitted requests with
``now - t <= window`` (inclusive on the boundary).  Admitted requests are
appended to the RequestLedger before the decision is returned, so the next
query always sees them.

The enforcer only records admissions.  Tracking the attempt (admitted or
not) in the ActivityLedger is the caller's job; see ActivityTracker.
"""

from datetime import datetime, timedelta

import structlog

from limiter.clock import Clock, system_clock
from limiter.ledger import LedgerRegistry
from limiter.models import Decision, Outcome, Request

logger = structlog.get_logger()


class RateLimitEnforcer:

    def __init__(self, max_requests: int, window: timedelta,
                 registry: LedgerRegistry, clock: Clock = system_clock):
        self.max_requests = max_requests
        self.window = window
        self.registry = registry
        self.clock = clock

    def process(self, request: Request) -> Decision:
        """Decide one request, append it on admission, report remaining quota.

        Read-count-decide-append runs without yielding, which is what makes
        it atomic per client under the single-threaded driver.
        """
        now = request.timestamp
        recent = self._recent(request.client_id, now)

        if recent >= self.max_requests:
            outcome = Outcome.REJECTED
            recent_after = recent
            logger.debug("request_rejected", client_id=request.client_id,
                         category=request.category.value, recent=recent,
                         max_requests=self.max_requests)
        else:
            outcome = Outcome.ADMITTED
            self.registry.requests.append(request.client_id, request)
            recent_after = recent + 1

        remaining = max(0, self.max_requests - recent_after)
        return Decision(request, outcome, remaining)

    def should_block(self, request: Request) -> bool:
        """Would this request be refused?  Does not append anything."""
        return self._recent(request.client_id, request.timestamp) >= self.max_requests

    def remaining_quota(self, client_id: str, now: datetime | None = None) -> int:
        """Quota left for *client_id* at *now* (clock when omitted), in [0, N]."""
        if now is None:
            now = self.clock()
        return max(0, self.max_requests - self._recent(client_id, now))

    def time_until_reset(self, client_id: str, now: datetime | None = None) -> timedelta:
        """Time until the oldest request in the current window ages out.

        Zero when nothing is in the window.
        """
        if now is None:
            now = self.clock()
        in_window = [r.timestamp for r in self.registry.requests.get(client_id)
                     if now - r.timestamp <= self.window]
        if not in_window:
            return timedelta(0)
        reset_at = min(in_window) + self.window
        return max(timedelta(0), reset_at - now)

    def _recent(self, client_id: str, now: datetime) -> int:
        # Old entries are skipped, never pruned: policies need full history.
        return sum(1 for r in self.registry.requests.get(client_id)
                   if now - r.timestamp <= self.window)
