"""Activity tracker: records every attempted request with its outcome."""

from limiter.ledger import LedgerRegistry
from limiter.models import ActivityRecord, Outcome, Request


class ActivityTracker:

    def __init__(self, registry: LedgerRegistry):
        self.registry = registry

    def track(self, request: Request, outcome: Outcome) -> ActivityRecord:
        record = ActivityRecord(request.timestamp, request.category, outcome)
        self.registry.activity.append(request.client_id, record)
        return record

    def get(self, client_id: str) -> tuple[ActivityRecord, ...]:
        return self.registry.activity.get(client_id)

    def all(self) -> dict[str, tuple[ActivityRecord, ...]]:
        return {c: self.registry.activity.get(c)
                for c in self.registry.activity.clients()}
