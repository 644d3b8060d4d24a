"""Statistics derived from a client's ledgers for reports and dashboards.

Totals and success rate always come from the ActivityLedger counters.
Category distribution and first/last timestamps come from the RequestLedger
by default, meaning "what the client sent that actually got through".  Pass
``source="activity"`` to compute them over every attempt instead.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from limiter.ledger import LedgerRegistry
from limiter.models import RequestCategory

SOURCES = ("requests", "activity")


@dataclass(frozen=True)
class ClientStats:
    client_id: str
    total: int
    admitted: int
    rejected: int
    success_rate: float
    source: str = "requests"
    distribution: dict[RequestCategory, int] = field(default_factory=dict)
    first_seen: datetime | None = None
    last_seen: datetime | None = None
    last_activity: str = "N/A"

    def share(self, category: RequestCategory) -> float:
        """Percentage of the distribution taken by *category*."""
        sampled = sum(self.distribution.values())
        if sampled == 0:
            return 0.0
        return self.distribution.get(category, 0) * 100.0 / sampled


def derive_stats(registry: LedgerRegistry, client_id: str,
                 source: str = "requests") -> ClientStats:
    if source not in SOURCES:
        raise ValueError(f"Unknown statistics source: {source}")

    counters = registry.activity.counters(client_id)
    attempts = registry.activity.get(client_id)

    if source == "requests":
        entries = registry.requests.get(client_id)
    else:
        entries = attempts

    counts = Counter(e.category for e in entries)
    # Enum order, like the category table in the reports.
    distribution = {c: counts[c] for c in RequestCategory if counts[c]}

    return ClientStats(
        client_id=client_id,
        total=counters.total,
        admitted=counters.admitted,
        rejected=counters.rejected,
        success_rate=counters.success_rate,
        source=source,
        distribution=distribution,
        first_seen=entries[0].timestamp if entries else None,
        last_seen=entries[-1].timestamp if entries else None,
        last_activity=attempts[-1].formatted_time if attempts else "N/A",
    )
