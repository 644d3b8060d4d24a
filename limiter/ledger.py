"""Per-client append-only ledgers and the registry that owns them.

Two ledgers per client:

  * RequestLedger:  admitted requests only.  The enforcer counts against it
    and every detection policy reads its full history, so nothing is ever
    evicted here (unlike a detector window, old entries are just ignored by
    the window arithmetic).
  * ActivityLedger: every attempted request with its outcome, plus running
    counters so totals and success rate are O(1).

State: dict[client_id, list[record]].  Ordering within a client is insertion
order; the single-threaded driver guarantees that is also timestamp order.
"""

from dataclasses import dataclass, field

from limiter.models import ActivityRecord, Outcome, Request


class Ledger:
    """Append-only per-client sequences.  Every operation is total."""

    def __init__(self):
        self._entries: dict[str, list] = {}

    def append(self, client_id: str, record) -> None:
        self._entries.setdefault(client_id, []).append(record)

    def get(self, client_id: str) -> tuple:
        """Read-only view; empty for clients never seen."""
        return tuple(self._entries.get(client_id, ()))

    def clear(self, client_id: str) -> None:
        # Truncate but keep the client entry.  Unknown clients are a no-op.
        entries = self._entries.get(client_id)
        if entries is not None:
            entries.clear()

    def clients(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class RequestLedger(Ledger):

    def append(self, client_id: str, record: Request) -> None:
        super().append(client_id, record)

    def get(self, client_id: str) -> tuple[Request, ...]:
        return super().get(client_id)


@dataclass
class Counters:
    total: int = 0
    admitted: int = 0
    rejected: int = 0

    @property
    def success_rate(self) -> float:
        if self.total == 0:
            return 100.0
        return self.admitted * 100.0 / self.total


class ActivityLedger(Ledger):
    """Ledger of every attempt, with counters maintained on append."""

    def __init__(self):
        super().__init__()
        self._counters: dict[str, Counters] = {}

    def append(self, client_id: str, record: ActivityRecord) -> None:
        super().append(client_id, record)
        counters = self._counters.setdefault(client_id, Counters())
        counters.total += 1
        if record.outcome is Outcome.ADMITTED:
            counters.admitted += 1
        else:
            counters.rejected += 1

    def get(self, client_id: str) -> tuple[ActivityRecord, ...]:
        return super().get(client_id)

    def counters(self, client_id: str) -> Counters:
        """Snapshot of the client's counters (zeros for unknown clients)."""
        c = self._counters.get(client_id, Counters())
        return Counters(c.total, c.admitted, c.rejected)

    def clear(self, client_id: str) -> None:
        super().clear(client_id)
        if client_id in self._counters:
            self._counters[client_id] = Counters()


@dataclass
class LedgerRegistry:
    """The process-wide ledger state, owned by one simulator instance.

    Passed into the enforcer, the activity tracker and the analyzer at
    construction instead of living in module globals.
    """

    requests: RequestLedger = field(default_factory=RequestLedger)
    activity: ActivityLedger = field(default_factory=ActivityLedger)

    def clear(self, client_id: str) -> None:
        """Truncate both ledgers and reset counters for one client."""
        self.requests.clear(client_id)
        self.activity.clear(client_id)

    def clients(self) -> list[str]:
        """Every client either ledger has seen, in order of discovery."""
        seen = dict.fromkeys(self.activity.clients())
        seen.update(dict.fromkeys(self.requests.clients()))
        return list(seen)
