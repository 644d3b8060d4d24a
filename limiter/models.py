"""Value types shared by the enforcer, the ledgers and the analyzer.

Everything here is immutable.  Ledgers hand out tuples of these records, so
nothing a caller holds can reach back into ledger storage.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RequestCategory(str, Enum):
    READ = "READ"
    WRITE = "WRITE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Outcome(str, Enum):
    ADMITTED = "ADMITTED"
    REJECTED = "REJECTED"


@dataclass(frozen=True)
class Request:
    client_id: str
    category: RequestCategory
    timestamp: datetime


@dataclass(frozen=True)
class ActivityRecord:
    timestamp: datetime
    category: RequestCategory
    outcome: Outcome

    @property
    def blocked(self) -> bool:
        return self.outcome is Outcome.REJECTED

    @property
    def status(self) -> str:
        # Labels the dashboard used for the activity table.
        return "BLOCKED" if self.blocked else "ALLOWED"

    @property
    def formatted_time(self) -> str:
        return self.timestamp.strftime("%H:%M:%S")


@dataclass(frozen=True)
class Decision:
    """Result of one admission decision."""

    request: Request
    outcome: Outcome
    remaining_quota: int

    @property
    def allowed(self) -> bool:
        return self.outcome is Outcome.ADMITTED

    @property
    def blocked(self) -> bool:
        return not self.allowed

    @property
    def status_message(self) -> str:
        if self.blocked:
            return "REQUEST BLOCKED - Rate limit exceeded"
        return f"REQUEST ALLOWED - Remaining quota: {self.remaining_quota}"
