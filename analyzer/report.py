"""Abuse report: the outcome of one analysis of one client.

Severity only ever moves up during an analysis: policies call
``raise_to()``, which takes the max of the current and the target level.
"""

from dataclasses import dataclass, field
from enum import IntEnum


class Level(IntEnum):
    NORMAL = 0
    WARNING = 1
    CRITICAL = 2

    def __str__(self) -> str:
        return self.name


@dataclass
class AbuseReport:
    client_id: str
    level: Level = Level.NORMAL
    violations: list[str] = field(default_factory=list)

    def add_violation(self, message: str) -> None:
        self.violations.append(message)

    def raise_to(self, level: Level) -> None:
        self.level = max(self.level, level)

    @property
    def clean(self) -> bool:
        return self.level is Level.NORMAL and not self.violations

    def as_dict(self) -> dict:
        return {
            "client_id": self.client_id,
            "level": self.level.name,
            "violations": list(self.violations),
        }
