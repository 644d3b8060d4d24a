"""Synthetic request traffic for the simulator.

Each client follows a profile describing how long it waits between requests
and what it asks for.  Streams are generated in simulated time (no sleeping)
and merged into one timestamp-ordered sequence, which is what the
single-threaded driver feeds to the enforcer.

Profiles map onto the detection policies they are meant to exercise:

  normal    irregular human pacing, mixed categories; should stay clean
  burster   quiet, then several requests inside a second or two
  scraper   steady READ-only crawling
  bot       a fixed sleep between calls
  retrier   sub-second retries, ignoring refusals
  night_owl active between 02:00 and 05:00
"""

import heapq
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator

from limiter.models import Request, RequestCategory

_ALL = tuple(RequestCategory)


@dataclass(frozen=True)
class Profile:
    name: str
    gap_lo: float           # seconds between requests, lower bound
    gap_hi: float           # upper bound; equal bounds = fixed cadence
    category_weights: tuple[float, float, float, float]  # READ, WRITE, UPDATE, DELETE
    burst_size: int = 1     # requests per burst; gaps inside a burst use burst_gap
    burst_gap: float = 0.0
    start_hour: int | None = None  # pin the stream's start to this local hour


PROFILES = {
    "normal": Profile("normal", 3.0, 15.0, (0.55, 0.2, 0.15, 0.1)),
    "burster": Profile("burster", 20.0, 40.0, (0.4, 0.3, 0.2, 0.1),
                       burst_size=5, burst_gap=0.3),
    "scraper": Profile("scraper", 2.0, 4.0, (0.97, 0.01, 0.01, 0.01)),
    "bot": Profile("bot", 3.0, 3.0, (0.25, 0.25, 0.25, 0.25)),
    "retrier": Profile("retrier", 0.1, 0.6, (0.7, 0.3, 0.0, 0.0)),
    "night_owl": Profile("night_owl", 30.0, 90.0, (0.5, 0.3, 0.1, 0.1),
                         start_hour=3),
}


def client_stream(client_id: str, profile: Profile, count: int,
                  start: datetime, rng: random.Random) -> Iterator[Request]:
    """Yield *count* requests for one client, timestamps non-decreasing."""
    ts = start
    if profile.start_hour is not None:
        ts = ts.replace(hour=profile.start_hour, minute=0, second=0, microsecond=0)
        if ts < start:
            ts += timedelta(days=1)

    for i in range(count):
        yield Request(client_id, rng.choices(_ALL, profile.category_weights)[0], ts)
        if profile.burst_size > 1 and (i + 1) % profile.burst_size:
            gap = profile.burst_gap
        else:
            gap = rng.uniform(profile.gap_lo, profile.gap_hi)
        ts += timedelta(seconds=gap)


def create_clients(counts: dict[str, int]) -> list[tuple[str, Profile]]:
    """Build the client pool, e.g. {"normal": 3, "bot": 1}."""
    clients = []
    n = 0
    for name, how_many in counts.items():
        if name not in PROFILES:
            raise ValueError(f"Unknown traffic profile: {name}")
        for _ in range(how_many):
            n += 1
            clients.append((f"client_{n:03d}_{name}", PROFILES[name]))
    return clients


def generate(clients: list[tuple[str, Profile]], per_client: int,
             start: datetime, seed: int | None = None) -> Iterator[Request]:
    """Merge every client's stream into one timestamp-ordered sequence."""
    rng = random.Random(seed)
    streams = [client_stream(cid, profile, per_client, start, rng)
               for cid, profile in clients]
    return heapq.merge(*streams, key=lambda r: r.timestamp)
