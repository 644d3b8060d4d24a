"""Rate-limit simulator: synthetic clients against the enforcer + analyzer.

Generates traffic for a pool of client profiles in simulated time, runs
every request through the enforcer, then analyses each client's history and
prints the comparison table plus one section per client: the full violation
report, a compact summary, or a usage summary (``--view``).

Usage:
    python -m simulator.main
    python -m simulator.main --normal 3 --bursters 1 --bots 1 --retriers 1 --seed 7
    python -m simulator.main --config my_limits.yml --export report.txt
    python -m simulator.main --view summary
"""

import argparse
import json
import sys
from datetime import datetime

from limiter.clock import ManualClock
from simulator import formatter, metrics
from simulator.config import load_config
from simulator.log import configure_logging
from simulator.service import Simulator
from simulator.traffic import create_clients, generate

_STATUS_TAGS = {"ADMITTED": "ALLOW", "REJECTED": "BLOCK"}

# view -> renderer(report, stats, now)
_VIEWS = {
    "full": formatter.violation_report,
    "summary": lambda report, stats, now: formatter.summary(report),
    "usage": lambda report, stats, now: formatter.usage_report(stats, now),
}


def _parse_start(value: str) -> datetime:
    """Accept HH:MM (today) or a full ISO timestamp."""
    try:
        t = datetime.strptime(value, "%H:%M")
    except ValueError:
        return datetime.fromisoformat(value)
    return datetime.now().replace(hour=t.hour, minute=t.minute,
                                  second=0, microsecond=0)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="API rate-limit and abuse simulator")
    parser.add_argument("--config", default=None,
                        help="YAML config (default: packaged default.yml)")
    parser.add_argument("--normal", type=int, default=3)
    parser.add_argument("--bursters", type=int, default=1)
    parser.add_argument("--scrapers", type=int, default=1)
    parser.add_argument("--bots", type=int, default=1)
    parser.add_argument("--retriers", type=int, default=1)
    parser.add_argument("--night-owls", type=int, default=1)
    parser.add_argument("--requests", type=int, default=30,
                        help="Requests generated per client")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--start", type=_parse_start, default=None,
                        help="Simulated start time, HH:MM or ISO (default: now)")
    parser.add_argument("--echo", action="store_true",
                        help="Print every enforcer decision")
    parser.add_argument("--json", action="store_true",
                        help="Print reports as JSON instead of text")
    parser.add_argument("--view", choices=sorted(_VIEWS), default="full",
                        help="Per-client text section (default: full)")
    parser.add_argument("--export", default=None,
                        help="Also write the full text report to this file")
    parser.add_argument("--metrics-port", type=int, default=None)
    parser.add_argument("--log-level", default="WARNING")
    return parser


def run(args) -> int:
    configure_logging(args.log_level.upper())

    config = load_config(args.config)
    start = args.start or datetime.now().replace(microsecond=0)
    clock = ManualClock(start)
    sim = Simulator(config, clock=clock)

    if args.metrics_port:
        metrics.serve(args.metrics_port)
        print(f"Metrics on :{args.metrics_port}/metrics")

    clients = create_clients({
        "normal": args.normal,
        "burster": args.bursters,
        "scraper": args.scrapers,
        "bot": args.bots,
        "retrier": args.retriers,
        "night_owl": args.night_owls,
    })

    print(f"Simulating {len(clients)} clients x {args.requests} requests  "
          f"limit={config.max_requests}/{config.window.total_seconds():g}s  "
          f"policies={len(sim.analyzer.policies)}")
    for cid, profile in clients:
        print(f"  {cid:<24s} {profile.name}")

    count = blocked = 0
    for request in generate(clients, args.requests, start, args.seed):
        clock.set(request.timestamp)
        decision = sim.submit(request.client_id, request.category, request.timestamp)
        count += 1
        blocked += decision.blocked
        if args.echo:
            millis = request.timestamp.microsecond // 1000
            print(f"{_STATUS_TAGS[decision.outcome.value]}  "
                  f"{request.timestamp:%H:%M:%S}.{millis:03d}  "
                  f"client={request.client_id:<24s} {request.category.value:<6s} "
                  f"remaining={decision.remaining_quota}")
        if count % 100 == 0:
            print(f"  ... {count} requests processed, {blocked} blocked")

    print(f"Done. {count} requests processed, {blocked} blocked.\n")

    reports = sim.reports()
    all_stats = [sim.stats(cid) for cid in sim.clients()]

    if args.json:
        output = json.dumps({
            "clients": [
                {**reports[s.client_id].as_dict(),
                 "total": s.total, "admitted": s.admitted,
                 "rejected": s.rejected,
                 "success_rate": round(s.success_rate, 1)}
                for s in all_stats
            ]
        }, indent=2) + "\n"
    else:
        parts = [formatter.comparison_report(all_stats, reports)]
        now = clock()
        render = _VIEWS[args.view]
        parts += [render(reports[s.client_id], s, now) for s in all_stats]
        output = "\n".join(parts)

    print(output)

    if args.export:
        try:
            with open(args.export, "w") as f:
                f.write(output)
        except OSError as e:
            print(f"Warning: could not export report to {args.export}: {e}",
                  file=sys.stderr)
            return 1
        print(f"Report exported to {args.export}")

    return 0


def main(argv=None):
    args = build_parser().parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
