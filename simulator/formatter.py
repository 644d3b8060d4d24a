"""Plain-text reports for the terminal and for file export.

Three layouts:
  - violation_report:  one client, severity + stats + distribution + findings
  - usage_report:      one client, short usage summary
  - comparison_report: every client in one table

Formatting only: every number here comes from ClientStats / AbuseReport.
"""

from datetime import datetime

from analyzer.report import AbuseReport, Level
from limiter.stats import ClientStats

_RULE = "-" * 59
_BANNER = "=" * 59

_LEVEL_TAGS = {Level.NORMAL: "[ OK ]", Level.WARNING: "[WARN]", Level.CRITICAL: "[CRIT]"}

_RECOMMENDATIONS = {
    Level.CRITICAL: [
        "CRITICAL: Immediate action required!",
        "  -> Consider blocking this client temporarily",
        "  -> Review client's API key and permissions",
        "  -> Contact client about usage patterns",
    ],
    Level.WARNING: [
        "WARNING: Monitor this client closely",
        "  -> Send usage warning notification",
        "  -> Review if rate limits need adjustment",
        "  -> Track for pattern escalation",
    ],
    Level.NORMAL: [
        "NORMAL: No action required",
        "  -> Client is using API within acceptable limits",
        "  -> Continue standard monitoring",
    ],
}

# Below this success rate the client probably has an integration problem.
_LOW_SUCCESS_RATE = 50


def _pct(part: int, total: int) -> float:
    return part * 100.0 / max(1, total)


def _bar(pct: float) -> str:
    return "#" * max(0, int(pct) // 10)


def _time(ts: datetime | None) -> str:
    return ts.strftime("%H:%M:%S") if ts else "N/A"


def _title(text: str) -> list[str]:
    return [_BANNER, text.center(59).rstrip(), _BANNER, ""]


def summary(report: AbuseReport) -> str:
    """Compact three-part summary: client, severity, violations."""
    lines = [f"Client ID: {report.client_id}", f"Severity: {report.level.name}",
             "Violations:"]
    lines.extend(f"  - {v}" for v in report.violations)
    if not report.violations:
        lines.append("  (none)")
    return "\n".join(lines) + "\n"


def violation_report(report: AbuseReport, stats: ClientStats | None = None,
                     now: datetime | None = None) -> str:
    now = now or datetime.now()
    lines = _title("API ABUSE & VIOLATION REPORT")

    lines += [
        "CLIENT INFORMATION",
        _RULE,
        f"Client ID:        {report.client_id}",
        f"Report Date:      {now:%Y-%m-%d %H:%M:%S}",
        f"Severity Level:   {_LEVEL_TAGS[report.level]} {report.level.name}",
        "",
    ]

    if stats is not None:
        lines += [
            "USAGE STATISTICS",
            _RULE,
            f"Total Requests:   {stats.total}",
            f"Allowed:          {stats.admitted} ({_pct(stats.admitted, stats.total):.1f}%)",
            f"Blocked:          {stats.rejected} ({_pct(stats.rejected, stats.total):.1f}%)",
            f"Success Rate:     {stats.success_rate:.1f}%",
            f"Last Activity:    {stats.last_activity}",
            "",
        ]

        if stats.distribution:
            lines += ["REQUEST TYPE DISTRIBUTION", _RULE]
            for category, n in stats.distribution.items():
                pct = stats.share(category)
                lines.append(f"{category.value:<10s}: {n:3d} requests ({pct:.1f}%) {_bar(pct)}")
            lines.append("")

    lines += ["VIOLATIONS DETECTED", _RULE]
    if report.violations:
        lines.append(f"Total Violations: {len(report.violations)}")
        lines.append("")
        for i, violation in enumerate(report.violations, 1):
            lines.append(f"[{i}] {violation}")
    else:
        lines.append("No violations detected - Clean usage pattern")
    lines.append("")

    lines += ["RECOMMENDATIONS", _RULE]
    lines += _RECOMMENDATIONS[report.level]
    if stats is not None and stats.success_rate < _LOW_SUCCESS_RATE:
        lines += [
            "",
            "Low success rate detected:",
            "  -> Client may need help with integration",
            "  -> Consider providing API usage documentation",
        ]
    lines.append("")

    lines += [_BANNER, "END OF REPORT".center(59).rstrip(), _BANNER]
    return "\n".join(lines) + "\n"


def usage_report(stats: ClientStats, now: datetime | None = None) -> str:
    now = now or datetime.now()
    lines = [
        "CLIENT USAGE SUMMARY",
        _RULE,
        f"Client:           {stats.client_id}",
        f"Report Time:      {now:%H:%M:%S}",
        "",
        f"Total Requests:   {stats.total}",
        f"Allowed:          {stats.admitted}",
        f"Blocked:          {stats.rejected}",
        f"Success Rate:     {stats.success_rate:.1f}%",
    ]
    if stats.first_seen is not None:
        lines += [
            "",
            f"First Request:    {_time(stats.first_seen)}",
            f"Latest Request:   {_time(stats.last_seen)}",
        ]
    lines.append(_BANNER)
    return "\n".join(lines) + "\n"


def comparison_report(all_stats: list[ClientStats],
                      reports: dict[str, AbuseReport] | None = None) -> str:
    reports = reports or {}
    lines = _title("MULTI-CLIENT COMPARISON REPORT")
    lines.append(f"{'CLIENT':<24s} | {'TOTAL':>6s} | {'ALLOWED':>7s} | "
                 f"{'BLOCKED':>7s} | {'SUCCESS %':>9s} | LEVEL")
    lines.append(_RULE + "-" * 14)
    for s in all_stats:
        report = reports.get(s.client_id)
        level = report.level.name if report else "-"
        lines.append(f"{s.client_id:<24s} | {s.total:>6d} | {s.admitted:>7d} | "
                     f"{s.rejected:>7d} | {s.success_rate:>8.1f}% | {level}")
    lines.append(_BANNER)
    return "\n".join(lines) + "\n"
