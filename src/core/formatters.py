#!/usr/bin/env python3
"""
Formatting utilities for run and report display.
"""

from typing import Iterable, List, Optional

from core.models.run import RunRecord
from core.models.stats import WorkflowGroup, WorkflowStats
from core.report import Report

SECTION_TITLES = {
    'main': 'Main Branch',
    'other': 'Other Branches',
}

EMPTY_SECTION_TEXT = {
    'main': 'No actions found on main branch.',
    'other': 'No actions found on other branches.',
}


def format_runtime(seconds: Optional[float]) -> str:
    """Seconds with one decimal, or 'n/a' when there is no data."""
    if seconds is None:
        return 'n/a'
    return f"{seconds:.1f}s"


def format_run(run: RunRecord) -> str:
    """Format a single run for display."""
    timestamp = run.created_at.strftime("%Y-%m-%d %H:%M")
    icon = "✅" if run.succeeded else "❌"
    return f"[{timestamp}] {icon} {run.name} ({run.branch}) {run.status} {format_runtime(run.duration)}"


def format_sparkline(runs: Iterable[RunRecord]) -> str:
    """One character per run, oldest first: '+' for success, '-' otherwise."""
    return ''.join('+' if run.succeeded else '-' for run in runs)


def format_group(position: int, group: WorkflowGroup, stats: WorkflowStats, details: bool = False) -> str:
    """Format one workflow row, optionally with the expanded statistics."""
    lines = [
        f"{position:>3}. {group.name}  "
        f"[{format_sparkline(group.runs)[-40:]}]  "
        f"max {format_runtime(stats.max_duration)}, {stats.runs_per_week:.1f} runs/week"
    ]

    if details:
        lines.extend([
            f"       Success Rate:     {stats.success_rate:.1f}%",
            f"       Avg Pass Runtime: {format_runtime(stats.avg_pass_runtime)}",
            f"       Avg Fail Runtime: {format_runtime(stats.avg_fail_runtime)}",
            f"       90th Percentile:  {format_runtime(stats.p90_runtime)}",
            f"       Total Runs:       {stats.total_runs}",
        ])

    return "\n".join(lines)


def format_report(report: Report, sections: Iterable[str] = ('main', 'other'), details: bool = True,
                  short_run_ratio: float = 0.05) -> str:
    """Format the selected report sections for display."""
    lines: List[str] = ["\n=== Actions Summary ==="]
    if report.excluded_runs:
        lines.append(f"🧹 Excluded {report.excluded_runs} short runs (< {short_run_ratio * 100:g}% of p90)")

    for section in sections:
        title = SECTION_TITLES[section]
        lines.extend(["", f"📊 {title}", "-" * (len(title) + 3)])

        groups = report.section(section)
        if not groups:
            lines.append(EMPTY_SECTION_TEXT[section])
            continue

        stats = report.stats_for(section)
        for position, group in enumerate(groups, 1):
            lines.append(format_group(position, group, stats[group.name], details))

    return "\n".join(lines)
