#!/usr/bin/env python3
"""
Grouping and runtime statistics for workflow runs.

All functions are pure: they take the record set currently in scope and
return derived groups, statistics or filtered records.
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple

from core.models.run import RunRecord
from core.models.stats import WorkflowGroup, WorkflowStats

MAIN_BRANCH = 'main'
SHORT_RUN_RATIO = 0.05

SECONDS_PER_WEEK = 7 * 24 * 60 * 60
# One hour expressed in weeks; keeps rates finite for very short datasets
MIN_TIME_RANGE_WEEKS = 1 / 168


def percentile_90(values: Sequence[float]) -> float:
    """
    Nearest-rank 90th percentile: the smallest sample with at least 90% of
    samples at or below it. Returns 0 for an empty sample.
    """
    if not values:
        return 0
    ordered = sorted(values)
    index = math.ceil(0.9 * len(ordered)) - 1
    return ordered[index]


def group_by_name(records: Sequence[RunRecord]) -> List[WorkflowGroup]:
    """
    Group records by workflow name.

    Groups come out in order of first occurrence; each group's runs are
    sorted oldest first.
    """
    groups: Dict[str, List[RunRecord]] = {}
    for record in records:
        groups.setdefault(record.name, []).append(record)

    return [
        WorkflowGroup(name=name, runs=sorted(runs, key=lambda run: run.created_at))
        for name, runs in groups.items()
    ]


def partition_by_branch(records: Sequence[RunRecord],
                        main_branch: str = MAIN_BRANCH) -> Tuple[List[RunRecord], List[RunRecord]]:
    """Split records into (main branch, every other branch)."""
    main = [record for record in records if record.branch == main_branch]
    other = [record for record in records if record.branch != main_branch]
    return main, other


def time_range_weeks(records: Sequence[RunRecord]) -> float:
    """Span between the oldest and newest record in weeks, at least one hour."""
    if not records:
        return MIN_TIME_RANGE_WEEKS
    times = [record.created_at.timestamp() for record in records]
    return max((max(times) - min(times)) / SECONDS_PER_WEEK, MIN_TIME_RANGE_WEEKS)


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def compute_stats(runs: Sequence[RunRecord], range_weeks: Optional[float] = None) -> WorkflowStats:
    """
    Compute runtime statistics for one group of runs.

    Args:
        runs: Runs of a single workflow
        range_weeks: Time span of the whole filtered dataset; the rate is
            relative to the dataset, not the group. Defaults to the span of
            ``runs`` themselves.

    Returns:
        WorkflowStats; the pass/fail averages are None when that subset is empty
    """
    if range_weeks is None:
        range_weeks = time_range_weeks(runs)

    total = len(runs)
    durations = [run.duration for run in runs]
    passed = [run.duration for run in runs if run.succeeded]
    failed = [run.duration for run in runs if not run.succeeded]

    return WorkflowStats(
        success_rate=(100 * len(passed) / total) if total else 0,
        avg_pass_runtime=_mean(passed),
        avg_fail_runtime=_mean(failed),
        p90_runtime=percentile_90(durations),
        total_runs=total,
        max_duration=max(durations) if durations else 0,
        runs_per_week=total / range_weeks
    )


def short_run_thresholds(records: Sequence[RunRecord], ratio: float = SHORT_RUN_RATIO) -> Dict[str, float]:
    """Per-workflow duration cutoff: ``ratio`` times the group's p90."""
    return {
        group.name: percentile_90([run.duration for run in group.runs]) * ratio
        for group in group_by_name(records)
    }


def filter_short_runs(records: Sequence[RunRecord], enabled: bool,
                      ratio: float = SHORT_RUN_RATIO) -> List[RunRecord]:
    """
    Drop noise runs that are much shorter than their workflow usually takes.

    Thresholds are derived from the full record set, per workflow name.
    When disabled the records are returned unchanged.
    """
    if not enabled:
        return list(records)

    thresholds = short_run_thresholds(records, ratio)
    return [record for record in records if record.duration >= thresholds.get(record.name, 0)]
