#!/usr/bin/env python3
"""
Report composition.

Turns the stored run set into the two ordered sections shown to the user:
workflows on the main branch and workflows on every other branch.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from core.models.run import RunRecord
from core.models.stats import WorkflowGroup, WorkflowStats
from core.ordering import GlobalOrder
from core.statistics import (
    MAIN_BRANCH,
    SHORT_RUN_RATIO,
    compute_stats,
    filter_short_runs,
    group_by_name,
    partition_by_branch,
    time_range_weeks,
)

logger = logging.getLogger(__name__)

SECTIONS = ('main', 'other')


@dataclass
class Report:
    """Ordered workflow groups per section with their statistics."""
    main_groups: List[WorkflowGroup]
    other_groups: List[WorkflowGroup]
    time_range_weeks: float
    total_runs: int
    excluded_runs: int = 0
    main_stats: Dict[str, WorkflowStats] = field(default_factory=dict)
    other_stats: Dict[str, WorkflowStats] = field(default_factory=dict)

    def section(self, name: str) -> List[WorkflowGroup]:
        """Visible list for a section ('main' or 'other')."""
        if name == 'main':
            return self.main_groups
        if name == 'other':
            return self.other_groups
        raise ValueError(f"Unknown section '{name}'. Use one of: {', '.join(SECTIONS)}")

    def stats_for(self, section: str) -> Dict[str, WorkflowStats]:
        return self.main_stats if section == 'main' else self.other_stats


def build_report(records: Sequence[RunRecord],
                 order: GlobalOrder,
                 exclude_short_runs: bool = False,
                 short_run_ratio: float = SHORT_RUN_RATIO,
                 main_branch: str = MAIN_BRANCH) -> Report:
    """
    Build both report sections from a record set.

    Args:
        records: Stored runs
        order: Shared workflow order used to sort both sections
        exclude_short_runs: Drop runs below the per-workflow noise threshold
        short_run_ratio: Fraction of the p90 used as noise threshold
        main_branch: Branch name for the main section

    Returns:
        Report with sorted groups and per-group statistics
    """
    filtered = filter_short_runs(records, exclude_short_runs, short_run_ratio)
    range_weeks = time_range_weeks(filtered)

    main_records, other_records = partition_by_branch(filtered, main_branch)
    main_groups = order.sort(group_by_name(main_records))
    other_groups = order.sort(group_by_name(other_records))

    report = Report(
        main_groups=main_groups,
        other_groups=other_groups,
        time_range_weeks=range_weeks,
        total_runs=len(filtered),
        excluded_runs=len(records) - len(filtered),
        main_stats={group.name: compute_stats(group.runs, range_weeks) for group in main_groups},
        other_stats={group.name: compute_stats(group.runs, range_weeks) for group in other_groups},
    )

    logger.debug(f"Built report: {len(main_groups)} main workflows, {len(other_groups)} other, "
                 f"{report.excluded_runs} short runs excluded")
    return report
