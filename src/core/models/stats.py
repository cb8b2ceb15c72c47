#!/usr/bin/env python3
"""
Derived workflow data models.

Groups and statistics are rebuilt from whatever record set is in scope and
are never persisted.
"""

from typing import List, Optional
from dataclasses import dataclass, field

from .run import RunRecord


@dataclass
class WorkflowGroup:
    """All runs sharing a workflow name, oldest first."""
    name: str
    runs: List[RunRecord] = field(default_factory=list)


@dataclass
class WorkflowStats:
    """Runtime statistics for one workflow group."""
    success_rate: float
    avg_pass_runtime: Optional[float]  # None when there are no passing runs
    avg_fail_runtime: Optional[float]  # None when there are no failing runs
    p90_runtime: float
    total_runs: int
    max_duration: float
    runs_per_week: float
