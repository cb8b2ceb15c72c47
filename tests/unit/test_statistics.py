import pytest

from conftest import make_run
from core.statistics import (
    MIN_TIME_RANGE_WEEKS,
    compute_stats,
    filter_short_runs,
    group_by_name,
    partition_by_branch,
    percentile_90,
    short_run_thresholds,
    time_range_weeks,
)


def test_percentile_90_nearest_rank():
    assert percentile_90([]) == 0
    assert percentile_90([7]) == 7
    assert percentile_90([5, 10]) == 10
    assert percentile_90(list(range(1, 11))) == 9
    assert percentile_90(list(range(1, 21))) == 18


def test_group_by_name_first_occurrence_order_and_ascending_runs():
    records = [
        make_run(name="Test", timestamp="2024-01-03T00:00:00Z"),
        make_run(name="Build", timestamp="2024-01-02T00:00:00Z"),
        make_run(name="Test", timestamp="2024-01-01T00:00:00Z"),
    ]

    groups = group_by_name(records)

    assert [group.name for group in groups] == ["Test", "Build"]
    assert [run.timestamp for run in groups[0].runs] == ["2024-01-01T00:00:00Z", "2024-01-03T00:00:00Z"]


def test_partition_by_branch():
    records = [make_run(branch="main"), make_run(branch="dev"), make_run(branch="feature/x")]

    main, other = partition_by_branch(records)

    assert [record.branch for record in main] == ["main"]
    assert [record.branch for record in other] == ["dev", "feature/x"]


def test_time_range_weeks_has_one_hour_floor():
    assert time_range_weeks([]) == MIN_TIME_RANGE_WEEKS
    assert time_range_weeks([make_run()]) == MIN_TIME_RANGE_WEEKS

    span = [make_run(timestamp="2024-01-01T00:00:00Z"), make_run(timestamp="2024-01-15T00:00:00Z")]
    assert time_range_weeks(span) == pytest.approx(2)


def test_compute_stats_mixed_outcomes():
    runs = [
        make_run(status="success", duration=10, timestamp="2024-01-01T00:00:00Z"),
        make_run(status="failure", duration=5, timestamp="2024-01-08T00:00:00Z"),
    ]

    stats = compute_stats(runs)

    assert stats.success_rate == 50
    assert stats.avg_pass_runtime == 10
    assert stats.avg_fail_runtime == 5
    assert stats.p90_runtime == 10
    assert stats.total_runs == 2
    assert stats.max_duration == 10
    assert stats.runs_per_week == pytest.approx(2)


def test_compute_stats_without_failures_has_no_fail_average():
    stats = compute_stats([make_run(status="success", duration=8)])

    assert stats.avg_fail_runtime is None
    assert stats.avg_pass_runtime == 8
    assert stats.success_rate == 100


def test_compute_stats_uses_dataset_range():
    stats = compute_stats([make_run()], range_weeks=4)

    assert stats.runs_per_week == pytest.approx(0.25)


def test_compute_stats_empty_group():
    stats = compute_stats([])

    assert stats.total_runs == 0
    assert stats.success_rate == 0
    assert stats.max_duration == 0
    assert stats.avg_pass_runtime is None


def test_short_run_thresholds_per_workflow():
    records = [make_run(name="Build", duration=d) for d in (100, 200)] + [make_run(name="Lint", duration=20)]

    thresholds = short_run_thresholds(records, 0.05)

    assert thresholds == {"Build": pytest.approx(10), "Lint": pytest.approx(1)}


def test_filter_short_runs_drops_runs_below_threshold():
    records = [
        make_run(name="Build", duration=100, timestamp="2024-01-01T00:00:00Z"),
        make_run(name="Build", duration=200, timestamp="2024-01-02T00:00:00Z"),
        make_run(name="Build", duration=3, timestamp="2024-01-03T00:00:00Z"),
        make_run(name="Build", duration=10, timestamp="2024-01-04T00:00:00Z"),
    ]

    kept = filter_short_runs(records, enabled=True)

    assert [record.duration for record in kept] == [100, 200, 10]


def test_filter_short_runs_disabled_returns_everything():
    records = [make_run(duration=0), make_run(duration=100, timestamp="2024-01-02T00:00:00Z")]

    assert filter_short_runs(records, enabled=False) == records


def test_zero_duration_workflow_keeps_all_runs():
    records = [make_run(name="Noop", duration=0), make_run(name="Noop", duration=0, timestamp="2024-01-02T00:00:00Z")]

    assert len(filter_short_runs(records, enabled=True)) == 2
