import json

import pytest

from conftest import make_run
from cli_router import CLIRouter
from commands import runs as runs_command
from core.ordering import ORDER_SLOT

CSV_TEXT = (
    "name,status,branch,timestamp,duration\n"
    "Build,success,main,2024-01-01T10:00:00Z,120\n"
    "Build,failure,main,2024-01-02T10:00:00Z,90\n"
    "Test,success,main,2024-01-02T11:00:00Z,300\n"
    "Lint,success,dev,2024-01-03T10:00:00Z,15\n"
)


@pytest.fixture
def router(container):
    return CLIRouter(container)


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "runs.csv"
    path.write_text(CSV_TEXT, encoding="utf-8")
    return path


def test_import_then_report(router, csv_file, run_store, capsys):
    assert router.route_command(["runs", "import", str(csv_file)]) == 0
    assert run_store.count() == 4

    assert router.route_command(["report", "show"]) == 0
    out = capsys.readouterr().out
    assert "Imported 4 runs" in out
    assert "=== Actions Summary ===" in out
    assert "Success Rate:     50.0%" in out
    assert "Lint" in out


def test_reimport_is_deduplicated(router, csv_file, run_store):
    router.route_command(["runs", "import", str(csv_file)])
    router.route_command(["runs", "import", str(csv_file)])

    assert run_store.count() == 4


def test_import_bad_file_leaves_store_untouched(router, tmp_path, run_store):
    bad = tmp_path / "bad.csv"
    bad.write_text("name,status\nBuild,success\n", encoding="utf-8")

    assert router.route_command(["runs", "import", str(bad)]) == 22
    assert run_store.count() == 0


def test_import_missing_file(router, tmp_path):
    assert router.route_command(["runs", "import", str(tmp_path / "nope.csv")]) == 2


def test_export_round_trip(router, csv_file, tmp_path, run_store):
    router.route_command(["runs", "import", str(csv_file)])
    out_dir = tmp_path / "exports"

    assert router.route_command(["runs", "export", "--output-dir", str(out_dir)]) == 0
    exported = list(out_dir.glob("actions_export_*.csv"))
    assert len(exported) == 1

    router.route_command(["runs", "clear", "--force"])
    router.route_command(["runs", "import", str(exported[0])])
    assert run_store.count() == 4


def test_export_empty_store(router, tmp_path, capsys):
    assert router.route_command(["runs", "export", "--output-dir", str(tmp_path)]) == 0
    assert "No cached runs to export" in capsys.readouterr().out
    assert list(tmp_path.iterdir()) == []


def test_clear_requires_confirmation(router, run_store, monkeypatch):
    run_store.merge([make_run()])
    monkeypatch.setattr("builtins.input", lambda prompt: "no")

    assert router.route_command(["runs", "clear"]) == 0
    assert run_store.count() == 1

    assert router.route_command(["runs", "clear", "--force"]) == 0
    assert run_store.count() == 0


def test_clear_keeps_workflow_order(router, csv_file, kv_store):
    router.route_command(["runs", "import", str(csv_file)])
    router.route_command(["order", "up", "Build"])
    router.route_command(["runs", "clear", "--force"])

    assert json.loads(kv_store.get(ORDER_SLOT)) == ["Build", "Test"]


def test_order_up_changes_report_order(router, csv_file, global_order, capsys):
    router.route_command(["runs", "import", str(csv_file)])

    assert router.route_command(["order", "up", "Build", "--section", "main"]) == 0
    assert global_order.names == ["Build", "Test"]

    capsys.readouterr()
    router.route_command(["report", "show", "--section", "main", "--compact"])
    out = capsys.readouterr().out
    assert out.index("Build") < out.index("Test")


def test_order_move_at_boundary(router, csv_file, capsys, kv_store):
    router.route_command(["runs", "import", str(csv_file)])
    writes = kv_store.writes

    assert router.route_command(["order", "down", "Build"]) == 0
    assert "already last" in capsys.readouterr().out
    assert kv_store.writes == writes


def test_order_unknown_workflow(router, csv_file):
    router.route_command(["runs", "import", str(csv_file)])

    assert router.route_command(["order", "up", "Lint", "--section", "main"]) == 1


def test_order_show(router, csv_file, capsys):
    assert router.route_command(["order", "show"]) == 0
    assert "No saved order" in capsys.readouterr().out

    router.route_command(["runs", "import", str(csv_file)])
    router.route_command(["order", "down", "Test"])
    router.route_command(["order", "show"])
    assert "1. Build" in capsys.readouterr().out


def test_report_on_empty_store(router, capsys):
    assert router.route_command(["report", "show"]) == 0
    assert "No cached runs" in capsys.readouterr().out


def test_fetch_without_token_is_rejected(router):
    assert router.route_command(["runs", "fetch", "--repo", "octo/repo"]) == 22


def test_fetch_merges_runs(router, run_store, monkeypatch, capsys):
    calls = {}

    def fake_fetch(**kwargs):
        calls.update(kwargs)
        kwargs["progress"](1, 1)
        return [make_run(id=1), make_run(id=2, timestamp="2024-01-02T10:00:00Z")]

    monkeypatch.setattr(runs_command, "fetch_runs_sync", fake_fetch)

    assert router.route_command(["runs", "fetch", "--repo", "octo/repo", "--token", "t", "--window", "7d"]) == 0
    assert run_store.count() == 2
    assert calls["time_window"] == "7d"
    assert calls["api_url"] == "https://api.test"
    assert "Processing 1/1 runs" in capsys.readouterr().out


def test_stats_lists_recent_runs(router, csv_file, capsys):
    router.route_command(["runs", "import", str(csv_file)])

    assert router.route_command(["runs", "stats", "--limit", "2"]) == 0
    out = capsys.readouterr().out
    assert "Cached runs: 4" in out
    assert "and 2 more runs" in out


def test_missing_subcommand(router):
    assert router.route_command(["runs"]) != 0
