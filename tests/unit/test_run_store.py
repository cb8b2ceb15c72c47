import csv
import json
from datetime import date

import pytest

from conftest import make_run
from core.exceptions import StorageParseError
from core.kv_store import NullKeyValueStore
from core.run_store import RECORDS_SLOT, RunStore


def test_load_empty_store_returns_empty_list(run_store):
    assert run_store.load() == []


def test_merge_sorts_newest_first_and_persists(run_store, kv_store):
    older = make_run(timestamp="2024-01-01T10:00:00Z")
    newer = make_run(timestamp="2024-01-02T10:00:00Z")

    merged = run_store.merge([older, newer])

    assert [record.timestamp for record in merged] == ["2024-01-02T10:00:00Z", "2024-01-01T10:00:00Z"]
    stored = json.loads(kv_store.get(RECORDS_SLOT))
    assert [item["timestamp"] for item in stored] == ["2024-01-02T10:00:00Z", "2024-01-01T10:00:00Z"]
    assert [record.timestamp for record in run_store.load()] == ["2024-01-02T10:00:00Z", "2024-01-01T10:00:00Z"]


def test_merge_same_id_keeps_latest_version(run_store):
    run_store.merge([make_run(id=42, status="failure")])
    merged = run_store.merge([make_run(id=42, status="success")])

    assert len(merged) == 1
    assert run_store.count() == 1
    assert run_store.load()[0].status == "success"


def test_merge_new_records_win_on_composite_collision(run_store):
    first = [make_run(name="Lint", branch="dev", timestamp="2024-01-01T10:00:00Z", duration=5),
             make_run(name="Test", timestamp="2024-01-01T09:00:00Z")]
    second = [make_run(name="Lint", branch="dev", timestamp="2024-01-01T10:00:00Z", duration=7)]

    run_store.merge(first)
    merged = run_store.merge(second)

    assert len(merged) == 2
    lint = next(record for record in merged if record.name == "Lint")
    assert lint.duration == 7


def test_id_and_composite_identities_do_not_collide(run_store):
    with_id = make_run(id=7, timestamp="2024-01-01T10:00:00Z")
    without_id = make_run(timestamp="2024-01-01T10:00:00Z")

    merged = run_store.merge([with_id, without_id])

    assert len(merged) == 2


def test_clear_removes_records(run_store):
    run_store.merge([make_run()])
    run_store.clear()

    assert run_store.load() == []


def test_corrupt_slot_raises_parse_error(kv_store):
    kv_store.set(RECORDS_SLOT, "{not json")
    store = RunStore(kv_store)

    with pytest.raises(StorageParseError):
        store.load()


def test_out_of_range_stored_timestamp_raises_parse_error(kv_store):
    kv_store.set(RECORDS_SLOT, json.dumps([{"name": "Build", "status": "success", "branch": "main",
                                            "timestamp": "99999999999999999999"}]))

    with pytest.raises(StorageParseError):
        RunStore(kv_store).load()


def test_unavailable_storage_degrades_to_empty():
    store = RunStore(NullKeyValueStore())

    assert store.merge([make_run()])[0].name == "Build"
    assert store.load() == []
    store.clear()


def test_export_csv_writes_dated_file(run_store, tmp_path):
    run_store.merge([
        make_run(id=1, name="Build", duration=12.5, url="https://example.test/1"),
        make_run(name="Lint", timestamp="2024-01-03T08:00:00Z", extra={"runner": "ubuntu"}),
    ])

    path = run_store.export_csv(tmp_path, today=date(2024, 5, 1))

    assert path.name == "actions_export_2024-05-01.csv"
    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [row["name"] for row in rows] == ["Lint", "Build"]
    assert rows[0]["runner"] == "ubuntu"
    assert rows[0]["id"] == ""
    assert rows[1]["id"] == "1"
    assert rows[1]["duration"] == "12.5"


def test_export_csv_empty_store_writes_nothing(run_store, tmp_path):
    assert run_store.export_csv(tmp_path) is None
    assert list(tmp_path.iterdir()) == []
