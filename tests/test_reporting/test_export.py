"""Tests for JSON snapshot export/import and the rider deductions sheet."""

from __future__ import annotations

import csv
import json

import pytest

from ems_tracker.reporting.export import (
    RIDER_EXPORT_COLUMNS,
    export_snapshot,
    export_to_csv,
    flatten_riders_for_export,
    load_snapshot,
)


class TestSnapshotExport:
    def test_document_layout(self, sample_snapshot, tmp_path):
        path = export_snapshot(sample_snapshot, tmp_path / "out" / "ems-data.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert list(data) == ["supervisors", "riders", "inventory", "orders"]
        assert data["inventory"] == {"motorcyclePouches": 7, "bicyclePouches": 0, "tshirts": 42}
        assert data["riders"][0]["tshirtQuantity"] == 2
        assert path.read_text(encoding="utf-8").startswith('{\n  "supervisors"')

    def test_export_then_import_reproduces_store(self, sample_snapshot, tmp_path):
        path = export_snapshot(sample_snapshot, tmp_path / "ems-data.json")
        assert load_snapshot(path) == sample_snapshot

    def test_import_fills_missing_collections(self, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"riders": [{"code": "R1", "name": "Ali"}]}), encoding="utf-8")
        snapshot = load_snapshot(path)
        assert snapshot.riders[0].tshirt_quantity == 1
        assert snapshot.orders == ()

    def test_invalid_json_raises_value_error(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(ValueError, match="not valid JSON"):
            load_snapshot(path)

    def test_invalid_document_raises_value_error(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"inventory": {"tshirts": -1}}), encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid export file"):
            load_snapshot(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "nope.json")


class TestRiderSheet:
    def test_flatten(self, sample_snapshot):
        ali, sara = flatten_riders_for_export(sample_snapshot.riders)
        assert list(ali) == RIDER_EXPORT_COLUMNS
        assert ali["advance"] == 100.0
        assert ali["securityCheck"] == 25.5
        assert ali["totalDeductions"] == 125.5
        assert ali["hasPhoto"] is True
        assert sara["vehicleType"] == "bicycle"
        assert sara["hasPhoto"] is False

    def test_csv_written_with_header(self, sample_snapshot, tmp_path):
        path = export_to_csv(
            flatten_riders_for_export(sample_snapshot.riders),
            tmp_path / "riders.csv",
            fieldnames=RIDER_EXPORT_COLUMNS,
        )
        with path.open(newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert [r["code"] for r in rows] == ["R1", "R2"]
        assert rows[0]["totalDeductions"] == "125.5"

    def test_empty_riders_still_writes_header(self, tmp_path):
        path = export_to_csv([], tmp_path / "riders.csv", fieldnames=RIDER_EXPORT_COLUMNS)
        assert path.read_text(encoding="utf-8").strip() == ",".join(RIDER_EXPORT_COLUMNS)
