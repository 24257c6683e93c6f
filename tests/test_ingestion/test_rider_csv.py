"""Tests for the bulk rider CSV parser."""

from __future__ import annotations

import pytest

from ems_tracker.ingestion.rider_csv import RIDER_CSV_COLUMNS, parse_rider_rows, read_rider_csv
from ems_tracker.taxonomy.equipment_taxonomy import VehicleType


class TestParseRiderRows:
    def test_two_rows_with_blank_trailing_fields(self):
        rows = parse_rider_rows("R1,Ali,Cairo,motorcycle,2\nR2,Sara,Giza,,\n")
        assert rows == [
            {"code": "R1", "name": "Ali", "region": "Cairo",
             "vehicleType": "motorcycle", "tshirtQuantity": "2"},
            {"code": "R2", "name": "Sara", "region": "Giza",
             "vehicleType": "", "tshirtQuantity": ""},
        ]

    def test_trims_and_skips_blank_lines(self):
        rows = parse_rider_rows("\r\n  R1 , Ali ,Cairo , bicycle , 3 \r\n\r\n   \n")
        assert len(rows) == 1
        assert rows[0]["name"] == "Ali"
        assert rows[0]["vehicleType"] == "bicycle"

    def test_short_row_is_padded(self):
        assert parse_rider_rows("R3,Hany") == [
            {"code": "R3", "name": "Hany", "region": "",
             "vehicleType": "", "tshirtQuantity": ""},
        ]

    def test_extra_fields_ignored(self):
        row = parse_rider_rows("R1,Ali,Cairo,motorcycle,2,extra,more")[0]
        assert set(row) == set(RIDER_CSV_COLUMNS)

    def test_quoted_field_with_comma(self):
        assert parse_rider_rows('R1,"Ali, Jr.",Cairo')[0]["name"] == "Ali, Jr."

    def test_empty_text(self):
        assert parse_rider_rows("") == []


class TestReadRiderCsv:
    def test_reads_file_with_bom(self, tmp_path):
        path = tmp_path / "riders.csv"
        path.write_bytes("R1,Ali,Cairo,motorcycle,2\n".encode("utf-8-sig"))
        assert read_rider_csv(path)[0]["code"] == "R1"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_rider_csv(tmp_path / "nope.csv")


def test_import_into_store(store, tmp_path):
    path = tmp_path / "riders.csv"
    path.write_text("R1,Ali,Cairo,motorcycle,2\nR2,Sara,Giza,,\n", encoding="utf-8")

    result = store.bulk_import_riders(read_rider_csv(path))

    assert result.ok
    ali, sara = store.riders
    assert (ali.code, ali.region, ali.tshirt_quantity) == ("R1", "Cairo", 2)
    assert (sara.code, sara.vehicle_type, sara.tshirt_quantity) == (
        "R2", VehicleType.MOTORCYCLE, 1,
    )
