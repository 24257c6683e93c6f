"""End-to-end tests for the typer CLI against a temporary database."""

from __future__ import annotations

import json
import logging

import pytest
from typer.testing import CliRunner

from ems_tracker.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def cli(tmp_path, monkeypatch):
    """Return ``invoke(*args)`` bound to a temp config and database."""
    monkeypatch.delenv("EMS_TRACKER_DB_PATH", raising=False)
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        f"""
[storage]
db_path = "{(tmp_path / 'ems.db').as_posix()}"

[data]
export_dir = "{(tmp_path / 'exports').as_posix()}"

[inventory]
default_motorcycle_pouches = 5
default_bicycle_pouches = 5
default_tshirts = 5

[logging]
level = "WARNING"
log_file = "{(tmp_path / 'ems.log').as_posix()}"
""",
        encoding="utf-8",
    )

    def invoke(*args: str, input: str | None = None):
        return runner.invoke(app, [*args, "--config", str(config_path)], input=input)

    return invoke


def _order_ids(cli) -> list[str]:
    result = cli("order", "list")
    return [line.split()[0] for line in result.stdout.splitlines() if line.strip()[:1].isdigit()]


# ── Setup commands ────────────────────────────────────────────────────────────

class TestSetup:
    def test_init_db_seeds_once(self, cli):
        first = cli("init-db")
        assert first.exit_code == 0
        assert "Seeded" in first.stdout
        assert "Tables: storage_documents" in first.stdout
        second = cli("init-db")
        assert second.exit_code == 0
        assert "Seeded" not in second.stdout

    def test_validate_config(self, cli):
        result = cli("validate-config", "--full")
        assert result.exit_code == 0
        assert "Reject policy:    any" in result.stdout
        assert '"currency": "EGP"' in result.stdout

    def test_missing_config_exits_1(self, tmp_path):
        result = runner.invoke(app, ["overview", "--config", str(tmp_path / "none.toml")])
        assert result.exit_code == 1


# ── Entities ──────────────────────────────────────────────────────────────────

class TestEntities:
    def test_supervisor_lifecycle(self, cli):
        assert cli("supervisor", "add", "S1", "Omar", "--region", "Cairo").exit_code == 0
        assert "Omar" in cli("supervisor", "list").stdout
        duplicate = cli("supervisor", "add", "S1", "Other")
        assert duplicate.exit_code == 1
        assert "validation_failed" in duplicate.output
        assert cli("supervisor", "remove", "S1").exit_code == 0
        assert cli("supervisor", "remove", "S1").exit_code == 1

    def test_rider_add_and_search(self, cli):
        cli("rider", "add", "R1", "Ali", "--region", "Cairo", "--tshirts", "2")
        cli("rider", "add", "R2", "Sara", "--vehicle", "bicycle")
        listing = cli("rider", "list", "--search", "Sar").stdout
        assert "R2" in listing
        assert "R1" not in listing

    def test_rider_bad_vehicle(self, cli):
        assert cli("rider", "add", "R1", "Ali", "--vehicle", "car").exit_code == 1

    def test_rider_import(self, cli, tmp_path):
        csv_path = tmp_path / "riders.csv"
        csv_path.write_text("R1,Ali,Cairo,motorcycle,2\nR2,Sara,Giza,,\n", encoding="utf-8")
        result = cli("rider", "import", str(csv_path))
        assert result.exit_code == 0
        assert "Imported 2 rider(s)" in result.stdout

    def test_rider_photo(self, cli, tmp_path):
        cli("rider", "add", "R1", "Ali")
        photo = tmp_path / "kit.jpg"
        photo.write_bytes(b"\xff\xd8\xff")
        assert cli("rider", "photo", "R1", str(photo)).exit_code == 0
        assert "yes" in cli("rider", "list").stdout
        assert cli("rider", "photo", "R1", "--clear").exit_code == 0
        assert cli("rider", "photo", "R1").exit_code == 1


# ── Inventory and orders ──────────────────────────────────────────────────────

class TestOrders:
    def test_request_approve_flow(self, cli):
        requested = cli(
            "order", "request", "--supervisor", "S1",
            "--motorcycle", "2", "--bicycle", "1", "--tshirts", "3",
        )
        assert requested.exit_code == 0
        (order_id,) = _order_ids(cli)

        assert cli("order", "approve", order_id).exit_code == 0
        inventory = cli("inventory", "show").stdout
        assert "Motorcycle pouches" in inventory
        assert [line.split()[-1] for line in inventory.splitlines() if line.startswith("  ")] == [
            "3", "4", "2",
        ]
        again = cli("order", "approve", order_id)
        assert again.exit_code == 1
        assert "invalid_transition" in again.output
        assert "current status: approved" in again.output

    def test_insufficient_inventory(self, cli):
        cli("order", "request", "--motorcycle", "6")
        (order_id,) = _order_ids(cli)
        result = cli("order", "approve", order_id)
        assert result.exit_code == 1
        assert "insufficient_inventory" in result.output
        assert "pending" in cli("order", "list", "--pending").stdout

    def test_empty_request_rejected(self, cli):
        assert cli("order", "request", "--supervisor", "S1").exit_code == 1

    def test_reject(self, cli):
        cli("order", "request", "--tshirts", "1")
        (order_id,) = _order_ids(cli)
        assert cli("order", "reject", order_id).exit_code == 0
        assert "rejected" in cli("order", "list").stdout

    def test_inventory_adjust(self, cli):
        assert cli("inventory", "adjust", "tshirts", "--by", "-9").exit_code == 0
        assert cli("inventory", "adjust", "helmets", "--by", "1").exit_code == 1


# ── Deductions, overview, export/import ───────────────────────────────────────

class TestReports:
    def test_deductions(self, cli):
        cli("rider", "add", "R1", "Ali")
        cli("deduction", "add", "R1", "--type", "advance", "--amount", "100")
        cli("deduction", "add", "R1", "--type", "advance", "--amount", "50", "--reason", "fuel")
        shown = cli("deduction", "show", "R1")
        assert shown.exit_code == 0
        assert "150.00" in shown.stdout
        assert cli("deduction", "add", "R9", "--amount", "1").exit_code == 1
        assert cli("deduction", "show", "R9").exit_code == 1

    def test_overview(self, cli):
        cli("rider", "add", "R1", "Ali")
        result = cli("overview")
        assert result.exit_code == 0
        assert "Riders:             1" in result.stdout

    def test_export_import_round_trip(self, cli, tmp_path):
        cli("supervisor", "add", "S1", "Omar")
        cli("rider", "add", "R1", "Ali")
        out = tmp_path / "backup.json"
        assert cli("export", "--output", str(out)).exit_code == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert data["riders"][0]["code"] == "R1"

        cli("rider", "remove", "R1")
        assert cli("import", str(out), "--yes").exit_code == 0
        assert "R1" in cli("rider", "list").stdout

    def test_import_requires_confirmation(self, cli, tmp_path):
        out = tmp_path / "backup.json"
        cli("export", "--output", str(out))
        result = cli("import", str(out), input="n\n")
        assert result.exit_code == 1

    def test_riders_csv_default_location(self, cli, tmp_path):
        cli("rider", "add", "R1", "Ali")
        assert cli("export", "--riders-csv").exit_code == 0
        sheet = (tmp_path / "exports" / "ems-riders.csv").read_text(encoding="utf-8")
        assert sheet.startswith("code,name,region")
