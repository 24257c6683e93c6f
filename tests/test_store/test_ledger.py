"""Tests for DeductionLedger — accumulation, credits, and lookups."""

from __future__ import annotations

import pytest

from ems_tracker.models.outcome import MutationStatus
from ems_tracker.store.ledger import DeductionLedger
from ems_tracker.taxonomy.equipment_taxonomy import DeductionType


@pytest.fixture
def ledger(store) -> DeductionLedger:
    store.add_rider({"code": "R1", "name": "Ali"})
    store.add_rider({"code": "R2", "name": "Sara"})
    return DeductionLedger(store)


class TestAddDeduction:
    def test_amounts_accumulate(self, ledger, store):
        ledger.add_deduction("R1", {"type": "advance", "amount": 100})
        result = ledger.add_deduction("R1", {"type": "advance", "amount": 50})
        assert result.ok
        assert result.detail["total"] == pytest.approx(150)
        rider = store.get_rider("R1")
        assert rider.deductions.advance == pytest.approx(150)
        assert rider.total_deductions == pytest.approx(150)

    def test_categories_are_independent(self, ledger, store):
        ledger.add_deduction("R1", {"type": "securityCheck", "amount": "20"})
        ledger.add_deduction("R1", {"type": "previousDebt", "amount": 5.5})
        deductions = store.get_rider("R1").deductions
        assert deductions.security_check == pytest.approx(20)
        assert deductions.previous_debt == pytest.approx(5.5)
        assert deductions.advance == 0

    def test_other_riders_untouched(self, ledger, store):
        ledger.add_deduction("R1", {"type": "deduction", "amount": 9})
        assert store.get_rider("R2").total_deductions == 0

    def test_unknown_rider(self, ledger):
        result = ledger.add_deduction("R9", {"type": "advance", "amount": 1})
        assert result.status == MutationStatus.NOT_FOUND

    @pytest.mark.parametrize(
        "payload",
        [
            {"type": "advance", "amount": "abc"},
            {"type": "advance", "amount": ""},
            {"type": "bonus", "amount": 5},
        ],
    )
    def test_invalid_input(self, ledger, store, payload):
        result = ledger.add_deduction("R1", payload)
        assert result.status == MutationStatus.VALIDATION_FAILED
        assert store.get_rider("R1").total_deductions == 0

    def test_credit_allowed_by_default(self, ledger, store):
        ledger.add_deduction("R1", {"type": "advance", "amount": 30})
        assert ledger.add_deduction("R1", {"type": "advance", "amount": -10}).ok
        assert store.get_rider("R1").deductions.advance == pytest.approx(20)

    def test_credit_rejected_when_disabled(self, store):
        store.add_rider({"code": "R1", "name": "Ali"})
        ledger = DeductionLedger(store, allow_credits=False)
        result = ledger.add_deduction("R1", {"type": "advance", "amount": -10})
        assert result.status == MutationStatus.VALIDATION_FAILED

    def test_reason_is_logged_not_stored(self, ledger, store, caplog):
        caplog.set_level("INFO", logger="ems_tracker.store.ledger")
        ledger.add_deduction("R1", {"type": "advance", "amount": 1, "reason": "fuel"})
        assert "fuel" in caplog.text
        assert "fuel" not in str(store.get_rider("R1").to_document())


class TestTotals:
    def test_total_for(self, ledger):
        ledger.add_deduction("R1", {"type": "advance", "amount": 10})
        ledger.add_deduction("R1", {"type": "deduction", "amount": 2})
        assert ledger.total_for("R1") == pytest.approx(12)
        assert ledger.total_for("missing") is None

    def test_fleet_totals(self, ledger):
        ledger.add_deduction("R1", {"type": "advance", "amount": 10})
        ledger.add_deduction("R2", {"type": "advance", "amount": 5})
        ledger.add_deduction("R2", {"type": "securityCheck", "amount": 1})
        totals = ledger.totals_by_type()
        assert totals[DeductionType.ADVANCE] == pytest.approx(15)
        assert totals[DeductionType.SECURITY_CHECK] == pytest.approx(1)
        assert ledger.fleet_total() == pytest.approx(16)
