"""
ems_tracker.store — the business-rule core.

Modules:
  codec           — Storage documents ↔ ``StoreSnapshot``.
  domain_store    — ``DomainStore``: the four collections and their mutators.
  reconciliation  — ``OrderReconciler``: request / approve / reject orders.
  ledger          — ``DeductionLedger``: per-rider running deduction totals.
"""
