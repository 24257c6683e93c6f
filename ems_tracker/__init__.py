"""
EMS Tracker — equipment, rider, and supervisor tracking for delivery fleets.

Packages:
  taxonomy   — Enumerations shared by every layer (equipment items, statuses).
  models     — Frozen Pydantic entities, input forms, and mutation outcomes.
  db         — SQLite connection, schema, and the storage document repository.
  store      — Domain store, order reconciliation, and the deduction ledger.
  ingestion  — Bulk rider CSV parsing and photo embedding.
  reporting  — Overview figures, terminal formatters, and JSON/CSV export.
"""

__version__ = "0.1.0"
