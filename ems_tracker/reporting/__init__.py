"""
ems_tracker.reporting — Overview figures, terminal output, and file export.

It reads from a ``DomainStore`` or ``StoreSnapshot``; the only write path
back into the store is ``load_snapshot`` feeding ``DomainStore.replace_all``.

Modules:
  overview   — Dashboard figures (counts, pool value) and rider search.
  formatters — ASCII terminal table formatters for Typer CLI commands.
  export     — JSON snapshot export/import and the rider deductions CSV.
"""
