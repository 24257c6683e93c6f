"""
EMS Tracker — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Open the storage database and load the ``DomainStore``.
  4. Execute one action (add, approve, export, ...).
  5. Report the result to stdout; failures go to stderr with exit code 1.

Install and run::

    pip install -e .
    ems-tracker --help
    ems-tracker init-db
    ems-tracker supervisor add S1 "Omar" --region Cairo
    ems-tracker rider import riders.csv
    ems-tracker order request --supervisor S1 --motorcycle 2 --tshirts 3
    ems-tracker order approve 1718000000000
    ems-tracker deduction add R1 --type advance --amount 150
    ems-tracker export --output data/exports/ems-data.json
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer

app = typer.Typer(
    name="ems-tracker",
    help="Equipment tracker for delivery riders, supervisors, and equipment orders.",
    add_completion=False,
)
supervisor_app = typer.Typer(help="Manage supervisors.", no_args_is_help=True)
rider_app = typer.Typer(help="Manage riders, bulk imports, and equipment photos.", no_args_is_help=True)
inventory_app = typer.Typer(help="Inspect and adjust the central inventory pool.", no_args_is_help=True)
order_app = typer.Typer(help="Request, approve, and reject equipment orders.", no_args_is_help=True)
deduction_app = typer.Typer(help="Record and inspect rider deductions.", no_args_is_help=True)

app.add_typer(supervisor_app, name="supervisor")
app.add_typer(rider_app, name="rider")
app.add_typer(inventory_app, name="inventory")
app.add_typer(order_app, name="order")
app.add_typer(deduction_app, name="deduction")

_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")
_DB_PATH_OPTION = typer.Option(
    None, "--db-path", help="Override storage DB path from config (e.g. data/db/test.db)."
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from ems_tracker.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from ems_tracker.utils.logging import configure_logging
    configure_logging(config.logging)


def _default_pool(config):
    from ems_tracker.models.inventory import InventoryPool

    inv = config.inventory
    return InventoryPool(
        motorcycle_pouches=inv.default_motorcycle_pouches,
        bicycle_pouches=inv.default_bicycle_pouches,
        tshirts=inv.default_tshirts,
    )


@contextmanager
def _session(config_path: Optional[str], db_path: Optional[str] = None) -> Iterator[tuple]:
    """Yield ``(config, store)`` with the store loaded from the configured DB."""
    from ems_tracker.db.connection import get_connection
    from ems_tracker.db.repositories.document_repo import StorageDocumentRepository
    from ems_tracker.store.domain_store import DomainStore

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with get_connection(
        db_path or config.storage.db_path,
        wal_mode=config.storage.wal_mode,
        busy_timeout_ms=config.storage.busy_timeout_ms,
    ) as conn:
        store = DomainStore(StorageDocumentRepository(conn), default_inventory=_default_pool(config))
        store.load()
        yield config, store


def _report(result) -> None:
    """Echo a ``MutationResult``; exit 1 if it is not a success."""
    from ems_tracker.reporting.formatters import format_result

    if result.ok:
        typer.echo(format_result(result))
        return
    typer.echo(format_result(result), err=True)
    raise typer.Exit(code=1)


# ── Top-level commands ────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Create the storage database and seed the default inventory pool.

    Safe to run multiple times — existing documents are left untouched.
    """
    from ems_tracker.db.connection import get_connection
    from ems_tracker.db.repositories.document_repo import StorageDocumentRepository
    from ems_tracker.db.schema import get_existing_tables
    from ems_tracker.models.snapshot import StoreSnapshot
    from ems_tracker.store.codec import encode_snapshot

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.storage.db_path
    typer.echo(f"Initializing storage at: {target_path}")

    with get_connection(
        target_path,
        wal_mode=config.storage.wal_mode,
        busy_timeout_ms=config.storage.busy_timeout_ms,
    ) as conn:
        repo = StorageDocumentRepository(conn)
        seeded = repo.count() == 0
        if seeded:
            repo.put_many(encode_snapshot(StoreSnapshot(inventory=_default_pool(config))))
        stored_keys = repo.keys()
        tables = get_existing_tables(conn)

    typer.echo(f"  Tables: {', '.join(tables)}")
    typer.echo(f"  Documents: {', '.join(stored_keys)}")
    if seeded:
        typer.echo("  Seeded empty collections and the default inventory pool.")
    typer.echo("[OK] Storage ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(False, "--full", help="Print full config as JSON."),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Storage path:     {config.storage.db_path}")
    typer.echo(f"  Export dir:       {config.data.export_dir}")
    typer.echo(f"  Reject policy:    {config.orders.reject_policy}")
    typer.echo(f"  Allow credits:    {config.deductions.allow_credits}")
    typer.echo(f"  Currency:         {config.inventory.currency}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("overview")
def overview(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show counts, pending orders, and the approximate inventory value."""
    from ems_tracker.reporting.formatters import format_overview
    from ems_tracker.reporting.overview import build_overview

    with _session(config_path, db_path) as (config, store):
        summary = build_overview(
            store.snapshot,
            prices=config.inventory.unit_prices,
            currency=config.inventory.currency,
        )
    typer.echo(format_overview(summary))


@app.command("export")
def export(
    output: Optional[str] = typer.Option(
        None, "--output", "-o",
        help="Destination file. Defaults to <export_dir>/ems-data.json (or ems-riders.csv).",
    ),
    riders_csv: bool = typer.Option(
        False, "--riders-csv", help="Write the rider deductions sheet (CSV) instead of the JSON snapshot.",
    ),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Export all data as one indented JSON document, or riders as CSV."""
    from ems_tracker.reporting.export import (
        DEFAULT_EXPORT_FILENAME,
        RIDER_EXPORT_COLUMNS,
        export_snapshot,
        export_to_csv,
        flatten_riders_for_export,
    )

    with _session(config_path, db_path) as (config, store):
        default_name = "ems-riders.csv" if riders_csv else DEFAULT_EXPORT_FILENAME
        out_path = Path(output) if output else Path(config.data.export_dir) / default_name
        if riders_csv:
            export_to_csv(
                flatten_riders_for_export(store.riders), out_path, fieldnames=RIDER_EXPORT_COLUMNS
            )
        else:
            export_snapshot(store.snapshot, out_path)

    typer.echo(f"[OK] Exported to {out_path}")


@app.command("import")
def import_data(
    input_file: str = typer.Argument(..., help="JSON file produced by 'export'."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Replace existing data without asking."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Replace all four collections with the contents of an export file."""
    from ems_tracker.reporting.export import load_snapshot

    try:
        snapshot = load_snapshot(Path(input_file))
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if not yes:
        typer.confirm(
            f"Replace all stored data with {len(snapshot.supervisors)} supervisors, "
            f"{len(snapshot.riders)} riders, {len(snapshot.orders)} orders?",
            abort=True,
        )

    with _session(config_path, db_path) as (_, store):
        result = store.replace_all(snapshot)
    _report(result)


# ── Supervisors ───────────────────────────────────────────────────────────────

@supervisor_app.command("add")
def supervisor_add(
    code: str = typer.Argument(..., help="Unique supervisor code."),
    name: str = typer.Argument(..., help="Display name."),
    region: str = typer.Option("", "--region", help="Region label."),
    username: str = typer.Option("", "--username", help="Stored login name."),
    password: str = typer.Option("", "--password", help="Stored password (not enforced)."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Add a supervisor."""
    with _session(config_path, db_path) as (_, store):
        result = store.add_supervisor(
            {"code": code, "name": name, "region": region,
             "username": username, "password": password}
        )
    _report(result)


@supervisor_app.command("remove")
def supervisor_remove(
    code: str = typer.Argument(..., help="Supervisor code."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Remove a supervisor by code."""
    with _session(config_path, db_path) as (_, store):
        result = store.remove_supervisor(code)
    _report(result)


@supervisor_app.command("list")
def supervisor_list(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List supervisors."""
    from ems_tracker.reporting.formatters import format_supervisors_table

    with _session(config_path, db_path) as (_, store):
        supervisors = store.supervisors
    typer.echo(format_supervisors_table(supervisors))


# ── Riders ────────────────────────────────────────────────────────────────────

@rider_app.command("add")
def rider_add(
    code: str = typer.Argument(..., help="Unique rider code."),
    name: str = typer.Argument(..., help="Display name."),
    region: str = typer.Option("", "--region", help="Region label."),
    vehicle: str = typer.Option("motorcycle", "--vehicle", help="motorcycle or bicycle."),
    tshirts: str = typer.Option("1", "--tshirts", help="T-shirts issued (at least 1)."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Add a rider."""
    with _session(config_path, db_path) as (_, store):
        result = store.add_rider(
            {"code": code, "name": name, "region": region,
             "vehicleType": vehicle, "tshirtQuantity": tshirts}
        )
    _report(result)


@rider_app.command("remove")
def rider_remove(
    code: str = typer.Argument(..., help="Rider code."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Remove a rider by code."""
    with _session(config_path, db_path) as (_, store):
        result = store.remove_rider(code)
    _report(result)


@rider_app.command("list")
def rider_list(
    search: str = typer.Option("", "--search", "-s", help="Filter by name, code, or region."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List riders with their deduction totals."""
    from ems_tracker.reporting.formatters import format_riders_table
    from ems_tracker.reporting.overview import search_riders

    with _session(config_path, db_path) as (config, store):
        riders = search_riders(store.riders, search)
    typer.echo(format_riders_table(riders, currency=config.inventory.currency))


@rider_app.command("import")
def rider_import(
    csv_file: str = typer.Argument(..., help="Headerless CSV: code,name,region,vehicleType,tshirtQuantity"),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Bulk-import riders from a CSV file."""
    from ems_tracker.ingestion.rider_csv import read_rider_csv

    try:
        rows = read_rider_csv(Path(csv_file))
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    with _session(config_path, db_path) as (_, store):
        result = store.bulk_import_riders(rows)
    _report(result)


@rider_app.command("photo")
def rider_photo(
    code: str = typer.Argument(..., help="Rider code."),
    photo_file: Optional[str] = typer.Argument(None, help="Image file to embed."),
    clear: bool = typer.Option(False, "--clear", help="Remove the stored photo."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Attach (or clear) a rider's equipment photo."""
    from ems_tracker.ingestion.photo import read_photo

    if clear:
        image_data = None
    elif photo_file is None:
        typer.echo("[ERROR] Pass a photo file or --clear.", err=True)
        raise typer.Exit(code=1)
    else:
        try:
            image_data = read_photo(Path(photo_file))
        except FileNotFoundError as exc:
            typer.echo(f"[ERROR] {exc}", err=True)
            raise typer.Exit(code=1)

    with _session(config_path, db_path) as (_, store):
        result = store.set_rider_photo(code, image_data)
    _report(result)


# ── Inventory ─────────────────────────────────────────────────────────────────

@inventory_app.command("show")
def inventory_show(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show the central pool."""
    from ems_tracker.reporting.formatters import format_inventory

    with _session(config_path, db_path) as (_, store):
        pool = store.inventory
    typer.echo(format_inventory(pool))


@inventory_app.command("adjust")
def inventory_adjust(
    item: str = typer.Argument(..., help="motorcyclePouches, bicyclePouches, or tshirts."),
    by: int = typer.Option(..., "--by", help="Amount to add (negative to remove). Clamped at zero."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Add to or remove from one pool item."""
    with _session(config_path, db_path) as (_, store):
        result = store.adjust_inventory(item, by)
    _report(result)


# ── Orders ────────────────────────────────────────────────────────────────────

def _reconciler(config, store):
    from ems_tracker.store.reconciliation import OrderReconciler
    return OrderReconciler(store, reject_policy=config.orders.reject_policy)


@order_app.command("request")
def order_request(
    supervisor: str = typer.Option("", "--supervisor", help="Requesting supervisor code."),
    motorcycle: str = typer.Option("0", "--motorcycle", help="Motorcycle pouches."),
    bicycle: str = typer.Option("0", "--bicycle", help="Bicycle pouches."),
    tshirts: str = typer.Option("0", "--tshirts", help="T-shirts."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Request equipment from the pool (creates a pending order)."""
    with _session(config_path, db_path) as (config, store):
        result = _reconciler(config, store).request_order(
            supervisor,
            {"motorcyclePouches": motorcycle, "bicyclePouches": bicycle, "tshirts": tshirts},
        )
    _report(result)


@order_app.command("approve")
def order_approve(
    order_id: int = typer.Argument(..., help="Order id."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Approve a pending order, deducting its quantities from the pool."""
    with _session(config_path, db_path) as (config, store):
        result = _reconciler(config, store).approve_order(order_id)
    _report(result)


@order_app.command("reject")
def order_reject(
    order_id: int = typer.Argument(..., help="Order id."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Reject an order (see [orders] reject_policy)."""
    with _session(config_path, db_path) as (config, store):
        result = _reconciler(config, store).reject_order(order_id)
    _report(result)


@order_app.command("list")
def order_list(
    pending: bool = typer.Option(False, "--pending", help="Only pending orders."),
    supervisor: Optional[str] = typer.Option(None, "--supervisor", help="Only this supervisor's orders."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List orders."""
    from ems_tracker.reporting.formatters import format_orders_table

    with _session(config_path, db_path) as (config, store):
        reconciler = _reconciler(config, store)
        orders = (
            reconciler.orders_for_supervisor(supervisor)
            if supervisor is not None
            else list(store.orders)
        )
        if pending:
            orders = [o for o in orders if o.is_pending]
    typer.echo(format_orders_table(orders))


# ── Deductions ────────────────────────────────────────────────────────────────

@deduction_app.command("add")
def deduction_add(
    rider_code: str = typer.Argument(..., help="Rider code."),
    kind: str = typer.Option(
        "advance", "--type", help="advance, securityCheck, previousDebt, or deduction."
    ),
    amount: str = typer.Option(..., "--amount", help="Amount to add (negative = credit)."),
    reason: str = typer.Option("", "--reason", help="Free-text reason (logged only)."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Add a deduction to a rider's running totals."""
    from ems_tracker.store.ledger import DeductionLedger

    with _session(config_path, db_path) as (config, store):
        ledger = DeductionLedger(store, allow_credits=config.deductions.allow_credits)
        result = ledger.add_deduction(
            rider_code, {"type": kind, "amount": amount, "reason": reason}
        )
    _report(result)


@deduction_app.command("show")
def deduction_show(
    rider_code: str = typer.Argument(..., help="Rider code."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show one rider's deduction totals."""
    from ems_tracker.reporting.formatters import format_rider_deductions

    with _session(config_path, db_path) as (config, store):
        rider = store.get_rider(rider_code)
    if rider is None:
        typer.echo(f"[ERROR] Rider '{rider_code}' not found.", err=True)
        raise typer.Exit(code=1)
    typer.echo(format_rider_deductions(rider, currency=config.inventory.currency))


if __name__ == "__main__":
    app()
