"""
Bulk rider import parser.

Format — one rider per line, no header row, comma separated, in order::

    code,name,region,vehicleType,tshirtQuantity

  - Every field is whitespace-trimmed.
  - Blank lines are ignored; ``\\r\\n`` and ``\\n`` line endings are accepted.
  - Missing trailing fields are treated as empty; extra fields are ignored.

This module only splits text into raw row dicts. Defaults (region ``""``,
vehicle type ``motorcycle``, t-shirt quantity ``1``) and validation are
applied by ``RiderForm`` inside ``DomainStore.bulk_import_riders``.

Example::

    R1,Ali,Cairo,motorcycle,2
    R2,Sara,Giza,,
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

RIDER_CSV_COLUMNS: tuple[str, ...] = (
    "code", "name", "region", "vehicleType", "tshirtQuantity",
)


def parse_rider_rows(text: str) -> list[dict[str, str]]:
    """Split bulk-import text into one raw dict per non-blank line.

    Args:
        text: Whole file contents.

    Returns:
        List of ``{column: value}`` dicts keyed by ``RIDER_CSV_COLUMNS``.
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]

    rows: list[dict[str, str]] = []
    for fields in csv.reader(lines):
        values = [f.strip() for f in fields]
        values += [""] * (len(RIDER_CSV_COLUMNS) - len(values))
        rows.append(dict(zip(RIDER_CSV_COLUMNS, values)))
    return rows


def read_rider_csv(path: Path) -> list[dict[str, str]]:
    """Read and split a bulk rider file.

    Args:
        path: Path to the CSV file (must exist).

    Returns:
        Raw row dicts, see ``parse_rider_rows``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rider CSV file not found: {path}")

    # utf-8-sig drops the BOM spreadsheet tools prepend to exported CSV
    rows = parse_rider_rows(path.read_text(encoding="utf-8-sig"))
    if not rows:
        logger.warning("Rider CSV is empty: %s", path)
    else:
        logger.info("Read %d rider row(s) from %s", len(rows), path.name)
    return rows
