"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``EMS_TRACKER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

CLI commands and the domain store receive values from an ``AppConfig``
instance — never raw dicts or individual env var lookups scattered through
the codebase.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from ems_tracker.taxonomy.equipment_taxonomy import RejectPolicy

# ── Sub-config models ─────────────────────────────────────────────────────────


class StorageConfig(BaseModel):
    """SQLite document storage settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/ems_tracker.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class DataConfig(BaseModel):
    """Filesystem paths for exports."""

    model_config = ConfigDict(frozen=True)

    export_dir: str = "data/exports"


class UnitPricesConfig(BaseModel):
    """Approximate per-unit value of each equipment item, used by the overview."""

    model_config = ConfigDict(frozen=True)

    motorcycle_pouches: float = 200.0
    bicycle_pouches: float = 200.0
    tshirts: float = 50.0

    @field_validator("motorcycle_pouches", "bicycle_pouches", "tshirts")
    @classmethod
    def non_negative(cls, v: float) -> float:
        if v < 0.0:
            raise ValueError(f"Unit price must be >= 0.0, got {v}.")
        return v


class InventoryConfig(BaseModel):
    """Initial pool quantities and valuation settings."""

    model_config = ConfigDict(frozen=True)

    default_motorcycle_pouches: int = 100
    default_bicycle_pouches: int = 80
    default_tshirts: int = 300
    currency: str = "EGP"
    unit_prices: UnitPricesConfig = UnitPricesConfig()

    @field_validator(
        "default_motorcycle_pouches", "default_bicycle_pouches", "default_tshirts"
    )
    @classmethod
    def non_negative_count(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Default pool quantity must be >= 0, got {v}.")
        return v


class OrdersConfig(BaseModel):
    """Order transition rules."""

    model_config = ConfigDict(frozen=True)

    reject_policy: RejectPolicy = RejectPolicy.ANY


class DeductionsConfig(BaseModel):
    """Deduction ledger rules."""

    model_config = ConfigDict(frozen=True)

    allow_credits: bool = True


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/ems_tracker.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env.
    """

    model_config = ConfigDict(frozen=True)

    storage: StorageConfig = StorageConfig()
    data: DataConfig = DataConfig()
    inventory: InventoryConfig = InventoryConfig()
    orders: OrdersConfig = OrdersConfig()
    deductions: DeductionsConfig = DeductionsConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply EMS_TRACKER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply EMS_TRACKER_* env vars to the raw config dict.

    Supported overrides:
      EMS_TRACKER_DB_PATH    → raw["storage"]["db_path"]
      EMS_TRACKER_LOG_LEVEL  → raw["logging"]["level"]
      EMS_TRACKER_LOG_FILE   → raw["logging"]["log_file"]
      EMS_TRACKER_DEBUG      → raw["debug"]
    """
    if db_path := os.environ.get("EMS_TRACKER_DB_PATH"):
        raw.setdefault("storage", {})["db_path"] = db_path

    if log_level := os.environ.get("EMS_TRACKER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if log_file := os.environ.get("EMS_TRACKER_LOG_FILE"):
        raw.setdefault("logging", {})["log_file"] = log_file

    if debug := os.environ.get("EMS_TRACKER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        storage=StorageConfig(**raw.get("storage", {})),
        data=DataConfig(**raw.get("data", {})),
        inventory=InventoryConfig(**raw.get("inventory", {})),
        orders=OrdersConfig(**raw.get("orders", {})),
        deductions=DeductionsConfig(**raw.get("deductions", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
