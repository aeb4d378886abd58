"""Configuration loading for billing runs.

Loads settings from .env file and environment variables with sensible defaults.
Validates values and provides clear error messages.
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True)
class FeeSchedule:
    """Fixed recurring charges printed on every invoice, in order."""

    service_fee: Decimal = Decimal("14.36")
    """Cuota de servicio"""

    meter_maintenance_fee: Decimal = Decimal("1.67")
    """Conservación contador"""

    waste_fee: Decimal = Decimal("10.80")
    """Basura"""

    meter_supervision_fee: Decimal = Decimal("6.00")
    """Supervisión de contadores"""

    billing_fee: Decimal = Decimal("0.00")
    """Cuota de recibo"""

    maintenance_fee: Decimal = Decimal("10.00")
    """Cuota de mantenimiento"""

    adjustment: Decimal = Decimal("0.00")
    """Ajuste"""

    def items(self) -> list[tuple[str, Decimal]]:
        """Invoice label and amount of each fixed charge, in invoice order."""
        return [
            ("Cuota de servicio", self.service_fee),
            ("Conservación contador", self.meter_maintenance_fee),
            ("Basura", self.waste_fee),
            ("Supervisión de contadores", self.meter_supervision_fee),
            ("Cuota de recibo", self.billing_fee),
            ("Cuota de mantenimiento", self.maintenance_fee),
            ("Ajuste", self.adjustment),
        ]


# FeeSchedule field -> environment variable override
FEE_ENV_VARS = {
    "service_fee": "FEE_SERVICE",
    "meter_maintenance_fee": "FEE_METER_MAINTENANCE",
    "waste_fee": "FEE_WASTE",
    "meter_supervision_fee": "FEE_METER_SUPERVISION",
    "billing_fee": "FEE_BILLING",
    "maintenance_fee": "FEE_MAINTENANCE",
    "adjustment": "FEE_ADJUSTMENT",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class BillingConfig:
    """Configuration for a billing run."""

    database_url: str = "sqlite:///./waterbill.db"
    """SQLAlchemy database URL (default: local SQLite)"""

    log_file: str = "logs/billing.log"
    """Path to log file (default: logs/billing.log)"""

    log_level: str = "INFO"
    """Level name for stdout and file logging"""

    locale: str = "es_ES"
    """Locale for amount formatting in reports"""

    max_workers: int = 4
    """Worker threads building invoices concurrently"""

    remittance_file: str = "remesa.csv"
    """Output path of the remittance batch"""

    fees: FeeSchedule = field(default_factory=FeeSchedule)
    """Fixed recurring invoice charges"""


def _parse_amount(name: str, value: str) -> Decimal:
    try:
        return Decimal(value.strip().replace(",", "."))
    except InvalidOperation as e:
        raise ValueError(f"{name} must be a decimal amount, got {value!r}") from e


def load_fee_schedule() -> FeeSchedule:
    """Build the fee schedule, applying any FEE_* environment overrides."""
    overrides = {}
    for field_name, env_var in FEE_ENV_VARS.items():
        value = os.getenv(env_var)
        if value:
            overrides[field_name] = _parse_amount(env_var, value)
    return FeeSchedule(**overrides)


def load_config() -> BillingConfig:
    """
    Load configuration from .env file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (DATABASE_URL, LOG_FILE, LOG_LEVEL, BILLING_WORKERS, ...)
    2. .env file in project root
    3. Default values

    Returns:
        BillingConfig with all settings

    Raises:
        ValueError: If a configured value is invalid
    """
    # Load .env file from project root
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    database_url = os.getenv("DATABASE_URL", "sqlite:///./waterbill.db")
    log_file = os.getenv("LOG_FILE", "logs/billing.log")
    level_name = os.getenv("LOG_LEVEL", "INFO")
    locale = os.getenv("LOCALE", "es_ES")
    remittance_file = os.getenv("REMITTANCE_FILE", "remesa.csv")
    workers = os.getenv("BILLING_WORKERS", "4")

    if not database_url:
        raise ValueError(
            "DATABASE_URL is empty. Set DATABASE_URL environment variable or in .env file"
        )

    try:
        max_workers = int(workers)
    except ValueError as e:
        raise ValueError(f"BILLING_WORKERS must be an integer, got {workers!r}") from e
    if max_workers < 1:
        raise ValueError(f"BILLING_WORKERS must be at least 1, got {max_workers}")

    log_level = level_name.strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {LOG_LEVELS}, got {level_name!r}")

    return BillingConfig(
        database_url=database_url,
        log_file=log_file,
        log_level=log_level,
        locale=locale,
        max_workers=max_workers,
        remittance_file=remittance_file,
        fees=load_fee_schedule(),
    )


__all__ = [
    "BillingConfig",
    "FEE_ENV_VARS",
    "FeeSchedule",
    "LOG_LEVELS",
    "load_config",
    "load_fee_schedule",
]
