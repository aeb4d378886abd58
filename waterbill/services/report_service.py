"""Console reconciliation report and remittance export for an invoice batch."""

import csv
import logging
from pathlib import Path
from typing import NamedTuple

from rich.table import Table

from waterbill.services.cost_share_service import CostShareSummary
from waterbill.services.invoice_service import InvoiceBatch
from waterbill.services.locale_service import DEFAULT_LOCALE, format_amount, period_label
from waterbill.services.tariff_service import round_money

logger = logging.getLogger(__name__)

REPORT_COLUMNS = ("Socio", "Nombre", "Anterior", "Actual", "m³", "Importe", "Derrama", "Total")

REMITTANCE_HEADER = ("Socio", "Nombre", "IBAN", "Total")


class ReportRow(NamedTuple):
    member_id: str
    name: str
    previous: str
    current: str
    consumption: str
    consumption_charge: str
    cost_share: str
    total: str


def build_report_rows(batch: InvoiceBatch, locale_str: str = DEFAULT_LOCALE) -> list[ReportRow]:
    """One formatted row per invoice, in member id order."""
    return [
        ReportRow(
            member_id=str(invoice.member_id),
            name=invoice.name,
            previous=str(invoice.previous_reading),
            current=str(invoice.current_reading),
            consumption=str(invoice.consumption),
            consumption_charge=format_amount(invoice.consumption_charge, locale_str, False),
            cost_share=format_amount(invoice.cost_share, locale_str, False),
            total=format_amount(invoice.total, locale_str, False),
        )
        for invoice in batch
    ]


def build_report_table(rows: list[ReportRow], title: str | None = None) -> Table:
    """Invoice table for the console; names left-aligned, figures right-aligned."""
    table = Table(title=title)
    for column in REPORT_COLUMNS:
        if column == "Nombre":
            table.add_column(column, no_wrap=True)
        else:
            table.add_column(column, justify="right")
    for row in rows:
        table.add_row(*row)
    return table


def render_reconciliation(
    summary: CostShareSummary, batch: InvoiceBatch, locale_str: str = DEFAULT_LOCALE
) -> str:
    """Provider invoice against member invoices, as printed after the table."""
    return "\n".join(
        [
            f"Periodo: {summary.period} ({period_label(summary.period, locale_str)})",
            f"Factura proveedor: {format_amount(summary.provider_charge, locale_str)}",
            f"Facturas socios: {format_amount(batch.consumption_total, locale_str)}",
            f"Derrama: {summary.shortfall_volume} m³",
            f"Derrama importe: {format_amount(summary.shortfall, locale_str)}"
            f" / {summary.active_members} socios"
            f" = {format_amount(summary.share, locale_str)}",
            f"Total remesa: {format_amount(batch.grand_total, locale_str)}",
        ]
    )


def write_remittance_csv(batch: InvoiceBatch, path: str | Path) -> Path:
    """Write the bank remittance batch, totals rounded to the cent.

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(REMITTANCE_HEADER)
        for entry in batch.remittance():
            writer.writerow(
                [entry.member_id, entry.name, entry.iban, str(round_money(entry.total))]
            )

    logger.info("Wrote remittance of %d entries to %s", len(batch), path)
    return path


__all__ = [
    "REMITTANCE_HEADER",
    "REPORT_COLUMNS",
    "ReportRow",
    "build_report_rows",
    "build_report_table",
    "render_reconciliation",
    "write_remittance_csv",
]
