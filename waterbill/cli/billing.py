"""CLI entry point for generating a period's invoices and remittance batch.

Usage:
    python -m waterbill.cli.billing --period 2024-3
    waterbill --period 2024-3 --output out/remesa-2024-3.csv

Exit Codes:
    0 - Success: Report printed and remittance file written
    1 - Failure: Error encountered; no remittance file written

Logging:
    LOG_LEVEL (default INFO) logs to both stdout and LOG_FILE (default logs/billing.log)
"""

import argparse
import logging
import sys

from rich.console import Console

from waterbill.services.config import load_config
from waterbill.services.cost_share_service import CostShareService
from waterbill.services.db import create_db_engine, create_session_factory
from waterbill.services.errors import BillingError
from waterbill.services.invoice_service import InvoiceService
from waterbill.services.locale_service import period_label
from waterbill.services.logging import setup_logging
from waterbill.services.period_service import Period
from waterbill.services.report_service import (
    build_report_rows,
    build_report_table,
    render_reconciliation,
    write_remittance_csv,
)
from waterbill.services.repository import SqlAlchemyBillingRepository


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Genera recibos y remesa para la Junta de Agua"
    )
    parser.add_argument("--period", required=True, help="Billing period, e.g. 2024-3")
    parser.add_argument(
        "--output",
        default=None,
        help="Remittance CSV path (default: REMITTANCE_FILE or remesa.csv)",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Print the report only, do not write the remittance file",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for a billing run.

    Orchestrates the complete run:
    1. Load configuration and set up logging
    2. Compute the period's derrama once
    3. Build every active member's invoice with that derrama
    4. Print the table and reconciliation summary
    5. Write the remittance batch

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = build_parser().parse_args(argv)
    logger = logging.getLogger("waterbill")

    try:
        config = load_config()
        logger = setup_logging(config)
        logger.info("Starting billing run for period %s", args.period)

        period = Period.parse(args.period)
        engine = create_db_engine(config.database_url)
        try:
            repository = SqlAlchemyBillingRepository(create_session_factory(engine))
            invoice_service = InvoiceService(
                repository, fees=config.fees, max_workers=config.max_workers
            )
            summary = CostShareService(repository).summarize(period)
            batch = invoice_service.build_all(period, share=summary.share)
        finally:
            engine.dispose()

        out = Console()
        out.print(
            build_report_table(
                build_report_rows(batch, config.locale),
                title=f"Recibos {period} ({period_label(period, config.locale)})",
            )
        )
        print(render_reconciliation(summary, batch, config.locale))

        if not args.no_export:
            write_remittance_csv(batch, args.output or config.remittance_file)

        return 0

    except BillingError as e:
        logger.error(f"Billing run failed: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except Exception as e:
        logger.error(f"Billing run failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
