"""Service assembling member invoices ("recibos") for a billing period."""

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, NamedTuple

from waterbill.services.config import FeeSchedule
from waterbill.services.cost_share_service import CostShareService
from waterbill.services.errors import NegativeConsumptionError
from waterbill.services.period_service import Period
from waterbill.services.repository import BillingRepository
from waterbill.services.tariff_service import (
    BandCharges,
    ConsumptionBands,
    MeterClass,
    price,
    split,
)

logger = logging.getLogger(__name__)

COST_SHARE_LABEL = "Derrama"


class LineItem(NamedTuple):
    """A named invoice amount; ``computed`` is False for fixed recurring charges."""

    name: str
    amount: Decimal
    computed: bool = False


class RemittanceEntry(NamedTuple):
    """One row of the bank remittance batch."""

    member_id: int
    name: str
    iban: str
    total: Decimal


@dataclass(frozen=True)
class Invoice:
    """Itemized water bill of one member for one period."""

    member_id: int
    name: str
    iban: str
    period: Period
    previous_reading: int
    current_reading: int
    consumption: int
    bands: ConsumptionBands
    band_charges: BandCharges
    consumption_charge: Decimal
    cost_share: Decimal
    line_items: tuple[LineItem, ...]
    total: Decimal

    @property
    def readings(self) -> tuple[int, int]:
        return self.previous_reading, self.current_reading

    def to_context(self) -> dict[str, Any]:
        """Values exposed to invoice document templates."""
        return {
            "period": str(self.period),
            "member_id": self.member_id,
            "name": self.name,
            "previous": self.previous_reading,
            "current": self.current_reading,
            "consumption": self.consumption,
            "consumption_bands": list(self.bands),
            "band_charges": list(self.band_charges),
            "consumption_charge": self.consumption_charge,
            "line_items": [{"name": item.name, "amount": item.amount} for item in self.line_items],
            "total": self.total,
        }

    def to_remittance(self) -> RemittanceEntry:
        return RemittanceEntry(
            member_id=self.member_id, name=self.name, iban=self.iban, total=self.total
        )


@dataclass(frozen=True)
class InvoiceBatch:
    """All invoices of a period, ordered by member id."""

    period: Period
    share: Decimal
    invoices: tuple[Invoice, ...]

    @property
    def consumption_total(self) -> Decimal:
        """Sum of member consumption charges, for reconciliation display."""
        return sum((invoice.consumption_charge for invoice in self.invoices), Decimal("0.00"))

    @property
    def grand_total(self) -> Decimal:
        return sum((invoice.total for invoice in self.invoices), Decimal("0.00"))

    def remittance(self) -> list[RemittanceEntry]:
        return [invoice.to_remittance() for invoice in self.invoices]

    def __len__(self) -> int:
        return len(self.invoices)

    def __iter__(self):
        return iter(self.invoices)


class InvoiceService:
    """Builds invoices from readings, the tariff, fixed fees and the derrama.

    Every lookup goes through the repository. Invoices are never persisted.
    """

    def __init__(
        self,
        repository: BillingRepository,
        fees: FeeSchedule | None = None,
        max_workers: int = 4,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.repository = repository
        self.fees = fees or FeeSchedule()
        self.max_workers = max_workers
        self.cost_share_service = CostShareService(repository)

    def build_invoice(self, member_id: int, period: "Period | str", share: Decimal) -> Invoice:
        """Build the invoice of one member.

        Args:
            member_id: Member to invoice
            period: Billing period
            share: Per-member derrama, carried as the last line item

        Raises:
            LookupFailureError: If the member or one of its readings is missing
            NegativeConsumptionError: If the current reading is below the previous one
        """
        period = Period.parse(period)
        member = self.repository.get_member(member_id)
        previous_reading = self.repository.get_reading(member_id, period.previous())
        current_reading = self.repository.get_reading(member_id, period)

        consumption = current_reading - previous_reading
        if consumption < 0:
            raise NegativeConsumptionError(
                f"Current reading {current_reading} is below previous reading {previous_reading}",
                period=period,
                member_id=member_id,
            )

        bands = split(consumption, MeterClass.USER)
        band_charges, consumption_charge = price(bands, MeterClass.USER)

        line_items = tuple(LineItem(name, amount) for name, amount in self.fees.items())
        line_items += (LineItem(COST_SHARE_LABEL, share, computed=True),)
        total = consumption_charge + sum((item.amount for item in line_items), Decimal("0"))

        return Invoice(
            member_id=member_id,
            name=member.name,
            iban=member.iban,
            period=period,
            previous_reading=previous_reading,
            current_reading=current_reading,
            consumption=consumption,
            bands=bands,
            band_charges=band_charges,
            consumption_charge=consumption_charge,
            cost_share=share,
            line_items=line_items,
            total=total,
        )

    def build_all(self, period: "Period | str", share: Decimal | None = None) -> InvoiceBatch:
        """Build the invoices of every active member.

        The derrama is computed once, unless the caller already has it, then
        invoices are built concurrently.
        The first failure cancels pending work and is raised; no partial batch
        is returned.
        """
        period = Period.parse(period)
        if share is None:
            share = self.cost_share_service.compute_share(period)
        member_ids = self.repository.get_active_member_ids()

        logger.info(
            "Building %d invoices for %s with %d workers", len(member_ids), period, self.max_workers
        )

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(self.build_invoice, member_id, period, share)
                for member_id in member_ids
            ]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()
            for future in futures:
                if future in done and future.exception() is not None:
                    logger.error("Invoice batch for %s aborted: %s", period, future.exception())
                    raise future.exception()

            invoices = [future.result() for future in futures]

        invoices.sort(key=lambda invoice: invoice.member_id)
        batch = InvoiceBatch(period=period, share=share, invoices=tuple(invoices))

        logger.info(
            "Built %d invoices for %s, consumption total %s",
            len(batch),
            period,
            batch.consumption_total,
        )
        return batch


__all__ = [
    "COST_SHARE_LABEL",
    "Invoice",
    "InvoiceBatch",
    "InvoiceService",
    "LineItem",
    "RemittanceEntry",
]
