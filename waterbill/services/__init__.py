"""Billing services: tariff, derrama, invoices and their supporting layers."""

from waterbill.services.cost_share_service import CostShareService, CostShareSummary
from waterbill.services.errors import (
    BillingError,
    DivisionPreconditionError,
    InvalidPeriodError,
    LookupFailureError,
    NegativeConsumptionError,
)
from waterbill.services.invoice_service import (
    Invoice,
    InvoiceBatch,
    InvoiceService,
    LineItem,
    RemittanceEntry,
)
from waterbill.services.period_service import Period, previous
from waterbill.services.repository import (
    GENERAL_METER_ID,
    NON_BILLABLE_METER_IDS,
    BillingRepository,
    MemberInfo,
    SqlAlchemyBillingRepository,
)
from waterbill.services.tariff_service import (
    BandCharges,
    ConsumptionBands,
    MeterClass,
    price,
    price_total,
    split,
)

__all__ = [
    "BandCharges",
    "BillingError",
    "BillingRepository",
    "ConsumptionBands",
    "CostShareService",
    "CostShareSummary",
    "DivisionPreconditionError",
    "GENERAL_METER_ID",
    "InvalidPeriodError",
    "Invoice",
    "InvoiceBatch",
    "InvoiceService",
    "LineItem",
    "LookupFailureError",
    "MemberInfo",
    "MeterClass",
    "NON_BILLABLE_METER_IDS",
    "NegativeConsumptionError",
    "Period",
    "RemittanceEntry",
    "SqlAlchemyBillingRepository",
    "previous",
    "price",
    "price_total",
    "split",
]
