"""Service for the derrama: the provider invoice shortfall shared by members."""

import logging
from decimal import Decimal
from typing import NamedTuple

from waterbill.services.errors import DivisionPreconditionError, NegativeConsumptionError
from waterbill.services.period_service import Period
from waterbill.services.repository import BillingRepository
from waterbill.services.tariff_service import MeterClass, price_total

logger = logging.getLogger(__name__)


class CostShareSummary(NamedTuple):
    """Figures behind a period's derrama, for the reconciliation report."""

    period: Period
    provider_charge: Decimal
    member_charges: Decimal
    shortfall: Decimal
    active_members: int
    share: Decimal
    shortfall_volume: int


class CostShareService:
    """Reconciles the provider's aggregate invoice against member charges.

    The provider bills the whole association at the GENERAL tariff on the
    total metered volume, while each member pays the USER tariff on their own
    volume. The difference is split evenly across active members.
    """

    def __init__(self, repository: BillingRepository):
        self.repository = repository

    def provider_charge(self, period: Period) -> Decimal:
        """Amount of the provider invoice for the period."""
        return price_total(self.repository.get_general_consumption(period), MeterClass.GENERAL)

    def member_charges(self, period: Period) -> Decimal:
        """Sum of the consumption charges of all billable meters."""
        total = Decimal("0.00")
        for consumption in self.repository.get_member_consumptions(period):
            if consumption < 0:
                raise NegativeConsumptionError(
                    f"Negative consumption {consumption} among member meters", period=period
                )
            total += price_total(consumption, MeterClass.USER)
        return total

    def compute_share(self, period: "Period | str") -> Decimal:
        """Per-member derrama for a period.

        Formula: (provider_charge - member_charges) / active_members

        The result is not rounded and may be negative, in which case members
        were charged more than the provider invoice and each invoice is reduced.

        Raises:
            DivisionPreconditionError: If there are no active members
        """
        return self._reconcile(Period.parse(period))[3]

    def summarize(self, period: "Period | str") -> CostShareSummary:
        """Collect every figure of the derrama calculation for display.

        Each figure is read once, so the summary share is the one to invoice with.
        """
        period = Period.parse(period)
        active_members, provider_charge, member_charges, share = self._reconcile(period)

        return CostShareSummary(
            period=period,
            provider_charge=provider_charge,
            member_charges=member_charges,
            shortfall=provider_charge - member_charges,
            active_members=active_members,
            share=share,
            shortfall_volume=self.repository.get_shortfall_volume(period),
        )

    def _reconcile(self, period: Period) -> tuple[int, Decimal, Decimal, Decimal]:
        active_members = self.repository.count_active_members()
        if active_members == 0:
            raise DivisionPreconditionError(
                "Cannot share the provider invoice: no active members", period=period
            )

        provider_charge = self.provider_charge(period)
        member_charges = self.member_charges(period)
        shortfall = provider_charge - member_charges
        share = shortfall / Decimal(active_members)

        logger.info(
            "Derrama for %s: shortfall %s over %d members = %s",
            period,
            shortfall,
            active_members,
            share,
        )
        return active_members, provider_charge, member_charges, share


__all__ = ["CostShareService", "CostShareSummary"]
