"""Billing data repository: the read-only lookups a billing run depends on.

The tariff and invoice services only talk to ``BillingRepository``. The
SQLAlchemy implementation below maps it onto the ``members``,
``meter_readings``, ``meter_consumptions`` and ``shortfall_volumes`` tables.
"""

import logging
from abc import ABC, abstractmethod
from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased, sessionmaker

from waterbill.models.consumption import MeterConsumption, ShortfallVolume
from waterbill.models.member import Member
from waterbill.models.meter_reading import MeterReading
from waterbill.services.errors import LookupFailureError
from waterbill.services.period_service import Period

logger = logging.getLogger(__name__)

# Whole-association meter, invoiced by the provider
GENERAL_METER_ID = 0

# Aggregate and sub-aggregate meters that are read like members but never billed
NON_BILLABLE_METER_IDS = frozenset({GENERAL_METER_ID, 100, 200})


class MemberInfo(NamedTuple):
    """Member details printed on the invoice and used for the remittance."""

    member_id: int
    name: str
    iban: str


class BillingRepository(ABC):
    """Read-only view of members, readings and provider figures.

    Implementations raise ``LookupFailureError`` for any missing record and
    never substitute a default value.
    """

    @abstractmethod
    def get_member(self, member_id: int) -> MemberInfo:
        """Name and bank account of a member."""

    @abstractmethod
    def get_active_member_ids(self) -> list[int]:
        """Ids of all currently active members, ascending."""

    @abstractmethod
    def count_active_members(self) -> int:
        """Number of currently active members."""

    @abstractmethod
    def get_reading(self, member_id: int, period: Period) -> int:
        """Cumulative meter volume of a member at the close of ``period``."""

    @abstractmethod
    def get_general_consumption(self, period: Period) -> int:
        """Whole-association consumption invoiced by the provider for ``period``."""

    @abstractmethod
    def get_member_consumptions(self, period: Period) -> list[int]:
        """Per-meter consumption of ``period`` for every billable meter read in
        both ``period`` and the period before it.

        Meters in ``NON_BILLABLE_METER_IDS`` are excluded.
        """

    @abstractmethod
    def get_shortfall_volume(self, period: Period) -> int:
        """Unbilled volume (m³) recorded for ``period``, for display only."""


class SqlAlchemyBillingRepository(BillingRepository):
    """BillingRepository over the SQLAlchemy models.

    Each lookup opens its own session, so one repository can serve several
    invoice worker threads at once.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def _scalar(self, stmt, what: str, *, period=None, member_id: int | None = None):
        try:
            with self.session_factory() as session:
                value = session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Store error while reading %s: %s", what, e)
            raise LookupFailureError(
                f"Cannot read {what}: {e}", period=period, member_id=member_id
            ) from e

        if value is None:
            raise LookupFailureError(f"No {what} found", period=period, member_id=member_id)
        return value

    def _scalars(self, stmt, what: str, *, period=None) -> list:
        try:
            with self.session_factory() as session:
                return list(session.execute(stmt).scalars().all())
        except SQLAlchemyError as e:
            logger.error("Store error while reading %s: %s", what, e)
            raise LookupFailureError(f"Cannot read {what}: {e}", period=period) from e

    def get_member(self, member_id: int) -> MemberInfo:
        member = self._scalar(
            select(Member).where(Member.id == member_id), "member", member_id=member_id
        )
        return MemberInfo(member_id=member.id, name=member.name, iban=member.iban)

    def get_active_member_ids(self) -> list[int]:
        stmt = (
            select(Member.id)
            .where(Member.is_active == True)  # noqa: E712
            .order_by(Member.id.asc())
        )
        return self._scalars(stmt, "active members")

    def count_active_members(self) -> int:
        stmt = select(func.count(Member.id)).where(Member.is_active == True)  # noqa: E712
        return int(self._scalar(stmt, "active member count"))

    def get_reading(self, member_id: int, period: Period) -> int:
        stmt = select(MeterReading.volume).where(
            (MeterReading.member_id == member_id) & (MeterReading.period == str(period))
        )
        return self._scalar(stmt, "meter reading", period=period, member_id=member_id)

    def get_general_consumption(self, period: Period) -> int:
        stmt = select(MeterConsumption.volume).where(
            (MeterConsumption.member_id == GENERAL_METER_ID)
            & (MeterConsumption.period == str(period))
        )
        return self._scalar(
            stmt, "general consumption", period=period, member_id=GENERAL_METER_ID
        )

    def get_member_consumptions(self, period: Period) -> list[int]:
        before = aliased(MeterReading)
        after = aliased(MeterReading)
        stmt = (
            select(after.volume - before.volume)
            .select_from(after)
            .join(before, before.member_id == after.member_id)
            .where(
                (after.period == str(period))
                & (before.period == str(period.previous()))
                & (after.member_id.not_in(sorted(NON_BILLABLE_METER_IDS)))
            )
            .order_by(after.member_id.asc())
        )
        return self._scalars(stmt, "member consumptions", period=period)

    def get_shortfall_volume(self, period: Period) -> int:
        stmt = select(ShortfallVolume.volume).where(ShortfallVolume.period == str(period))
        return self._scalar(stmt, "shortfall volume", period=period)


__all__ = [
    "BillingRepository",
    "GENERAL_METER_ID",
    "MemberInfo",
    "NON_BILLABLE_METER_IDS",
    "SqlAlchemyBillingRepository",
]
