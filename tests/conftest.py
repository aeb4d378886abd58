"""Shared fixtures: an in-memory billing repository and a seeded SQLite store."""

from decimal import Decimal

import pytest

from waterbill.models.consumption import MeterConsumption, ShortfallVolume
from waterbill.models.member import Member
from waterbill.models.meter_reading import MeterReading
from waterbill.services.db import create_db_engine, create_session_factory, init_schema
from waterbill.services.errors import LookupFailureError
from waterbill.services.period_service import Period
from waterbill.services.repository import (
    GENERAL_METER_ID,
    NON_BILLABLE_METER_IDS,
    BillingRepository,
    MemberInfo,
)

PERIOD = "2024-3"
PREVIOUS_PERIOD = "2024-2"

# member_id -> (name, iban, is_active)
MEMBERS = {
    1: ("Ana García", "ES7620770024003102575766", True),
    2: ("Luis Pérez", "ES9121000418450200051332", True),
    3: ("Marta Ruiz", "ES1000492352082414205416", True),
    4: ("Pedro Gil", "ES6000491500051234567892", False),
}

# (member_id, period) -> cumulative m³; 0 and 100 are aggregate meters
READINGS = {
    (1, PREVIOUS_PERIOD): 100,
    (1, PERIOD): 109,
    (2, PREVIOUS_PERIOD): 200,
    (2, PERIOD): 228,
    (3, PREVIOUS_PERIOD): 50,
    (3, PERIOD): 50,
    (4, PREVIOUS_PERIOD): 10,
    (4, PERIOD): 10,
    (0, PREVIOUS_PERIOD): 1000,
    (0, PERIOD): 1090,
    (100, PREVIOUS_PERIOD): 500,
    (100, PERIOD): 540,
}

# Provider-invoiced whole-association consumption per period
GENERAL_CONSUMPTION = {PERIOD: 200}

SHORTFALL_VOLUMES = {PERIOD: 53}

# 9 m³ -> 5.37, 28 m³ -> 36.21, 0 m³ -> 0.00 (x2)
MEMBER_CHARGES = Decimal("41.58")
# 200 m³ at the GENERAL tariff, all in band 1
PROVIDER_CHARGE = Decimal("119.26")
FIXED_FEES_TOTAL = Decimal("42.83")


class FakeBillingRepository(BillingRepository):
    """Dict-backed repository mirroring the SQLAlchemy implementation."""

    def __init__(self, members=None, readings=None, general=None, shortfalls=None):
        self.members = dict(MEMBERS if members is None else members)
        self.readings = dict(READINGS if readings is None else readings)
        self.general = dict(GENERAL_CONSUMPTION if general is None else general)
        self.shortfalls = dict(SHORTFALL_VOLUMES if shortfalls is None else shortfalls)
        self.reading_lookups = 0
        self.general_lookups = 0

    def get_member(self, member_id):
        if member_id not in self.members:
            raise LookupFailureError("No member found", member_id=member_id)
        name, iban, _ = self.members[member_id]
        return MemberInfo(member_id, name, iban)

    def get_active_member_ids(self):
        return sorted(mid for mid, (_, _, active) in self.members.items() if active)

    def count_active_members(self):
        return len(self.get_active_member_ids())

    def get_reading(self, member_id, period):
        self.reading_lookups += 1
        key = (member_id, str(period))
        if key not in self.readings:
            raise LookupFailureError("No meter reading found", period=period, member_id=member_id)
        return self.readings[key]

    def get_general_consumption(self, period):
        self.general_lookups += 1
        if str(period) not in self.general:
            raise LookupFailureError(
                "No general consumption found", period=period, member_id=GENERAL_METER_ID
            )
        return self.general[str(period)]

    def get_member_consumptions(self, period):
        period = Period.parse(period)
        consumptions = []
        for (member_id, reading_period), volume in sorted(self.readings.items()):
            if member_id in NON_BILLABLE_METER_IDS or reading_period != str(period):
                continue
            before = self.readings.get((member_id, str(period.previous())))
            if before is not None:
                consumptions.append(volume - before)
        return consumptions

    def get_shortfall_volume(self, period):
        if str(period) not in self.shortfalls:
            raise LookupFailureError("No shortfall volume found", period=period)
        return self.shortfalls[str(period)]


@pytest.fixture
def fake_repository():
    """Repository holding the standard three-active-member scenario."""
    return FakeBillingRepository()


@pytest.fixture
def make_repository():
    """Factory for repositories with custom data."""
    return FakeBillingRepository


def seed_store(session_factory) -> None:
    """Write the standard scenario into the SQL tables."""
    with session_factory() as session:
        for member_id, (name, iban, active) in MEMBERS.items():
            session.add(Member(id=member_id, name=name, iban=iban, is_active=active))
        for (member_id, period), volume in READINGS.items():
            session.add(MeterReading(member_id=member_id, period=period, volume=volume))
        for period, volume in GENERAL_CONSUMPTION.items():
            session.add(
                MeterConsumption(member_id=GENERAL_METER_ID, period=period, volume=volume)
            )
        for period, volume in SHORTFALL_VOLUMES.items():
            session.add(ShortfallVolume(period=period, volume=volume))
        session.commit()


@pytest.fixture
def database_url(tmp_path):
    """File-backed SQLite URL, usable from worker threads."""
    return f"sqlite:///{tmp_path / 'waterbill_test.db'}"


@pytest.fixture
def session_factory(database_url):
    """Session factory over an empty schema."""
    engine = create_db_engine(database_url)
    init_schema(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture
def seeded_session_factory(session_factory):
    """Session factory over the standard scenario."""
    seed_store(session_factory)
    return session_factory


@pytest.fixture
def scenario():
    """Known figures of the standard scenario."""
    return {
        "period": PERIOD,
        "previous_period": PREVIOUS_PERIOD,
        "member_charges": MEMBER_CHARGES,
        "provider_charge": PROVIDER_CHARGE,
        "fixed_fees_total": FIXED_FEES_TOTAL,
        "shortfall_volume": SHORTFALL_VOLUMES[PERIOD],
        "active_member_ids": [1, 2, 3],
    }
