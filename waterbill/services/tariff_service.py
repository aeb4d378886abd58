"""Progressive-volume water tariff: band split and pricing.

Consumption is split into four cumulative volume bands and each band is
priced at its own rate, plus tax. Individual members are billed at the USER
thresholds; the provider bills the association as a whole at the GENERAL
thresholds.

Example:
    >>> split(28, MeterClass.USER).volumes
    (9, 18, 1, 0)
    >>> price_total(9, MeterClass.USER)
    Decimal('5.37')
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from waterbill.services.errors import NegativeConsumptionError

BAND_COUNT = 4

CENT = Decimal("0.01")


def round_money(amount: Decimal) -> Decimal:
    """Round an amount half-up to the cent, as printed and remitted."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


# Per-m³ rates for bands 1..4, shared by both meter classes
BAND_RATES: tuple[Decimal, ...] = (
    Decimal("0.5421"),
    Decimal("1.449535"),
    Decimal("1.944467"),
    Decimal("2.8033"),
)

TAX_MULTIPLIER = Decimal("1.10")


class MeterClass(str, Enum):
    """Kind of meter a tariff computation applies to."""

    USER = "user"
    """Individual member meter"""

    GENERAL = "general"
    """Whole-association meter invoiced by the provider"""


# Cumulative upper bounds of bands 1..3; band 4 is unbounded
BAND_THRESHOLDS: dict[MeterClass, tuple[int, int, int]] = {
    MeterClass.USER: (9, 27, 80),
    MeterClass.GENERAL: (423, 1269, 3760),
}


@dataclass(frozen=True)
class ConsumptionBands:
    """Volume (m³) falling in each of the four tariff bands."""

    volumes: tuple[int, ...]

    def __post_init__(self) -> None:
        volumes = tuple(self.volumes)
        if len(volumes) != BAND_COUNT:
            raise ValueError(f"Expected {BAND_COUNT} band volumes, got {len(volumes)}")
        if any(volume < 0 for volume in volumes):
            raise ValueError(f"Band volumes cannot be negative: {volumes}")
        object.__setattr__(self, "volumes", volumes)

    def __iter__(self):
        return iter(self.volumes)

    def __len__(self) -> int:
        return BAND_COUNT

    def __getitem__(self, index: int) -> int:
        return self.volumes[index]

    @property
    def total(self) -> int:
        return sum(self.volumes)


@dataclass(frozen=True)
class BandCharges:
    """Charge for each of the four tariff bands, rounded to the cent."""

    amounts: tuple[Decimal, ...]

    def __post_init__(self) -> None:
        amounts = tuple(self.amounts)
        if len(amounts) != BAND_COUNT:
            raise ValueError(f"Expected {BAND_COUNT} band charges, got {len(amounts)}")
        object.__setattr__(self, "amounts", amounts)

    def __iter__(self):
        return iter(self.amounts)

    def __len__(self) -> int:
        return BAND_COUNT

    def __getitem__(self, index: int) -> Decimal:
        return self.amounts[index]

    @property
    def total(self) -> Decimal:
        return sum(self.amounts, Decimal("0"))


def split(consumption: int, meter_class: MeterClass) -> ConsumptionBands:
    """Split a consumption into its four progressive bands.

    Args:
        consumption: Volume consumed in the period (m³)
        meter_class: Selects the band thresholds

    Returns:
        ConsumptionBands whose volumes always add up to ``consumption``

    Raises:
        NegativeConsumptionError: If consumption is below zero
    """
    if consumption < 0:
        raise NegativeConsumptionError(f"Consumption cannot be negative, got {consumption}")

    volumes = []
    lower = 0
    for upper in BAND_THRESHOLDS[meter_class]:
        volumes.append(max(0, min(consumption, upper) - lower))
        lower = upper
    volumes.append(max(0, consumption - lower))

    return ConsumptionBands(tuple(volumes))


def price(bands: ConsumptionBands, meter_class: MeterClass) -> tuple[BandCharges, Decimal]:
    """Price each band and sum the rounded band charges.

    Each band is rounded half-up to the cent before summing, so the total
    always equals the sum of the printed band charges.

    Returns:
        Tuple of (per-band charges, total consumption charge)
    """
    # Rates are the same for both classes; thresholds already applied by split()
    amounts = tuple(
        round_money(rate * TAX_MULTIPLIER * Decimal(volume))
        for rate, volume in zip(BAND_RATES, bands)
    )
    charges = BandCharges(amounts)
    return charges, charges.total


def price_total(consumption: int, meter_class: MeterClass) -> Decimal:
    """Consumption charge for a total volume at the given meter class."""
    _, total = price(split(consumption, meter_class), meter_class)
    return total


__all__ = [
    "BAND_COUNT",
    "BAND_RATES",
    "BAND_THRESHOLDS",
    "BandCharges",
    "ConsumptionBands",
    "MeterClass",
    "CENT",
    "TAX_MULTIPLIER",
    "price",
    "price_total",
    "round_money",
    "split",
]
