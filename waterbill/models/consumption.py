"""Provider-side consumption figures taken from the water company invoice."""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from waterbill.models import Base, BaseModel


class MeterConsumption(Base, BaseModel):
    """Consumption (m³) for a period as invoiced by the provider.

    The whole-association meter is stored under member id 0.
    """

    __tablename__ = "meter_consumptions"

    member_id: Mapped[int] = mapped_column(Integer, nullable=False)
    period: Mapped[str] = mapped_column(String(10), nullable=False)
    volume: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Invoiced consumption in m³",
    )

    __table_args__ = (
        UniqueConstraint("member_id", "period", name="uq_consumption_member_period"),
    )

    def __repr__(self) -> str:
        return (
            f"<MeterConsumption(member_id={self.member_id}, period={self.period}, "
            f"volume={self.volume})>"
        )


class ShortfallVolume(Base, BaseModel):
    """Unbilled volume (m³) of a period, shown on the reconciliation report only."""

    __tablename__ = "shortfall_volumes"

    period: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    volume: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<ShortfallVolume(period={self.period}, volume={self.volume})>"


__all__ = ["MeterConsumption", "ShortfallVolume"]
