"""Meter reading model - cumulative water meter volume per billing period."""

from sqlalchemy import Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from waterbill.models import Base, BaseModel


class MeterReading(Base, BaseModel):
    """Cumulative meter volume (m³) taken at the close of a billing period.

    Attributes:
        member_id: Member number, or a reserved aggregate meter identifier
        period: Period identifier ("<year>-<n>")
        volume: Cumulative meter volume in m³
    """

    __tablename__ = "meter_readings"

    member_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Member number or reserved aggregate meter id",
    )
    period: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="Period identifier, e.g. '2024-3'",
    )
    volume: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Cumulative meter volume in m³",
    )

    __table_args__ = (
        UniqueConstraint("member_id", "period", name="uq_reading_member_period"),
        Index("idx_reading_period", "period"),
    )

    def __repr__(self) -> str:
        return (
            f"<MeterReading(member_id={self.member_id}, period={self.period}, "
            f"volume={self.volume})>"
        )


__all__ = ["MeterReading"]
