"""Member ORM model for water association partners ("socios")."""

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from waterbill.models import Base, BaseModel


class Member(Base, BaseModel):
    """
    A member of the water association.

    The primary key doubles as the member number printed on invoices and used
    as the meter identifier in readings. Meter identifiers reserved for
    aggregate metering (see ``NON_BILLABLE_METER_IDS``) never get a row here.
    """

    __tablename__ = "members"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Full name as printed on the invoice",
    )
    iban: Mapped[str] = mapped_column(
        String(34),
        nullable=False,
        comment="Bank account used for the remittance batch",
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Active members are invoiced and share the derrama",
    )
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (Index("idx_member_active", "is_active"),)

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, name={self.name}, is_active={self.is_active})>"


__all__ = ["Member"]
