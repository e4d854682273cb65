from datetime import date
from sqlalchemy import String, Integer, Numeric, ForeignKey, Date, Text, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING

from property_api.models.base import Base, TimestampMixin, enum_column
from property_api.models.enums import LeaseStatus

if TYPE_CHECKING:
    from property_api.models.tenant import Tenant
    from property_api.models.unit import Unit
    from property_api.models.payment import Payment
    from property_api.models.invoice import Invoice

# Partial index predicate: pending and active leases hold the unit
OPEN_LEASE_PREDICATE = text("status IN ('active', 'pending')")


class Lease(Base, TimestampMixin):
    """
    Binds one tenant to one unit for [start_date, end_date] at rent_amount.

    Renewal chains are linked both ways: the renewal points back through
    previous_lease_id and the renewed lease points forward through renewal_id.

    Constraints:
    - At most one lease with status active/pending per unit. Checked by
      LeaseService under a unit row lock and backed by the partial unique
      index uq_leases_open_unit.
    """

    __tablename__ = "leases"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    unit_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    rent_amount: Mapped[float] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    security_deposit: Mapped[float | None] = mapped_column(
        Numeric(precision=10, scale=2), nullable=True
    )
    lease_terms: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[LeaseStatus] = mapped_column(
        enum_column(LeaseStatus), nullable=False, default=LeaseStatus.PENDING, index=True
    )
    termination_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    termination_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    previous_lease_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("leases.id", ondelete="SET NULL"), nullable=True
    )
    renewal_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("leases.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="leases")
    unit: Mapped["Unit"] = relationship("Unit", back_populates="leases")
    payments: Mapped[list["Payment"]] = relationship("Payment", back_populates="lease")
    invoices: Mapped[list["Invoice"]] = relationship("Invoice", back_populates="lease")

    __table_args__ = (
        Index(
            "uq_leases_open_unit",
            "unit_id",
            unique=True,
            sqlite_where=OPEN_LEASE_PREDICATE,
            postgresql_where=OPEN_LEASE_PREDICATE,
        ),
        Index("ix_leases_status_end_date", "status", "end_date"),
    )

    # Display fields joined into API responses
    @property
    def tenant_name(self) -> str | None:
        return self.tenant.name if self.tenant else None

    @property
    def tenant_email(self) -> str | None:
        return self.tenant.email if self.tenant else None

    @property
    def unit_number(self) -> str | None:
        return self.unit.unit_number if self.unit else None

    @property
    def unit_type(self) -> str | None:
        return self.unit.type.value if self.unit else None

    def __repr__(self) -> str:
        return f"<Lease(id={self.id}, tenant_id={self.tenant_id}, unit_id={self.unit_id}, status={self.status})>"
